"""
Invoice service - rebuilds an invoice from a stored payment.

The stored payment amount is what the member actually paid: tax included and
discount already taken off. The invoice reverses that:

    subtotal  = (amount + discount) / (1 + taxRate / 100)
    taxAmount = subtotal * taxRate / 100
    cgst = sgst = taxAmount / 2

subtotal and taxAmount are rounded to whole units, cgst and sgst to two
decimals each, so cgst + sgst may drift from taxAmount by up to 0.01.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from app.errors import PaymentNotFound

logger = logging.getLogger(__name__)

WHOLE = Decimal("1")
CENTS = Decimal("0.01")


def _decimal(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _round_half_up(value: Decimal, exp: Decimal) -> Decimal:
    return value.quantize(exp, rounding=ROUND_HALF_UP)


def compute_invoice_amounts(amount, tax_rate=0, discount=0) -> dict:
    total_paid = _decimal(amount)
    rate = _decimal(tax_rate)
    discount_value = _decimal(discount)

    subtotal = (total_paid + discount_value) / (1 + rate / 100)
    tax_amount = subtotal * rate / 100
    cgst_amount = tax_amount / 2
    sgst_amount = tax_amount / 2

    return {
        "subtotal": int(_round_half_up(subtotal, WHOLE)),
        "taxRate": float(rate),
        "taxAmount": int(_round_half_up(tax_amount, WHOLE)),
        "cgstAmount": float(_round_half_up(cgst_amount, CENTS)),
        "sgstAmount": float(_round_half_up(sgst_amount, CENTS)),
        "totalAmount": float(total_paid),
        "discount": float(discount_value),
    }


def get_invoice_data(conn, payment_id) -> dict:
    """Payment with member, branch, plan and gym details plus computed amounts"""
    cursor = conn.cursor(dictionary=True)
    try:
        cursor.execute(
            """
            SELECT
                p.id AS paymentId,
                p.amount,
                p.invoiceNo,
                p.paymentDate,
                p.paymentMode,
                m.id AS memberId,
                m.fullName AS memberName,
                m.email AS memberEmail,
                m.phone AS memberPhone,
                m.address AS memberAddress,
                m.membershipFrom,
                m.membershipTo,
                m.adminId,
                m.discount AS memberDiscount,
                b.id AS branchId,
                b.name AS branchName,
                b.address AS branchAddress,
                pl.id AS planId,
                pl.name AS planName,
                pl.price AS planPrice,
                pl.validityDays AS planValidity,
                u.id AS adminUserId,
                u.fullName AS adminName,
                u.gymName AS adminGymName,
                u.gymAddress AS adminGymAddress,
                u.gstNumber AS adminGstNumber,
                u.tax AS adminTax,
                u.phone AS adminPhone,
                u.email AS adminEmail,
                mu.tax AS memberTax
            FROM payment p
            LEFT JOIN member m ON m.id = p.memberId
            LEFT JOIN branch b ON b.id = m.branchId
            LEFT JOIN memberplan pl ON pl.id = p.planId
            LEFT JOIN user u ON u.id = m.adminId
            LEFT JOIN user mu ON mu.id = m.userId
            WHERE p.id = %s
            """,
            (payment_id,),
        )
        payment = cursor.fetchone()
    finally:
        cursor.close()

    if not payment:
        raise PaymentNotFound()

    amounts = compute_invoice_amounts(
        payment["amount"],
        tax_rate=payment["memberTax"],
        discount=payment["memberDiscount"],
    )

    invoice = dict(payment)
    for key in ["amount", "planPrice", "memberDiscount", "adminTax", "memberTax"]:
        if invoice.get(key) is not None:
            invoice[key] = float(invoice[key])
    invoice.update(amounts)
    return invoice

"""
Invoice amounts and invoice lookup
"""
import pytest

from app.errors import PaymentNotFound
from app.services.invoice import compute_invoice_amounts, get_invoice_data


def test_tax_inclusive_amount_is_split():
    amounts = compute_invoice_amounts(1180, tax_rate=18, discount=0)

    assert amounts["subtotal"] == 1000
    assert amounts["taxAmount"] == 180
    assert amounts["cgstAmount"] == 90.0
    assert amounts["sgstAmount"] == 90.0
    assert amounts["totalAmount"] == 1180.0
    assert amounts["taxRate"] == 18.0


def test_discount_is_added_back_before_tax():
    amounts = compute_invoice_amounts(944, tax_rate=18, discount=236)

    assert amounts["subtotal"] == 1000
    assert amounts["taxAmount"] == 180
    assert amounts["discount"] == 236.0
    assert amounts["totalAmount"] == 944.0


def test_zero_tax():
    amounts = compute_invoice_amounts(500, tax_rate=0, discount=0)

    assert amounts["subtotal"] == 500
    assert amounts["taxAmount"] == 0
    assert amounts["cgstAmount"] == 0.0
    assert amounts["sgstAmount"] == 0.0


def test_missing_tax_and_discount_count_as_zero():
    amounts = compute_invoice_amounts(750, tax_rate=None, discount=None)
    assert amounts["subtotal"] == 750
    assert amounts["discount"] == 0.0


def test_rounding_is_half_up():
    # 1000 / 1.18 = 847.457..., tax 152.542..., halves 76.271...
    amounts = compute_invoice_amounts(1000, tax_rate=18)

    assert amounts["subtotal"] == 847
    assert amounts["taxAmount"] == 153
    assert amounts["cgstAmount"] == 76.27
    assert amounts["sgstAmount"] == 76.27

    # 2.5 tax on a subtotal of 100 rounds up, not to even
    assert compute_invoice_amounts(102.5, tax_rate=2.5)["taxAmount"] == 3


def test_invoice_data_joins_payment_details(seed, conn, gym):
    _, member_id = seed.member(
        gym["admin_id"], branch_id=gym["branch_id"], name="Ivy Invoice", tax=18, discount=236
    )
    plan_id = seed.plan(sessions=12, price=1180, name="Quarterly")
    payment_id = seed.payment(member_id, 944, plan_id=plan_id, invoice_no="INV-0042")

    invoice = get_invoice_data(conn, payment_id)

    assert invoice["paymentId"] == payment_id
    assert invoice["invoiceNo"] == "INV-0042"
    assert invoice["memberName"] == "Ivy Invoice"
    assert invoice["branchName"] == "Main Branch"
    assert invoice["planName"] == "Quarterly"
    assert invoice["adminGymName"] == "Iron Gym"
    assert invoice["adminGstNumber"] == "29ABCDE1234F1Z5"
    assert invoice["amount"] == 944.0
    assert invoice["subtotal"] == 1000
    assert invoice["taxAmount"] == 180
    assert invoice["cgstAmount"] == 90.0


def test_invoice_uses_member_tax_not_admin_tax(seed, conn, gym):
    _, member_id = seed.member(gym["admin_id"], tax=None)
    payment_id = seed.payment(member_id, 1180)

    invoice = get_invoice_data(conn, payment_id)

    assert invoice["adminTax"] == 18.0
    assert invoice["taxRate"] == 0.0
    assert invoice["subtotal"] == 1180


def test_missing_payment(conn):
    with pytest.raises(PaymentNotFound):
        get_invoice_data(conn, 999)

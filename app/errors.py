"""
Service errors.

Every failure a service detects is raised as a ``ServiceError`` subclass.
``error_code`` is the kind discriminator and ``status_code`` the response
category the HTTP layer answers with.
"""
from fastapi import status


class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str = None, error_code: str = None):
        self.message = message or self.default_message
        if error_code:
            self.error_code = error_code
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"error_code": self.error_code, "message": self.message}


# ============== Validation ==============

class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
    default_message = "Please fill all required fields"


# ============== Not Found ==============

class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class MemberNotFound(NotFoundError):
    error_code = "MEMBER_NOT_FOUND"
    default_message = "Member profile not found for this user"


class ScheduleNotFound(NotFoundError):
    error_code = "SCHEDULE_NOT_FOUND"
    default_message = "Class schedule not found"


class PaymentNotFound(NotFoundError):
    error_code = "PAYMENT_NOT_FOUND"
    default_message = "Payment / Invoice not found"


class BookingNotFound(NotFoundError):
    error_code = "BOOKING_NOT_FOUND"
    default_message = "No booking found"


class ShiftNotFound(NotFoundError):
    error_code = "SHIFT_NOT_FOUND"
    default_message = "Shift not found"


class AttendanceNotFound(NotFoundError):
    error_code = "ATTENDANCE_NOT_FOUND"
    default_message = "Attendance record not found"


# ============== Conflict ==============

class ConflictError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "CONFLICT"
    default_message = "Conflicting request"


class AlreadyBooked(ConflictError):
    error_code = "ALREADY_BOOKED"
    default_message = "Already booked for this class"


class AlreadyCheckedOut(ConflictError):
    error_code = "ALREADY_CHECKED_OUT"
    default_message = "Member already checked out"


# ============== Capacity ==============

class CapacityExceededError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "CAPACITY_EXCEEDED"
    default_message = "Capacity exceeded"


class ClassFull(CapacityExceededError):
    error_code = "CLASS_FULL"
    default_message = "Class is full"


# ============== Eligibility ==============

class EligibilityDeniedError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "ELIGIBILITY_DENIED"
    default_message = "Membership does not allow this action"


class SessionLimitReached(EligibilityDeniedError):
    error_code = "SESSION_LIMIT_REACHED"
    default_message = "Session Limit Reached!"


class PlanExpired(EligibilityDeniedError):
    error_code = "PLAN_EXPIRED"
    default_message = "Your plan has expired."


class NoActivePlan(EligibilityDeniedError):
    error_code = "NO_ACTIVE_PLAN"
    default_message = "No active membership plan found."


# ============== Authorization ==============

class UnauthorizedError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "UNAUTHORIZED"
    default_message = "You are not allowed to access this resource"

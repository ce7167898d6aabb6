# Models package (re-export feature modules for stable imports)
from .users.user import User
from .health.appointment import Appointment, AppointmentStatus, PaymentStatus
from .health.review import Review
from .health.payment_attempt import PaymentAttempt, PaymentAttemptStatus
from .auth.revoked_token import RevokedToken

__all__ = [
    "User",
    "Appointment",
    "AppointmentStatus",
    "PaymentStatus",
    "Review",
    "PaymentAttempt",
    "PaymentAttemptStatus",
    "RevokedToken",
]

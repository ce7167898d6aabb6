# quickcare/db/models/health/payment_attempt.py
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid


class PaymentAttemptStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"
    # Timed out or unreachable: the hospital may or may not have charged
    UNKNOWN = "unknown"
    # Charged upstream but no local appointment exists
    NEEDS_RECONCILIATION = "needs_reconciliation"


class PaymentAttempt(SQLModel, table=True):
    __tablename__ = "payment_attempts"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    hospital_id: str = Field(max_length=50)
    doctor_id: str = Field(max_length=100)
    payload: str
    status: str = Field(default=PaymentAttemptStatus.PENDING.value, max_length=30, index=True)
    transaction_id: Optional[str] = Field(max_length=100, default=None)
    error: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

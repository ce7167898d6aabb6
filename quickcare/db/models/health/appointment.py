# quickcare/db/models/health/appointment.py
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid


class AppointmentStatus(str, Enum):
    BOOKED = "booked"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    user_name: str = Field(max_length=100)
    user_email: str = Field(max_length=255)
    # Key into the hospital directory, hospitals are external systems
    hospital_id: str = Field(max_length=50, index=True)
    doctor_id: str = Field(max_length=100)
    doctor_name: Optional[str] = Field(max_length=100, default=None)
    specialization: Optional[str] = Field(max_length=100, default=None)
    patient_name: str = Field(max_length=100)
    patient_age: int
    patient_gender: str = Field(max_length=10)
    reason: str
    location: str = Field(max_length=255)
    fee: Optional[float] = Field(default=None)
    currency: Optional[str] = Field(max_length=10, default=None)
    transaction_id: str = Field(max_length=100, unique=True, index=True)
    queue_position: Optional[int] = Field(default=None)
    estimated_wait_time: Optional[str] = Field(max_length=50, default=None)
    status: str = Field(default=AppointmentStatus.BOOKED.value, max_length=20)
    payment_status: str = Field(default=PaymentStatus.COMPLETED.value, max_length=20)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

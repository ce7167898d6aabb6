# quickcare/schemas/appointment.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class PatientFields(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    age: Optional[int] = None
    gender: Optional[str] = None
    reason: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, max_length=255)


class PayRequest(PatientFields):
    """Body of POST /api/hospitals/{id}/doctors/{doctorId}/pay"""
    doctorName: Optional[str] = None
    specialization: Optional[str] = None
    fee: Optional[float] = None
    currency: Optional[str] = None
    paymentMethod: Optional[str] = "mock"


class BookingRequest(PayRequest):
    """Body of POST /api/appointments"""
    hospitalId: Optional[str] = None
    doctorId: Optional[str] = None


class AppointmentResponse(BaseModel):
    id: str
    hospital_id: str
    doctor_id: str
    doctor_name: Optional[str] = None
    specialization: Optional[str] = None
    patient_name: str
    patient_age: int
    patient_gender: str
    reason: str
    location: str
    fee: Optional[float] = None
    currency: Optional[str] = None
    transaction_id: str
    queue_position: Optional[int] = None
    estimated_wait_time: Optional[str] = None
    status: str
    payment_status: str
    created_at: datetime

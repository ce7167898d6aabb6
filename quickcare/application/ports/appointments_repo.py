from dataclasses import dataclass
from typing import List, Optional
from datetime import datetime


@dataclass
class AppointmentDraft:
    user_id: str
    user_name: str
    user_email: str
    hospital_id: str
    doctor_id: str
    doctor_name: Optional[str]
    specialization: Optional[str]
    patient_name: str
    patient_age: int
    patient_gender: str
    reason: str
    location: str
    fee: Optional[float]
    currency: Optional[str]
    transaction_id: str
    queue_position: Optional[int]
    estimated_wait_time: Optional[str]


@dataclass
class AppointmentDto:
    id: str
    user_id: str
    user_name: str
    user_email: str
    hospital_id: str
    doctor_id: str
    doctor_name: Optional[str]
    specialization: Optional[str]
    patient_name: str
    patient_age: int
    patient_gender: str
    reason: str
    location: str
    fee: Optional[float]
    currency: Optional[str]
    transaction_id: str
    queue_position: Optional[int]
    estimated_wait_time: Optional[str]
    status: str
    payment_status: str
    created_at: datetime


class AppointmentsRepository:
    def create(self, draft: AppointmentDraft) -> AppointmentDto:
        ...

    def list_for_user(self, user_id: str) -> List[AppointmentDto]:
        ...

    def get_by_transaction_id(self, transaction_id: str) -> Optional[AppointmentDto]:
        ...

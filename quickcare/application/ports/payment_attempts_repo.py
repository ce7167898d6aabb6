from dataclasses import dataclass
from typing import List, Optional
from datetime import datetime


@dataclass
class PaymentAttemptDto:
    id: str
    user_id: str
    hospital_id: str
    doctor_id: str
    payload: str
    status: str
    transaction_id: Optional[str]
    error: Optional[str]
    created_at: datetime
    updated_at: datetime


class PaymentAttemptsRepository:
    def open(self, user_id: str, hospital_id: str, doctor_id: str, payload: str) -> PaymentAttemptDto:
        ...

    def mark(self, attempt_id: str, status: str, transaction_id: Optional[str] = None, error: Optional[str] = None) -> None:
        ...

    def get(self, attempt_id: str) -> Optional[PaymentAttemptDto]:
        ...

    def unresolved(self) -> List[PaymentAttemptDto]:
        ...

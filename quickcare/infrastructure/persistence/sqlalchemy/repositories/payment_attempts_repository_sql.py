from datetime import datetime
from typing import List, Optional
from sqlmodel import Session, select

from .....db.models import PaymentAttempt, PaymentAttemptStatus
from .....application.ports.payment_attempts_repo import PaymentAttemptsRepository, PaymentAttemptDto


class SqlPaymentAttemptsRepository(PaymentAttemptsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, p: PaymentAttempt) -> PaymentAttemptDto:
        return PaymentAttemptDto(
            id=p.id,
            user_id=p.user_id,
            hospital_id=p.hospital_id,
            doctor_id=p.doctor_id,
            payload=p.payload,
            status=p.status,
            transaction_id=p.transaction_id,
            error=p.error,
            created_at=p.created_at,
            updated_at=p.updated_at,
        )

    def open(self, user_id: str, hospital_id: str, doctor_id: str, payload: str) -> PaymentAttemptDto:
        attempt = PaymentAttempt(
            user_id=user_id,
            hospital_id=hospital_id,
            doctor_id=doctor_id,
            payload=payload,
            status=PaymentAttemptStatus.PENDING.value,
        )
        self.session.add(attempt)
        self.session.commit()
        self.session.refresh(attempt)
        return self._to_dto(attempt)

    def mark(self, attempt_id: str, status: str, transaction_id: Optional[str] = None, error: Optional[str] = None) -> None:
        attempt = self.session.get(PaymentAttempt, attempt_id)
        if not attempt:
            return
        attempt.status = status
        if transaction_id is not None:
            attempt.transaction_id = transaction_id
        if error is not None:
            attempt.error = error
        attempt.updated_at = datetime.utcnow()
        self.session.add(attempt)
        self.session.commit()

    def get(self, attempt_id: str) -> Optional[PaymentAttemptDto]:
        attempt = self.session.get(PaymentAttempt, attempt_id)
        return self._to_dto(attempt) if attempt else None

    def unresolved(self) -> List[PaymentAttemptDto]:
        rows = self.session.exec(
            select(PaymentAttempt)
            .where(PaymentAttempt.status.in_([
                PaymentAttemptStatus.UNKNOWN.value,
                PaymentAttemptStatus.NEEDS_RECONCILIATION.value,
            ]))
            .order_by(PaymentAttempt.created_at)
        ).all()
        return [self._to_dto(r) for r in rows]

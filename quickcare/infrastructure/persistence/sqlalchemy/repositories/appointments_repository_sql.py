from typing import List, Optional
from sqlmodel import Session, select

from .....db.models import Appointment
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDraft,
    AppointmentDto,
)


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            user_id=a.user_id,
            user_name=a.user_name,
            user_email=a.user_email,
            hospital_id=a.hospital_id,
            doctor_id=a.doctor_id,
            doctor_name=a.doctor_name,
            specialization=a.specialization,
            patient_name=a.patient_name,
            patient_age=a.patient_age,
            patient_gender=a.patient_gender,
            reason=a.reason,
            location=a.location,
            fee=a.fee,
            currency=a.currency,
            transaction_id=a.transaction_id,
            queue_position=a.queue_position,
            estimated_wait_time=a.estimated_wait_time,
            status=a.status,
            payment_status=a.payment_status,
            created_at=a.created_at,
        )

    def create(self, draft: AppointmentDraft) -> AppointmentDto:
        appt = Appointment(**vars(draft))
        self.session.add(appt)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(appt)
        return self._appt_to_dto(appt)

    def list_for_user(self, user_id: str) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.user_id == user_id)
            .order_by(Appointment.created_at.desc())
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def get_by_transaction_id(self, transaction_id: str) -> Optional[AppointmentDto]:
        a = self.session.exec(select(Appointment).where(Appointment.transaction_id == transaction_id)).first()
        return self._appt_to_dto(a) if a else None

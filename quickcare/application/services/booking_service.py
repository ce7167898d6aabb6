import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from ..ports.appointments_repo import AppointmentDraft, AppointmentDto, AppointmentsRepository
from ..ports.hospital_gateway import HospitalGateway
from ..ports.payment_attempts_repo import PaymentAttemptsRepository
from ...db.models import PaymentAttemptStatus
from ...exceptions import (
    ReconciliationRequired,
    UpstreamRejected,
    UpstreamTimeout,
    UpstreamUnreachable,
)
from ...infrastructure.hospitals.directory import HospitalDirectory

logger = logging.getLogger(__name__)

GENDERS = ("male", "female", "other")


@dataclass
class DoctorRef:
    id: str
    name: Optional[str] = None
    specialization: Optional[str] = None
    fee: Optional[float] = None
    currency: Optional[str] = None


@dataclass
class PatientDetails:
    name: Optional[str]
    age: Any
    gender: Optional[str]
    reason: Optional[str]
    location: Optional[str]

    def problems(self) -> List[str]:
        problems = []
        if not (self.name or "").strip():
            problems.append("name is required")
        if isinstance(self.age, bool) or not isinstance(self.age, int) or self.age <= 0:
            problems.append("age must be a positive number")
        if (self.gender or "").strip().lower() not in GENDERS:
            problems.append(f"gender must be one of: {', '.join(GENDERS)}")
        if not (self.reason or "").strip():
            problems.append("reason is required")
        if not (self.location or "").strip():
            problems.append("location is required")
        return problems


@dataclass
class BookingConfirmation:
    transaction_id: str
    queue_position: Optional[int]
    estimated_wait_time: Optional[str]
    appointment: AppointmentDto
    upstream: Any = field(default=None, repr=False)


def _payment_data(response: Any) -> Dict[str, Any]:
    if not isinstance(response, dict):
        return {}
    data = response.get("data")
    return data if isinstance(data, dict) else response


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class BookingService:
    """Charges through the hospital backend, then records the appointment locally.

    Every attempt is written to the payment_attempts outbox before the charge
    and marked completed only once the appointment row exists, so a charge
    without a local record is always discoverable.
    """

    gateway: HospitalGateway
    directory: HospitalDirectory
    appointments: AppointmentsRepository
    attempts: PaymentAttemptsRepository

    async def book(self, user, hospital_id: str, doctor: DoctorRef, patient: PatientDetails) -> BookingConfirmation:
        if user is None:
            raise HTTPException(status_code=401, detail="Not authenticated")

        problems = patient.problems()
        if not doctor.id or not str(doctor.id).strip():
            problems.insert(0, "doctor is required")
        if problems:
            raise HTTPException(status_code=400, detail="Invalid booking details: " + "; ".join(problems))

        # Unknown hospital is a client error, nothing is written for it
        self.directory.resolve(hospital_id)

        payload = self._build_payload(doctor, patient)
        attempt = self.attempts.open(user.id, hospital_id, doctor.id, json.dumps(payload))

        try:
            response = await self.gateway.pay(hospital_id, doctor.id, payload)
        except UpstreamRejected as e:
            self._mark_quietly(attempt.id, PaymentAttemptStatus.REJECTED.value, error=json.dumps(e.body, default=str))
            logger.info(f"Payment rejected by hospital {hospital_id} for user {user.id} (status {e.status})")
            raise
        except (UpstreamTimeout, UpstreamUnreachable) as e:
            # The charge may or may not have happened, the patient must not be told to simply retry
            self._mark_quietly(attempt.id, PaymentAttemptStatus.UNKNOWN.value, error=e.message)
            logger.warning(f"Payment outcome unknown for attempt {attempt.id} (user {user.id}, hospital {hospital_id}): {e.message}")
            raise

        if isinstance(response, dict) and response.get("success") is False:
            self._mark_quietly(attempt.id, PaymentAttemptStatus.REJECTED.value, error=json.dumps(response, default=str))
            raise UpstreamRejected(hospital_id, 402, response)

        data = _payment_data(response)
        transaction_id = str(data.get("transactionId") or "").strip()
        if not transaction_id:
            self._needs_reconciliation(attempt.id, None, user.id, hospital_id, "payment response carried no transaction id")
            raise ReconciliationRequired(None, user.id, hospital_id, "payment response carried no transaction id")

        draft = AppointmentDraft(
            user_id=user.id,
            user_name=user.name,
            user_email=user.email,
            hospital_id=hospital_id,
            doctor_id=str(doctor.id),
            doctor_name=data.get("doctorName") or doctor.name,
            specialization=data.get("specialization") or doctor.specialization,
            patient_name=patient.name.strip(),
            patient_age=patient.age,
            patient_gender=patient.gender.strip().lower(),
            reason=patient.reason.strip(),
            location=patient.location.strip(),
            fee=_as_float(data.get("amount")) if data.get("amount") is not None else doctor.fee,
            currency=data.get("currency") or doctor.currency,
            transaction_id=transaction_id,
            queue_position=_as_int(data.get("queuePosition")),
            estimated_wait_time=str(data["estimatedWaitTime"]) if data.get("estimatedWaitTime") is not None else None,
        )
        try:
            appointment = self.appointments.create(draft)
        except Exception as e:
            self._needs_reconciliation(attempt.id, transaction_id, user.id, hospital_id, f"appointment not recorded: {e}")
            raise ReconciliationRequired(transaction_id, user.id, hospital_id, str(e)) from e

        try:
            self.attempts.mark(attempt.id, PaymentAttemptStatus.COMPLETED.value, transaction_id=transaction_id)
        except Exception:
            logger.exception(f"Appointment {appointment.id} recorded but attempt {attempt.id} could not be closed")

        logger.info(f"Booked appointment {appointment.id} for user {user.id} at hospital {hospital_id} (transaction {transaction_id})")
        return BookingConfirmation(
            transaction_id=transaction_id,
            queue_position=appointment.queue_position,
            estimated_wait_time=appointment.estimated_wait_time,
            appointment=appointment,
            upstream=response,
        )

    def _build_payload(self, doctor: DoctorRef, patient: PatientDetails) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": patient.name.strip(),
            "age": patient.age,
            "gender": patient.gender.strip().lower(),
            "reason": patient.reason.strip(),
            "location": patient.location.strip(),
            "paymentMethod": "mock",
        }
        if doctor.fee is not None:
            payload["fee"] = doctor.fee
        if doctor.currency:
            payload["currency"] = doctor.currency
        return payload

    def _needs_reconciliation(self, attempt_id: str, transaction_id: Optional[str], user_id: str, hospital_id: str, reason: str) -> None:
        logger.error(
            f"RECONCILIATION NEEDED: attempt={attempt_id} transactionId={transaction_id} "
            f"userId={user_id} hospitalId={hospital_id}: {reason}"
        )
        try:
            self.attempts.mark(attempt_id, PaymentAttemptStatus.NEEDS_RECONCILIATION.value, transaction_id=transaction_id, error=reason)
        except Exception:
            logger.exception(f"Could not flag payment attempt {attempt_id} for reconciliation")

    def _mark_quietly(self, attempt_id: str, status: str, error: Optional[str] = None) -> None:
        # The proxy error being handled must reach the caller even if the outbox write fails
        try:
            self.attempts.mark(attempt_id, status, error=error)
        except Exception:
            logger.exception(f"Could not mark payment attempt {attempt_id} as {status}")

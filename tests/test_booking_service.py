import json
import logging

import pytest
from fastapi import HTTPException

from conftest import FakeAppointmentsRepo, FakeGateway, FakePaymentAttempts, User
from quickcare.application.services.booking_service import BookingService, DoctorRef, PatientDetails
from quickcare.exceptions import (
    HospitalNotFound,
    ReconciliationRequired,
    UpstreamRejected,
    UpstreamTimeout,
    UpstreamUnreachable,
)


def _patient(**overrides):
    fields = dict(name="Asha", age=30, gender="female", reason="Chest pain", location="Varanasi")
    fields.update(overrides)
    return PatientDetails(**fields)


def _service(directory, appointments=None):
    gateway = FakeGateway(directory)
    appointments = appointments or FakeAppointmentsRepo()
    attempts = FakePaymentAttempts()
    svc = BookingService(gateway=gateway, directory=directory, appointments=appointments, attempts=attempts)
    return svc, gateway, appointments, attempts


@pytest.mark.asyncio
async def test_successful_payment_records_exactly_one_appointment(directory):
    svc, gateway, appointments, attempts = _service(directory)

    confirmation = await svc.book(User(), "hospa", DoctorRef(id="d1", name="Dr. Rao", fee=500.0, currency="INR"), _patient())

    assert confirmation.transaction_id == "TXN-1001"
    assert confirmation.queue_position == 3
    assert confirmation.estimated_wait_time == "45 minutes"
    assert len(appointments.appointments) == 1
    appt = appointments.appointments[0]
    assert appt.transaction_id == "TXN-1001"
    assert appt.status == "booked"
    assert appt.payment_status == "completed"
    assert appt.user_id == "user-1"
    assert appt.doctor_name == "Dr. Rao"
    assert attempts.only().status == "completed"
    assert attempts.only().transaction_id == "TXN-1001"


@pytest.mark.asyncio
async def test_payment_payload_carries_mock_method_and_fee(directory):
    svc, gateway, _, attempts = _service(directory)

    await svc.book(User(), "hospa", DoctorRef(id="d1", fee=500.0, currency="INR"), _patient(gender="Female "))

    _, hospital_id, doctor_id, payload = gateway.calls[0]
    assert (hospital_id, doctor_id) == ("hospa", "d1")
    assert payload["paymentMethod"] == "mock"
    assert payload["gender"] == "female"
    assert payload["fee"] == 500.0
    assert payload["currency"] == "INR"
    assert json.loads(attempts.only().payload) == payload


@pytest.mark.asyncio
async def test_transaction_id_read_from_top_level_response(directory):
    svc, gateway, appointments, _ = _service(directory)
    gateway.pay_response = {"success": True, "transactionId": "TXN-TOP", "queuePosition": 1}

    confirmation = await svc.book(User(), "hospa", DoctorRef(id="d1"), _patient())

    assert confirmation.transaction_id == "TXN-TOP"
    assert appointments.appointments[0].queue_position == 1


@pytest.mark.asyncio
async def test_rejected_payment_creates_no_appointment(directory):
    svc, gateway, appointments, attempts = _service(directory)
    gateway.pay_error = UpstreamRejected("hospa", 400, {"message": "Doctor unavailable"})

    with pytest.raises(UpstreamRejected):
        await svc.book(User(), "hospa", DoctorRef(id="d1"), _patient())

    assert appointments.appointments == []
    assert attempts.only().status == "rejected"


@pytest.mark.asyncio
async def test_success_false_body_is_a_rejection(directory):
    svc, gateway, appointments, attempts = _service(directory)
    gateway.pay_response = {"success": False, "message": "Card declined"}

    with pytest.raises(UpstreamRejected) as exc:
        await svc.book(User(), "hospa", DoctorRef(id="d1"), _patient())

    assert exc.value.upstream_message == "Card declined"
    assert appointments.appointments == []
    assert attempts.only().status == "rejected"


@pytest.mark.asyncio
async def test_timeout_is_distinct_from_rejection_and_creates_no_appointment(directory):
    svc, gateway, appointments, attempts = _service(directory)
    gateway.pay_error = UpstreamTimeout("hospa", 15)

    with pytest.raises(UpstreamTimeout) as exc:
        await svc.book(User(), "hospa", DoctorRef(id="d1"), _patient())

    assert not isinstance(exc.value, UpstreamRejected)
    assert appointments.appointments == []
    assert attempts.only().status == "unknown"
    assert len(gateway.calls) == 1


@pytest.mark.asyncio
async def test_unreachable_marks_outcome_unknown(directory):
    svc, gateway, appointments, attempts = _service(directory)
    gateway.pay_error = UpstreamUnreachable("hospa", "connection refused")

    with pytest.raises(UpstreamUnreachable):
        await svc.book(User(), "hospa", DoctorRef(id="d1"), _patient())

    assert appointments.appointments == []
    assert attempts.only().status == "unknown"


@pytest.mark.asyncio
async def test_local_failure_after_charge_flags_reconciliation(directory, caplog):
    svc, gateway, appointments, attempts = _service(directory, FakeAppointmentsRepo(fail_with=RuntimeError("disk full")))

    with caplog.at_level(logging.ERROR):
        with pytest.raises(ReconciliationRequired) as exc:
            await svc.book(User(), "hospa", DoctorRef(id="d1"), _patient())

    assert exc.value.transaction_id == "TXN-1001"
    assert attempts.only().status == "needs_reconciliation"
    assert attempts.only().transaction_id == "TXN-1001"
    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    assert any("TXN-1001" in m and "user-1" in m and "hospa" in m for m in errors)


@pytest.mark.asyncio
async def test_missing_transaction_id_flags_reconciliation(directory):
    svc, gateway, appointments, attempts = _service(directory)
    gateway.pay_response = {"success": True, "data": {"queuePosition": 4}}

    with pytest.raises(ReconciliationRequired):
        await svc.book(User(), "hospa", DoctorRef(id="d1"), _patient())

    assert appointments.create_calls == 0
    assert attempts.only().status == "needs_reconciliation"


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"name": "  "},
    {"age": 0},
    {"age": None},
    {"gender": "unknown"},
    {"reason": ""},
    {"location": None},
])
async def test_invalid_patient_details_rejected_before_network(directory, overrides):
    svc, gateway, appointments, attempts = _service(directory)

    with pytest.raises(HTTPException) as exc:
        await svc.book(User(), "hospa", DoctorRef(id="d1"), _patient(**overrides))

    assert exc.value.status_code == 400
    assert gateway.calls == []
    assert attempts.attempts == {}


@pytest.mark.asyncio
async def test_anonymous_booking_is_unauthenticated(directory):
    svc, gateway, _, _ = _service(directory)

    with pytest.raises(HTTPException) as exc:
        await svc.book(None, "hospa", DoctorRef(id="d1"), _patient())

    assert exc.value.status_code == 401
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_unknown_hospital_writes_nothing(directory):
    svc, gateway, _, attempts = _service(directory)

    with pytest.raises(HospitalNotFound):
        await svc.book(User(), "nowhere", DoctorRef(id="d1"), _patient())

    assert gateway.calls == []
    assert attempts.attempts == {}


class BrokenOutbox(FakePaymentAttempts):
    def mark(self, attempt_id, status, transaction_id=None, error=None):
        raise RuntimeError("database is locked")


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    UpstreamTimeout("hospa", 15),
    UpstreamUnreachable("hospa", "connection refused"),
    UpstreamRejected("hospa", 400, {"message": "Doctor unavailable"}),
])
async def test_outbox_write_failure_keeps_upstream_error(directory, error, caplog):
    appointments = FakeAppointmentsRepo()
    gateway = FakeGateway(directory)
    gateway.pay_error = error
    svc = BookingService(gateway=gateway, directory=directory, appointments=appointments, attempts=BrokenOutbox())

    with caplog.at_level(logging.ERROR):
        with pytest.raises(type(error)) as exc:
            await svc.book(User(), "hospa", DoctorRef(id="d1"), _patient())

    assert exc.value is error
    assert appointments.appointments == []
    assert any("Could not mark payment attempt" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_outbox_write_failure_keeps_success_false_rejection(directory):
    gateway = FakeGateway(directory)
    gateway.pay_response = {"success": False, "message": "Card declined"}
    svc = BookingService(gateway=gateway, directory=directory, appointments=FakeAppointmentsRepo(), attempts=BrokenOutbox())

    with pytest.raises(UpstreamRejected) as exc:
        await svc.book(User(), "hospa", DoctorRef(id="d1"), _patient())

    assert exc.value.status == 402

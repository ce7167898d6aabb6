import os

# Settings are read at import time, so the environment must be in place first
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["HOSPITAL_URLS"] = '{"hospa": "http://hospa.test", "hospb": "http://hospb.test"}'
os.environ["GOOGLE_CLIENT_ID"] = ""

import itertools
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from quickcare.application.ports.appointments_repo import AppointmentDraft, AppointmentDto
from quickcare.application.ports.errors import DuplicateRecordError
from quickcare.application.ports.payment_attempts_repo import PaymentAttemptDto
from quickcare.application.ports.reviews_repo import ReviewDto
from quickcare.application.ports.user_repo import UserDto
from quickcare.database import create_db_and_tables
from quickcare.infrastructure.hospitals.directory import HospitalDirectory

HOSPITALS = {"hospa": "http://hospa.test", "hospb": "http://hospb.test"}

_clock = itertools.count()


def _tick() -> datetime:
    # Strictly increasing timestamps so newest-first ordering is deterministic
    return datetime(2024, 1, 1) + timedelta(seconds=next(_clock))


class FakeUserRepo:
    def __init__(self):
        self.users: Dict[str, UserDto] = {}

    def get_by_email(self, email: str) -> Optional[UserDto]:
        return next((u for u in self.users.values() if u.email == email.strip().lower()), None)

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        return self.users.get(user_id)

    def create(self, name, email, password_hash=None, phone=None, google_id=None, avatar_url=None, is_google_user=False):
        if self.get_by_email(email):
            raise DuplicateRecordError(email)
        now = _tick()
        user = UserDto(str(uuid.uuid4()), name, email.strip().lower(), password_hash, google_id, avatar_url, phone,
                       "patient", is_google_user, now, now)
        self.users[user.id] = user
        return user

    def link_google(self, user_id, google_id, avatar_url):
        user = self.users[user_id]
        user.google_id = google_id
        user.is_google_user = True
        if avatar_url:
            user.avatar_url = avatar_url
        return user


class FakeRevokedTokens:
    def __init__(self):
        self.revoked: Dict[str, datetime] = {}

    def revoke(self, jti, user_id, expires_at):
        self.revoked[jti] = expires_at

    def is_revoked(self, jti) -> bool:
        return jti in self.revoked


class FakeAudit:
    def __init__(self):
        self.entries: List[Dict[str, Any]] = []

    def log(self, action, email, user_id=None, ip_address=None, success=True, details=None):
        self.entries.append({"action": action, "email": email, "user_id": user_id, "success": success})


class FakeAppointmentsRepo:
    def __init__(self, fail_with: Optional[Exception] = None):
        self.appointments: List[AppointmentDto] = []
        self.fail_with = fail_with
        self.create_calls = 0

    def create(self, draft: AppointmentDraft) -> AppointmentDto:
        self.create_calls += 1
        if self.fail_with:
            raise self.fail_with
        appt = AppointmentDto(id=str(uuid.uuid4()), status="booked", payment_status="completed",
                              created_at=_tick(), **vars(draft))
        self.appointments.append(appt)
        return appt

    def list_for_user(self, user_id):
        rows = [a for a in self.appointments if a.user_id == user_id]
        return sorted(rows, key=lambda a: a.created_at, reverse=True)

    def get_by_transaction_id(self, transaction_id):
        return next((a for a in self.appointments if a.transaction_id == transaction_id), None)


class FakePaymentAttempts:
    def __init__(self):
        self.attempts: Dict[str, PaymentAttemptDto] = {}

    def open(self, user_id, hospital_id, doctor_id, payload):
        now = _tick()
        attempt = PaymentAttemptDto(str(uuid.uuid4()), user_id, hospital_id, doctor_id, payload, "pending", None, None, now, now)
        self.attempts[attempt.id] = attempt
        return attempt

    def mark(self, attempt_id, status, transaction_id=None, error=None):
        attempt = self.attempts[attempt_id]
        attempt.status = status
        if transaction_id is not None:
            attempt.transaction_id = transaction_id
        if error is not None:
            attempt.error = error

    def get(self, attempt_id):
        return self.attempts.get(attempt_id)

    def unresolved(self):
        return [a for a in self.attempts.values() if a.status in ("unknown", "needs_reconciliation")]

    def only(self) -> PaymentAttemptDto:
        assert len(self.attempts) == 1
        return next(iter(self.attempts.values()))


class FakeReviewsRepo:
    def __init__(self):
        self.reviews: List[ReviewDto] = []
        self.create_calls = 0

    def create(self, hospital_id, user_id, user_name, rating, comment):
        self.create_calls += 1
        if any(r.hospital_id == hospital_id and r.user_id == user_id for r in self.reviews):
            raise DuplicateRecordError(f"{hospital_id}/{user_id}")
        now = _tick()
        review = ReviewDto(str(uuid.uuid4()), hospital_id, user_id, user_name, rating, comment, now, now)
        self.reviews.append(review)
        return review

    def list_for_hospital(self, hospital_id):
        return sorted((r for r in self.reviews if r.hospital_id == hospital_id), key=lambda r: r.created_at, reverse=True)

    def list_for_user(self, user_id):
        return sorted((r for r in self.reviews if r.user_id == user_id), key=lambda r: r.created_at, reverse=True)


class FakeGateway:
    """Stands in for HospitalProxy; raises or answers as configured."""

    def __init__(self, directory: HospitalDirectory):
        self.directory = directory
        self.pay_response: Any = {"success": True, "data": {"transactionId": "TXN-1001", "queuePosition": 3, "estimatedWaitTime": "45 minutes"}}
        self.pay_error: Optional[Exception] = None
        self.doctors: Any = {"success": True, "doctors": [{"id": "d1", "name": "Dr. Rao", "specialization": "Cardiology"}]}
        self.calls: List[tuple] = []

    async def list_doctors(self, hospital_id):
        self.directory.resolve(hospital_id)
        self.calls.append(("list_doctors", hospital_id))
        return self.doctors

    async def get_queue_status(self, hospital_id, doctor_id, patient_name):
        self.directory.resolve(hospital_id)
        self.calls.append(("status", hospital_id, doctor_id, patient_name))
        return {"success": True, "queuePosition": 2}

    async def pay(self, hospital_id, doctor_id, payload):
        self.calls.append(("pay", hospital_id, doctor_id, payload))
        if self.pay_error:
            raise self.pay_error
        return self.pay_response

    async def probe_all(self):
        return [{"hospitalId": h, "status": 200, "ok": True, "error": None} for h in self.directory.ids()]


class User:
    def __init__(self, id="user-1", name="Asha", email="asha@x.com"):
        self.id = id
        self.name = name
        self.email = email


@pytest.fixture
def directory():
    return HospitalDirectory(HOSPITALS)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_db_and_tables(engine)
    return engine


@pytest.fixture
def gateway(directory):
    return FakeGateway(directory)


@pytest.fixture
def client(engine, directory, gateway):
    from fastapi.testclient import TestClient

    from quickcare.main import app
    from quickcare.routers.deps import get_hospital_gateway
    from quickcare.database import get_session

    def _session():
        with Session(engine) as session:
            yield session

    app.state.hospital_directory = directory
    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_hospital_gateway] = lambda: gateway
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

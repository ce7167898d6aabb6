from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from ..application.services.appointments_service import AppointmentsService
from ..application.services.auth_service import AuthService, SessionUser
from ..application.services.booking_service import BookingService
from ..application.services.reviews_service import ReviewsService
from ..core.config import settings
from ..database import get_session
from ..infrastructure.audit.std_logger import StdAuditLogger
from ..infrastructure.hospitals.directory import HospitalDirectory
from ..infrastructure.hospitals.proxy import HospitalProxy
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.payment_attempts_repository_sql import SqlPaymentAttemptsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.reviews_repository_sql import SqlReviewsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.revoked_token_repository_sql import SqlRevokedTokenRepository
from ..infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from ..services.auth import SESSION_COOKIE_NAME
from ..services.auth.google_service import GoogleIdentityProvider


def get_client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_hospital_directory(request: Request) -> HospitalDirectory:
    return request.app.state.hospital_directory


def get_hospital_gateway(directory: HospitalDirectory = Depends(get_hospital_directory)) -> HospitalProxy:
    return HospitalProxy(
        directory,
        read_timeout=settings.HOSPITAL_READ_TIMEOUT,
        pay_timeout=settings.HOSPITAL_PAY_TIMEOUT,
    )


def get_identity_provider() -> GoogleIdentityProvider:
    return GoogleIdentityProvider()


def get_audit_logger() -> StdAuditLogger:
    return StdAuditLogger()


def get_auth_service(
    session: Session = Depends(get_session),
    identity_provider: GoogleIdentityProvider = Depends(get_identity_provider),
    audit: StdAuditLogger = Depends(get_audit_logger),
) -> AuthService:
    return AuthService(
        user_repo=SqlUserRepository(session),
        revoked_tokens=SqlRevokedTokenRepository(session),
        audit=audit,
        identity_provider=identity_provider,
    )


def get_booking_service(
    session: Session = Depends(get_session),
    gateway: HospitalProxy = Depends(get_hospital_gateway),
    directory: HospitalDirectory = Depends(get_hospital_directory),
) -> BookingService:
    return BookingService(
        gateway=gateway,
        directory=directory,
        appointments=SqlAppointmentsRepository(session),
        attempts=SqlPaymentAttemptsRepository(session),
    )


def get_reviews_service(
    session: Session = Depends(get_session),
    directory: HospitalDirectory = Depends(get_hospital_directory),
) -> ReviewsService:
    return ReviewsService(repo=SqlReviewsRepository(session), directory=directory)


def get_appointments_service(session: Session = Depends(get_session)) -> AppointmentsService:
    return AppointmentsService(repo=SqlAppointmentsRepository(session))


def get_optional_user(request: Request, auth_service: AuthService = Depends(get_auth_service)) -> Optional[SessionUser]:
    """Session user from the cookie, or None for an anonymous request."""
    return auth_service.resolve(request.cookies.get(SESSION_COOKIE_NAME))


def get_current_user(user: Optional[SessionUser] = Depends(get_optional_user)) -> SessionUser:
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user

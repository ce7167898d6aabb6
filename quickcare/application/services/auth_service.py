import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from passlib.context import CryptContext

from ..ports.audit_logger import AuditLogger
from ..ports.errors import DuplicateRecordError
from ..ports.identity_provider import IdentityProvider
from ..ports.revoked_token_repo import RevokedTokenRepository
from ..ports.user_repo import UserRepository, UserDto
from ...services.auth import create_session_token, decode_session_token

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class SessionUser:
    id: str
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    token_id: Optional[str] = None
    expires_at: Optional[datetime] = None


@dataclass
class AuthResult:
    user: UserDto
    token: str


def user_to_dict(user) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role,
        "avatar": user.avatar_url,
    }


@dataclass
class AuthService:
    user_repo: UserRepository
    revoked_tokens: RevokedTokenRepository
    audit: AuditLogger
    identity_provider: Optional[IdentityProvider] = None

    def _issue(self, user: UserDto) -> AuthResult:
        token = create_session_token(user.id, user.email, user.name, user.role)
        return AuthResult(user=user, token=token)

    def signup(self, name: Optional[str], email: Optional[str], password: Optional[str], phone: Optional[str] = None,
               ip_address: Optional[str] = None) -> AuthResult:
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise HTTPException(status_code=400, detail="Name, email, and password are required")
        if not EMAIL_RE.match(email):
            raise HTTPException(status_code=400, detail="Please enter a valid email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(status_code=400, detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        if self.user_repo.get_by_email(email):
            self.audit.log("signup", email, ip_address=ip_address, success=False, details={"reason": "email_exists"})
            raise HTTPException(status_code=409, detail="User with this email already exists")

        try:
            user = self.user_repo.create(
                name=name,
                email=email,
                password_hash=pwd_context.hash(password),
                phone=(phone or "").strip() or None,
            )
        except DuplicateRecordError:
            # Lost a race with a concurrent signup for the same email
            self.audit.log("signup", email, ip_address=ip_address, success=False, details={"reason": "email_exists"})
            raise HTTPException(status_code=409, detail="User with this email already exists")

        self.audit.log("signup", email, user_id=user.id, ip_address=ip_address)
        return self._issue(user)

    def login(self, email: Optional[str], password: Optional[str], ip_address: Optional[str] = None) -> AuthResult:
        email = (email or "").strip().lower()
        if not email or not password:
            raise HTTPException(status_code=400, detail="Email and password are required")

        user = self.user_repo.get_by_email(email)
        # Same answer for unknown email, Google-only account and wrong password
        if not user or not user.password_hash or not pwd_context.verify(password, user.password_hash):
            self.audit.log("login", email, user_id=user.id if user else None, ip_address=ip_address, success=False)
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

        self.audit.log("login", email, user_id=user.id, ip_address=ip_address)
        return self._issue(user)

    async def google_login(self, credential: Optional[str], ip_address: Optional[str] = None) -> AuthResult:
        if not credential:
            raise HTTPException(status_code=400, detail="No credential provided")
        if self.identity_provider is None:
            raise HTTPException(status_code=400, detail="Google sign-in is not available")

        identity = await self.identity_provider.verify(credential)
        if identity is None:
            raise HTTPException(status_code=400, detail="Invalid Google credential")
        if not identity.email:
            raise HTTPException(status_code=400, detail="No email found in Google account")

        email = identity.email.strip().lower()
        user = self.user_repo.get_by_email(email)
        if not user:
            try:
                user = self.user_repo.create(
                    name=identity.name or email.split("@")[0],
                    email=email,
                    google_id=identity.subject,
                    avatar_url=identity.picture,
                    is_google_user=True,
                )
            except DuplicateRecordError:
                user = self.user_repo.get_by_email(email)
                if not user:
                    raise
        elif not user.google_id:
            user = self.user_repo.link_google(user.id, identity.subject, identity.picture)
            logger.info(f"Linked Google account to existing user {user.id}")

        self.audit.log("google_login", email, user_id=user.id, ip_address=ip_address)
        return self._issue(user)

    def resolve(self, token: Optional[str]) -> Optional[SessionUser]:
        """Resolve a session cookie to its user. Any failure means an anonymous request."""
        try:
            payload = decode_session_token(token)
            if not payload:
                return None
            jti = payload.get("jti")
            if jti and self.revoked_tokens.is_revoked(jti):
                return None
            user = self.user_repo.get_by_id(payload["sub"])
            if not user:
                return None
        except Exception as e:
            logger.warning(f"Session resolution failed: {e}")
            return None

        expires_at = datetime.utcfromtimestamp(payload["exp"]) if payload.get("exp") else None
        return SessionUser(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            phone=user.phone,
            avatar_url=user.avatar_url,
            token_id=jti,
            expires_at=expires_at,
        )

    def logout(self, token: Optional[str], ip_address: Optional[str] = None) -> None:
        payload = decode_session_token(token)
        if not payload or not payload.get("jti"):
            return
        expires_at = datetime.utcfromtimestamp(payload["exp"])
        self.revoked_tokens.revoke(payload["jti"], payload["sub"], expires_at)
        self.audit.log("logout", payload.get("email", ""), user_id=payload["sub"], ip_address=ip_address)

from datetime import datetime, timedelta
from typing import Optional, Dict, Any
import uuid

import jwt
from fastapi import Request, Response

from quickcare.core.config import settings

SESSION_COOKIE_NAME = "token"


def session_max_age() -> int:
    return settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60


def create_session_token(user_id: str, email: str, name: str, role: str, expires_days: Optional[int] = None) -> str:
    if not settings.secret_key_configured:
        raise ValueError("SECRET_KEY not properly configured")
    now = datetime.utcnow()
    to_encode: Dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "name": name,
        "role": role,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(days=expires_days or settings.SESSION_EXPIRE_DAYS),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the verified claims, or None for a missing, malformed, tampered or expired token."""
    if not token or not settings.secret_key_configured:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload


def request_is_secure(request: Request) -> bool:
    if settings.COOKIE_SECURE:
        return True
    if request.url.scheme == "https":
        return True
    return request.headers.get("x-forwarded-proto", "").split(",")[0].strip().lower() == "https"


def set_session_cookie(response: Response, token: str, secure: bool) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=session_max_age(),
        path="/",
        httponly=True,
        samesite="strict",
        secure=secure,
    )


def clear_session_cookie(response: Response, secure: bool) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="strict",
        secure=secure,
    )

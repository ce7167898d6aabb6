# quickcare/routers/auth_router.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from .deps import get_auth_service, get_client_ip, get_current_user
from ..application.services.auth_service import AuthResult, AuthService, SessionUser, user_to_dict
from ..exceptions import create_success_response
from ..schemas import GoogleAuthRequest, LoginRequest, SignupRequest, UserResponse
from ..services.auth import (
    SESSION_COOKIE_NAME,
    clear_session_cookie,
    request_is_secure,
    set_session_cookie,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _session_response(request: Request, response: Response, result: AuthResult) -> dict:
    set_session_cookie(response, result.token, secure=request_is_secure(request))
    user = UserResponse(**user_to_dict(result.user))
    return create_success_response({"user": user.model_dump()})


@router.post("/signup")
def signup(
    body: SignupRequest,
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = auth_service.signup(body.name, body.email, body.password, phone=body.phone, ip_address=get_client_ip(request))
    logger.info(f"User registered: {result.user.id}")
    return _session_response(request, response, result)


@router.post("/login")
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = auth_service.login(body.email, body.password, ip_address=get_client_ip(request))
    return _session_response(request, response, result)


@router.post("/google")
async def google_login(
    body: GoogleAuthRequest,
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = await auth_service.google_login(body.credential, ip_address=get_client_ip(request))
    return _session_response(request, response, result)


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    token: Optional[str] = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        auth_service.logout(token, ip_address=get_client_ip(request))
    clear_session_cookie(response, secure=request_is_secure(request))
    return create_success_response({"message": "Logged out"})


@router.get("/me")
def me(current_user: SessionUser = Depends(get_current_user)):
    user = UserResponse(**user_to_dict(current_user))
    return create_success_response({"user": user.model_dump()})

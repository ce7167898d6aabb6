import logging
from typing import Any, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class HospitalProxyError(Exception):
    """Base class for failures talking to a hospital backend."""

    # False when the call may or may not have taken effect upstream
    outcome_known = True

    def __init__(self, hospital_id: str, message: str):
        super().__init__(message)
        self.hospital_id = hospital_id
        self.message = message


class HospitalNotFound(HospitalProxyError):
    def __init__(self, hospital_id: str):
        super().__init__(hospital_id, "Hospital not found")


class UpstreamTimeout(HospitalProxyError):
    outcome_known = False

    def __init__(self, hospital_id: str, timeout: float):
        super().__init__(hospital_id, f"Hospital {hospital_id} did not respond within {timeout:g}s")
        self.timeout = timeout


class UpstreamUnreachable(HospitalProxyError):
    outcome_known = False

    def __init__(self, hospital_id: str, reason: str):
        super().__init__(hospital_id, f"Hospital {hospital_id} is unreachable: {reason}")
        self.reason = reason


class UpstreamRejected(HospitalProxyError):
    def __init__(self, hospital_id: str, status: int, body: Any):
        super().__init__(hospital_id, f"Hospital {hospital_id} rejected the request with status {status}")
        self.status = status
        self.body = body

    @property
    def upstream_message(self) -> Optional[str]:
        if isinstance(self.body, dict):
            for key in ("message", "error"):
                value = self.body.get(key)
                if isinstance(value, str) and value:
                    return value
        return None


class ReconciliationRequired(Exception):
    """The hospital charged the patient but no local appointment could be recorded."""

    def __init__(self, transaction_id: Optional[str], user_id: str, hospital_id: str, reason: str):
        super().__init__(reason)
        self.transaction_id = transaction_id
        self.user_id = user_id
        self.hospital_id = hospital_id
        self.reason = reason


def create_error_response(error_message: str, details: Any = None) -> dict:
    """Create a standardized error response"""
    content = {
        "success": False,
        "data": None,
        "error": error_message
    }
    if details is not None:
        content["details"] = details
    return content


def create_success_response(data: dict) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "data": data,
        "error": None
    }


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    fields = [".".join(str(part) for part in err.get("loc", ()) if part != "body") for err in errors]
    message = "Invalid request"
    if fields and any(fields):
        message = f"Invalid or missing fields: {', '.join(f for f in fields if f)}"
    return JSONResponse(status_code=400, content=create_error_response(message))


def hospital_error_status(exc: HospitalProxyError) -> int:
    if isinstance(exc, HospitalNotFound):
        return 404
    if isinstance(exc, UpstreamTimeout):
        return 504
    if isinstance(exc, UpstreamRejected) and 400 <= exc.status < 500:
        return exc.status
    return 502


async def hospital_proxy_exception_handler(request: Request, exc: HospitalProxyError) -> JSONResponse:
    status_code = hospital_error_status(exc)
    if isinstance(exc, HospitalNotFound):
        return JSONResponse(status_code=status_code, content=create_error_response(exc.message))

    logger.warning(f"Hospital proxy failure on {request.method} {request.url.path}: {exc.message}")
    if isinstance(exc, UpstreamRejected):
        fallback = "Payment failed" if request.url.path.endswith("/pay") or request.method == "POST" else "Hospital service error"
        return JSONResponse(
            status_code=status_code,
            content=create_error_response(exc.upstream_message or fallback, details=exc.body),
        )
    return JSONResponse(
        status_code=status_code,
        content=create_error_response(exc.message, details={"outcomeKnown": exc.outcome_known}),
    )


async def reconciliation_exception_handler(request: Request, exc: ReconciliationRequired) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=create_error_response(
            "Payment was received but the booking could not be recorded. Please contact support.",
            details={"transactionId": exc.transaction_id},
        ),
    )

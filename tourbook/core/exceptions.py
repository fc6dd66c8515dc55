"""
exceptions.py

애플리케이션 공통 에러 분류 및 중앙 응답 처리.

서비스 계층은 HTTP 상태 분류가 포함된 AppError 계열 예외를 발생시키고,
여기 등록된 핸들러가 일관된 응답 형식으로 변환한다.

응답 형식:
- 4xx : {"status": "fail",  "message": ...}
- 5xx : {"status": "error", "message": ...}

설계 원칙:
- 예상하지 못한 예외는 내부 정보 노출 없이 일반 서버 에러로 변환
- 예상하지 못한 예외만 스택 트레이스와 함께 로깅

"""

from typing import Any, Dict, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class BadRequestError(AppError):
    def __init__(self, message: str = "Bad request", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, details)


class AuthenticationError(AppError):
    """Missing / invalid / expired / stale token, wrong credentials, unverified email."""
    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, details)


class PermissionDeniedError(AppError):
    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_403_FORBIDDEN, details)


class NotFoundError(AppError):
    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_404_NOT_FOUND, details)


class ServiceUnavailableError(AppError):
    """A dependency (email provider, ...) failed while serving the request."""
    def __init__(self, message: str = "Service unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)


class VerificationTokenError(BadRequestError):
    """Verification link did not resolve to a pending verification."""
    expired: bool = False


class VerificationTokenExpired(VerificationTokenError):
    expired = True

    def __init__(self):
        super().__init__("This verification link has expired. Please request a new one.")


class VerificationTokenInvalid(VerificationTokenError):
    def __init__(self):
        super().__init__("This verification link is invalid.")


def envelope(status_code: int, message: str) -> dict:
    return {
        "status": "fail" if status_code < 500 else "error",
        "message": message,
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    body = envelope(exc.status_code, exc.message)
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # pydantic 에러 메시지를 한 줄로 합쳐서 전달
    messages = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "Invalid value")
        messages.append(f"{field}: {msg}" if field else msg)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=envelope(status.HTTP_400_BAD_REQUEST, "Invalid input data. " + "; ".join(messages)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error occurred", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went very wrong!"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

"""
core/middleware.py

앱 공통 미들웨어 설정.

주요 기능:
- 요청 시작 / 완료 / 실패 로그 (처리 시간 포함)
- X-Request-ID 헤더 기반 correlation id 부여

설계 원칙:
- CorrelationIdMiddleware 가 가장 바깥에서 실행되도록 마지막에 등록

관련 파일:
- tourbook.core.logging     : request_id 로그 프로세서

"""

import time
from typing import Callable

import structlog
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status code and timing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed",
                method=request.method,
                path=request.url.path,
                process_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return response


def setup_middleware(app: FastAPI) -> None:
    # Starlette는 나중에 추가된 미들웨어가 바깥쪽 → correlation id를 마지막에 추가
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        update_request_header=True,
    )

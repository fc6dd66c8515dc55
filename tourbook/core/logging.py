"""
core/logging.py

structlog 기반 로깅 설정.

주요 기능:
- 요청 단위 correlation id(request_id)를 모든 로그에 첨부
- production: JSON 출력 / 그 외: 콘솔 컬러 출력
- 표준 logging(uvicorn, sqlalchemy 등)도 같은 포맷으로 출력

관련 파일:
- tourbook.core.middleware  : correlation id 미들웨어
- tourbook.main             : 앱 시작 시 configure_logging() 호출

"""

import logging
import sys
from typing import Any

import structlog
from asgi_correlation_id import correlation_id

from tourbook.core.config import settings


def add_correlation_id(logger, method_name, event_dict):
    request_id = correlation_id.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def configure_logging() -> None:
    """Configure structlog and route stdlib logging through the same renderer."""
    shared_processors: list[Any] = [
        add_correlation_id,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if settings.ENVIRONMENT == "production":
        # JSON logs for production (ELK, Datadog compatible)
        renderer: Any = structlog.processors.JSONRenderer()
        final = [structlog.processors.format_exc_info, renderer]
    else:
        final = [structlog.dev.ConsoleRenderer()]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(settings.LOG_LEVEL.upper())

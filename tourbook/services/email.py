"""
services/email.py

계정 흐름에서 쓰는 메일 발송 로직.
(이메일 인증 / 가입 환영 / 비밀번호 재설정)

주요 기능:
- 메일 종류별 제목 / 본문 구성 (EmailMessage)
- 발송 백엔드 선택 (console: 로그 출력, brevo: Brevo HTTP API)
- deliver(): 발송과 타이머를 경쟁시켜 제한 시간 내 완료 여부 판단

설계 원칙:
- 발송 중 발생한 모든 실패(타임아웃 포함)는 EmailDeliveryError 로 통일
- 롤백 여부는 호출 측(services.auth)에서 결정

관련 파일:
- tourbook.core.config      : EMAIL_* 설정
- tourbook.services.auth    : 가입 / 비밀번호 찾기 흐름

"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import httpx
import structlog

from tourbook.core.config import settings
from tourbook.core.exceptions import ServiceUnavailableError

logger = structlog.get_logger(__name__)


class EmailDeliveryError(ServiceUnavailableError):
    """Raised when a message could not be handed to the provider in time."""


class MessageKind(str, Enum):
    VERIFY_EMAIL = "verify_email"
    WELCOME = "welcome"
    PASSWORD_RESET = "password_reset"


SUBJECTS = {
    MessageKind.VERIFY_EMAIL: "Please verify your email address (valid for only {minutes} minutes)",
    MessageKind.WELCOME: "Welcome to the Tourbook family!",
    MessageKind.PASSWORD_RESET: "Your password reset token (valid for only {minutes} minutes)",
}

BODIES = {
    MessageKind.VERIFY_EMAIL: (
        "Hi {first_name},\n\n"
        "Thanks for signing up! Please confirm your email address by opening the link below:\n"
        "{url}\n\n"
        "If you didn't create an account, please ignore this email."
    ),
    MessageKind.WELCOME: (
        "Hi {first_name},\n\n"
        "Welcome aboard! Complete your profile and book your first tour here:\n"
        "{url}"
    ),
    MessageKind.PASSWORD_RESET: (
        "Hi {first_name},\n\n"
        "Forgot your password? Submit a PATCH request with your new password and "
        "password_confirm to:\n"
        "{url}\n\n"
        "If you didn't forget your password, please ignore this email."
    ),
}


@dataclass(slots=True)
class EmailMessage:
    to: str
    name: str
    url: str
    kind: MessageKind

    @property
    def first_name(self) -> str:
        return self.name.split(" ")[0] if self.name else ""

    @property
    def subject(self) -> str:
        return SUBJECTS[self.kind].format(minutes=settings.EMAIL_TOKEN_EXPIRE_MINUTES)

    @property
    def body(self) -> str:
        return BODIES[self.kind].format(first_name=self.first_name, url=self.url)


class Mailer(Protocol):
    async def send(self, message: EmailMessage) -> None:
        ...


class ConsoleMailer:
    """Development backend: writes the rendered message to the log."""

    async def send(self, message: EmailMessage) -> None:
        logger.info(
            "Email sent (console backend)",
            to=message.to,
            kind=message.kind.value,
            subject=message.subject,
            body=message.body,
        )


class BrevoMailer:
    """Transactional email through the Brevo HTTP API."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        sender_email: str,
        sender_name: str,
        timeout: float | None = None,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._sender = {"email": sender_email, "name": sender_name}
        # HTTP 타임아웃은 deliver() 의 발송 제한 시간과 같은 값을 사용
        self._timeout = settings.EMAIL_SEND_TIMEOUT_SECONDS if timeout is None else timeout

    async def send(self, message: EmailMessage) -> None:
        payload = {
            "sender": self._sender,
            "to": [{"email": message.to, "name": message.name}],
            "subject": message.subject,
            "textContent": message.body,
        }
        headers = {"api-key": self._api_key, "accept": "application/json"}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(self._api_url, json=payload, headers=headers)
        if response.status_code >= 400:
            raise EmailDeliveryError(f"Email provider response {response.status_code}: {response.text}")


def build_mailer() -> Mailer:
    if settings.EMAIL_BACKEND == "brevo":
        if not settings.BREVO_API_KEY:
            raise RuntimeError("BREVO_API_KEY must be set when EMAIL_BACKEND is 'brevo'")
        return BrevoMailer(
            settings.BREVO_API_URL,
            settings.BREVO_API_KEY,
            settings.EMAIL_FROM,
            settings.EMAIL_FROM_NAME,
            timeout=settings.EMAIL_SEND_TIMEOUT_SECONDS,
        )
    return ConsoleMailer()


async def deliver(mailer: Mailer, message: EmailMessage, timeout: float | None = None) -> None:
    """Send ``message``, racing the provider against a timer.

    Any provider failure, including the timeout, surfaces as EmailDeliveryError
    so callers can decide whether to roll back.
    """
    timeout = settings.EMAIL_SEND_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        await asyncio.wait_for(mailer.send(message), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("Email sending timeout", to=message.to, kind=message.kind.value, timeout=timeout)
        raise EmailDeliveryError("Email sending timeout") from exc
    except EmailDeliveryError:
        logger.warning("Email sending failed", to=message.to, kind=message.kind.value)
        raise
    except Exception as exc:
        # 공급자 / 백엔드 종류와 무관하게 모든 발송 실패를 동일하게 취급
        logger.warning(
            "Email sending failed",
            to=message.to,
            kind=message.kind.value,
            error=repr(exc),
        )
        raise EmailDeliveryError(f"Email sending failed: {exc}") from exc

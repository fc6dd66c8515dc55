"""
메일 발송 유틸리티 단위 테스트.
- deliver() 가 모든 발송 실패를 EmailDeliveryError 로 통일하는지,
  Brevo 백엔드의 HTTP 타임아웃이 설정값을 따르는지 검증한다.
"""

import asyncio

import httpx
import pytest

from tourbook.core.config import settings
from tourbook.services.email import BrevoMailer, EmailDeliveryError, EmailMessage, MessageKind, deliver


class RaisingMailer:
    def __init__(self, error: Exception):
        self.error = error

    async def send(self, message: EmailMessage) -> None:
        raise self.error


def _message() -> EmailMessage:
    return EmailMessage("alice@x.com", "Alice Doe", "http://testserver/me", MessageKind.WELCOME)


@pytest.mark.parametrize(
    "error",
    [RuntimeError("boom"), httpx.InvalidURL("bad url"), httpx.ConnectError("refused"), ValueError("bad payload")],
)
def test_deliver_wraps_any_send_failure(error):
    with pytest.raises(EmailDeliveryError) as exc_info:
        asyncio.run(deliver(RaisingMailer(error), _message()))
    assert exc_info.value.__cause__ is error


def test_deliver_keeps_delivery_errors():
    error = EmailDeliveryError("provider unavailable")
    with pytest.raises(EmailDeliveryError) as exc_info:
        asyncio.run(deliver(RaisingMailer(error), _message()))
    assert exc_info.value is error


def test_brevo_timeout_follows_send_timeout_setting():
    mailer = BrevoMailer("https://api.example.test/send", "key", "no-reply@x.com", "Tourbook")
    assert mailer._timeout == settings.EMAIL_SEND_TIMEOUT_SECONDS

    custom = BrevoMailer("https://api.example.test/send", "key", "no-reply@x.com", "Tourbook", timeout=3.0)
    assert custom._timeout == 3.0

"""
services/tokens.py

Bearer 토큰 발급 및 쿠키 전달.

- 토큰은 JSON 응답 바디(token)와 HttpOnly 쿠키 두 곳으로 전달
- 쿠키 만료는 토큰 만료와 별도 설정(JWT_COOKIE_EXPIRES_IN_DAYS)
- HTTPS 요청(또는 프록시가 https로 전달한 요청)일 때만 secure 쿠키

"""

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from tourbook.core.config import settings
from tourbook.core.security import create_access_token
from tourbook.models.user import User
from tourbook.schemas.user import UserResponse

LOGGED_OUT_VALUE = "loggedout"


def is_secure_request(request: Request) -> bool:
    return (
        request.url.scheme == "https"
        or request.headers.get("x-forwarded-proto", "").lower() == "https"
    )


def set_token_cookie(response: Response, token: str, request: Request) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        max_age=settings.JWT_COOKIE_EXPIRES_IN_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=is_secure_request(request),
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
        path="/",
    )


def clear_token_cookie(response: Response) -> None:
    # 쿠키를 덮어써서 10초 후 만료 (HttpOnly 쿠키는 클라이언트에서 지울 수 없음)
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=LOGGED_OUT_VALUE,
        max_age=10,
        httponly=True,
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
        path="/",
    )


def send_token(user: User, status_code: int, request: Request) -> JSONResponse:
    token = create_access_token(subject=str(user.id))
    response = JSONResponse(
        status_code=status_code,
        content={
            "status": "success",
            "token": token,
            "data": {
                "user": UserResponse.model_validate(user).model_dump(mode="json"),
            },
        },
    )
    set_token_cookie(response, token, request)
    return response

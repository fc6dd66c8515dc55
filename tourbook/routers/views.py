"""
views.py

서버 렌더링 화면 (인증 관련 최소 화면만).

- /                   : 로그인 여부에 따라 다른 인사말 (is_logged_in, 실패해도 익명으로 진행)
- /me                 : 계정 화면 (protect)
- /verifyEmail/{token}: 인증 메일 링크 도착 화면 (성공 / 만료 / 무효)

"""

from html import escape

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from tourbook.core.deps import get_db, is_logged_in, protect
from tourbook.core.exceptions import VerificationTokenError
from tourbook.core.security import create_access_token
from tourbook.models.user import User
from tourbook.services import auth as auth_service
from tourbook.services.tokens import set_token_cookie

router = APIRouter(tags=["views"])


def render_page(title: str, body: str, status_code: int = status.HTTP_200_OK) -> HTMLResponse:
    html = (
        "<!DOCTYPE html>"
        f"<html><head><meta charset=\"utf-8\"><title>Tourbook | {escape(title)}</title></head>"
        f"<body><main><h1>{escape(title)}</h1>{body}</main></body></html>"
    )
    return HTMLResponse(content=html, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
def overview(user: User | None = Depends(is_logged_in)):
    if user is None:
        return render_page("All tours", '<p><a href="/login">Log in</a> or <a href="/signup">sign up</a>.</p>')
    return render_page("All tours", f"<p>Welcome back, {escape(user.name.split(' ')[0])}!</p>")


@router.get("/me", response_class=HTMLResponse)
def account(user: User = Depends(protect)):
    return render_page(
        "Your account",
        f"<p>{escape(user.name)}</p><p>{escape(user.email)}</p><p>{escape(user.role.value)}</p>",
    )


@router.get("/verifyEmail/{token}", response_class=HTMLResponse)
def verify_email_page(
    token: str,
    request: Request,
    autoLogin: bool = False,
    db: Session = Depends(get_db),
):
    try:
        user = auth_service.verify_email(db, token)
    except VerificationTokenError as exc:
        title = "Link expired" if exc.expired else "Invalid link"
        return render_page(title, f"<p>{escape(exc.message)}</p>", status.HTTP_400_BAD_REQUEST)

    if autoLogin:
        response = render_page("Email verified", "<p>Your email has been verified. You are now logged in.</p>")
        set_token_cookie(response, create_access_token(subject=str(user.id)), request)
        return response

    return render_page(
        "Email verified",
        '<p>Your email has been verified. Please <a href="/login">log in</a>.</p>',
    )

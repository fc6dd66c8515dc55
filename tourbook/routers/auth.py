"""
auth.py

인증(Authentication) 및 계정 관리 API 모음.

회원 가입, 이메일 인증, 로그인 / 로그아웃,
비밀번호 변경 / 찾기 / 재설정과 같이 사용자 인증 흐름 전반을 담당한다.

주요 기능:
- 회원 가입 (인증 메일 발송, 토큰은 인증 후 발급)
- 이메일 인증 / 인증 메일 재발송
- 로그인 및 토큰 발급 (JSON 바디 + HttpOnly 쿠키)
- 로그아웃 (쿠키 덮어쓰기)
- 비밀번호 변경 / 찾기 / 재설정

설계 원칙:
- Bearer 토큰은 Authorization Header 또는 HttpOnly Cookie로 전달
- 비밀번호가 바뀌면 이전에 발급된 토큰은 모두 무효
- 이메일 / 비밀번호 오류는 같은 메시지로 응답 (어느 쪽이 틀렸는지 노출하지 않음)

관련 파일:
- tourbook.services.auth      : 인증 비즈니스 로직
- tourbook.services.tokens    : 토큰 발급 / 쿠키
- tourbook.core.deps          : protect 의존성
- tourbook.schemas.auth       : 인증 관련 요청

"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from tourbook.core.deps import get_db, get_mailer, get_origin, protect
from tourbook.models.user import User
from tourbook.schemas.auth import (
    EmailRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    SignupResponse,
    UpdatePasswordRequest,
)
from tourbook.services import auth as auth_service
from tourbook.services.email import Mailer
from tourbook.services.tokens import clear_token_cookie, send_token

router = APIRouter(prefix="/api/v1/users", tags=["auth"])


"""
회원 가입 API

- 인증되지 않은 계정으로 생성 (email_verified=False)
- 인증 메일 발송 실패 시 계정은 남지 않음 (500)
- 응답에는 이름 / 이메일만 포함, 토큰은 발급하지 않음

"""

@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    request: Request,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    user = await auth_service.signup(db, mailer, data, get_origin(request))
    return {
        "status": "success",
        "message": "Account created! Please check your email to verify your address.",
        "data": {
            "user": SignupResponse(name=user.name, email=user.email).model_dump(),
        },
    }


@router.post("/login")
def login(data: LoginRequest, request: Request, db: Session = Depends(get_db)):
    user = auth_service.login(db, data.email, data.password)
    return send_token(user, status.HTTP_200_OK, request)


@router.get("/logout")
def logout():
    response = JSONResponse(content={"status": "success"})
    clear_token_cookie(response)
    return response


"""
이메일 인증 API (JSON)

- autoLogin=true 이면 바로 토큰 발급
- 만료 / 무효 링크는 400 (메시지로만 구분)

"""

@router.get("/verifyEmail/{token}")
def verify_email(
    token: str,
    request: Request,
    autoLogin: bool = False,
    db: Session = Depends(get_db),
):
    user = auth_service.verify_email(db, token)
    if autoLogin:
        return send_token(user, status.HTTP_200_OK, request)
    return {
        "status": "success",
        "message": "Your email has been verified. You can now log in.",
    }


@router.post("/resendVerification")
async def resend_verification(
    data: EmailRequest,
    request: Request,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    await auth_service.resend_verification(db, mailer, data.email, get_origin(request))
    return {"status": "success", "message": "Verification email sent!"}


@router.post("/forgotPassword")
async def forgot_password(
    data: EmailRequest,
    request: Request,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    await auth_service.forgot_password(db, mailer, data.email, get_origin(request))
    return {"status": "success", "message": "Token sent to email!"}


@router.patch("/resetPassword/{token}")
def reset_password(
    token: str,
    data: ResetPasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    user = auth_service.reset_password(db, token, data.password)
    return send_token(user, status.HTTP_200_OK, request)


"""
비밀번호 변경 API

- 현재 비밀번호 확인 필수
- 변경 시각(password_changed_at) 갱신 → 이전 토큰 무효
- 새 토큰 재발급

"""

@router.patch("/updateMyPassword")
def update_my_password(
    data: UpdatePasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(protect),
):
    user = auth_service.update_password(db, user, data.password_current, data.password)
    return send_token(user, status.HTTP_200_OK, request)

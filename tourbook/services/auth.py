"""
services/auth.py

인증(Authentication) 비즈니스 로직 모음.

이 파일은 회원 가입, 이메일 인증, 로그인, Bearer 토큰 검증,
비밀번호 변경 / 재설정 흐름을 담당한다.
라우터와 의존성(deps)은 이 파일의 함수를 호출하기만 하며,
여기서는 FastAPI 요청 객체에 의존하지 않는다.

주요 기능:
- 회원 가입 (인증 메일 발송 실패 시 생성된 계정 삭제)
- 이메일 인증 (만료 / 무효 링크 구분)
- 로그인 (이메일 / 비밀번호 오류는 동일한 메시지)
- Bearer 토큰 → 사용자 확인 (비밀번호 변경 이후 발급된 토큰만 허용)
- 비밀번호 변경 / 찾기 / 재설정

설계 원칙:
- 에러는 AppError 계열로 발생시키고 응답 변환은 중앙 핸들러에 맡김
- DB에는 일회성 토큰의 해시만 저장
- 메일 발송은 외부 협력자(Mailer)로 취급

관련 파일:
- tourbook.core.security      : 해시 / JWT
- tourbook.services.users     : 사용자 조회 (활성 사용자 기본 필터)
- tourbook.services.email     : 메일 발송
- tourbook.core.deps          : protect / is_logged_in / restrict_to

"""

import uuid

import structlog
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from tourbook.core.exceptions import (
    AuthenticationError,
    BadRequestError,
    NotFoundError,
    ServiceUnavailableError,
    VerificationTokenExpired,
    VerificationTokenInvalid,
)
from tourbook.core.security import decode_access_token, hash_token, verify_password
from tourbook.models.user import User, utcnow
from tourbook.schemas.auth import SignupRequest
from tourbook.services import users as user_repo
from tourbook.services.email import EmailDeliveryError, EmailMessage, Mailer, MessageKind, deliver

logger = structlog.get_logger(__name__)

INCORRECT_CREDENTIALS = "Incorrect email or password"
EMAIL_NOT_VERIFIED = "Please verify your email address before logging in."


def verification_url(origin: str, raw_token: str) -> str:
    return f"{origin}/verifyEmail/{raw_token}"


def reset_url(origin: str, raw_token: str) -> str:
    return f"{origin}/api/v1/users/resetPassword/{raw_token}"


"""
회원 가입

1) 인증된 계정이 이미 이메일을 쓰고 있으면 거절
2) 같은 이메일의 미인증 계정은 새 가입으로 대체(삭제)
3) 미인증 사용자 생성 + 인증 토큰 해시 저장
4) 인증 메일 발송 (실패 시 방금 만든 계정 삭제 후 500)
5) 환영 메일 발송 (실패해도 로그만 남김)

"""

async def signup(db: Session, mailer: Mailer, data: SignupRequest, origin: str) -> User:
    existing = user_repo.get_user_by_email(db, data.email, include_inactive=True)
    if existing is not None:
        if existing.email_verified:
            raise BadRequestError("Email already exists. Please use another email!")
        logger.info("Superseding unverified signup", user_id=str(existing.id))
        db.delete(existing)
        db.flush()

    user = User(name=data.name, email=data.email)
    user.set_password(data.password)
    raw_token = user.create_email_verify_token()

    db.add(user)
    db.commit()
    db.refresh(user)

    try:
        await deliver(
            mailer,
            EmailMessage(user.email, user.name, verification_url(origin, raw_token), MessageKind.VERIFY_EMAIL),
        )
    except EmailDeliveryError:
        # 인증할 수 없는 미인증 계정을 남기지 않음
        db.delete(user)
        db.commit()
        logger.warning("Signup rolled back: verification email failed", email=data.email)
        raise ServiceUnavailableError(
            "There was an error sending the verification email. Please try again later!"
        )

    try:
        await deliver(mailer, EmailMessage(user.email, user.name, f"{origin}/me", MessageKind.WELCOME))
    except EmailDeliveryError:
        logger.warning("Welcome email failed", user_id=str(user.id))

    logger.info("User signed up", user_id=str(user.id))
    return user


"""
인증 메일 재발송

- 미인증 계정만 대상
- 아직 유효한 링크가 있으면 새 토큰을 만들지 않음
- 발송 실패 시 새로 만든 토큰을 지우고 500

"""

async def resend_verification(db: Session, mailer: Mailer, email: str, origin: str) -> None:
    user = user_repo.get_user_by_email(db, email)
    if user is None or user.email_verified:
        raise NotFoundError("There is no unverified account with that email address.")

    raw_token = user.create_email_verify_token()
    if raw_token is None:
        raise BadRequestError(
            "A verification link was already sent. Please check your inbox or try again later."
        )
    db.commit()

    try:
        await deliver(
            mailer,
            EmailMessage(user.email, user.name, verification_url(origin, raw_token), MessageKind.VERIFY_EMAIL),
        )
    except EmailDeliveryError:
        user.clear_email_verification()
        db.commit()
        raise ServiceUnavailableError("There was an error sending the email. Try again later!")


"""
이메일 인증

- 토큰 해시 + 만료 전 조건으로 조회
- 실패 시 (안내 메시지용으로만) 만료 / 무효 구분
- 성공 시 email_verified=True, 토큰 정보 삭제

"""

def verify_email(db: Session, raw_token: str) -> User:
    token_hash = hash_token(raw_token)
    user = user_repo.get_user_by_verification_token(db, token_hash, utcnow())
    if user is None:
        if user_repo.get_user_by_verification_token(db, token_hash) is not None:
            raise VerificationTokenExpired()
        raise VerificationTokenInvalid()

    user.email_verified = True
    user.clear_email_verification()
    db.commit()
    db.refresh(user)
    logger.info("Email verified", user_id=str(user.id))
    return user


def login(db: Session, email: str | None, password: str | None) -> User:
    if not email or not password:
        raise BadRequestError("Please provide email and password!")

    user = user_repo.get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError(INCORRECT_CREDENTIALS)

    if not user.email_verified:
        raise AuthenticationError(EMAIL_NOT_VERIFIED)

    return user


"""
Bearer 토큰 → 사용자 확인

1) 서명 / 만료 검증
2) 토큰의 사용자(sub)가 아직 존재하는지 (비활성 사용자 제외)
3) 토큰 발급(iat) 이후 비밀번호가 바뀌었는지

"""

def authenticate_token(db: Session, token: str | None) -> User:
    if not token:
        raise AuthenticationError("You are not logged in! Please log in to get access.")

    try:
        payload = decode_access_token(token)
        user_id = uuid.UUID(str(payload["sub"]))
        issued_at = float(payload["iat"])
    except ExpiredSignatureError:
        raise AuthenticationError("Your token has expired! Please log in again.")
    except (JWTError, KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token. Please log in again!")

    user = user_repo.get_user_by_id(db, user_id)
    if user is None:
        raise AuthenticationError("The user belonging to this token does no longer exist.")

    if user.changed_password_after(issued_at):
        raise AuthenticationError("User recently changed password! Please log in again.")

    return user


def update_password(db: Session, user: User, current: str, new_password: str) -> User:
    if not verify_password(current, user.password_hash):
        raise AuthenticationError("Your current password is wrong.")

    user.set_password(new_password)
    db.commit()
    db.refresh(user)
    logger.info("Password updated", user_id=str(user.id))
    return user


"""
비밀번호 찾기

- 재설정 토큰은 매 요청마다 새로 발급
- 메일 발송 실패 시 토큰 정보를 지워 사용할 수 없는 재설정 상태를 남기지 않음

"""

async def forgot_password(db: Session, mailer: Mailer, email: str, origin: str) -> None:
    user = user_repo.get_user_by_email(db, email)
    if user is None:
        raise NotFoundError("There is no user with that email address.")

    raw_token = user.create_password_reset_token()
    db.commit()

    try:
        await deliver(
            mailer,
            EmailMessage(user.email, user.name, reset_url(origin, raw_token), MessageKind.PASSWORD_RESET),
        )
    except EmailDeliveryError:
        user.clear_password_reset()
        db.commit()
        raise ServiceUnavailableError("There was an error sending the email. Try again later!")


def reset_password(db: Session, raw_token: str, new_password: str) -> User:
    user = user_repo.get_user_by_reset_token(db, hash_token(raw_token), utcnow())
    if user is None:
        raise BadRequestError("Token is invalid or has expired")

    user.set_password(new_password)
    user.clear_password_reset()
    db.commit()
    db.refresh(user)
    logger.info("Password reset", user_id=str(user.id))
    return user

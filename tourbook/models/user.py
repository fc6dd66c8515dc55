"""
user.py

사용자(User) 및 권한(Role) 모델 정의 파일.

이 파일은 투어 예약 서비스 회원의 기본 정보와
권한(Role), 비활성화 상태(Soft Delete), 인증 관련 정보를 관리한다.

모든 인증, 권한, 관리자 기능의 기준이 되는 핵심 모델이다.

"""

import uuid
import datetime
from datetime import timedelta, timezone
from enum import Enum

from sqlalchemy import String, Boolean, DateTime, Uuid, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from tourbook.core.config import settings
from tourbook.core.security import get_password_hash, generate_raw_token, hash_token
from tourbook.db.base import Base


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(timezone.utc)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    # SQLite는 tz 정보를 저장하지 않으므로 naive 값은 UTC로 간주
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


"""
사용자 권한(Role) 정의

- USER        : 일반 회원 (기본값)
- GUIDE       : 투어 가이드
- LEAD_GUIDE  : 리드 가이드
- ADMIN       : 관리자

"""

class Role(str, Enum):
    USER = "user"
    GUIDE = "guide"
    LEAD_GUIDE = "lead-guide"
    ADMIN = "admin"


"""
사용자(User) 모델

- email 은 고유 식별자 (소문자로 정규화)
- password_hash 에는 bcrypt 해시만 저장, 응답에 절대 포함하지 않음
- email_verified 가 True 여야 로그인 가능
- password_changed_at 이후 발급된 토큰만 유효
- *_token 컬럼에는 일회성 토큰의 sha256 해시만 저장 (만료 시각과 항상 함께 set / clear)
- active=False 로 Soft Delete (기본 조회에서 제외)

"""

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    photo: Mapped[str] = mapped_column(String(255), nullable=False, default="default.jpg")

    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.USER,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    password_changed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    password_reset_token: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    password_reset_expires: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_verification_token: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    email_verification_expires: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self):
        return f"<User {self.email}>"

    # 비밀번호 변경 (계정 생성 시에는 password_changed_at 을 남기지 않음)
    def set_password(self, password: str, now: datetime.datetime | None = None) -> None:
        is_new = self.password_hash is None
        self.password_hash = get_password_hash(password)
        if not is_new:
            self.password_changed_at = now or utcnow()

    def changed_password_after(self, issued_at: float) -> bool:
        if self.password_changed_at is None:
            return False
        return issued_at < as_utc(self.password_changed_at).timestamp()

    """
    이메일 인증 토큰 생성

    - 아직 유효한 토큰이 있으면 새로 만들지 않고 None 반환
      (재요청으로 이전 링크가 계속 무효화되는 것을 방지)
    - raw 토큰은 반환값으로만 전달, DB에는 해시만 저장

    """
    def create_email_verify_token(self, now: datetime.datetime | None = None) -> str | None:
        now = now or utcnow()
        if (
            self.email_verification_token
            and self.email_verification_expires
            and as_utc(self.email_verification_expires) > now
        ):
            return None

        raw = generate_raw_token()
        self.email_verification_token = hash_token(raw)
        self.email_verification_expires = now + timedelta(minutes=settings.EMAIL_TOKEN_EXPIRE_MINUTES)
        return raw

    def clear_email_verification(self) -> None:
        self.email_verification_token = None
        self.email_verification_expires = None

    # 재설정 토큰은 요청마다 새로 발급 (이전 링크는 무효)
    def create_password_reset_token(self, now: datetime.datetime | None = None) -> str:
        now = now or utcnow()
        raw = generate_raw_token()
        self.password_reset_token = hash_token(raw)
        self.password_reset_expires = now + timedelta(minutes=settings.EMAIL_TOKEN_EXPIRE_MINUTES)
        return raw

    def clear_password_reset(self) -> None:
        self.password_reset_token = None
        self.password_reset_expires = None

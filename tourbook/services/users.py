"""
services/users.py

사용자 조회(Repository) 로직 모음.

모든 사용자 조회는 이 파일을 거치며,
비활성화(active=False)된 사용자는 기본적으로 제외된다.
비활성 사용자까지 필요한 경우(가입 시 이메일 중복 확인, 관리자 조회)에만
include_inactive=True 를 명시한다.

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어(commit)는 호출 측에서 수행

관련 파일:
- tourbook.models.user       : User 모델
- tourbook.services.auth     : 인증 흐름
- tourbook.routers.admin     : 관리자 API

"""

import uuid
from datetime import datetime

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from tourbook.models.user import User


def user_query(*, include_inactive: bool = False) -> Select:
    stmt = select(User)
    if not include_inactive:
        stmt = stmt.where(User.active.is_(True))
    return stmt


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_id(db: Session, user_id: uuid.UUID, *, include_inactive: bool = False) -> User | None:
    return db.scalar(user_query(include_inactive=include_inactive).where(User.id == user_id))


def get_user_by_email(db: Session, email: str, *, include_inactive: bool = False) -> User | None:
    return db.scalar(
        user_query(include_inactive=include_inactive).where(User.email == normalize_email(email))
    )


def get_user_by_reset_token(db: Session, token_hash: str, now: datetime) -> User | None:
    return db.scalar(
        user_query().where(
            User.password_reset_token == token_hash,
            User.password_reset_expires > now,
        )
    )


def get_user_by_verification_token(
    db: Session, token_hash: str, now: datetime | None = None
) -> User | None:
    # now=None 이면 만료 여부와 관계없이 해시만으로 조회 (만료 / 무효 안내 메시지 구분용)
    stmt = user_query().where(User.email_verification_token == token_hash)
    if now is not None:
        stmt = stmt.where(User.email_verification_expires > now)
    return db.scalar(stmt)


def list_users(db: Session, *, include_inactive: bool = False) -> list[User]:
    return list(
        db.scalars(user_query(include_inactive=include_inactive).order_by(User.created_at)).all()
    )

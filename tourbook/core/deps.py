"""
deps.py

요청 단위 의존성(Dependency) 모음.

라우트에 붙는 순서대로 동작하는 인증 / 인가 체인:
    get_db → protect → restrict_to(...) → 핸들러

- protect       : 토큰 확인 실패 시 401 (보호 라우트)
- is_logged_in  : 같은 검사를 하되 실패하면 익명 사용자(None)로 계속 진행 (화면 렌더링용)
- restrict_to   : protect 이후 role 확인, 허용 목록에 없으면 403

실제 검증 로직은 tourbook.services.auth.authenticate_token 에 있고
여기서는 요청에서 토큰을 꺼내 전달하는 역할만 한다.

"""

from typing import Generator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from tourbook.core.config import settings
from tourbook.core.exceptions import AuthenticationError, PermissionDeniedError
from tourbook.db.session import SessionLocal
from tourbook.models.user import Role, User
from tourbook.services.auth import authenticate_token
from tourbook.services.email import Mailer, build_mailer

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_mailer() -> Mailer:
    return build_mailer()


def get_origin(request: Request) -> str:
    return str(request.base_url).rstrip("/")


# Authorization 헤더 우선, 없으면 쿠키
def extract_token(request: Request, cred: HTTPAuthorizationCredentials | None) -> str | None:
    if cred is not None and cred.credentials:
        return cred.credentials
    return request.cookies.get(settings.COOKIE_NAME)


def protect(
    request: Request,
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    user = authenticate_token(db, extract_token(request, cred))
    request.state.user = user
    return user


def is_logged_in(request: Request, db: Session = Depends(get_db)) -> User | None:
    token = request.cookies.get(settings.COOKIE_NAME)
    if not token:
        return None
    try:
        user = authenticate_token(db, token)
    except AuthenticationError:
        return None
    request.state.user = user
    return user


def restrict_to(*roles: Role):
    allowed = frozenset(roles)

    def _checker(current_user: User = Depends(protect)) -> User:
        if current_user.role not in allowed:
            raise PermissionDeniedError("You do not have permission to perform this action")
        return current_user

    return _checker


get_current_admin = restrict_to(Role.ADMIN)

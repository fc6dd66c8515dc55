# tests/helpers.py
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from tourbook.models.user import User, Role

DEFAULT_PASSWORD = "Passw0rd!123"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:6]}@test.com"


def signup_payload(email: str, password: str = DEFAULT_PASSWORD, name: str = "Test User") -> dict:
    return {
        "name": name,
        "email": email,
        "password": password,
        "password_confirm": password,
    }


def create_user_in_db(
    db: Session,
    *,
    email: str,
    password: str = DEFAULT_PASSWORD,
    name: str = "Test User",
    role: Role = Role.USER,
    verified: bool = True,
) -> User:
    user = User(name=name, email=email, role=role, email_verified=verified)
    user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def login(client, email: str, password: str = DEFAULT_PASSWORD) -> str:
    r = client.post("/api/v1/users/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def create_and_login(client, db: Session, *, role: Role = Role.USER, prefix: str = "user"):
    email = unique_email(prefix)
    user = create_user_in_db(db, email=email, role=role)
    token = login(client, email)
    # 쿠키가 남아 있으면 헤더 없는 요청도 인증되므로 테스트에서는 헤더만 사용
    client.cookies.clear()
    return user, token


def get_user(db: Session, email: str) -> User | None:
    # 다른 세션(앱)에서 바뀐 값을 다시 읽기 위해 캐시 무효화
    db.expire_all()
    return db.scalar(select(User).where(User.email == email))

import asyncio
import os

# 앱 모듈 import 전에 테스트용 환경 변수 설정
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789abcdef0123456789abcdef"
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["EMAIL_SEND_TIMEOUT_SECONDS"] = "0.2"
os.environ["EMAIL_BACKEND"] = "console"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, delete
from sqlalchemy.orm import sessionmaker

from tourbook.main import app as fastapi_app
from tourbook.core.deps import get_db, get_mailer
from tourbook.db.base import Base
from tourbook.models.user import User
from tourbook.services.email import EmailDeliveryError, EmailMessage, MessageKind


class FakeMailer:
    """메일 발송 기록용 가짜 Mailer (실패 / 타임아웃 시뮬레이션 가능)"""

    def __init__(self):
        self.attempts: list[EmailMessage] = []
        self.sent: list[EmailMessage] = []
        self.fail_kinds: set[MessageKind] = set()
        self.hang_kinds: set[MessageKind] = set()
        self.errors: dict[MessageKind, Exception] = {}

    async def send(self, message: EmailMessage) -> None:
        self.attempts.append(message)
        if message.kind in self.hang_kinds:
            await asyncio.sleep(5)
        if message.kind in self.errors:
            raise self.errors[message.kind]
        if message.kind in self.fail_kinds:
            raise EmailDeliveryError("provider unavailable")
        self.sent.append(message)

    def last(self, kind: MessageKind) -> EmailMessage:
        matches = [m for m in self.sent if m.kind == kind]
        assert matches, f"no {kind.value} email was sent"
        return matches[-1]

    def last_token(self, kind: MessageKind) -> str:
        return self.last(kind).url.split("?")[0].rsplit("/", 1)[-1]


@pytest.fixture(scope="session")
def engine(tmp_path_factory):
    db_path = tmp_path_factory.mktemp("db") / "test.sqlite3"
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="session")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def clean_tables(engine):
    """각 테스트마다 데이터 초기화 (테이블은 유지, row만 삭제)"""
    with engine.begin() as conn:
        conn.execute(delete(User))


@pytest.fixture()
def db_session(session_factory):
    """테스트에서 직접 DB 조작할 때 쓰는 세션"""
    session = session_factory()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def client(session_factory, mailer):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()

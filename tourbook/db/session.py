"""
session.py

데이터베이스 엔진 및 세션(Session) 관리 파일.

SQLAlchemy Engine과 SessionLocal을 생성하여
애플리케이션 전반에서 공통으로 사용하는 DB 연결을 관리한다.
FastAPI 의존성(get_db)을 통해 요청 단위로 세션을 생성/종료한다.

설계 원칙:
- DB 연결 설정은 한 곳에서만 정의
- 단일 문서(row) 쓰기의 원자성은 DB 트랜잭션에 맡김
- pool_pre_ping=True로 유휴 연결 오류 방지

관련 파일:
- tourbook.core.config     : DATABASE_URL 설정
- tourbook.core.deps       : get_db 의존성

"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tourbook.core.config import settings


engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# 요청 단위로 사용할 세션 팩토리
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

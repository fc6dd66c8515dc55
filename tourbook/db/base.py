"""
base.py

SQLAlchemy ORM Base 정의 파일.

모든 모델(User 등)이 상속받는 공통 Base 클래스.
Alembic 마이그레이션 또한 이 Base의 메타데이터를 기준으로 동작한다.

"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()

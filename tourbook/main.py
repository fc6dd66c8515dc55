"""
main.py

FastAPI 애플리케이션 진입점(Entry Point).

주요 역할:
- 로깅 설정 (structlog)
- FastAPI 앱 인스턴스 생성
- 미들웨어 (Correlation ID, 요청 로깅, CORS) 설정
- 공통 에러 핸들러 등록
- 기능별 라우터(auth, users, admin, views) 등록
- 헬스 체크 및 DB 연결 상태 확인용 엔드포인트 제공

설계 원칙:
- 비즈니스 로직은 포함하지 않고 설정/조립 역할만 수행
- 실제 기능은 routers / services 계층에 위임

"""

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text

from tourbook.core.config import settings
from tourbook.core.deps import get_db
from tourbook.core.exceptions import register_exception_handlers
from tourbook.core.logging import configure_logging
from tourbook.core.middleware import setup_middleware
from tourbook.routers import auth, users, admin, views

configure_logging()

app = FastAPI(title="Tourbook")

setup_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(admin.router)
app.include_router(views.router)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    value = db.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "value": value}

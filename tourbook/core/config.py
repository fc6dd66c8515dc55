"""
config.py

애플리케이션 전역 설정(Configuration) 관리 파일.

.env 환경 변수들을 Pydantic BaseSettings를 통해 로드하여
애플리케이션 전반에서 공통으로 사용하는 설정 값을 제공한다.

주요 설정 항목:
- 데이터베이스 연결 정보
- JWT 시크릿 및 토큰 / 쿠키 만료 정책
- 이메일 인증 / 비밀번호 재설정 토큰 유효 시간
- 메일 발송 백엔드(console / brevo) 및 발송 타임아웃
- 로깅 환경 / CORS 허용 도메인

설계 원칙:
- 모든 환경 변수는 이 파일을 통해서만 접근
- 로컬 / 테스트 / 운영 환경을 .env로 분리하여 관리
- 설정 값은 런타임 중 변경되지 않는 불변 객체로 취급

관련 파일:
- tourbook.main             : CORS 및 앱 초기화 시 설정 사용
- tourbook.core.security    : JWT 시크릿 / 해시 비용 설정 사용
- tourbook.services.email   : 메일 백엔드 설정 사용
- tourbook.db.session       : DATABASE_URL 사용

"""

from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str

    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # Bearer 토큰 자체 만료와 쿠키 만료는 별도로 관리
    JWT_EXPIRES_IN_DAYS: int = 90
    JWT_COOKIE_EXPIRES_IN_DAYS: int = 90

    # 이메일 인증 / 비밀번호 재설정 토큰 유효 시간
    EMAIL_TOKEN_EXPIRE_MINUTES: int = 10

    # bcrypt cost (테스트에서는 낮춰서 사용)
    BCRYPT_ROUNDS: int = 12

    # 쿠키 옵션
    # - secure 플래그는 요청이 HTTPS(또는 프록시 전달)인지에 따라 결정됨
    COOKIE_NAME: str = "jwt"
    COOKIE_SAMESITE: str = "lax"
    COOKIE_DOMAIN: str | None = None

    # 메일 발송
    EMAIL_BACKEND: Literal["console", "brevo"] = "console"
    EMAIL_FROM: str = "no-reply@tourbook.local"
    EMAIL_FROM_NAME: str = "Tourbook"
    EMAIL_SEND_TIMEOUT_SECONDS: float = 15.0
    BREVO_API_URL: str = "https://api.brevo.com/v3/smtp/email"
    BREVO_API_KEY: str | None = None

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # CORS 허용 도메인 (프론트엔드 주소)
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]


# 애플리케이션 전역에서 import하여 사용하는 Settings 인스턴스
settings = Settings()

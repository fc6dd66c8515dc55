"""
security.py

비밀번호 해싱, Bearer 토큰(JWT) 생성/검증,
이메일 인증 / 비밀번호 재설정용 일회성 토큰 생성을 담당하는 보안 유틸리티 모음.

이 파일은 인증(auth) 로직에서 사용하는
저수준(low-level) 보안 기능만을 제공하며,
라우터나 비즈니스 로직은 포함하지 않는다.

주요 기능:
- 비밀번호 해싱 및 검증 (bcrypt, salt 포함 느린 해시)
- Bearer 토큰 생성 / 디코딩 (sub + iat + exp)
- 일회성 토큰 생성 및 sha256 해시 (DB에는 해시만 저장)

설계 원칙:
- 비밀번호는 느린 salted 해시, 일회성 토큰은 결정적(deterministic) 해시
- iat는 초 단위 이하까지 기록하여 비밀번호 변경 시각과 정확히 비교
- 시간 기반(exp) 만료는 UTC 기준으로 처리

관련 파일:
- tourbook.core.config        : JWT 시크릿 키 및 만료 설정
- tourbook.services.auth      : 토큰을 실제로 검증하는 인증 흐름
- tourbook.models.user        : 일회성 토큰 해시 저장

"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from passlib.context import CryptContext

from tourbook.core.config import settings


# bcrypt 기반 비밀번호 해싱 컨텍스트
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


"""
Bearer 토큰 생성 함수

- sub: 사용자 식별자(user_id)
- iat: 발급 시각 (float, 비밀번호 변경 시각 비교용)
- exp: 만료 시각 (기본 90일)

"""

def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.JWT_EXPIRES_IN_DAYS))
    payload = {
        "sub": subject,
        "iat": now.timestamp(),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


"""
Bearer 토큰 디코딩 함수

- 서명 / 만료 검증 실패 시 JWTError (만료는 ExpiredSignatureError) 발생
- 에러 분류는 호출 측(services.auth)에서 수행

"""

def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


"""
일회성 토큰 생성 / 해시 함수

- raw 토큰은 32바이트 난수(hex 64자), 메일로만 전달
- DB에는 sha256 hex digest만 저장
- 같은 raw 토큰은 항상 같은 해시 → 조회 키로 사용

"""

def generate_raw_token() -> str:
    return secrets.token_hex(32)


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()

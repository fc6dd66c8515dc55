"""

ADMIN 초기 계정 생성 스크립트.

- 서버 최초 세팅 시 단 한 번 실행하는 용도
- .env에 정의된 ADMIN_* 환경 변수를 읽어
  이메일 인증이 완료된 ADMIN 계정을 생성한다.
- 이미 ADMIN 계정이 존재하면 생성하지 않고 종료한다.

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.create_admin

"""

import os
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from tourbook.db.session import SessionLocal
from tourbook.models.user import User, Role
from tourbook.services.users import normalize_email


def main():
    db = SessionLocal()
    try:
        exists = db.scalar(
            select(User).where(User.role == Role.ADMIN, User.active.is_(True))
        )
        if exists:
            print("✅ ADMIN already exists. Skip creation.")
            return

        email = normalize_email(os.environ["ADMIN_EMAIL"])
        password = os.environ["ADMIN_PASSWORD"]
        name = os.environ.get("ADMIN_NAME", "Admin")

        email_exists = db.scalar(
            select(User).where(User.email == email)
        )
        if email_exists:
            raise RuntimeError("Email already exists but is not ADMIN")

        user = User(
            name=name,
            email=email,
            role=Role.ADMIN,
            email_verified=True,
        )
        user.set_password(password)

        db.add(user)
        db.commit()

        print(f"🚀 ADMIN created: {email}")

    finally:
        db.close()


if __name__ == "__main__":
    main()

"""
users.py

로그인한 회원 본인의 계정 정보 API 모음.

관리자용 사용자 관리 기능(admin.py)과 분리하여,
권한 범위와 노출 가능한 데이터 범위를 명확히 하기 위한 구조이다.

주요 기능:
- 본인 프로필 조회
- 본인 프로필 수정 (이름 / 이메일만)
- 본인 탈퇴 (Soft Delete, active=False)

관련 파일:
- tourbook.models.user       : User 모델
- tourbook.core.deps         : protect 의존성
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from tourbook.core.deps import get_db, protect
from tourbook.core.exceptions import BadRequestError
from tourbook.models.user import User
from tourbook.schemas.user import UpdateMeRequest, UserResponse
from tourbook.services import users as user_repo

router = APIRouter(prefix="/api/v1/users", tags=["users"])

PASSWORD_FIELDS = {"password", "password_confirm", "password_current"}


@router.get("/me")
def get_me(current_user: User = Depends(protect)):
    return {
        "status": "success",
        "data": {"user": UserResponse.model_validate(current_user).model_dump(mode="json")},
    }


"""
회원 정보 수정 API

- 비밀번호 관련 필드가 오면 거절 (/updateMyPassword 사용)
- 이름 / 이메일 외 필드는 무시 (role 등 권한 상승 방지)
- 다른 계정이 쓰는 이메일로는 변경 불가

"""

@router.patch("/updateMe")
def update_me(
    data: UpdateMeRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(protect),
):
    if PASSWORD_FIELDS & set(data.model_extra or {}):
        raise BadRequestError("This route is not for password updates. Please use /updateMyPassword.")

    if data.email is not None and data.email != current_user.email:
        owner = user_repo.get_user_by_email(db, data.email, include_inactive=True)
        if owner is not None:
            raise BadRequestError("Email already exists. Please use another email!")
        current_user.email = data.email

    if data.name is not None:
        name = data.name.strip()
        if not name:
            raise BadRequestError("Please tell us your name")
        current_user.name = name

    db.commit()
    db.refresh(current_user)

    return {
        "status": "success",
        "data": {"user": UserResponse.model_validate(current_user).model_dump(mode="json")},
    }


@router.delete("/deleteMe", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(protect),
):
    current_user.active = False
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

import uuid

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tourbook.core.deps import get_current_admin, get_db
from tourbook.core.exceptions import BadRequestError, NotFoundError
from tourbook.models.user import User
from tourbook.schemas.user import AdminUserResponse, RoleUpdate
from tourbook.services import users as user_repo

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/admin/users", tags=["admin"])


def _serialize(user: User) -> dict:
    return AdminUserResponse.model_validate(user).model_dump(mode="json")


def _get_target(db: Session, user_id: uuid.UUID, include_inactive: bool = False) -> User:
    user = user_repo.get_user_by_id(db, user_id, include_inactive=include_inactive)
    if user is None:
        raise NotFoundError("No user found with that ID")
    return user


# 전체 회원 목록 조회 (기본: 활성 회원만)
@router.get("")
def list_users(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    users = user_repo.list_users(db, include_inactive=include_inactive)
    return {
        "status": "success",
        "results": len(users),
        "data": {"users": [_serialize(u) for u in users]},
    }


# 회원 상세 조회
@router.get("/{user_id}")
def get_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    user = _get_target(db, user_id, include_inactive=True)
    return {"status": "success", "data": {"user": _serialize(user)}}


# 회원 권한 변경
@router.patch("/{user_id}/role")
def set_role(
    user_id: uuid.UUID,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_target(db, user_id)

    # 자기 자신 권한 변경 금지
    if user.id == current_admin.id:
        raise BadRequestError("Cannot change your own role")

    if user.role == data.role:
        raise BadRequestError(f"User already {user.role.value}")

    before = user.role
    user.role = data.role
    db.commit()
    db.refresh(user)

    logger.info(
        "Role updated",
        actor_id=str(current_admin.id),
        target_user_id=str(user.id),
        before_role=before.value,
        after_role=user.role.value,
    )
    return {"status": "success", "data": {"user": _serialize(user)}}


# 회원 비활성화 (Soft Delete)
@router.delete("/{user_id}")
def deactivate_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = _get_target(db, user_id)

    # 자기 자신 비활성화 금지
    if user.id == current_admin.id:
        raise BadRequestError("Cannot deactivate yourself")

    user.active = False
    db.commit()

    logger.info("User deactivated", actor_id=str(current_admin.id), target_user_id=str(user.id))
    return {"status": "success", "data": {"user": _serialize(user)}}

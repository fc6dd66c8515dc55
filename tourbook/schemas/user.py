import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from tourbook.models.user import Role


# 유저 응답용 (비밀번호 / 토큰 해시는 절대 포함하지 않음)
class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    photo: str
    role: Role
    email_verified: bool


# 관리자 상세 조회용
class AdminUserResponse(UserResponse):
    active: bool
    password_changed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


# 관리자 role 변경 요청용
class RoleUpdate(BaseModel):
    role: Role


class UpdateMeRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    email: EmailStr | None = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


class PasswordPair(BaseModel):
    password: str = Field(min_length=8, max_length=64)
    password_confirm: str

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.password_confirm:
            raise ValueError("Passwords are not the same!")
        return self


class SignupRequest(PasswordPair):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please tell us your name")
        return v

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()


class SignupResponse(BaseModel):
    name: str
    email: EmailStr


# 누락 여부는 서비스에서 직접 확인 (400 "Please provide email and password!")
class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class EmailRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(PasswordPair):
    pass


class UpdatePasswordRequest(PasswordPair):
    password_current: str = Field(..., min_length=1)

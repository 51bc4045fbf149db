"""Client-side login and registration forms, checked before any network call."""

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from versalles.users.schemas import Username

MIN_PASSWORD_LENGTH = 6


class LoginForm(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterForm(BaseModel):
    username: Username
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    confirm_password: str

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and value != password:
            raise PydanticCustomError("password_mismatch", "Passwords do not match.")
        return value

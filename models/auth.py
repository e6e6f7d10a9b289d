import re
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
FULL_NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 8

PASSWORD_MISMATCH = "Passwords don't match"


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    remember_me: bool = False

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        value = _strip(value)
        return value.lower() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def password_present(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("password_required", "Password is required")
        return value


class SignUpRequest(BaseModel):
    email: EmailStr
    username: str
    full_name: str
    password: str
    confirm_password: str
    terms_accepted: bool = Field(default=False, validate_default=True)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        value = _strip(value)
        return value.lower() if isinstance(value, str) else value

    @field_validator("username", "full_name", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip(value)

    @field_validator("username")
    @classmethod
    def username_policy(cls, value: str) -> str:
        if len(value) < USERNAME_MIN_LENGTH:
            raise PydanticCustomError(
                "username_too_short",
                "Username must be at least {min} characters",
                {"min": USERNAME_MIN_LENGTH},
            )
        if len(value) > USERNAME_MAX_LENGTH:
            raise PydanticCustomError(
                "username_too_long",
                "Username must be at most {max} characters",
                {"max": USERNAME_MAX_LENGTH},
            )
        if not USERNAME_PATTERN.match(value):
            raise PydanticCustomError(
                "username_charset",
                "Username can only contain letters, numbers and underscores",
            )
        return value

    @field_validator("full_name")
    @classmethod
    def full_name_policy(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("full_name_required", "Full name is required")
        if len(value) > FULL_NAME_MAX_LENGTH:
            raise PydanticCustomError(
                "full_name_too_long",
                "Full name must be at most {max} characters",
                {"max": FULL_NAME_MAX_LENGTH},
            )
        return value

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise PydanticCustomError(
                "password_too_short",
                "Password must be at least {min} characters",
                {"min": PASSWORD_MIN_LENGTH},
            )
        if not re.search(r"[A-Za-z]", value) or not re.search(r"\d", value):
            raise PydanticCustomError(
                "password_too_weak",
                "Password must contain at least one letter and one number",
            )
        return value

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        # password is absent from info.data when it failed its own checks
        if "password" in info.data and value != info.data["password"]:
            raise PydanticCustomError("password_mismatch", PASSWORD_MISMATCH)
        return value

    @field_validator("terms_accepted")
    @classmethod
    def terms_must_be_accepted(cls, value: bool) -> bool:
        if value is not True:
            raise PydanticCustomError(
                "terms_required", "You must accept the terms and conditions"
            )
        return value


class AuthIdentity(BaseModel):
    id: str
    email: Optional[str] = None


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    user: AuthIdentity


class AuthResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user: AuthIdentity

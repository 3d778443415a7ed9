from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_BYTES = 72


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name must not be empty or whitespace")
        return value


class UserCreate(UserBase):
    """Schema used for incoming create requests."""

    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        # bcrypt ignores everything past 72 bytes.
        if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
        return value


class UserUpdate(UserBase):
    """Only the name can change after creation."""


class UserOut(BaseModel):
    """Schema used for responses.

    The password hash is deliberately not part of it.
    """

    id: int
    name: str
    email: EmailStr
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageOut(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    detail: str

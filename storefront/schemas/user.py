# storefront/schemas/user.py
import uuid
from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from storefront.schemas.cart import CartEntry


class RegisterRequest(SQLModel):
    """
    Payload for POST /register.

    Validation rules:
      - email must be a valid EmailStr
      - username 6..50 chars, not blank
      - password 8..100 chars
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    username: str = Field(min_length=6, max_length=50)
    password: str = Field(min_length=8, max_length=100)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 6:
            raise ValueError("Username must be at least 6 characters long")
        return v


class LoginRequest(SQLModel):
    """Payload for POST /login."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=8, max_length=100)


class UserRead(SQLModel):
    """
    Response schema returned to clients, and the snapshot kept in the
    session cache. Never carries the password hash.
    """

    id: uuid.UUID
    email: str
    username: str
    access_level: int
    cart: list[CartEntry] = []
    created_at: datetime
    updated_at: datetime


class RegisterResponse(SQLModel):
    id: uuid.UUID
    msg: str


class MessageResponse(SQLModel):
    msg: str

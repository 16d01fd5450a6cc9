# storefront/models/user.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Registered account.

    Access level:
      - 1 => regular customer (default)
      - >= 2 => administrator (may manage products and any cart)

    Cart:
      - embedded list of {"product_id": "<uuid>", "quantity": int}
      - unique by product_id, kept in insertion order
      - always reassign the list (never mutate in place) so the
        JSON column is flagged dirty
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    email: str = Field(
        unique=True,
        index=True,
        max_length=254,
    )

    username: str = Field(
        unique=True,
        index=True,
        min_length=6,
        max_length=50,
    )

    password_hash: str = Field(description="passlib hash, never serialized")

    access_level: int = Field(
        default=1,
        ge=1,
        description="Capability tier; >= 2 grants admin rights",
    )

    cart: list[dict] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )

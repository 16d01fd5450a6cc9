# storefront/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    `stock` is a ceiling checked by the cart, it is never decremented.
    `image_name` is either the default placeholder or a generated
    "<uuid4>.<ext>" name stored in the image bucket.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        min_length=5,
        max_length=200,
        index=True,
    )

    description: str = Field(
        default="",
        max_length=2500,
    )

    price: float = Field(
        ge=0,
        le=99999.99,
        description="Unit price",
    )

    stock: int = Field(
        ge=0,
        description="How many units may be ordered at most",
    )

    image_name: str = Field(
        default="default.png",
        max_length=255,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )

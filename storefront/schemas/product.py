# storefront/schemas/product.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ProductForm(SQLModel):
    """
    Fields of the multipart form used to create or replace a product.

    The optional image travels as a separate file part.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=5, max_length=200)
    description: str = Field(default="", max_length=2500)
    price: float = Field(ge=0, le=99999.99)
    stock: int = Field(ge=1)

    @field_validator("name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 5:
            raise ValueError(
                "Name of the product must be at least 5 characters long"
            )
        return v


class ProductRead(SQLModel):
    """
    Product representation for clients, with the resolved image URL.
    """

    id: uuid.UUID
    name: str
    description: str
    price: float
    stock: int
    image_name: str
    image_url: str
    created_at: datetime
    updated_at: datetime

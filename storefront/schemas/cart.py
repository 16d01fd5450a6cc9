# storefront/schemas/cart.py
import uuid

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

from storefront.schemas.product import ProductRead


class CartEntry(SQLModel):
    """
    One embedded cart line, as stored on the user row.
    """

    product_id: uuid.UUID
    quantity: int = Field(ge=1)


class CartItemCreate(SQLModel):
    """
    Payload for adding a product to a cart.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    quantity: int = Field(ge=1)


class CartItemUpdate(SQLModel):
    """
    Payload for changing the quantity of a product already in the cart.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(ge=1)


class CartProductRead(ProductRead):
    """
    Product joined with its cart quantity.
    """

    quantity: int

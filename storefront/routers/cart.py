# storefront/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_auth
from storefront.database import get_session
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.user_repo import UserRepository
from storefront.routers.products import get_product_service
from storefront.schemas.cart import CartItemCreate, CartItemUpdate, CartProductRead
from storefront.schemas.user import MessageResponse, UserRead
from storefront.services.cart_service import CartService
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/cart", tags=["Cart"])


def get_cart_service(
    products: ProductService = Depends(get_product_service),
) -> CartService:
    return CartService(UserRepository(), ProductRepository(), products)


@router.get("/{user_id}", response_model=list[CartProductRead])
def get_cart(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
    service: CartService = Depends(get_cart_service),
):
    """
    Products in a user's cart with their quantities.

    Auth:
      - the cart owner, or any admin.
    """
    return service.list(session, current_user, user_id)


@router.post("/{user_id}", response_model=MessageResponse)
def add_to_cart(
    user_id: uuid.UUID,
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
    service: CartService = Depends(get_cart_service),
):
    """
    Add a product to a user's cart.
    """
    service.add(session, current_user, user_id, payload)
    return MessageResponse(msg="Product added to cart")


@router.put("/{user_id}/{product_id}", response_model=MessageResponse)
def update_cart_item(
    user_id: uuid.UUID,
    product_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
    service: CartService = Depends(get_cart_service),
):
    """
    Update the quantity of a product already in the cart.
    """
    service.update_quantity(
        session=session,
        actor=current_user,
        user_id=user_id,
        product_id=product_id,
        payload=payload,
    )
    return MessageResponse(msg="Product quantity updated")


@router.delete("/{user_id}/{product_id}", response_model=MessageResponse)
def remove_cart_item(
    user_id: uuid.UUID,
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
    service: CartService = Depends(get_cart_service),
):
    """
    Remove a product from the cart.
    """
    service.remove(session, current_user, user_id, product_id)
    return MessageResponse(msg="Product removed from cart")

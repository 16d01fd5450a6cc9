# storefront/services/cart_service.py
import uuid

from sqlmodel import Session

from storefront.core.errors import BadRequest, Forbidden, NotFound
from storefront.models.product import Product
from storefront.models.user import User
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.cart import CartItemCreate, CartItemUpdate, CartProductRead
from storefront.schemas.user import UserRead
from storefront.services.auth_service import AuthService
from storefront.services.product_service import ProductService


class CartService:
    """
    Business logic for the cart embedded in each user row.

    Responsibilities:
      - only the cart owner or an admin may read/modify a cart
      - validate product existence
      - enforce quantity <= stock (stock is a ceiling, never consumed)
      - keep at most one entry per product
    """

    def __init__(
        self,
        user_repo: UserRepository,
        product_repo: ProductRepository,
        products: ProductService,
    ):
        self.user_repo = user_repo
        self.product_repo = product_repo
        self.products = products

    # ---- internal helpers ----

    def _get_cart_owner(
        self,
        session: Session,
        actor: UserRead,
        user_id: uuid.UUID,
    ) -> User:
        user = self.user_repo.get_by_id(session, user_id)
        if not user:
            raise NotFound("Invalid user id")
        if not AuthService.can_manage(actor, user.id):
            raise Forbidden()
        return user

    def _get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise NotFound("Invalid product id")
        return product

    @staticmethod
    def _check_stock(product: Product, quantity: int) -> None:
        if quantity > product.stock:
            raise BadRequest("Insufficient stock")

    @staticmethod
    def _find(user: User, product_id: uuid.UUID) -> int | None:
        for i, entry in enumerate(user.cart):
            if entry["product_id"] == str(product_id):
                return i
        return None

    # ---- public operations ----

    def list(
        self,
        session: Session,
        actor: UserRead,
        user_id: uuid.UUID,
    ) -> list[CartProductRead]:
        """
        Products in the cart, in cart order, each with its quantity and
        image URL. Entries whose product has since been deleted are skipped.
        """
        user = self._get_cart_owner(session, actor, user_id)
        ids = [uuid.UUID(entry["product_id"]) for entry in user.cart]
        found = self.product_repo.get_many(session, ids)

        items: list[CartProductRead] = []
        for pid, entry in zip(ids, user.cart):
            product = found.get(pid)
            if product is None:
                continue
            items.append(
                CartProductRead(
                    **self.products.to_read(product).model_dump(),
                    quantity=entry["quantity"],
                )
            )
        return items

    def add(
        self,
        session: Session,
        actor: UserRead,
        user_id: uuid.UUID,
        payload: CartItemCreate,
    ) -> None:
        """
        Add a product to the cart.

        Rules:
          - product must exist
          - quantity <= stock
          - product must not already be in the cart (use update instead)
        """
        user = self._get_cart_owner(session, actor, user_id)
        product = self._get_product(session, payload.product_id)
        self._check_stock(product, payload.quantity)

        if self._find(user, product.id) is not None:
            raise BadRequest("Product already in cart")

        user.cart = user.cart + [
            {"product_id": str(product.id), "quantity": payload.quantity}
        ]
        self.user_repo.update(session, user)

    def update_quantity(
        self,
        session: Session,
        actor: UserRead,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> None:
        """
        Replace the quantity of a product already in the cart.
        """
        user = self._get_cart_owner(session, actor, user_id)
        product = self._get_product(session, product_id)
        self._check_stock(product, payload.quantity)

        idx = self._find(user, product_id)
        if idx is None:
            raise NotFound("Product not in cart")

        cart = [dict(entry) for entry in user.cart]
        cart[idx]["quantity"] = payload.quantity
        user.cart = cart
        self.user_repo.update(session, user)

    def remove(
        self,
        session: Session,
        actor: UserRead,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> None:
        """
        Remove a product from the cart.
        """
        user = self._get_cart_owner(session, actor, user_id)

        idx = self._find(user, product_id)
        if idx is None:
            raise NotFound("Product not in cart")

        user.cart = user.cart[:idx] + user.cart[idx + 1:]
        self.user_repo.update(session, user)

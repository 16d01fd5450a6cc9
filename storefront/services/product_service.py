# storefront/services/product_service.py
import logging
import uuid
from dataclasses import dataclass

from sqlmodel import Session

from storefront.core.config import Settings
from storefront.core.errors import NotFound, ValidationFailed
from storefront.core.storage import ImageStore
from storefront.models.product import Product
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import ProductForm, ProductRead

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 500
DEFAULT_LIST_LIMIT = 100


@dataclass
class ImageUpload:
    """An uploaded image file, already read into memory."""

    filename: str | None
    content_type: str | None
    data: bytes


class ProductService:
    """
    Business logic for Product.

    Responsibilities:
      - validation beyond pydantic (image type/size)
      - image upload/delete orchestration with the image store
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(self, repo: ProductRepository, images: ImageStore, settings: Settings):
        self.repo = repo
        self.images = images
        self.settings = settings

    # ----- Helpers -----

    def _validate_image(self, image: ImageUpload) -> None:
        if not image.content_type or not image.content_type.startswith("image/"):
            raise ValidationFailed(
                [{"msg": "Uploaded file must be an image", "param": "image"}]
            )
        if len(image.data) > self.settings.MAX_IMAGE_BYTES:
            raise ValidationFailed(
                [{"msg": "Image too large", "param": "image"}]
            )

    def _store_image(self, image: ImageUpload) -> str:
        self._validate_image(image)
        return self.images.upload(image.filename, image.content_type, image.data)

    def _discard_image(self, image_name: str) -> None:
        """Delete a stored image unless it is the shared placeholder."""
        if image_name and image_name != self.settings.DEFAULT_IMAGE_NAME:
            self.images.delete(image_name)

    def to_read(self, product: Product) -> ProductRead:
        """Attach the resolved image URL to a product."""
        return ProductRead(
            **product.model_dump(),
            image_url=self.images.get_url(product.image_name),
        )

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        limit: int = DEFAULT_LIST_LIMIT,
        skip: int = 0,
    ) -> list[Product]:
        """Newest first; limit is capped at 500."""
        limit = min(limit, MAX_LIST_LIMIT)
        return self.repo.list(session, skip=skip, limit=limit)

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFound("Product not found")
        return product

    def create_product(
        self,
        session: Session,
        payload: ProductForm,
        image: ImageUpload | None = None,
    ) -> Product:
        """
        Create a new product. Without an image the default placeholder is used.
        """
        image_name = self.settings.DEFAULT_IMAGE_NAME
        if image is not None:
            image_name = self._store_image(image)

        product = Product(
            name=payload.name,
            description=payload.description,
            price=payload.price,
            stock=payload.stock,
            image_name=image_name,
        )
        product = self.repo.create(session, product)
        logger.info("Created product %s", product.id)
        return product

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductForm,
        image: ImageUpload | None = None,
    ) -> Product:
        """
        Full replace of name, description, price and stock.

        - If a new image is supplied it replaces the stored one, and the old
          file is removed from the bucket (placeholder excepted).
        - Without an image the current one is kept.
        """
        product = self.get_product(session, product_id)

        old_image = None
        if image is not None:
            old_image = product.image_name
            product.image_name = self._store_image(image)

        product.name = payload.name
        product.description = payload.description
        product.price = payload.price
        product.stock = payload.stock
        product = self.repo.update(session, product)

        if old_image:
            self._discard_image(old_image)
        return product

    def delete_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> None:
        """
        Delete a product and its stored image (placeholder excepted).
        """
        product = self.get_product(session, product_id)
        image_name = product.image_name

        self.repo.delete(session, product)
        self._discard_image(image_name)
        logger.info("Deleted product %s", product_id)

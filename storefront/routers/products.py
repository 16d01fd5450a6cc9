# storefront/routers/products.py
import uuid

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Query,
    UploadFile,
    status,
)
from pydantic import ValidationError
from sqlmodel import Session

from storefront.core.auth import require_admin
from storefront.core.config import Settings, get_settings
from storefront.core.errors import ValidationFailed, field_errors
from storefront.core.storage import ImageStore, get_image_store
from storefront.database import get_session
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import ProductForm, ProductRead
from storefront.schemas.user import MessageResponse
from storefront.services.product_service import (
    DEFAULT_LIST_LIMIT,
    ImageUpload,
    ProductService,
)

router = APIRouter(prefix="/products", tags=["Products"])


def get_product_service(
    images: ImageStore = Depends(get_image_store),
    settings: Settings = Depends(get_settings),
) -> ProductService:
    return ProductService(ProductRepository(), images, settings)


def product_form(
    name: str | None = Form(None),
    description: str | None = Form(None),
    price: str | None = Form(None),
    stock: str | None = Form(None),
) -> ProductForm:
    """
    Validate the multipart fields into a ProductForm.

    All fields arrive as optional strings so that every problem is reported
    together as one 400 list instead of FastAPI's per-field 422.
    """
    raw = {"name": name, "price": price, "stock": stock}
    if description is not None:
        raw["description"] = description
    try:
        return ProductForm.model_validate(raw)
    except ValidationError as e:
        raise ValidationFailed(field_errors(e.errors()))


def image_upload(image: UploadFile | None = File(None)) -> ImageUpload | None:
    """Read the optional `image` file part into memory."""
    if image is None or not image.filename:
        return None
    return ImageUpload(
        filename=image.filename,
        content_type=image.content_type,
        data=image.file.read(),
    )


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1),
    skip: int = Query(0, ge=0),
):
    """
    List products, newest first.

    - Public endpoint.
    - `limit` defaults to 100 and is capped at 500.
    """
    products = service.list_products(session, limit=limit, skip=skip)
    return [service.to_read(p) for p in products]


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Get a single product by id.

    - Public endpoint.
    """
    return service.to_read(service.get_product(session, product_id))


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductForm = Depends(product_form),
    image: ImageUpload | None = Depends(image_upload),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Create a new product (admin only).

    Multipart form: name, description, price, stock, optional image file.
    """
    product = service.create_product(session, payload, image)
    return service.to_read(product)


@router.put(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductForm = Depends(product_form),
    image: ImageUpload | None = Depends(image_upload),
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Replace an existing product (admin only).
    """
    product = service.update_product(session, product_id, payload, image)
    return service.to_read(product)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    service: ProductService = Depends(get_product_service),
):
    """
    Delete a product and its image (admin only).
    """
    service.delete_product(session, product_id)
    return MessageResponse(msg="Product deleted successfully")

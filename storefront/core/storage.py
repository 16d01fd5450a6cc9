# storefront/core/storage.py
import uuid

from fastapi import Request
from supabase import create_client, Client

from storefront.core.config import Settings


def create_supabase_client(settings: Settings) -> Client:
    """
    Create a Supabase client with the service role key.

    Used only for the product image bucket.

    WARNING:
      - Never expose service role key to frontend.
      - Only backend should call this.

    Raises:
        RuntimeError: if SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def generate_image_name(filename: str | None) -> str:
    """
    Generate a random object name using UUID4, keeping the extension of
    the uploaded file.

    Example:
        "cake.PNG" -> "<uuid4>.png"
    """
    ext = ""
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1].lower()
    return f"{uuid.uuid4()}.{ext}" if ext else str(uuid.uuid4())


class ImageStore:
    """
    Product images kept in a Supabase Storage bucket.

    Objects are addressed by their bare name (no folders), so the name
    persisted on the product is all that's needed to build a URL or
    delete the file.
    """

    def __init__(self, client: Client, bucket: str = "images"):
        self.client = client
        self.bucket = bucket

    def upload(self, filename: str | None, content_type: str, data: bytes) -> str:
        """
        Upload raw bytes under a freshly generated name.

        Returns:
            The generated object name.
        """
        name = generate_image_name(filename)
        self.client.storage.from_(self.bucket).upload(
            name, data, {"content-type": content_type}
        )
        return name

    def get_url(self, name: str) -> str:
        """Public URL of an object in the bucket."""
        return self.client.storage.from_(self.bucket).get_public_url(name)

    def delete(self, name: str) -> None:
        """Delete an object. Missing objects are ignored by Supabase."""
        # Supabase Python client expects a list of paths.
        self.client.storage.from_(self.bucket).remove([name])


def get_image_store(request: Request) -> ImageStore:
    """FastAPI dependency: the ImageStore built in the app lifespan."""
    return request.app.state.image_store

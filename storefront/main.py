# storefront/main.py
from contextlib import asynccontextmanager
import logging

import redis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.core.cache import SessionCache, create_redis_client
from storefront.core.config import Settings, get_settings
from storefront.core.errors import error_body, field_errors
from storefront.core.storage import ImageStore, create_supabase_client
from storefront.database import create_db_and_tables, create_db_engine

# Import models so SQLModel metadata is populated before create_all()
from storefront.models import user as _user_models  # noqa: F401
from storefront.models import product as _product_models  # noqa: F401

# Routers
from storefront.routers.auth import router as auth_router
from storefront.routers.products import router as products_router
from storefront.routers.cart import router as cart_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


def create_app(
    settings: Settings | None = None,
    *,
    engine: Engine | None = None,
    redis_client: redis.Redis | None = None,
    image_store: ImageStore | None = None,
) -> FastAPI:
    """
    Build the application.

    Shared clients (SQL engine, redis, image bucket) are created once in the
    lifespan and kept on `app.state`; request dependencies read them from
    there. Any of them can be passed in ready-made (tests do this).
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup:
          - Create the SQL engine and tables.
          - Create the redis client and the session cache on top of it.
          - Create the image store.

        Shutdown:
          - Close the redis client and dispose of the engine pool.
        """
        logger.info("Startup: connecting to database...")
        app.state.engine = engine or create_db_engine(settings.DATABASE_URL)
        try:
            create_db_and_tables(app.state.engine)
            logger.info("Startup: DB connection OK, tables verified.")
        except Exception as e:
            logger.error(f"Startup: DB connection FAILED: {e}")
            raise

        client = redis_client or create_redis_client(settings)
        try:
            client.ping()
            logger.info("Startup: session cache reachable.")
        except redis.RedisError as e:
            # Requests degrade to 401 until the cache comes back.
            logger.warning(f"Startup: session cache unreachable: {e}")
        app.state.session_cache = SessionCache(client, settings.AUTH_TOKEN_TTL)

        app.state.image_store = image_store or ImageStore(
            create_supabase_client(settings), settings.STORAGE_BUCKET
        )

        yield

        logger.info("Shutdown: closing clients.")
        client.close()
        app.state.engine.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    # --- CORS configuration ---
    # The session token travels in the Authorization response header.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Authorization"],
    )

    # --- Uniform error bodies: {"errors": [{"msg": ...}, ...]} ---

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_body(field_errors(exc.errors())),
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=error_body("Unexpected error encountered"),
        )

    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(products_router, prefix=settings.API_PREFIX)
    app.include_router(cart_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "storefront-backend"}

    return app


app = create_app()

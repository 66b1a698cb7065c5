"""FastAPI application entry point.

Product endpoints guarded against duplicate submissions, plus health check.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, status
from fastapi.responses import JSONResponse

from dedupguard.api.errors import register_exception_handlers
from dedupguard.api.prevent_duplicate import prevent_duplicate
from dedupguard.config import get_settings
from dedupguard.core.guard import get_duplicate_guard
from dedupguard.models import BaseResponse, ProductRequest
from dedupguard.services.products import ProductService, get_product_service
from dedupguard.storage.redis import redis_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: connect/disconnect storage."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Fail fast on bad guard configuration (e.g. unknown hash algorithm)
    get_duplicate_guard()

    uses_redis = settings.claim_backend == "redis"
    if uses_redis:
        await redis_storage.connect()
    logger.info(f"{settings.app_name} started with claim backend={settings.claim_backend}")

    yield

    if uses_redis:
        await redis_storage.disconnect()


app = FastAPI(
    title="DedupGuard",
    description="Duplicate request guard backed by Redis",
    lifespan=lifespan,
)
register_exception_handlers(app)


@app.post("/products", response_model=BaseResponse[ProductRequest])
@prevent_duplicate(
    include_field_keys=["productId", "transactionId"],
    optional_values=["CAFEINCODE"],
    expire_time=40_000,
)
async def create_product(
    request: ProductRequest,
    service: ProductService = Depends(get_product_service),
) -> BaseResponse[ProductRequest]:
    """Create a product. Repeats within 40s are rejected with CF_275."""
    return BaseResponse[ProductRequest].of_succeeded(service.create_product(request))


@app.get("/products/{product_id}", response_model=BaseResponse[ProductRequest])
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> BaseResponse[ProductRequest]:
    """Get a product by id."""
    return BaseResponse[ProductRequest].of_succeeded(service.get_product(product_id))


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint.

    Returns: {status, claim_backend, redis}
    """
    settings = get_settings()

    if settings.claim_backend == "memory":
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "healthy", "claim_backend": "memory", "redis": "unused"},
        )

    redis_healthy = await redis_storage.health_check()
    return JSONResponse(
        status_code=status.HTTP_200_OK if redis_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if redis_healthy else "degraded",
            "claim_backend": "redis",
            "redis": "healthy" if redis_healthy else "unhealthy",
        },
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "DedupGuard API", "version": "0.1.0"}

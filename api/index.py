"""
Storefront Backend - Main FastAPI Application

Single entry point for catalog, account and cart routes.

Run locally:
    uvicorn api.index:app --port 5000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from core.config import get_settings
from core.db import get_redis
from core.errors import ERROR_INTERNAL, InfrastructureError, StorefrontError
from core.logging import get_logger
from core.middleware.rate_limit import RateLimitMiddleware
from core.middleware.security import SecurityHeadersMiddleware
from core.routers import auth_router, cart_router, products_router
from core.routers.deps import get_image_store, init_services

logger = get_logger(__name__)

# Fails fast when JWT_SECRET is missing: the signing secret is loaded once here
settings = get_settings()


# ==================== FASTAPI APP ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    await init_services()
    logger.info("Storefront backend started")
    yield


app = FastAPI(
    title="Storefront Backend",
    description="Catalog, accounts and shopping carts",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    requests_per_minute=settings.auth_rate_limit_per_minute,
    redis_client=get_redis(),
    trust_forwarded_for=settings.trust_proxy_headers,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(cart_router)
app.include_router(products_router)

# Uploaded product images
app.mount(
    "/images",
    StaticFiles(directory=get_image_store().upload_dir, check_dir=False),
    name="images",
)


# ==================== ERROR HANDLERS ====================

@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    """Map domain errors to JSON. Infrastructure detail stays in the logs."""
    if isinstance(exc, InfrastructureError):
        logger.error(
            "Request %s %s failed: %s",
            request.method,
            request.url.path,
            exc.code,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": "InternalError", "message": exc.public_message},
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.code, "message": exc.message},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "InternalError", "message": ERROR_INTERNAL},
    )


# ==================== HEALTH CHECK ====================

@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Storefront backend is running"


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "storefront"}

"""Main FastAPI application for the Storefront Ledger Service."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from src.api.routes import (
    admin,
    analytics,
    auth,
    domains,
    health,
    orders,
    products,
    shipping_classes,
    store_settings,
    storefront,
)
from src.core.database import get_database
from src.core.settings import get_settings
from src.middleware.auth import AuthenticationMiddleware
from src.middleware.logging import LoggingMiddleware, configure_logging
from src.middleware.rate_limiting import RateLimitMiddleware
from src.schemas.base import JSONAPIErrorResponse
from src.services.business_rules import (
    AuthenticationError,
    ForbiddenError,
    InvalidInputError,
    InvalidTransitionError,
    LimitExceededError,
    NotFoundError,
    StorefrontError,
)
from src.services.notifications import get_notification_dispatcher
from src.services.tenant_service import TenantService

# Initialize logging
configure_logging()

logger = logging.getLogger(__name__)
settings = get_settings()

ERROR_STATUS = {
    NotFoundError: (404, "Resource Not Found"),
    InvalidInputError: (400, "Invalid Input"),
    LimitExceededError: (403, "Plan Limit Reached"),
    ForbiddenError: (403, "Plan Feature Unavailable"),
    InvalidTransitionError: (409, "Invalid Status Transition"),
    AuthenticationError: (401, "Unauthorized"),
}

# Documented error shapes for the API routers
ERROR_RESPONSES = {
    status_code: {"model": JSONAPIErrorResponse, "description": title}
    for status_code, title in sorted(set(ERROR_STATUS.values()))
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    await get_database().connect()
    if settings.admin_email and settings.admin_password:
        async with get_database().get_session() as session:
            await TenantService(session).ensure_admin(settings.admin_email, settings.admin_password)
    yield
    # Shutdown
    await get_notification_dispatcher().drain()
    await get_database().disconnect()


app = FastAPI(
    title="Storefront Ledger Service",
    description="Multi-tenant cash-on-delivery storefront: orders, catalog, plans and sales analytics",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    openapi_url="/openapi.json" if not settings.is_production else None,
)

# Security middleware
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.allowed_hosts
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# Custom middleware stack (last added runs first)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(AuthenticationMiddleware)


# Exception handlers
@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    """Translate expected business outcomes into JSON:API error documents."""
    status_code, title = 400, "Bad Request"
    for error_type, mapping in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status_code, title = mapping
            break

    error = {
        "status": str(status_code),
        "code": exc.code,
        "title": title,
        "detail": exc.message,
        "source": {"pointer": request.url.path},
    }
    if exc.meta:
        error["meta"] = exc.meta

    content = {"errors": [error]}
    if isinstance(exc, InvalidInputError) and len(exc.errors) > 1:
        content["errors"].extend(
            {
                "status": str(status_code),
                "code": field_error.code,
                "title": title,
                "detail": field_error.message,
                "source": {"pointer": f"/data/attributes/{field_error.field}"},
            }
            for field_error in exc.errors[1:]
        )
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with JSON:API format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "errors": [{
                "status": str(exc.status_code),
                "code": exc.detail.get("code", "HTTP_ERROR") if isinstance(exc.detail, dict) else "HTTP_ERROR",
                "title": exc.detail.get("message", "HTTP Error") if isinstance(exc.detail, dict) else str(exc.detail),
                "detail": exc.detail.get("message", str(exc.detail)) if isinstance(exc.detail, dict) else str(exc.detail),
                "source": {"pointer": request.url.path}
            }]
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request body or parameters failed schema validation."""
    return JSONResponse(
        status_code=422,
        content={
            "errors": [
                {
                    "status": "422",
                    "code": "VALIDATION_ERROR",
                    "title": "Validation Error",
                    "detail": error.get("msg", "Invalid value"),
                    "source": {"pointer": "/" + "/".join(str(part) for part in error.get("loc", ()))},
                }
                for error in exc.errors()
            ]
        },
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    """Handle 500 errors with JSON:API format."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "errors": [{
                "status": "500",
                "code": "INTERNAL_SERVER_ERROR",
                "title": "Internal Server Error",
                "detail": "An unexpected error occurred"
            }]
        }
    )


# Routes
app.include_router(health.router, prefix="", tags=["system"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": health.SERVICE_NAME,
        "version": health.SERVICE_VERSION,
        "status": "running",
        "api": {
            "docs": "/docs" if not settings.is_production else None,
            "openapi": "/openapi.json" if not settings.is_production else None
        }
    }


# Main API routes
app.include_router(auth.router, prefix="/api", tags=["auth"], responses=ERROR_RESPONSES)
app.include_router(analytics.router, prefix="/api", tags=["analytics"], responses=ERROR_RESPONSES)
app.include_router(products.router, prefix="/api/products", tags=["products"], responses=ERROR_RESPONSES)
app.include_router(shipping_classes.router, prefix="/api/shipping-classes", tags=["shipping"], responses=ERROR_RESPONSES)
app.include_router(orders.router, prefix="/api/orders", tags=["orders"], responses=ERROR_RESPONSES)
app.include_router(store_settings.router, prefix="/api/store-settings", tags=["settings"], responses=ERROR_RESPONSES)
app.include_router(domains.router, prefix="/api/domains", tags=["domains"], responses=ERROR_RESPONSES)
app.include_router(storefront.router, prefix="/api/store", tags=["storefront"], responses=ERROR_RESPONSES)
app.include_router(admin.router, prefix="/api/admin", tags=["admin"], responses=ERROR_RESPONSES)


if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )

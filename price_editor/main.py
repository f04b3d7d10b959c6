"""
Shopify Bulk Price Editor - Main Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse

from .config import settings
from .dependencies import init_dependencies, close_dependencies
from .pricing import InvalidPayloadError
from .routes import auth_router, products_router, bulk_edit_router, update_price_router
from .shopify import ShopifyAuthError, ShopifyClientError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info(f"Starting Shopify Bulk Price Editor for {settings.shop_domain or '<unset>'}...")
    await init_dependencies()
    logger.info("Application ready")
    yield
    logger.info("Shutting down...")
    await close_dependencies()


# Create app
app = FastAPI(
    title="Shopify Bulk Price Editor",
    description="List a store's products and bulk-edit their prices",
    version="1.0.0",
    lifespan=lifespan
)

# Include routers
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(bulk_edit_router)
app.include_router(update_price_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse({"error": "Invalid payload"}, status_code=400)


@app.exception_handler(InvalidPayloadError)
async def invalid_payload_handler(request: Request, exc: InvalidPayloadError):
    return JSONResponse({"error": str(exc)}, status_code=400)


@app.exception_handler(ShopifyAuthError)
async def shopify_auth_handler(request: Request, exc: ShopifyAuthError):
    logger.error(f"Shopify rejected credentials: {exc}")
    return JSONResponse({"error": "Shopify authentication failed"}, status_code=502)


@app.exception_handler(ShopifyClientError)
async def shopify_error_handler(request: Request, exc: ShopifyClientError):
    logger.error(f"Shopify request failed on {request.url.path}: {exc}")
    return JSONResponse({"error": str(exc)}, status_code=502)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.url.path}")
    return JSONResponse({"error": "Server error"}, status_code=500)


@app.get("/")
async def root():
    """Redirect root to the product listing."""
    return RedirectResponse(url="/api/products", status_code=303)


@app.get("/health")
async def health():
    """Health check endpoint (no auth required)."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "price_editor.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )

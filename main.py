"""
SilverLine B2B - Application Entry Point
==========================================
FastAPI app initialization, error mapping, and router registration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import settings
from config.database import Base, engine
from common.exceptions import (
    SilverLineError, AuthenticationError, AuthorizationError, NotFoundError,
    ValidationError, SnapshotImmutableError, RateFeedError, OrderCodeUnavailableError,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("silverline")


# ==========================================
# Models (register every table on Base.metadata)
# ==========================================
from modules.admin.models import SystemSetting  # noqa: F401
from modules.pricing.models import SilverRate  # noqa: F401
from modules.catalog.models import Product  # noqa: F401
from modules.reseller.models import Reseller  # noqa: F401
from modules.order.models import Order, OrderItem  # noqa: F401


# ==========================================
# Exception handler: business errors → JSON
# ==========================================
ERROR_STATUS = {
    AuthenticationError: 401,
    AuthorizationError: 403,
    NotFoundError: 404,
    ValidationError: 400,
    SnapshotImmutableError: 409,
    RateFeedError: 503,
    OrderCodeUnavailableError: 503,
}


async def business_exception_handler(request: Request, exc: SilverLineError):
    status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    return JSONResponse({"success": False, "error": exc.message}, status_code=status_code)


@asynccontextmanager
async def lifespan(app):
    # Auto-create any missing tables (safe for existing tables)
    Base.metadata.create_all(bind=engine)
    logger.info("SilverLine B2B started")
    yield
    logger.info("SilverLine B2B stopped")


# ==========================================
# Create App
# ==========================================
app = FastAPI(
    title="SilverLine B2B",
    description="Silver jewelry B2B pricing, ordering and invoicing",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.add_exception_handler(SilverLineError, business_exception_handler)


# ==========================================
# Routers
# ==========================================
from modules.pricing.routes import router as pricing_router, rates_router
from modules.order.routes import router as order_router
from modules.invoice.routes import router as invoice_router
from modules.admin.routes import router as admin_router

app.include_router(rates_router)
app.include_router(pricing_router)
app.include_router(order_router)
app.include_router(invoice_router)
app.include_router(admin_router)


@app.get("/health")
async def health():
    return {"status": "ok"}

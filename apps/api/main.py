"""
Game Credits Store - FastAPI Backend
Main application entry point: store page, player/package/payment API and health checks.
"""

from contextlib import asynccontextmanager
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from config import settings, validate_payment_settings
from database import AsyncSessionLocal, engine, Base
import models  # noqa: F401
from routers import health, packages, payments, players, storefront
from services.errors import CreditStoreError, DatabaseUnavailable, RequestValidationFailed
from services.packages import seed_default_packages

STATIC_DIR = Path(__file__).resolve().parent / "static"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    print("🚀 Starting Game Credits Store API...")
    validate_payment_settings()
    if settings.AUTO_CREATE_DB_SCHEMA:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            print("🗄️ Database schema verified.")
        except Exception as e:
            print(f"⚠️ Database bootstrap skipped: {e}")
    if settings.SEED_DEFAULT_PACKAGES:
        try:
            async with AsyncSessionLocal() as session:
                seeded = await seed_default_packages(session)
            if seeded:
                print(f"📦 Seeded {seeded} default credit packages.")
        except Exception as exc:
            print(f"⚠️ Credit package seeding skipped: {exc}")
    print(f"💳 Payment gateway: {settings.PAYMENT_GATEWAY}")
    yield
    # Shutdown
    print("👋 Shutting down API...")


app = FastAPI(
    title="Game Credits Store API",
    description="Look up players, list credit packages and purchase game credits",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CreditStoreError)
async def credit_store_error_handler(request: Request, exc: CreditStoreError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = RequestValidationFailed.message
    if errors and all(error.get("type") != "missing" for error in errors):
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid {field}: {first.get('msg', 'invalid value')}" if field else str(first.get("msg"))
    return JSONResponse(status_code=400, content=RequestValidationFailed(message).to_payload())


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error while handling %s %s", request.method, request.url.path, exc_info=exc)
    error = DatabaseUnavailable()
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error while handling %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=CreditStoreError().to_payload())


app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(storefront.page_router, tags=["Storefront"])
app.include_router(storefront.router, prefix=settings.API_PREFIX, tags=["Storefront"])
app.include_router(packages.router, prefix=settings.API_PREFIX, tags=["Packages"])
app.include_router(players.router, prefix=settings.API_PREFIX, tags=["Players"])
app.include_router(payments.router, prefix=settings.API_PREFIX, tags=["Payments"])

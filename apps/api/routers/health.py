"""
Health check endpoints.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import redis.asyncio as redis

from config import settings, validate_payment_settings
from database import engine

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns overall system health status.
    """
    health_status = {
        "status": "healthy",
        "api": "up",
        "database": "unknown",
        "redis": "unknown",
        "payment_gateway": settings.PAYMENT_GATEWAY,
    }

    # Check database connection
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        health_status["database"] = "up"
    except Exception as e:
        health_status["database"] = f"down: {str(e)}"
        health_status["status"] = "degraded"

    # Redis only backs rate limiting; an outage degrades to in-process counters.
    try:
        r = redis.from_url(settings.REDIS_URL)
        await r.ping()
        await r.aclose()
        health_status["redis"] = "up"
    except Exception as e:
        health_status["redis"] = f"down: {str(e)}"

    return health_status


@router.get("/health/ready")
async def readiness_check():
    """Ready once purchases can be taken: gateway configured and database reachable."""
    problems = []
    try:
        validate_payment_settings()
    except ValueError as exc:
        problems.append(str(exc))

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        problems.append(f"database unavailable: {exc.__class__.__name__}")

    if problems:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "problems": problems},
        )
    return {"ready": True, "payment_gateway": settings.PAYMENT_GATEWAY}


@router.get("/health/live")
async def liveness_check():
    """Liveness check: the process is up and serving requests."""
    return {"alive": True}

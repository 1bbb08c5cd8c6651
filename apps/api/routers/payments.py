"""Payment processing router."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.rate_limit import rate_limit
from services.errors import RequestValidationFailed
from services.payment_gateway import PaymentGateway, get_payment_gateway
from services.payments import process_payment

router = APIRouter()


class ProcessPaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_id: Optional[str] = Field(default=None, alias="playerId")
    package_id: Optional[str] = Field(default=None, alias="packageId")
    amount: Optional[Decimal] = None
    credits: Optional[Decimal] = None


class ProcessPaymentResponse(BaseModel):
    success: bool
    message: str
    newCredits: float
    creditsAdded: float
    transactionId: str


@router.post("/process-payment", response_model=ProcessPaymentResponse)
async def process_payment_endpoint(
    request: ProcessPaymentRequest,
    _rate_limit: None = Depends(rate_limit("process_payment", limit=60, window_seconds=3600)),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    db: AsyncSession = Depends(get_db),
):
    if not request.player_id or not request.package_id or not request.amount or not request.credits:
        raise RequestValidationFailed("Missing required fields")

    return await process_payment(
        db,
        gateway,
        player_id=request.player_id,
        package_id=request.package_id,
        amount=request.amount,
        credits=request.credits,
    )

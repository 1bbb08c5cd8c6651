"""Credit package catalog router."""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from services.packages import list_active_packages, serialize_package

router = APIRouter()


class CreditPackageResponse(BaseModel):
    id: str
    name: str
    price: float
    credits: float


@router.get("/credit-packages", response_model=List[CreditPackageResponse])
async def get_credit_packages(db: AsyncSession = Depends(get_db)):
    packages = await list_active_packages(db)
    return [serialize_package(package) for package in packages]

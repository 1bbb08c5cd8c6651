"""Credit package catalog."""

from __future__ import annotations

from decimal import Decimal
import logging
from typing import Any, Dict, List, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.credit_package import CreditPackage
from services.errors import PackageNotFound

logger = logging.getLogger(__name__)

# 1:1 ratio, $5 minimum.
DEFAULT_PACKAGES: Sequence[Tuple[str, Decimal, Decimal]] = (
    ("Starter", Decimal("5.00"), Decimal("5")),
    ("Player", Decimal("10.00"), Decimal("10")),
    ("Pro", Decimal("20.00"), Decimal("20")),
    ("Champion", Decimal("50.00"), Decimal("50")),
    ("Legend", Decimal("100.00"), Decimal("100")),
)


def serialize_package(package: CreditPackage) -> Dict[str, Any]:
    return {
        "id": package.id,
        "name": package.name,
        "price": float(package.price),
        "credits": float(package.credits),
    }


async def list_active_packages(db: AsyncSession) -> List[CreditPackage]:
    result = await db.execute(
        select(CreditPackage)
        .where(CreditPackage.is_active.is_(True))
        .order_by(CreditPackage.price.asc(), CreditPackage.name.asc())
    )
    return list(result.scalars().all())


async def get_active_package(package_id: str, db: AsyncSession) -> CreditPackage:
    """Return the active package with ``package_id`` or raise ``PackageNotFound``."""
    result = await db.execute(
        select(CreditPackage).where(
            CreditPackage.id == package_id,
            CreditPackage.is_active.is_(True),
        )
    )
    package = result.scalar_one_or_none()
    if package is None:
        raise PackageNotFound()
    return package


async def seed_default_packages(db: AsyncSession) -> int:
    """Insert the default catalog when no packages exist yet. Returns rows added."""
    existing = await db.execute(select(func.count(CreditPackage.id)))
    if int(existing.scalar() or 0) > 0:
        return 0

    for name, price, credits in DEFAULT_PACKAGES:
        db.add(CreditPackage(name=name, price=price, credits=credits, is_active=True))
    await db.commit()
    logger.info("Seeded %d default credit packages", len(DEFAULT_PACKAGES))
    return len(DEFAULT_PACKAGES)

"""
Purchase workflow: validate the request against the catalog, charge through
the payment gateway and record the outcome.

A successful charge writes the completed transaction, the balance increment
and the credit-history row in one database transaction. A declined charge
writes a single failed transaction.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
import logging
from typing import Any, Dict
import uuid

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.credit_history import CreditHistory
from models.credit_package import CreditPackage
from models.player import Player
from models.transaction import (
    TRANSACTION_STATUS_COMPLETED,
    TRANSACTION_STATUS_FAILED,
    Transaction,
)
from services.errors import (
    AmountMismatch,
    PaymentDeclined,
    PaymentProcessingError,
    TransactionWriteFailed,
)
from services.packages import get_active_package
from services.payment_gateway import ChargeResult, PaymentGateway
from services.players import get_active_player

logger = logging.getLogger(__name__)

CHANGE_TYPE_PURCHASE = "purchase"


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _matches_package(package: CreditPackage, amount: Decimal, credits: Decimal) -> bool:
    return _as_decimal(package.price) == amount and _as_decimal(package.credits) == credits


async def _record_failed_transaction(
    db: AsyncSession,
    *,
    transaction_id: str,
    player: Player,
    package: CreditPackage,
    payment_method: str,
    charge: ChargeResult,
) -> None:
    db.add(
        Transaction(
            id=transaction_id,
            player_id=player.id,
            package_id=package.id,
            amount=_as_decimal(package.price),
            credits_purchased=_as_decimal(package.credits),
            payment_method=payment_method,
            gateway_reference=charge.reference,
            status=TRANSACTION_STATUS_FAILED,
        )
    )
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to record declined transaction %s", transaction_id)


async def _record_completed_purchase(
    db: AsyncSession,
    *,
    transaction_id: str,
    player: Player,
    package: CreditPackage,
    payment_method: str,
    charge: ChargeResult,
) -> Decimal:
    price = _as_decimal(package.price)
    grant = _as_decimal(package.credits)
    now = datetime.now(timezone.utc)

    db.add(
        Transaction(
            id=transaction_id,
            player_id=player.id,
            package_id=package.id,
            amount=price,
            credits_purchased=grant,
            payment_method=payment_method,
            gateway_reference=charge.reference,
            status=TRANSACTION_STATUS_COMPLETED,
            completed_at=now,
        )
    )
    await db.flush()

    await db.execute(
        update(Player)
        .where(Player.id == player.id)
        .values(
            credits=Player.credits + grant,
            total_spent=Player.total_spent + price,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    balance = await db.execute(select(Player.credits).where(Player.id == player.id))
    credits_after = _as_decimal(balance.scalar_one())
    credits_before = credits_after - grant

    db.add(
        CreditHistory(
            player_id=player.id,
            transaction_id=transaction_id,
            credits_change=grant,
            credits_before=credits_before,
            credits_after=credits_after,
            change_type=CHANGE_TYPE_PURCHASE,
            description=f"Purchased {package.name}",
        )
    )
    await db.commit()
    return credits_after


async def process_payment(
    db: AsyncSession,
    gateway: PaymentGateway,
    *,
    player_id: str,
    package_id: str,
    amount: Decimal,
    credits: Decimal,
) -> Dict[str, Any]:
    """Run one purchase attempt and return the success payload.

    Raises ``PlayerNotFound``, ``PackageNotFound``, ``AmountMismatch``,
    ``PaymentDeclined``, ``PaymentProcessingError`` or ``TransactionWriteFailed``.
    """
    try:
        player = await get_active_player(player_id, db)
        package = await get_active_package(package_id, db)
    except SQLAlchemyError as exc:
        logger.exception("Lookup failed for payment by player %s for package %s", player_id, package_id)
        raise PaymentProcessingError() from exc

    amount = _as_decimal(amount)
    credits = _as_decimal(credits)
    if not _matches_package(package, amount, credits):
        logger.warning(
            "Amount mismatch for player %s package %s: got amount=%s credits=%s, expected %s/%s",
            player.id,
            package.id,
            amount,
            credits,
            package.price,
            package.credits,
        )
        raise AmountMismatch()

    # Loaded attributes are expired by a rollback; keep plain copies for logging.
    resolved_player_id = player.id
    grant = _as_decimal(package.credits)
    transaction_id = str(uuid.uuid4())
    try:
        charge = await gateway.charge(
            player_id=resolved_player_id,
            amount=_as_decimal(package.price),
            description=f"Purchased {package.name}",
        )
    except Exception as exc:
        # Outcome unknown; nothing is recorded for this attempt.
        logger.exception("Gateway %s failed to charge player %s", gateway.name, resolved_player_id)
        raise PaymentProcessingError() from exc

    if not charge.success:
        await _record_failed_transaction(
            db,
            transaction_id=transaction_id,
            player=player,
            package=package,
            payment_method=gateway.name,
            charge=charge,
        )
        logger.info("Payment %s declined for player %s", transaction_id, resolved_player_id)
        raise PaymentDeclined()

    try:
        credits_after = await _record_completed_purchase(
            db,
            transaction_id=transaction_id,
            player=player,
            package=package,
            payment_method=gateway.name,
            charge=charge,
        )
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception(
            "Purchase write failed for transaction %s (gateway reference %s)",
            transaction_id,
            charge.reference,
        )
        raise TransactionWriteFailed() from exc

    logger.info(
        "Payment %s completed for player %s: +%s credits, balance %s",
        transaction_id,
        resolved_player_id,
        grant,
        credits_after,
    )
    return {
        "success": True,
        "message": "Payment successful",
        "newCredits": float(credits_after),
        "creditsAdded": float(grant),
        "transactionId": transaction_id,
    }

"""
Payment gateway seam.

The purchase workflow only ever talks to a ``PaymentGateway``; the demo
gateway stands in for a real provider and approves a configurable share of
charges at random.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
import logging
import random
from typing import Callable, Dict, Optional
import uuid

from config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChargeResult:
    success: bool
    reference: Optional[str] = None
    detail: Optional[str] = None


class PaymentGateway(ABC):
    """Single-operation interface over an external payment provider."""

    name: str = "gateway"

    @abstractmethod
    async def charge(self, *, player_id: str, amount: Decimal, description: str) -> ChargeResult:
        """Attempt to collect ``amount`` from the player."""


class DemoPaymentGateway(PaymentGateway):
    """Coin-flip gateway used until a real provider is wired in."""

    name = "demo_payment"

    def __init__(self, success_rate: float = 0.9, rng: Optional[random.Random] = None):
        if not 0.0 <= float(success_rate) <= 1.0:
            raise ValueError("success_rate must be between 0 and 1")
        self.success_rate = float(success_rate)
        self._rng = rng or random.Random()

    async def charge(self, *, player_id: str, amount: Decimal, description: str) -> ChargeResult:
        approved = self._rng.random() < self.success_rate
        reference = f"demo_{uuid.uuid4().hex}"
        logger.info(
            "Demo charge %s for player %s amount=%s (%s): %s",
            reference,
            player_id,
            amount,
            description,
            "approved" if approved else "declined",
        )
        if approved:
            return ChargeResult(success=True, reference=reference)
        return ChargeResult(success=False, reference=reference, detail="Simulated decline")


def _build_demo_gateway() -> PaymentGateway:
    return DemoPaymentGateway(success_rate=settings.DEMO_PAYMENT_SUCCESS_RATE)


GATEWAY_FACTORIES: Dict[str, Callable[[], PaymentGateway]] = {
    "demo": _build_demo_gateway,
}


@lru_cache(maxsize=1)
def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency returning the configured gateway instance."""
    key = (settings.PAYMENT_GATEWAY or "").strip().lower()
    factory = GATEWAY_FACTORIES.get(key)
    if factory is None:
        raise ValueError(f"Unsupported PAYMENT_GATEWAY: {settings.PAYMENT_GATEWAY}")
    return factory()

from decimal import Decimal
import random

import pytest

import config
from config import validate_payment_settings
from services.payment_gateway import DemoPaymentGateway, get_payment_gateway


@pytest.mark.asyncio
async def test_demo_gateway_always_approves_at_full_rate():
    gateway = DemoPaymentGateway(success_rate=1.0)
    for _ in range(20):
        result = await gateway.charge(player_id="p", amount=Decimal("5.00"), description="Purchased Starter")
        assert result.success is True
        assert result.reference.startswith("demo_")


@pytest.mark.asyncio
async def test_demo_gateway_always_declines_at_zero_rate():
    gateway = DemoPaymentGateway(success_rate=0.0)
    result = await gateway.charge(player_id="p", amount=Decimal("5.00"), description="Purchased Starter")
    assert result.success is False
    assert result.detail == "Simulated decline"


@pytest.mark.asyncio
async def test_demo_gateway_is_reproducible_with_seeded_rng():
    async def outcomes(seed):
        gateway = DemoPaymentGateway(success_rate=0.9, rng=random.Random(seed))
        return [
            (await gateway.charge(player_id="p", amount=Decimal("1"), description="d")).success
            for _ in range(50)
        ]

    first = await outcomes(7)
    assert first == await outcomes(7)
    assert any(first)


def test_demo_gateway_rejects_invalid_rate():
    with pytest.raises(ValueError):
        DemoPaymentGateway(success_rate=1.5)


def test_configured_gateway_is_demo():
    gateway = get_payment_gateway()
    assert isinstance(gateway, DemoPaymentGateway)
    assert gateway.name == "demo_payment"
    assert get_payment_gateway() is gateway


def test_validate_payment_settings_rejects_unknown_gateway(monkeypatch):
    monkeypatch.setattr(config.settings, "PAYMENT_GATEWAY", "stripe")
    with pytest.raises(ValueError, match="not supported"):
        validate_payment_settings()


def test_validate_payment_settings_rejects_bad_rate(monkeypatch):
    monkeypatch.setattr(config.settings, "DEMO_PAYMENT_SUCCESS_RATE", 2.0)
    with pytest.raises(ValueError, match="between 0 and 1"):
        validate_payment_settings()

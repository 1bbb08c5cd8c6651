"""Routers package."""

from . import (
    health,
    packages,
    payments,
    players,
    storefront,
)

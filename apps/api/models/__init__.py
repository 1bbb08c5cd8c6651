"""Models package."""

from .player import Player
from .credit_package import CreditPackage
from .transaction import Transaction
from .credit_history import CreditHistory

"""CreditHistory model for balance changes."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class CreditHistory(Base):
    """Append-only ledger row explaining a balance change."""

    __tablename__ = "credit_history"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    player_id = Column(String, ForeignKey("players.id"), nullable=False, index=True)
    transaction_id = Column(String, ForeignKey("transactions.id"), nullable=True, index=True)
    credits_change = Column(Numeric(12, 2), nullable=False)
    credits_before = Column(Numeric(12, 2), nullable=False)
    credits_after = Column(Numeric(12, 2), nullable=False)
    change_type = Column(String, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    player = relationship("Player", back_populates="credit_history")

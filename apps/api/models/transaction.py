"""Transaction model for purchase attempts."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


TRANSACTION_STATUS_COMPLETED = "completed"
TRANSACTION_STATUS_FAILED = "failed"


class Transaction(Base):
    """Immutable record of one purchase attempt and its outcome."""

    __tablename__ = "transactions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    player_id = Column(String, ForeignKey("players.id"), nullable=False, index=True)
    package_id = Column(String, ForeignKey("credit_packages.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    credits_purchased = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String, nullable=False)
    gateway_reference = Column(String, nullable=True)
    status = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)

    player = relationship("Player", back_populates="transactions")

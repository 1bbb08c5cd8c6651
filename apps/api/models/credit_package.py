"""CreditPackage model."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Numeric, String
from sqlalchemy.sql import func

from database import Base


class CreditPackage(Base):
    """Fixed price/credit-grant pair offered for purchase."""

    __tablename__ = "credit_packages"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    credits = Column(Numeric(12, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

# catalog/models/stock.py
"""
Stock is tracked per agency (store / warehouse).

- stock_histories is the append-only movement ledger.
- agencies_products keeps the current per-agency snapshot, upserted in the same
  transaction as each ledger row. Current product stock is the sum of active
  snapshots, never a live sum over the ledger.
"""

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Index,
    UniqueConstraint, CheckConstraint, Enum as SAEnum, func
)
from sqlalchemy.orm import relationship

from ..database import Base
from catalog.core.enums import StockMovementType
from catalog.core.utils import utc_now


class Agency(Base):
    __tablename__ = "agencies"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    state = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False)

    product_stocks = relationship("AgencyProduct", back_populates="agency")


class AgencyProduct(Base):
    __tablename__ = "agencies_products"

    id = Column(Integer, primary_key=True)
    agency_id = Column(Integer, ForeignKey("agencies.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    current_stock = Column(Integer, nullable=False, default=0)
    state = Column(Boolean, nullable=False, default=True)  # inactive links do not count

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("agency_id", "product_id", name="uq_agencies_products_agency_product"),
        CheckConstraint("current_stock >= 0", name="ck_agencies_products_current_stock"),
    )

    agency = relationship("Agency", back_populates="product_stocks")
    product = relationship("Product", back_populates="agency_stocks")


class StockHistory(Base):
    __tablename__ = "stock_histories"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    agency_id = Column(Integer, ForeignKey("agencies.id"), nullable=False, index=True)
    user_id = Column(Integer, nullable=True)

    quantity = Column(Integer, nullable=False)  # signed delta
    previous_stock = Column(Integer, nullable=False)
    current_stock = Column(Integer, nullable=False)
    type = Column(SAEnum(StockMovementType, name="stockmovementtype"), nullable=False, index=True)
    reference = Column(String, nullable=True)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_stock_histories_product_agency", "product_id", "agency_id"),
    )

    product = relationship("Product", back_populates="stock_histories")
    agency = relationship("Agency")

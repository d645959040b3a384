# catalog/models/promotion.py

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, Table, func
from sqlalchemy.orm import relationship

from ..database import Base
from catalog.core.utils import utc_now


promotions_products = Table(
    "promotions_products",
    Base.metadata,
    Column("promotion_id", Integer, ForeignKey("promotions.id", ondelete="CASCADE"), primary_key=True),
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
)


class Promotion(Base):
    """
    A discount applied to a set of products. ``type`` is PERCENTAGE (discount
    is a percentage) or FIXED (discount is an amount in pesos).
    """
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    discount = Column(Float, nullable=False)
    state = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)
    automatically_generated = Column(Boolean, nullable=False, default=False)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    product_line_id = Column(Integer, ForeignKey("product_lines.id"), nullable=True)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False)

    products = relationship("Product", secondary=promotions_products)

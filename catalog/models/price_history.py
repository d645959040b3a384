# catalog/models/price_history.py

from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from ..database import Base
from catalog.core.utils import utc_now


class PriceHistory(Base):
    """
    Append-only price ledger. A price change is a new row; the row with the
    latest created_at is the product's current price.
    """
    __tablename__ = "price_histories"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    min_final_price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    unit_cost = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    user_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)

    product = relationship("Product", back_populates="price_histories")

    def __repr__(self):
        return f"<PriceHistory product_id={self.product_id} price={self.price} at={self.created_at}>"

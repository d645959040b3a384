"""
Schemas for stock movements.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from catalog.core.enums import StockMovementType
from .base import BaseSchema


class AdjustStock(BaseSchema):
    """
    A signed stock movement for one product at one agency.
    ``type`` is derived from the sign of ``quantity`` when omitted.
    """
    product_id: int = Field(gt=0)
    agency_id: int = Field(gt=0)
    quantity: int
    user_id: Optional[int] = None
    type: Optional[StockMovementType] = None
    reference: Optional[str] = Field(default=None, max_length=255)

    @property
    def movement_type(self) -> StockMovementType:
        return self.type or StockMovementType.from_quantity(self.quantity)


class StockMovementRead(BaseSchema):
    id: int
    product_id: int
    agency_id: int
    user_id: Optional[int] = None
    quantity: int
    previous_stock: int
    current_stock: int
    type: StockMovementType
    reference: Optional[str] = None
    created_at: datetime

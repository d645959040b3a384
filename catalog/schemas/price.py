"""
Schemas for price history writes and reads.
"""
import math
from datetime import datetime
from typing import Optional, List

from pydantic import Field, field_validator, model_validator

from .base import BaseSchema


class CreatePriceRecord(BaseSchema):
    """Input for appending a price to a product's history."""
    product_id: int = Field(gt=0)
    price: float
    min_final_price: Optional[float] = None  # defaults to price
    unit_cost: float = 0.0
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None  # backfills only; defaults to now

    @field_validator('price', 'min_final_price', 'unit_cost', mode='before')
    @classmethod
    def validate_amount(cls, v):
        if v is None:
            return None
        if v == '':
            raise ValueError('Price must be a valid number')
        try:
            amount = float(v)
        except (ValueError, TypeError):
            raise ValueError(f'Price must be a valid number, got: {v}')
        if not math.isfinite(amount):
            raise ValueError(f'Price must be a finite number, got: {v}')
        return amount

    @model_validator(mode='after')
    def default_min_final_price(self):
        if self.min_final_price is None:
            self.min_final_price = self.price
        return self


class PriceHistoryRead(BaseSchema):
    id: int
    product_id: int
    price: float
    min_final_price: float
    unit_cost: float
    created_at: datetime


class PriceHistoryPage(BaseSchema):
    rows: List[PriceHistoryRead]
    count: int


class PriceStats(BaseSchema):
    average: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

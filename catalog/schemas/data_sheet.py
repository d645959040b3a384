"""
Schemas for data sheet writes and product line filters.
"""
from typing import Optional, List

from pydantic import Field

from .base import BaseSchema


class DataSheetValueInput(BaseSchema):
    data_sheet_field_id: int = Field(gt=0)
    value: Optional[str] = None


class ProductLineFilter(BaseSchema):
    data_sheet_field: int
    label: str
    values: List[str] = []

"""
Shared enums and constants used across the application.
"""

from enum import Enum


class StockMovementType(str, Enum):
    """Kinds of rows in the stock ledger"""
    IN = "IN"
    OUT = "OUT"
    ADJUST = "ADJUST"

    @classmethod
    def from_quantity(cls, quantity: int) -> "StockMovementType":
        if quantity > 0:
            return cls.IN
        if quantity < 0:
            return cls.OUT
        return cls.ADJUST


class PromotionType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class PromotionState(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class DataSheetFieldType(str, Enum):
    """Field types as stored by the admin tool (Spanish labels)."""
    SELECTABLE = "Seleccionable"
    TEXT = "Texto"
    NUMBER = "Numerico"


class Availability(str, Enum):
    """Google Merchant availability values"""
    IN_STOCK = "in_stock"
    OUT_OF_STOCK = "out_of_stock"

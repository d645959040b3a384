"""
Purpose: Defines the data structure for events emitted by the write path after a
successful commit.
Contents:
WriteEventKind (Enum): what kind of source-of-truth write happened.
WriteEvent (Pydantic Model): the kind plus the product / product line ids the
write affected. Consumed by CacheInvalidationService, which decides which cache
keys to drop. Empty id lists on bulk events mean "affected ids unknown".
"""

from datetime import datetime
from enum import Enum
from typing import Iterable, List

from pydantic import BaseModel, Field, model_validator

from catalog.core.utils import utc_now


class WriteEventKind(str, Enum):
    PRICE_INSERTED = "PRICE_INSERTED"
    STOCK_ADJUSTED = "STOCK_ADJUSTED"
    BULK_UPDATED = "BULK_UPDATED"
    PRODUCT_UPDATED = "PRODUCT_UPDATED"
    FILES_CHANGED = "FILES_CHANGED"
    DATA_SHEET_CHANGED = "DATA_SHEET_CHANGED"


# Kinds that always concern known products
_REQUIRES_PRODUCT_IDS = {
    WriteEventKind.PRICE_INSERTED,
    WriteEventKind.STOCK_ADJUSTED,
    WriteEventKind.PRODUCT_UPDATED,
    WriteEventKind.FILES_CHANGED,
}


class WriteEvent(BaseModel):
    kind: WriteEventKind
    product_ids: List[int] = Field(default_factory=list)
    product_line_ids: List[int] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=utc_now)

    @model_validator(mode='after')
    def check_ids(self):
        if self.kind in _REQUIRES_PRODUCT_IDS and not self.product_ids:
            raise ValueError(f"{self.kind.value} events require at least one product id")
        self.product_ids = list(dict.fromkeys(self.product_ids))
        self.product_line_ids = list(dict.fromkeys(self.product_line_ids))
        return self

    @classmethod
    def price_inserted(cls, product_id: int) -> "WriteEvent":
        return cls(kind=WriteEventKind.PRICE_INSERTED, product_ids=[product_id])

    @classmethod
    def stock_adjusted(cls, product_id: int) -> "WriteEvent":
        return cls(kind=WriteEventKind.STOCK_ADJUSTED, product_ids=[product_id])

    @classmethod
    def bulk_updated(cls, product_ids: Iterable[int] = (), product_line_ids: Iterable[int] = ()) -> "WriteEvent":
        return cls(
            kind=WriteEventKind.BULK_UPDATED,
            product_ids=list(product_ids),
            product_line_ids=list(product_line_ids),
        )

    @classmethod
    def product_updated(cls, product_id: int, product_line_ids: Iterable[int] = ()) -> "WriteEvent":
        return cls(
            kind=WriteEventKind.PRODUCT_UPDATED,
            product_ids=[product_id],
            product_line_ids=list(product_line_ids),
        )

    @classmethod
    def files_changed(cls, product_id: int) -> "WriteEvent":
        return cls(kind=WriteEventKind.FILES_CHANGED, product_ids=[product_id])

    @classmethod
    def data_sheet_changed(
        cls,
        product_line_ids: Iterable[int] = (),
        product_ids: Iterable[int] = (),
    ) -> "WriteEvent":
        return cls(
            kind=WriteEventKind.DATA_SHEET_CHANGED,
            product_ids=list(product_ids),
            product_line_ids=list(product_line_ids),
        )

    @property
    def is_unscoped(self) -> bool:
        """True when the writer could not enumerate what it touched."""
        return not self.product_ids and not self.product_line_ids

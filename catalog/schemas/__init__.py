from .base import BaseSchema
from .price import CreatePriceRecord, PriceHistoryRead, PriceHistoryPage, PriceStats
from .stock import AdjustStock, StockMovementRead
from .product import (
    ImageSizes,
    BrandSummary,
    ProductLineSummary,
    FileDetails,
    DataSheetFieldValue,
    DataSheetInfo,
    ProductRead,
    ProductInfo,
    ProductUpdate,
    BulkStateUpdate,
    ProductSearchResult,
)
from .data_sheet import DataSheetValueInput, ProductLineFilter

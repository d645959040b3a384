"""
Core module exports.
"""
from .enums import (
    StockMovementType,
    PromotionType,
    PromotionState,
    DataSheetFieldType,
    Availability
)

from .exceptions import (
    BaseServiceError,
    ProductServiceError,
    ProductNotFoundError,
    InsufficientStockError,
    InvalidPriceError,
    FileNotLinkedError,
    ValidationError,
    DatabaseError,
    StoreUnavailableError,
    CacheError,
    PlatformServiceError,
    GoogleMerchantError,
    GoogleMerchantAPIError
)

from .utils import (
    utc_now,
    file_url,
    image_size_urls
)

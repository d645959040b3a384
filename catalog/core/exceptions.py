class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class ProductServiceError(BaseServiceError):
    """Base exception for product service errors."""
    pass

class ProductNotFoundError(ProductServiceError):
    """Raised when product is not found."""
    pass

class InsufficientStockError(ProductServiceError):
    """Raised when a stock movement would leave an agency below zero."""

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}. "
            f"Requested: {requested}, Available: {available}"
        )

class InvalidPriceError(ProductServiceError):
    """Raised when a price record is rejected."""

    def __init__(self, product_id: int, price: float):
        self.product_id = product_id
        self.price = price
        super().__init__(f"Invalid price {price} for product {product_id}")

class FileNotLinkedError(ProductServiceError):
    """Raised when a file is not associated with the product."""
    pass

class ValidationError(BaseServiceError):
    """Raised when data validation fails."""
    pass

class DatabaseError(Exception):
    """Exception raised for database-related errors."""
    pass

class StoreUnavailableError(DatabaseError):
    """Raised when a persistent store query fails (network, timeout, driver)."""

    def __init__(self, operation: str, product_id=None, detail: str = ""):
        self.operation = operation
        self.product_id = product_id
        message = f"Store operation '{operation}' failed"
        if product_id is not None:
            message += f" for product {product_id}"
        if detail:
            message += f": {detail}"
        super().__init__(message)

class CacheError(BaseServiceError):
    """Raised when the cache store cannot be reached."""
    pass

class PlatformServiceError(BaseServiceError):
    """Base exception for external platform errors."""
    pass

class GoogleMerchantError(PlatformServiceError):
    """Base exception for Google Merchant errors."""
    pass

class GoogleMerchantAPIError(GoogleMerchantError):
    """Raised when Google Content API calls fail."""
    pass

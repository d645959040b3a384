from .brand import Brand, ProductLine
from .file import File
from .product import Product, ProductFile
from .price_history import PriceHistory
from .stock import Agency, AgencyProduct, StockHistory
from .data_sheet import DataSheet, DataSheetField, DataSheetValue
from .promotion import Promotion, promotions_products

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'Brand',
    'ProductLine',
    'File',
    'Product',
    'ProductFile',
    'PriceHistory',
    'Agency',
    'AgencyProduct',
    'StockHistory',
    'DataSheet',
    'DataSheetField',
    'DataSheetValue',
    'Promotion',
    'promotions_products',
]

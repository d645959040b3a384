"""
Schemas for product reads, the cached product info payload and product writes.
"""

from datetime import datetime
from typing import Optional, List, Dict

from pydantic import Field, field_validator

from .base import BaseSchema


class ImageSizes(BaseSchema):
    xs: str = ""
    sm: str = ""
    md: str = ""
    lg: str = ""
    original: str = ""

    @classmethod
    def from_urls(cls, urls: Dict[str, str]) -> "ImageSizes":
        return cls(**{size: urls.get(size, "") for size in ("xs", "sm", "md", "lg", "original")})


class BrandSummary(BaseSchema):
    id: int
    name: str


class BrandImage(BaseSchema):
    url: str
    sizes: ImageSizes


class ProductLineBrand(BaseSchema):
    """A brand with active products in a product line, as listed on its page."""
    id: int
    name: str
    slug: str
    image: Optional[BrandImage] = None
    active_products_count: int = 0


class ProductLineSummary(BaseSchema):
    id: int
    name: str


class FileDetails(BaseSchema):
    id: int
    name: str
    original_name: str
    location: str
    mime_type: str
    size: int
    principal: bool = False
    url: str
    sizes: ImageSizes


class DataSheetFieldValue(BaseSchema):
    id: int
    name: str
    type: str
    value: str = ""


class DataSheetInfo(BaseSchema):
    id: int
    name: str
    year: Optional[int] = None
    fields: List[DataSheetFieldValue] = []


class ProductRead(BaseSchema):
    """Identity fields of a product row"""
    id: int
    magister_code: Optional[str] = None
    display_name: str
    name: str
    reference: str
    description: Optional[str] = None
    detailed_description: Optional[str] = None
    state: bool
    recommended: bool
    highlight: bool
    is_product: bool
    allow_national_sale: bool
    brand_id: int
    product_line_id: int
    process_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductInfo(ProductRead):
    """
    Denormalized product payload served to the storefront. Cached as a whole,
    so price and stock are the values resolved at assembly time.
    """
    current_price: float = 0.0
    stock: int = 0
    brand: Optional[BrandSummary] = None
    product_line: Optional[ProductLineSummary] = None
    files: List[FileDetails] = []
    file_url: Optional[str] = None
    images: Optional[ImageSizes] = None
    data_sheet: Optional[DataSheetInfo] = None


class ProductUpdate(BaseSchema):
    """Partial update of identity fields. Price and stock are not updatable here."""
    magister_code: Optional[str] = None
    display_name: Optional[str] = None
    name: Optional[str] = None
    reference: Optional[str] = None
    description: Optional[str] = None
    detailed_description: Optional[str] = None
    state: Optional[bool] = None
    recommended: Optional[bool] = None
    highlight: Optional[bool] = None
    allow_national_sale: Optional[bool] = None
    brand_id: Optional[int] = None
    product_line_id: Optional[int] = None

    @field_validator('display_name', 'name', 'reference', mode='before')
    @classmethod
    def validate_required_text(cls, v):
        if v is not None and not str(v).strip():
            raise ValueError('Field cannot be empty')
        return v


class BulkStateUpdate(BaseSchema):
    ids: List[int] = Field(min_length=1)
    state: bool

    @field_validator('ids')
    @classmethod
    def dedupe_ids(cls, v):
        return list(dict.fromkeys(v))


class ProductSearchResult(BaseSchema):
    rows: List[ProductRead]
    count: int

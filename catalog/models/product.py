"""
Models for the catalog's core entity.

A product row only carries identity and descriptive fields. Current price and
current stock are always derived from price_histories and agencies_products;
they are never stored on the product.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship

from ..database import Base
from catalog.core.utils import utc_now


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False)

    # Core Product Information
    magister_code = Column(String, nullable=True)  # ERP code, unique when present
    display_name = Column(String, nullable=False)
    name = Column(String, nullable=False)
    reference = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    detailed_description = Column(Text, nullable=True)

    # Status and Flags
    state = Column(Boolean, nullable=False, default=False, index=True)
    recommended = Column(Boolean, nullable=False, default=False)
    highlight = Column(Boolean, nullable=False, default=False)
    is_product = Column(Boolean, nullable=False, default=True)
    allow_national_sale = Column(Boolean, nullable=False, default=False)

    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    product_line_id = Column(Integer, ForeignKey("product_lines.id"), nullable=False, index=True)
    process_id = Column(Integer, nullable=True)

    __table_args__ = (
        Index(
            "ix_products_magister_code",
            "magister_code",
            unique=True,
            postgresql_where=magister_code.isnot(None),
        ),
    )

    #####################################################
    ################## Relationships ####################
    #####################################################

    brand = relationship("Brand", back_populates="products")
    product_line = relationship("ProductLine", back_populates="products")
    price_histories = relationship("PriceHistory", back_populates="product", cascade="all, delete-orphan")
    stock_histories = relationship("StockHistory", back_populates="product")
    agency_stocks = relationship("AgencyProduct", back_populates="product")
    product_files = relationship("ProductFile", back_populates="product", cascade="all, delete-orphan")
    data_sheets = relationship("DataSheet", back_populates="product")

    def __repr__(self):
        return f"<Product id={self.id} reference={self.reference!r}>"


class ProductFile(Base):
    """Link between a product and a stored file. One link per product may be principal."""
    __tablename__ = "products_files"

    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    file_id = Column(Integer, ForeignKey("files.id", ondelete="CASCADE"), primary_key=True)
    principal = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)

    product = relationship("Product", back_populates="product_files")
    file = relationship("File", back_populates="product_links")

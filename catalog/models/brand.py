# catalog/models/brand.py

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from ..database import Base
from catalog.core.utils import utc_now


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    state = Column(Boolean, nullable=False, default=True)
    file_id = Column(Integer, ForeignKey("files.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False)

    products = relationship("Product", back_populates="brand")
    file = relationship("File")


class ProductLine(Base):
    """A category of parts (batteries, tyres, lubricants...)."""
    __tablename__ = "product_lines"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    state = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False)

    products = relationship("Product", back_populates="product_line")
    data_sheet_fields = relationship("DataSheetField", back_populates="product_line", cascade="all, delete-orphan")

# catalog/models/data_sheet.py
"""
Technical data sheets. A product line defines its fields (some flagged as
filters), a data sheet belongs to a product line and optionally to a product,
and values hold one entry per (data sheet, field).
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship

from ..database import Base
from catalog.core.utils import utc_now


class DataSheetField(Base):
    __tablename__ = "data_sheet_fields"

    id = Column(Integer, primary_key=True)
    product_line_id = Column(Integer, ForeignKey("product_lines.id", ondelete="CASCADE"), nullable=False, index=True)
    field_name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    values = Column(Text, nullable=True)  # comma separated options for selectable fields
    use_to_filter = Column(Boolean, nullable=False, default=False)
    use_to_compare = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False)

    product_line = relationship("ProductLine", back_populates="data_sheet_fields")
    field_values = relationship("DataSheetValue", back_populates="field")


class DataSheet(Base):
    __tablename__ = "data_sheets"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    year = Column(Integer, nullable=True)
    original = Column(Boolean, nullable=False, default=False)
    product_line_id = Column(Integer, ForeignKey("product_lines.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True, index=True)
    vehicle_version_id = Column(Integer, nullable=True)
    client_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False)

    product = relationship("Product", back_populates="data_sheets")
    values = relationship("DataSheetValue", back_populates="data_sheet", cascade="all, delete-orphan")


class DataSheetValue(Base):
    __tablename__ = "data_sheet_values"

    id = Column(Integer, primary_key=True)
    data_sheet_id = Column(Integer, ForeignKey("data_sheets.id", ondelete="CASCADE"), nullable=False)
    data_sheet_field_id = Column(Integer, ForeignKey("data_sheet_fields.id", ondelete="CASCADE"), nullable=False)
    value = Column(String, nullable=True)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("data_sheet_id", "data_sheet_field_id", name="uq_data_sheet_values_sheet_field"),
    )

    data_sheet = relationship("DataSheet", back_populates="values")
    field = relationship("DataSheetField", back_populates="field_values")

# catalog/models/file.py

from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from sqlalchemy.orm import relationship

from ..database import Base
from catalog.core.utils import utc_now, file_url, image_size_urls


class File(Base):
    """
    Metadata for a blob kept in object storage. Upload, resize and delete of
    the blob itself are handled by the storage layer, not here.
    """
    __tablename__ = "files"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    location = Column(String, nullable=False)
    mime_type = Column(String, nullable=False)
    size = Column(Integer, nullable=False, default=0)
    file_metadata = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime, default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False)

    product_links = relationship("ProductFile", back_populates="file")

    @property
    def is_image(self) -> bool:
        return bool(self.mime_type) and self.mime_type.startswith("image/")

    def get_url(self, size: str = None) -> str:
        return file_url(self.location, self.name, size)

    def get_image_sizes_url(self):
        return image_size_urls(self.location, self.name)

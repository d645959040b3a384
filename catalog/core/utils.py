"""
Small helpers shared by services: timestamps, slugs and public file URLs.
"""
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from catalog.core.config import get_settings

IMAGE_SIZES = ("xs", "sm", "md", "lg", "original")


def utc_now() -> datetime:
    """Naive UTC timestamp, matching the TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def slugify(name: str) -> str:
    """'Mann-Filter / Bosch' -> 'mann-filter-bosch'"""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def file_url(location: str, name: str, size: Optional[str] = None) -> str:
    """
    Public URL for a stored file. Resized variants are stored next to the
    original with a ``<size>_`` prefix.
    """
    base_url = get_settings().storage_base_url
    filename = f"{size}_{name}" if size and size != "original" else name
    return f"{base_url}/{location}/{filename}"


def image_size_urls(location: str, name: str, sizes: Iterable[str] = IMAGE_SIZES) -> Dict[str, str]:
    return {size: file_url(location, name, size) for size in sizes}

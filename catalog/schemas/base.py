"""
Base schema shared by all request and response models.
"""
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Reads attributes from ORM rows and accepts field names or aliases"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True
    )

"""SQLModel GalleryImage model"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class GalleryImage(SQLModel, table=True):
    """Gallery picture; order_index defines display order (not unique)"""

    __tablename__ = "gallery_images"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str
    description: Optional[str] = None
    image_url: str
    order_index: int = Field(default=0, index=True)
    is_visible: bool = Field(default=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

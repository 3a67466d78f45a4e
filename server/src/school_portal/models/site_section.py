"""SQLModel SiteSection model"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class SiteSection(SQLModel, table=True):
    """Editable page region of the public site (historia, mision, vision...)"""

    __tablename__ = "site_sections"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    section_key: str = Field(unique=True, index=True)
    title: str
    content: str = Field(default="")
    image_url: Optional[str] = None
    order_index: int = Field(default=0)
    is_visible: bool = Field(default=True)
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

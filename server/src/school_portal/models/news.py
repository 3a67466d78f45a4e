"""SQLModel NewsItem model"""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class NewsItem(SQLModel, table=True):
    """News article shown on the public site"""

    __tablename__ = "news"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str
    content: str = Field(default="")
    image_url: Optional[str] = None
    published_date: date = Field(
        default_factory=lambda: datetime.now(timezone.utc).date(), index=True
    )
    is_published: bool = Field(default=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

"""Event-related SQLModel models"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer
from sqlmodel import Field, SQLModel

# Values offered by the dashboard for the invited courses selector
INVITED_COURSES_OPTIONS = (
    "Todos",
    "Todos los de básica",
    "Todos los de bachillerato",
    "Específicos",
)


class Event(SQLModel, table=True):
    """School event open for registrations.

    max_participants == 0 means unlimited capacity. Dates are stored in UTC.
    """

    __tablename__ = "events"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str
    description: str = Field(default="")
    location: str = Field(default="")
    event_date: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    image_url: Optional[str] = None
    is_active: bool = Field(default=True)
    invited_courses: str = Field(default="Todos")
    # Course list when invited_courses is "Específicos", specialty for bachillerato
    specialties: Optional[str] = None
    max_participants: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default="0"),
    )
    current_participants: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default="0"),
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        CheckConstraint("max_participants >= 0", name="ck_events_max_ge_0"),
        CheckConstraint("current_participants >= 0", name="ck_events_current_ge_0"),
        Index("idx_events_event_date", "event_date"),
    )


class EventRegistration(SQLModel, table=True):
    """Guardian/student registration for an event. Never updated."""

    __tablename__ = "event_registrations"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    event_id: uuid.UUID = Field(
        foreign_key="events.id", ondelete="CASCADE", index=True
    )
    representative_ci: str
    representative_name: str
    student_ci: str
    student_name: str
    student_course: str
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

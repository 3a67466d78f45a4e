"""Event editor and event registration log for the dashboard"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from school_portal.errors import ContentStoreError, EventNotFoundError
from school_portal.models.event import (
    INVITED_COURSES_OPTIONS,
    Event,
    EventRegistration,
)
from school_portal.services.capacity import capacity_summary
from school_portal.services.content_store import ContentStore
from school_portal.services.editor_service import TableEditor

logger = logging.getLogger(__name__)


def to_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EventEditor(TableEditor):
    """Events editor.

    The participant counter is only set on insert; later edits never touch it
    so concurrent registrations are not overwritten.
    """

    model = Event
    fields = (
        "title",
        "description",
        "location",
        "event_date",
        "image_url",
        "is_active",
        "invited_courses",
        "specialties",
        "max_participants",
    )
    insert_only_fields = ("current_participants",)

    def order_by(self):
        return Event.event_date.desc()

    def prepare(self, data: Dict[str, Any], is_new: bool) -> Dict[str, Any]:
        event_date = data.get("event_date")
        if event_date is not None:
            if isinstance(event_date, str):
                event_date = datetime.fromisoformat(event_date)
            data["event_date"] = to_utc(event_date)
        elif is_new or "event_date" in data:
            # An event cannot lose its date
            raise ValueError("event_date is required")

        if (data.get("max_participants") or 0) < 0:
            raise ValueError("max_participants must be >= 0")
        if (data.get("current_participants") or 0) < 0:
            raise ValueError("current_participants must be >= 0")

        invited = data.get("invited_courses")
        if invited is not None and invited not in INVITED_COURSES_OPTIONS:
            raise ValueError(f"Invalid invited_courses '{invited}'")
        return data


def registration_matches(registration: EventRegistration, term: str) -> bool:
    """Case-insensitive match over names, CIs and course"""
    term = term.strip().lower()
    if not term:
        return True
    haystack = (
        registration.representative_name,
        registration.representative_ci,
        registration.student_name,
        registration.student_ci,
        registration.student_course,
    )
    return any(term in value.lower() for value in haystack)


class EventLogService:
    """Registrations per event, as shown in the dashboard event log"""

    def __init__(self, store: ContentStore):
        self.store = store

    def list_events(self) -> List[Dict[str, Any]]:
        try:
            events = self.store.select(Event, order_by=Event.event_date.desc())
        except ContentStoreError as e:
            logger.error(f"Error loading events: {e}")
            return []

        return [
            {
                "id": str(event.id),
                "title": event.title,
                "event_date": event.event_date.isoformat(),
                "max_participants": event.max_participants,
                "current_participants": event.current_participants,
                **capacity_summary(event),
            }
            for event in events
        ]

    def list_registrations(
        self, event_id, search: Optional[str] = None
    ) -> List[EventRegistration]:
        if self.store.get(Event, event_id) is None:
            raise EventNotFoundError(event_id)

        try:
            registrations = self.store.select(
                EventRegistration,
                EventRegistration.event_id == event_id,
                order_by=EventRegistration.created_at.asc(),
            )
        except ContentStoreError as e:
            logger.error(f"Error loading registrations for {event_id}: {e}")
            return []

        if search:
            registrations = [r for r in registrations if registration_matches(r, search)]
        return registrations

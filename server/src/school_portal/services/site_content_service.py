"""Public site content reads - sections, news, events and gallery"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from school_portal.errors import ContentStoreError
from school_portal.models.event import Event
from school_portal.models.gallery_image import GalleryImage
from school_portal.models.news import NewsItem
from school_portal.models.site_section import SiteSection
from school_portal.services.capacity import capacity_summary
from school_portal.services.content_store import ContentStore

logger = logging.getLogger(__name__)

PUBLIC_LIST_LIMIT = 6

# Pre-seeded page regions editable from the dashboard
DEFAULT_SECTIONS = [
    {
        "section_key": "historia",
        "title": "Nuestra Historia",
        "content": (
            "Más de 60 años de trayectoria educativa en la parroquia Febres "
            "Cordero, Guayaquil, formando generaciones de estudiantes con "
            "excelencia académica, valores cívicos y compromiso social."
        ),
        "order_index": 0,
    },
    {"section_key": "mision", "title": "Nuestra Misión", "order_index": 1},
    {"section_key": "vision", "title": "Nuestra Visión", "order_index": 2},
]


def event_payload(event: Event) -> Dict[str, Any]:
    """Serialize an event with its capacity gate evaluated right now"""
    payload = event.model_dump(mode="json")
    payload.update(capacity_summary(event))
    return payload


class SiteContentService:
    """Read-side service for the public site.

    Read failures are logged and treated as "no data".
    """

    def __init__(self, store: ContentStore):
        self.store = store

    def get_section(self, section_key: str) -> Optional[SiteSection]:
        try:
            rows = self.store.select(
                SiteSection,
                SiteSection.section_key == section_key,
                SiteSection.is_visible == True,  # noqa: E712
                limit=1,
            )
        except ContentStoreError as e:
            logger.error(f"Error loading section {section_key}: {e}")
            return None
        return rows[0] if rows else None

    def list_news(self, limit: int = PUBLIC_LIST_LIMIT) -> List[NewsItem]:
        try:
            return self.store.select(
                NewsItem,
                NewsItem.is_published == True,  # noqa: E712
                order_by=NewsItem.published_date.desc(),
                limit=limit,
            )
        except ContentStoreError as e:
            logger.error(f"Error loading news: {e}")
            return []

    def list_upcoming_events(
        self, now: Optional[datetime] = None, limit: int = PUBLIC_LIST_LIMIT
    ) -> List[Event]:
        now = now or datetime.now(timezone.utc)
        try:
            return self.store.select(
                Event,
                Event.is_active == True,  # noqa: E712
                Event.event_date >= now,
                order_by=Event.event_date.asc(),
                limit=limit,
            )
        except ContentStoreError as e:
            logger.error(f"Error loading events: {e}")
            return []

    def get_event(self, event_id) -> Optional[Event]:
        try:
            return self.store.get(Event, event_id)
        except (ContentStoreError, ValueError) as e:
            logger.error(f"Error loading event {event_id}: {e}")
            return None

    def list_gallery(self) -> List[GalleryImage]:
        try:
            return self.store.select(
                GalleryImage,
                GalleryImage.is_visible == True,  # noqa: E712
                order_by=GalleryImage.order_index,
            )
        except ContentStoreError as e:
            logger.error(f"Error loading gallery: {e}")
            return []

    def ensure_default_sections(self) -> int:
        """Insert any missing default section; returns how many were created"""
        existing = {
            section.section_key for section in self.store.select(SiteSection)
        }
        created = 0
        for section in DEFAULT_SECTIONS:
            if section["section_key"] in existing:
                continue
            self.store.insert(SiteSection, section)
            created += 1
        if created:
            logger.info(f"Seeded {created} default site section(s)")
        return created

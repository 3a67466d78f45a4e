"""Database models for the school portal"""

from school_portal.models.contact_message import ContactMessage
from school_portal.models.contact_subject import ContactSubject
from school_portal.models.event import Event, EventRegistration
from school_portal.models.gallery_image import GalleryImage
from school_portal.models.news import NewsItem
from school_portal.models.site_section import SiteSection

__all__ = [
    "SiteSection",
    "NewsItem",
    "Event",
    "EventRegistration",
    "GalleryImage",
    "ContactMessage",
    "ContactSubject",
]

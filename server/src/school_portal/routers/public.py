"""Public site content endpoints"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from school_portal.errors import ContentStoreError
from school_portal.logging_config import get_logger
from school_portal.services.contact_service import (
    ContactMessageCreate,
    ContactService,
)
from school_portal.services.content_store import SqlContentStore
from school_portal.services.site_content_service import (
    SiteContentService,
    event_payload,
)
from school_portal.services.store_service import get_content_store

router = APIRouter(prefix="/api", tags=["Public"])
logger = get_logger(__name__)

CONTACT_ERROR_MESSAGE = "Error al enviar el mensaje. Por favor intente nuevamente."


@router.get("/sections/{section_key}")
async def get_section(
    section_key: str, store: SqlContentStore = Depends(get_content_store)
):
    """Visible page section (historia, mision, vision...)"""
    section = SiteContentService(store).get_section(section_key)
    if not section:
        raise HTTPException(status_code=404, detail="Section not found")
    return section


@router.get("/news")
async def list_news(store: SqlContentStore = Depends(get_content_store)):
    """Latest published news"""
    return SiteContentService(store).list_news()


@router.get("/events")
async def list_events(store: SqlContentStore = Depends(get_content_store)):
    """Upcoming active events with their registration capacity"""
    events = SiteContentService(store).list_upcoming_events()
    return [event_payload(event) for event in events]


@router.get("/events/{event_id}")
async def get_event(
    event_id: uuid.UUID, store: SqlContentStore = Depends(get_content_store)
):
    event = SiteContentService(store).get_event(event_id)
    if not event or not event.is_active:
        raise HTTPException(status_code=404, detail="Event not found")
    return event_payload(event)


@router.get("/gallery")
async def list_gallery(store: SqlContentStore = Depends(get_content_store)):
    """Visible gallery images in display order"""
    return SiteContentService(store).list_gallery()


@router.post("/contact", status_code=status.HTTP_201_CREATED)
async def submit_contact_message(
    payload: ContactMessageCreate,
    store: SqlContentStore = Depends(get_content_store),
):
    """Handle contact form submission"""
    try:
        message = ContactService(store).submit(payload)
    except ContentStoreError as e:
        logger.error(f"Error sending message: {e}")
        raise HTTPException(status_code=502, detail=CONTACT_ERROR_MESSAGE)

    return {"success": True, "id": str(message.id)}

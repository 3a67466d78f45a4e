"""Dashboard event log, contact log and manual expiry sweep"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from school_portal.auth.dependencies import require_admin_session
from school_portal.errors import EventNotFoundError
from school_portal.logging_config import get_logger
from school_portal.models.contact_message import ContactMessage
from school_portal.routers.live import live_stream_response
from school_portal.services.contact_service import ContactService, contact_payload
from school_portal.services.content_store import SqlContentStore, table_name
from school_portal.services.event_service import EventLogService
from school_portal.services.expiry_sweeper import sweep_expired_events
from school_portal.services.store_service import (
    get_content_store,
    get_session_factory,
)

router = APIRouter(
    prefix="/admin/api",
    tags=["Admin logs"],
    dependencies=[Depends(require_admin_session)],
)
logger = get_logger(__name__)


@router.get("/event-log")
async def event_log(store: SqlContentStore = Depends(get_content_store)):
    """Events with registration counts, newest first"""
    return EventLogService(store).list_events()


@router.get("/event-log/{event_id}/registrations")
async def event_registrations(
    event_id: uuid.UUID,
    search: Optional[str] = None,
    store: SqlContentStore = Depends(get_content_store),
):
    """Registrations of one event, optionally filtered by name, CI or course"""
    try:
        registrations = EventLogService(store).list_registrations(event_id, search)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {
        "event_id": str(event_id),
        "total": len(registrations),
        "registrations": registrations,
    }


@router.get("/contact-messages")
async def list_contact_messages(store: SqlContentStore = Depends(get_content_store)):
    return [contact_payload(m) for m in ContactService(store).list_messages()]


@router.delete("/contact-messages/{message_id}")
async def delete_contact_message(
    message_id: uuid.UUID, store: SqlContentStore = Depends(get_content_store)
):
    result = ContactService(store).delete_message(message_id)
    if not result["success"]:
        status_code = 404 if result["error"] == "Message not found" else 502
        raise HTTPException(status_code=status_code, detail=result["error"])
    return result


@router.get("/live/contact-messages")
async def live_contact_messages(
    request: Request, session_factory=Depends(get_session_factory)
):
    """Contact log pushed on every new or deleted message"""

    def fetch():
        with session_factory() as db:
            service = ContactService(SqlContentStore(db))
            return [contact_payload(m) for m in service.list_messages()]

    return live_stream_response(request, table_name(ContactMessage), fetch)


@router.post("/events/sweep")
async def sweep_events(store: SqlContentStore = Depends(get_content_store)):
    """Run the expired event cleanup now"""
    deleted = sweep_expired_events(store)
    logger.info(f"Manual sweep removed {deleted} event(s)")
    return {"success": True, "deleted": deleted}

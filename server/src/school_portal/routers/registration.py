"""Event registration workflow endpoints.

Each registration attempt is a server-side session that walks through the
form, two confirmation gates and the final submission.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from school_portal.errors import (
    ContentStoreError,
    PortalError,
    RegistrationValidationError,
    http_status_for,
)
from school_portal.logging_config import get_logger
from school_portal.models.event import Event
from school_portal.services.content_store import SqlContentStore
from school_portal.services.registration_workflow import (
    SUBMIT_ERROR_MESSAGE,
    RegistrationSessionManager,
)
from school_portal.services.site_content_service import event_payload
from school_portal.services.store_service import (
    get_content_store,
    get_registration_sessions,
)

router = APIRouter(prefix="/api", tags=["Registration"])
logger = get_logger(__name__)


class RegistrationFieldsUpdate(BaseModel):
    representative_ci: Optional[str] = None
    representative_name: Optional[str] = None
    student_ci: Optional[str] = None
    student_name: Optional[str] = None
    student_course: Optional[str] = None


def _http_error(error: PortalError) -> HTTPException:
    detail = {"code": error.code.value, "message": error.message}
    if isinstance(error, RegistrationValidationError):
        detail["missing_fields"] = error.missing_fields
    return HTTPException(status_code=http_status_for(error), detail=detail)


@router.post(
    "/events/{event_id}/registration", status_code=status.HTTP_201_CREATED
)
async def open_registration(
    event_id: uuid.UUID,
    store: SqlContentStore = Depends(get_content_store),
    sessions: RegistrationSessionManager = Depends(get_registration_sessions),
):
    """Open the registration modal for an event with free capacity"""
    try:
        workflow = sessions.open(store.get(Event, event_id))
    except PortalError as e:
        raise _http_error(e)
    return workflow.snapshot()


@router.get("/registration/{session_id}")
async def get_registration(
    session_id: str,
    sessions: RegistrationSessionManager = Depends(get_registration_sessions),
):
    try:
        return sessions.get(session_id).snapshot()
    except PortalError as e:
        raise _http_error(e)


@router.put("/registration/{session_id}/fields")
async def update_registration_fields(
    session_id: str,
    fields: RegistrationFieldsUpdate,
    sessions: RegistrationSessionManager = Depends(get_registration_sessions),
):
    try:
        workflow = sessions.get(session_id)
        workflow.update_fields(**fields.model_dump(exclude_unset=True, exclude_none=True))
    except PortalError as e:
        raise _http_error(e)
    return workflow.snapshot()


@router.post("/registration/{session_id}/{action}")
async def advance_registration(
    session_id: str,
    action: str,
    store: SqlContentStore = Depends(get_content_store),
    sessions: RegistrationSessionManager = Depends(get_registration_sessions),
):
    """Drive the workflow: submit, acknowledge, cancel or confirm"""
    try:
        workflow = sessions.get(session_id)
        if action == "submit":
            workflow.submit()
        elif action == "acknowledge":
            workflow.acknowledge()
        elif action == "cancel":
            workflow.cancel()
        elif action == "confirm":
            await workflow.confirm(store)
        else:
            raise HTTPException(status_code=404, detail=f"Unknown action '{action}'")
    except ContentStoreError:
        raise HTTPException(status_code=502, detail=SUBMIT_ERROR_MESSAGE)
    except PortalError as e:
        raise _http_error(e)

    response = workflow.snapshot()
    if action == "confirm":
        # Let the page refresh counts right away
        event = store.get(Event, workflow.event_id)
        response["event"] = event_payload(event) if event else None
    return response


@router.delete("/registration/{session_id}")
async def close_registration(
    session_id: str,
    sessions: RegistrationSessionManager = Depends(get_registration_sessions),
):
    """Close the modal; rejected while submitting or showing success"""
    try:
        workflow = sessions.close(session_id)
    except PortalError as e:
        raise _http_error(e)
    return workflow.snapshot()

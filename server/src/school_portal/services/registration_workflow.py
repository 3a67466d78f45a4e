"""Event registration workflow.

One workflow per registration attempt (one modal session):

    EDITING -> WARNING_SHOWN -> FINAL_CONFIRM -> SUBMITTING -> SUCCESS -> CLOSED
                  |                 |               |
                  +-- cancel -------+               +-- insert failed -> EDITING

Submitting writes the registration row first and only then asks the store to
increment the event's participant counter. A failed increment does not undo
the registration; the counter is best-effort.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from school_portal.errors import (
    ContentStoreError,
    EventNotFoundError,
    InvalidTransitionError,
    RegistrationClosedError,
    RegistrationSessionNotFoundError,
    RegistrationValidationError,
    SessionBusyError,
)
from school_portal.models.event import Event, EventRegistration
from school_portal.services.capacity import is_registration_open
from school_portal.services.content_store import ContentStore

logger = logging.getLogger(__name__)

DEFAULT_SUCCESS_DELAY_SECONDS = 3.0

# Idle sessions are reclaimed after 30 minutes without activity
DEFAULT_SESSION_TTL_SECONDS = 1800

SUBMIT_ERROR_MESSAGE = "Error al enviar el registro. Por favor intente nuevamente."


class RegistrationState(str, Enum):
    EDITING = "editing"
    WARNING_SHOWN = "warning_shown"
    FINAL_CONFIRM = "final_confirm"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    CLOSED = "closed"


class RegistrationForm(BaseModel):
    """The five identity fields collected by the registration modal"""

    representative_ci: str = ""
    representative_name: str = ""
    student_ci: str = ""
    student_name: str = ""
    student_course: str = ""

    def missing_fields(self) -> List[str]:
        return [name for name, value in self.model_dump().items() if not value.strip()]


REGISTRATION_FIELDS = tuple(RegistrationForm.model_fields)


class RegistrationWorkflow:
    """State machine for a single registration attempt"""

    def __init__(
        self,
        event_id: uuid.UUID,
        event_title: str = "",
        on_success: Optional[Callable[["RegistrationWorkflow"], None]] = None,
        on_close: Optional[Callable[["RegistrationWorkflow"], None]] = None,
        success_delay: Optional[float] = DEFAULT_SUCCESS_DELAY_SECONDS,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.event_id = event_id
        self.event_title = event_title
        self.on_success = on_success
        self.on_close = on_close
        self.success_delay = success_delay

        self.state = RegistrationState.EDITING
        self.form = RegistrationForm()
        self.error: Optional[str] = None
        self.registration_id: Optional[uuid.UUID] = None
        self.counter_updated: Optional[bool] = None
        self._close_handle: Optional[asyncio.TimerHandle] = None
        self.last_activity: float = 0.0

    def _require(self, action: str, *allowed: RegistrationState) -> None:
        if self.state not in allowed:
            raise InvalidTransitionError(action, self.state)

    # Editing
    def update_fields(self, **values: str) -> RegistrationForm:
        self._require("edit fields", RegistrationState.EDITING)
        unknown = set(values) - set(REGISTRATION_FIELDS)
        if unknown:
            raise ValueError(f"Unknown registration fields: {sorted(unknown)}")
        self.form = self.form.model_copy(update=values)
        return self.form

    def submit(self) -> RegistrationState:
        """Validate the form; every field must be non-blank once trimmed"""
        self._require("submit", RegistrationState.EDITING)
        missing = self.form.missing_fields()
        if missing:
            error = RegistrationValidationError(missing)
            self.error = error.message
            raise error

        self.error = None
        self.state = RegistrationState.WARNING_SHOWN
        return self.state

    # Confirmation gates
    def acknowledge(self) -> RegistrationState:
        self._require("acknowledge", RegistrationState.WARNING_SHOWN)
        self.state = RegistrationState.FINAL_CONFIRM
        return self.state

    def cancel(self) -> RegistrationState:
        """Back to editing with the form data preserved"""
        self._require(
            "cancel", RegistrationState.WARNING_SHOWN, RegistrationState.FINAL_CONFIRM
        )
        self.state = RegistrationState.EDITING
        return self.state

    async def confirm(self, store: ContentStore) -> RegistrationState:
        """Commit the registration.

        Repeated confirms once submitting has begun are ignored, so a session
        inserts at most one row and issues at most one increment.
        """
        if self.state in (RegistrationState.SUBMITTING, RegistrationState.SUCCESS):
            return self.state
        self._require("confirm", RegistrationState.FINAL_CONFIRM)

        self.state = RegistrationState.SUBMITTING
        row = {"event_id": self.event_id, **self.form.model_dump()}

        try:
            registration = await run_in_threadpool(
                store.insert, EventRegistration, row
            )
        except ContentStoreError:
            logger.error(
                f"Error submitting registration for event {self.event_id}",
                exc_info=True,
            )
            self.state = RegistrationState.EDITING
            self.error = SUBMIT_ERROR_MESSAGE
            raise

        self.registration_id = registration.id

        try:
            self.counter_updated = await run_in_threadpool(
                store.increment, Event, self.event_id, "current_participants"
            )
        except ContentStoreError as e:
            self.counter_updated = False
            logger.error(f"Error updating participant count: {e}")
        if not self.counter_updated:
            logger.warning(
                f"Registration {registration.id} committed but participant count "
                f"for event {self.event_id} was not incremented"
            )

        self._enter_success()
        return self.state

    def _enter_success(self) -> None:
        self.state = RegistrationState.SUCCESS
        self.error = None

        if self.on_success is not None:
            try:
                self.on_success(self)
            except Exception as e:
                logger.error(f"Registration success callback failed: {e}")

        if self.success_delay is not None:
            loop = asyncio.get_running_loop()
            self._close_handle = loop.call_later(self.success_delay, self._auto_close)

    def _auto_close(self) -> None:
        self._close_handle = None
        self._finish()

    # Closing
    def close(self) -> RegistrationState:
        """Close the modal; refused while submitting or showing success"""
        if self.state in (RegistrationState.SUBMITTING, RegistrationState.SUCCESS):
            raise SessionBusyError(self.state)
        if self.state == RegistrationState.CLOSED:
            return self.state
        self._finish()
        return self.state

    def expire(self) -> None:
        """Drop an idle session; a pending auto-close is cancelled"""
        if self._close_handle is not None:
            self._close_handle.cancel()
            self._close_handle = None
        self._finish()

    def reopen(self) -> RegistrationState:
        self._require("reopen", RegistrationState.CLOSED)
        self.state = RegistrationState.EDITING
        return self.state

    def _finish(self) -> None:
        self.form = RegistrationForm()
        self.error = None
        self.state = RegistrationState.CLOSED
        if self.on_close is not None:
            try:
                self.on_close(self)
            except Exception as e:
                logger.error(f"Registration close callback failed: {e}")

    def snapshot(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "event_id": str(self.event_id),
            "event_title": self.event_title,
            "state": self.state.value,
            "form": self.form.model_dump(),
            "error": self.error,
            "registration_id": (
                str(self.registration_id) if self.registration_id else None
            ),
            "counter_updated": self.counter_updated,
        }


class RegistrationSessionManager:
    """Registry of open registration workflows for this process.

    Sessions expire after ``ttl_seconds`` without activity (sliding window).
    A session that is still submitting is never reclaimed.
    """

    def __init__(
        self,
        success_delay: Optional[float] = DEFAULT_SUCCESS_DELAY_SECONDS,
        ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.success_delay = success_delay
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._sessions: Dict[str, RegistrationWorkflow] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _evict_expired(self) -> int:
        cutoff = self.clock() - self.ttl_seconds
        expired = [
            workflow
            for workflow in self._sessions.values()
            if workflow.last_activity < cutoff
            and workflow.state != RegistrationState.SUBMITTING
        ]
        for workflow in expired:
            workflow.expire()
        if expired:
            logger.info(f"Expired {len(expired)} idle registration session(s)")
        return len(expired)

    def open(
        self,
        event: Optional[Event],
        on_success: Optional[Callable[[RegistrationWorkflow], None]] = None,
    ) -> RegistrationWorkflow:
        """Start a workflow for an event that still accepts registrations"""
        self._evict_expired()
        if event is None or not event.is_active:
            raise EventNotFoundError(getattr(event, "id", None))
        if not is_registration_open(event.max_participants, event.current_participants):
            raise RegistrationClosedError(event.id)

        workflow = RegistrationWorkflow(
            event_id=event.id,
            event_title=event.title,
            on_success=on_success or self._log_success,
            on_close=self._forget,
            success_delay=self.success_delay,
        )
        workflow.last_activity = self.clock()
        self._sessions[workflow.session_id] = workflow
        logger.info(
            f"Opened registration session {workflow.session_id} for event {event.id}"
        )
        return workflow

    def get(self, session_id: str) -> RegistrationWorkflow:
        self._evict_expired()
        workflow = self._sessions.get(session_id)
        if workflow is None:
            raise RegistrationSessionNotFoundError(session_id)
        workflow.last_activity = self.clock()
        return workflow

    def close(self, session_id: str) -> RegistrationWorkflow:
        workflow = self.get(session_id)
        workflow.close()
        return workflow

    def _forget(self, workflow: RegistrationWorkflow) -> None:
        self._sessions.pop(workflow.session_id, None)

    @staticmethod
    def _log_success(workflow: RegistrationWorkflow) -> None:
        logger.info(
            f"Registration {workflow.registration_id} created for event {workflow.event_id}"
        )

"""Tests for the event registration workflow state machine"""

import asyncio
import threading

import pytest

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
from school_portal.services.content_store import SqlContentStore
from school_portal.services.registration_workflow import (
    SUBMIT_ERROR_MESSAGE,
    RegistrationSessionManager,
    RegistrationState,
    RegistrationWorkflow,
)

VALID_FORM = {
    "representative_ci": "0912345678",
    "representative_name": "Juan Pérez",
    "student_ci": "0987654321",
    "student_name": "María Pérez",
    "student_course": "3ro BGU",
}


class FailingInsertStore(SqlContentStore):
    def insert(self, model, row):
        raise ContentStoreError("insert", model.__tablename__)


class FailingIncrementStore(SqlContentStore):
    def increment(self, model, row_id, column):
        raise ContentStoreError("increment", model.__tablename__)


class BlockingInsertStore(SqlContentStore):
    """Store whose insert waits until the test releases it"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.entered = threading.Event()
        self.release = threading.Event()

    def insert(self, model, row):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().insert(model, row)


def _to_final_confirm(workflow: RegistrationWorkflow) -> RegistrationWorkflow:
    workflow.update_fields(**VALID_FORM)
    workflow.submit()
    workflow.acknowledge()
    assert workflow.state == RegistrationState.FINAL_CONFIRM
    return workflow


class TestFormValidation:
    def test_blank_field_never_shows_warning(self, create_event):
        event = create_event()
        workflow = RegistrationWorkflow(event.id, success_delay=None)
        workflow.update_fields(**{**VALID_FORM, "student_name": "   "})

        with pytest.raises(RegistrationValidationError) as exc_info:
            workflow.submit()

        assert exc_info.value.missing_fields == ["student_name"]
        assert workflow.state == RegistrationState.EDITING
        assert workflow.error == "Por favor complete todos los campos"

    def test_unknown_field_rejected(self, create_event):
        workflow = RegistrationWorkflow(create_event().id, success_delay=None)

        with pytest.raises(ValueError):
            workflow.update_fields(email="juan@example.com")

    def test_fields_locked_outside_editing(self, create_event):
        workflow = RegistrationWorkflow(create_event().id, success_delay=None)
        workflow.update_fields(**VALID_FORM)
        workflow.submit()

        with pytest.raises(InvalidTransitionError):
            workflow.update_fields(student_name="Otro")


class TestConfirmationGates:
    def test_cancel_keeps_form_data(self, create_event):
        workflow = RegistrationWorkflow(create_event().id, success_delay=None)
        workflow.update_fields(**VALID_FORM)
        workflow.submit()

        assert workflow.cancel() == RegistrationState.EDITING
        assert workflow.form.model_dump() == VALID_FORM

    def test_cancel_from_final_confirm(self, create_event):
        workflow = _to_final_confirm(RegistrationWorkflow(create_event().id, success_delay=None))

        assert workflow.cancel() == RegistrationState.EDITING

    @pytest.mark.asyncio
    async def test_confirm_requires_final_confirm(self, create_event, store):
        workflow = RegistrationWorkflow(create_event().id, success_delay=None)
        workflow.update_fields(**VALID_FORM)
        workflow.submit()

        with pytest.raises(InvalidTransitionError):
            await workflow.confirm(store)


class TestSubmission:
    @pytest.mark.asyncio
    async def test_full_flow_creates_one_registration(self, store, create_event):
        event = create_event(max_participants=30, current_participants=12)
        successes = []
        workflow = RegistrationWorkflow(
            event.id, on_success=successes.append, success_delay=None
        )
        _to_final_confirm(workflow)

        state = await workflow.confirm(store)

        assert state == RegistrationState.SUCCESS
        registrations = store.select(EventRegistration)
        assert len(registrations) == 1
        assert registrations[0].student_name == "María Pérez"
        assert registrations[0].event_id == event.id
        assert store.get(Event, event.id).current_participants == 13
        assert workflow.counter_updated is True
        # Notified as soon as the commit is done
        assert successes == [workflow]

    @pytest.mark.asyncio
    async def test_registration_keeps_submitted_values(self, store, create_event):
        event = create_event(max_participants=30, current_participants=12)
        form = {
            "representative_ci": "0123456789",
            "representative_name": "Juan Pérez",
            "student_ci": "0987654321",
            "student_name": "María Pérez",
            "student_course": "8vo A",
        }
        workflow = RegistrationWorkflow(event.id, success_delay=None)
        workflow.update_fields(**form)
        workflow.submit()
        workflow.acknowledge()

        await workflow.confirm(store)

        registrations = store.select(EventRegistration)
        assert len(registrations) == 1
        saved = registrations[0]
        assert {name: getattr(saved, name) for name in form} == form
        assert saved.event_id == event.id
        assert store.get(Event, event.id).current_participants == 13

    @pytest.mark.asyncio
    async def test_double_confirm_inserts_once(self, store, create_event):
        event = create_event()
        workflow = _to_final_confirm(RegistrationWorkflow(event.id, success_delay=None))

        await asyncio.gather(workflow.confirm(store), workflow.confirm(store))
        await workflow.confirm(store)

        assert len(store.select(EventRegistration)) == 1
        assert store.get(Event, event.id).current_participants == 1

    @pytest.mark.asyncio
    async def test_insert_failure_returns_to_editing(self, _db_session, feed, create_event):
        event = create_event()
        failing = FailingInsertStore(_db_session, feed)
        workflow = _to_final_confirm(RegistrationWorkflow(event.id, success_delay=None))

        with pytest.raises(ContentStoreError):
            await workflow.confirm(failing)

        assert workflow.state == RegistrationState.EDITING
        assert workflow.error == SUBMIT_ERROR_MESSAGE
        assert workflow.form.model_dump() == VALID_FORM
        assert failing.get(Event, event.id).current_participants == 0

    @pytest.mark.asyncio
    async def test_increment_failure_still_succeeds(self, _db_session, feed, create_event):
        event = create_event(max_participants=2, current_participants=0)
        failing = FailingIncrementStore(_db_session, feed)
        workflow = _to_final_confirm(RegistrationWorkflow(event.id, success_delay=None))

        state = await workflow.confirm(failing)

        assert state == RegistrationState.SUCCESS
        assert workflow.counter_updated is False
        assert len(failing.select(EventRegistration)) == 1
        # Counter lags behind the real registrations
        assert failing.get(Event, event.id).current_participants == 0

    @pytest.mark.asyncio
    async def test_success_auto_closes_after_delay(self, store, create_event):
        closed = []
        workflow = RegistrationWorkflow(
            create_event().id, on_close=closed.append, success_delay=0.01
        )
        _to_final_confirm(workflow)

        await workflow.confirm(store)
        assert workflow.state == RegistrationState.SUCCESS

        await asyncio.sleep(0.05)

        assert workflow.state == RegistrationState.CLOSED
        assert closed == [workflow]
        assert workflow.form.model_dump() == {name: "" for name in VALID_FORM}


class TestClosing:
    def test_close_while_editing_resets_form(self, create_event):
        workflow = RegistrationWorkflow(create_event().id, success_delay=None)
        workflow.update_fields(student_name="María")

        assert workflow.close() == RegistrationState.CLOSED
        assert workflow.form.student_name == ""

        workflow.reopen()
        assert workflow.state == RegistrationState.EDITING
        assert workflow.form.student_name == ""

    @pytest.mark.asyncio
    async def test_close_refused_after_success(self, store, create_event):
        workflow = _to_final_confirm(
            RegistrationWorkflow(create_event().id, success_delay=None)
        )
        await workflow.confirm(store)

        with pytest.raises(SessionBusyError):
            workflow.close()
        assert workflow.state == RegistrationState.SUCCESS

    @pytest.mark.asyncio
    async def test_close_refused_while_submitting(self, _db_session, feed, create_event):
        event = create_event()
        blocking = BlockingInsertStore(_db_session, feed)
        workflow = _to_final_confirm(RegistrationWorkflow(event.id, success_delay=None))

        task = asyncio.create_task(workflow.confirm(blocking))
        try:
            for _ in range(200):
                if blocking.entered.is_set():
                    break
                await asyncio.sleep(0.01)
            assert workflow.state == RegistrationState.SUBMITTING

            with pytest.raises(SessionBusyError):
                workflow.close()
            assert workflow.state == RegistrationState.SUBMITTING
            assert workflow.form.model_dump() == VALID_FORM
        finally:
            blocking.release.set()
            await task

        assert workflow.state == RegistrationState.SUCCESS
        assert len(blocking.select(EventRegistration)) == 1


class TestSessionManager:
    def test_open_full_event_rejected(self, registration_sessions, create_event):
        event = create_event(max_participants=2, current_participants=2)

        with pytest.raises(RegistrationClosedError):
            registration_sessions.open(event)
        assert len(registration_sessions) == 0

    def test_open_unlimited_event(self, registration_sessions, create_event):
        event = create_event(max_participants=0, current_participants=500)

        workflow = registration_sessions.open(event)

        assert registration_sessions.get(workflow.session_id) is workflow
        assert workflow.event_title == event.title

    def test_open_missing_or_inactive_event(self, registration_sessions, create_event):
        with pytest.raises(EventNotFoundError):
            registration_sessions.open(None)
        with pytest.raises(EventNotFoundError):
            registration_sessions.open(create_event(is_active=False))

    def test_closed_session_is_forgotten(self, registration_sessions, create_event):
        workflow = registration_sessions.open(create_event())

        registration_sessions.close(workflow.session_id)

        with pytest.raises(RegistrationSessionNotFoundError):
            registration_sessions.get(workflow.session_id)

    def test_new_session_starts_empty(self, registration_sessions, create_event):
        event = create_event()
        first = registration_sessions.open(event)
        first.update_fields(**VALID_FORM)
        registration_sessions.close(first.session_id)

        second = registration_sessions.open(event)

        assert second.session_id != first.session_id
        assert second.form.missing_fields() == list(VALID_FORM)

    def test_idle_sessions_are_reclaimed(self, create_event):
        now = [0.0]
        sessions = RegistrationSessionManager(
            success_delay=None, ttl_seconds=60, clock=lambda: now[0]
        )
        event = create_event()
        idle = sessions.open(event)
        idle.update_fields(student_name="María")

        now[0] = 61.0
        fresh = sessions.open(event)

        assert len(sessions) == 1
        assert idle.state == RegistrationState.CLOSED
        assert idle.form.student_name == ""
        with pytest.raises(RegistrationSessionNotFoundError):
            sessions.get(idle.session_id)
        assert sessions.get(fresh.session_id) is fresh

    def test_activity_keeps_session_alive(self, create_event):
        now = [0.0]
        sessions = RegistrationSessionManager(
            success_delay=None, ttl_seconds=60, clock=lambda: now[0]
        )
        workflow = sessions.open(create_event())

        now[0] = 45.0
        sessions.get(workflow.session_id)
        now[0] = 90.0

        assert sessions.get(workflow.session_id) is workflow
        assert workflow.state == RegistrationState.EDITING

    def test_submitting_session_is_not_reclaimed(self, create_event):
        now = [0.0]
        sessions = RegistrationSessionManager(
            success_delay=None, ttl_seconds=60, clock=lambda: now[0]
        )
        workflow = sessions.open(create_event())
        workflow.state = RegistrationState.SUBMITTING

        now[0] = 600.0

        assert sessions.get(workflow.session_id) is workflow
        assert workflow.state == RegistrationState.SUBMITTING

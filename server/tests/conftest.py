"""Shared test configuration and fixtures for School Portal tests"""

import logging
import os
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

from tests.config import test_config

# The application reads its configuration at import time
os.environ["DATABASE_URL"] = test_config["database_url"]
os.environ["SESSION_SECRET_KEY"] = test_config["session_secret_key"]
os.environ["AUTH0_DOMAIN"] = test_config["auth0_domain"]
os.environ["AUTH0_CLIENT_ID"] = test_config["auth0_client_id"]
os.environ["AUTH0_CLIENT_SECRET"] = test_config["auth0_client_secret"]
os.environ["EVENT_SWEEP_ENABLED"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from school_portal import models  # noqa: E402,F401
from school_portal.auth.dependencies import require_admin_session  # noqa: E402
from school_portal.main import app  # noqa: E402
from school_portal.models.database import create_db_engine, get_db  # noqa: E402
from school_portal.models.event import Event  # noqa: E402
from school_portal.services.change_feed import ChangeFeed  # noqa: E402
from school_portal.services.contact_service import ContactService  # noqa: E402
from school_portal.services.content_store import SqlContentStore  # noqa: E402
from school_portal.services.editor_service import (  # noqa: E402
    GalleryEditor,
    NewsEditor,
    SectionEditor,
)
from school_portal.services.event_service import (  # noqa: E402
    EventEditor,
    EventLogService,
)
from school_portal.services.registration_workflow import (  # noqa: E402
    RegistrationSessionManager,
)
from school_portal.services.site_content_service import (  # noqa: E402
    SiteContentService,
)
from school_portal.services.store_service import (  # noqa: E402
    get_content_store,
    get_registration_sessions,
    get_session_factory,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture
def db_engine():
    """Fresh in-memory database per test"""
    engine = create_db_engine(test_config["database_url"], poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)

    yield engine

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def _db_session(db_engine):
    """Private DB session for fixtures only.

    Do not use this fixture directly in tests. Prefer the store and service
    fixtures to avoid coupling tests to the session internals.
    """
    session = Session(db_engine)

    yield session

    session.close()


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def store(_db_session, feed):
    """Content store bound to the test database with its own change feed"""
    return SqlContentStore(_db_session, feed)


@pytest.fixture
def site_service(store):
    return SiteContentService(store)


@pytest.fixture
def contact_service(store):
    return ContactService(store)


@pytest.fixture
def event_log_service(store):
    return EventLogService(store)


@pytest.fixture
def section_editor(store):
    return SectionEditor(store)


@pytest.fixture
def news_editor(store):
    return NewsEditor(store)


@pytest.fixture
def event_editor(store):
    return EventEditor(store)


@pytest.fixture
def gallery_editor(store):
    return GalleryEditor(store)


@pytest.fixture
def registration_sessions():
    """Session registry without the auto-close timer"""
    return RegistrationSessionManager(success_delay=None)


@pytest.fixture
def create_event(store):
    """Factory inserting an event through the store"""

    def _create_event(**overrides) -> Event:
        row = {
            "title": f"Casa Abierta {uuid.uuid4().hex[:6]}",
            "description": "Feria de proyectos",
            "location": "Patio central",
            "event_date": datetime.now(timezone.utc) + timedelta(days=7),
            "max_participants": 0,
            "current_participants": 0,
        }
        row.update(overrides)
        return store.insert(Event, row)

    return _create_event


def _override_dependencies(store, registration_sessions, db_engine):
    def get_test_db():
        return store.db

    def get_test_store():
        return store

    def get_test_session_factory():
        return lambda: Session(db_engine)

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_content_store] = get_test_store
    app.dependency_overrides[get_registration_sessions] = lambda: registration_sessions
    app.dependency_overrides[get_session_factory] = get_test_session_factory


@pytest.fixture
def client(store, registration_sessions, db_engine):
    """Anonymous test client using the test database"""
    original_overrides = app.dependency_overrides.copy()
    app.dependency_overrides.clear()
    _override_dependencies(store, registration_sessions, db_engine)

    yield TestClient(app)

    app.dependency_overrides.clear()
    app.dependency_overrides.update(original_overrides)


@pytest.fixture
def admin_client(store, registration_sessions, db_engine):
    """Test client that bypasses the dashboard login"""
    original_overrides = app.dependency_overrides.copy()
    app.dependency_overrides.clear()
    _override_dependencies(store, registration_sessions, db_engine)

    admin_user = {"email": test_config["admin_email"], "name": "Dirección"}
    app.dependency_overrides[require_admin_session] = lambda: admin_user

    yield TestClient(app)

    app.dependency_overrides.clear()
    app.dependency_overrides.update(original_overrides)

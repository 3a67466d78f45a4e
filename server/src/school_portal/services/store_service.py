"""Request-scoped content store and process-wide registration sessions"""

import logging
import threading

from fastapi import Depends
from sqlmodel import Session

from school_portal.config import config
from school_portal.models.database import get_db, get_session
from school_portal.services.change_feed import change_feed
from school_portal.services.content_store import SqlContentStore
from school_portal.services.registration_workflow import RegistrationSessionManager

_sessions_lock = threading.Lock()
_registration_sessions = None

logger = logging.getLogger(__name__)


def get_content_store(db: Session = Depends(get_db)) -> SqlContentStore:
    """Content store bound to the request's database session"""
    return SqlContentStore(db, change_feed)


def get_registration_sessions() -> RegistrationSessionManager:
    """Get the singleton registry of open registration sessions"""
    global _registration_sessions
    if _registration_sessions is None:
        with _sessions_lock:
            if _registration_sessions is None:
                _registration_sessions = RegistrationSessionManager(
                    success_delay=config["registration_success_delay_seconds"],
                    ttl_seconds=config["registration_session_ttl_seconds"],
                )
                logger.info("Initialized registration session manager")

    return _registration_sessions


def get_session_factory():
    """Session factory for work outside the request session (live streams)"""
    return get_session

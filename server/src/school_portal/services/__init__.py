"""Services for the school portal"""

from school_portal.services.capacity import (
    CapacityStatus,
    evaluate_capacity,
    is_registration_open,
)
from school_portal.services.change_feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    LiveQuery,
    change_feed,
    column_equals,
)
from school_portal.services.contact_service import ContactMessageCreate, ContactService
from school_portal.services.content_store import ContentStore, SqlContentStore
from school_portal.services.editor_service import (
    GalleryEditor,
    NewsEditor,
    SectionEditor,
)
from school_portal.services.event_service import EventEditor, EventLogService
from school_portal.services.expiry_sweeper import ExpirySweeper, sweep_expired_events
from school_portal.services.registration_workflow import (
    RegistrationSessionManager,
    RegistrationState,
    RegistrationWorkflow,
)
from school_portal.services.site_content_service import SiteContentService

__all__ = [
    "CapacityStatus",
    "evaluate_capacity",
    "is_registration_open",
    "ChangeEvent",
    "ChangeFeed",
    "ChangeType",
    "LiveQuery",
    "change_feed",
    "column_equals",
    "ContactMessageCreate",
    "ContactService",
    "ContentStore",
    "SqlContentStore",
    "SectionEditor",
    "NewsEditor",
    "GalleryEditor",
    "EventEditor",
    "EventLogService",
    "ExpirySweeper",
    "sweep_expired_events",
    "RegistrationSessionManager",
    "RegistrationState",
    "RegistrationWorkflow",
    "SiteContentService",
]

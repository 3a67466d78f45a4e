#!/usr/bin/env python3
"""School Portal - public site API and content dashboard"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware
from starlette_csrf.middleware import CSRFMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from school_portal.auth.oauth_client import create_oauth
from school_portal.config import config
from school_portal.errors import ContentStoreError
from school_portal.logging_config import get_logger, setup_logging
from school_portal.models.database import get_session
from school_portal.routers import admin, admin_content, admin_logs, live, public
from school_portal.routers.health import health
from school_portal.routers.registration import router as registration_router
from school_portal.services.content_store import SqlContentStore
from school_portal.services.expiry_sweeper import ExpirySweeper
from school_portal.services.site_content_service import SiteContentService

# Configure logging (INFO -> stdout, WARNING/ERROR -> stderr)
setup_logging()
logger = get_logger(__name__)


def _seed_sections():
    with get_session() as session:
        try:
            SiteContentService(SqlContentStore(session)).ensure_default_sections()
        except ContentStoreError as e:
            logger.error(f"Could not seed default sections: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    _seed_sections()

    sweeper = None
    if config["event_sweep_enabled"]:
        sweeper = ExpirySweeper(
            get_session, interval_seconds=config["event_sweep_interval_seconds"]
        )
        await sweeper.start()
    app.state.expiry_sweeper = sweeper

    yield

    if sweeper is not None:
        await sweeper.stop()


# Create FastAPI app
app = FastAPI(
    title="School Portal",
    description="Public school website content, event registrations and the content dashboard API",
    version="1.0.0",
    lifespan=lifespan,
)

# Trust proxy headers so request.url.scheme reflects the original HTTPS protocol
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

# Session middleware backs the dashboard login
session_secret_key = config["session_secret_key"]
if not session_secret_key or len(session_secret_key) < 32:
    raise RuntimeError(
        "SESSION_SECRET_KEY must be set to a secure random string (>=32 characters)."
    )

app.add_middleware(
    SessionMiddleware,
    secret_key=session_secret_key,
    max_age=1800,  # 30 minutes
    https_only=True,
    same_site="lax",  # Allow cookies to be sent on redirects from Auth0
)

# CSRF protection only applies to requests carrying the session cookie
app.add_middleware(
    CSRFMiddleware,
    secret=session_secret_key,
    sensitive_cookies={"session"},
    cookie_secure=True,
    cookie_samesite="lax",
    header_name="X-CSRFToken",
)

# Make oauth available to routers
app.state.oauth = create_oauth()

# Include routers
app.include_router(health)
app.include_router(public.router)
app.include_router(registration_router)
app.include_router(live.router)
app.include_router(admin.router)
app.include_router(admin_content.router)
app.include_router(admin_logs.router)


if __name__ == "__main__":
    port = config["port"]
    logger.info(f"Starting School Portal on 0.0.0.0:{port}")
    logger.info("Health check available at /health")

    try:
        uvicorn.run(
            app, host="0.0.0.0", port=port, log_level=config["log_level"].lower()
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise

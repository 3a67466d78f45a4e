"""Dashboard login flow and landing summary"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from school_portal.auth.dependencies import require_admin_session, safe_return_path
from school_portal.auth.oauth_client import get_auth0_client
from school_portal.config import config
from school_portal.errors import ContentStoreError
from school_portal.logging_config import get_logger
from school_portal.models import (
    ContactMessage,
    Event,
    GalleryImage,
    NewsItem,
    SiteSection,
)
from school_portal.services.content_store import SqlContentStore, table_name
from school_portal.services.store_service import get_content_store

router = APIRouter(prefix="/admin", tags=["Admin"])

logger = get_logger(__name__)

SUMMARY_TABLES = (SiteSection, NewsItem, Event, GalleryImage, ContactMessage)


@router.get("/login", include_in_schema=False)
async def admin_login(request: Request, return_to: str | None = None):
    """Start the Auth0 login and come back to ``return_to`` afterwards"""
    request.session["return_to"] = safe_return_path(return_to)

    oauth = get_auth0_client(request)
    redirect_uri = str(request.url_for("admin_callback"))
    return await oauth.auth0.authorize_redirect(
        request, redirect_uri, scope="openid profile email"
    )


@router.get("/callback", name="admin_callback", include_in_schema=False)
async def admin_callback(request: Request):
    oauth = get_auth0_client(request)
    token = await oauth.auth0.authorize_access_token(request)

    request.session["user"] = token.get("userinfo")
    request.session["id_token"] = token.get("id_token")

    user = request.session["user"] or {}
    logger.info(f"Dashboard login for {user.get('email')}")

    return_to = safe_return_path(request.session.pop("return_to", None))
    return RedirectResponse(url=return_to)


@router.get("/logout", include_in_schema=False)
async def admin_logout(request: Request):
    request.session.clear()
    logout_url = (
        f'https://{config["auth0_domain"]}/v2/logout?'
        f'client_id={config["auth0_client_id"]}&'
        f"returnTo={request.base_url}"
    )
    return RedirectResponse(url=logout_url)


@router.get("")
async def admin_summary(
    user: dict = Depends(require_admin_session),
    store: SqlContentStore = Depends(get_content_store),
):
    """Signed-in user and row counts for each dashboard tab"""
    counts = {}
    for model in SUMMARY_TABLES:
        try:
            counts[table_name(model)] = len(store.select(model))
        except ContentStoreError as e:
            logger.error(f"Error counting {table_name(model)}: {e}")
            counts[table_name(model)] = None

    return {
        "user": {"email": user.get("email"), "name": user.get("name")},
        "counts": counts,
    }

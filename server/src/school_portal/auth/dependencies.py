"""Authentication dependencies for the admin dashboard"""

from urllib.parse import quote, urlparse

from fastapi import HTTPException, Request, status

from school_portal.config import config
from school_portal.logging_config import get_logger

logger = get_logger(__name__)

LOGIN_PATH = "/admin/login"


def safe_return_path(raw_value: str | None, default: str = "/admin") -> str:
    """
    Ensure the post-login redirect stays on this origin.

    Reject absolute URLs, protocol-relative URLs, and empty values.
    """
    if not raw_value:
        return default

    # Disallow protocol-relative or malformed values (e.g. begin with //)
    if raw_value.startswith("//"):
        return default

    parsed = urlparse(raw_value)

    # Reject any value that includes scheme or host components
    if parsed.scheme or parsed.netloc:
        return default

    if not raw_value.startswith("/"):
        return default

    return raw_value


def is_admin_email(email: str | None) -> bool:
    """An empty allow-list admits every authenticated user"""
    allowed = config.get("admin_emails") or []
    if not allowed:
        return True
    return bool(email) and email.lower() in allowed


def require_admin_session(request: Request) -> dict:
    """
    Require an authenticated dashboard session.

    Args:
        request: FastAPI Request object with session

    Returns:
        dict: User info from session (userinfo from Auth0)

    Raises:
        HTTPException: 307 redirect to /admin/login if not authenticated,
            403 if the user is not on the admin allow-list
    """
    user = request.session.get("user")
    if not user:
        raise HTTPException(
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
            headers={"Location": f"{LOGIN_PATH}?return_to={quote(request.url.path)}"},
        )

    if not is_admin_email(user.get("email")):
        logger.warning(f"Rejected dashboard access for {user.get('email')}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to the dashboard",
        )
    return user

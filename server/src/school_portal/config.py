"""Configuration loader for the school portal with environment-specific support"""

import os
from pathlib import Path

from dotenv import load_dotenv

server_dir = Path(__file__).parent.parent.parent
env_path = server_dir / ".env"

# Load .env file if it exists. For local development only.
if env_path.exists():
    load_dotenv(env_path)


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Configuration dictionary - set once at initialization
config = {
    "database_url": os.getenv("DATABASE_URL"),
    "port": int(os.getenv("PORT", "8080")),
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
    "environment": os.getenv("ENVIRONMENT", "development"),
    "session_secret_key": os.getenv("SESSION_SECRET_KEY"),
    "auth0_domain": os.getenv("AUTH0_DOMAIN"),
    "auth0_client_id": os.getenv("AUTH0_CLIENT_ID"),
    "auth0_client_secret": os.getenv("AUTH0_CLIENT_SECRET"),
    # Comma separated list of emails allowed into the dashboard. Empty = any login.
    "admin_emails": [
        email.strip().lower()
        for email in os.getenv("ADMIN_EMAILS", "").split(",")
        if email.strip()
    ],
    "event_sweep_enabled": _as_bool(os.getenv("EVENT_SWEEP_ENABLED"), True),
    "event_sweep_interval_seconds": int(
        os.getenv("EVENT_SWEEP_INTERVAL_SECONDS", "3600")
    ),
    "registration_success_delay_seconds": float(
        os.getenv("REGISTRATION_SUCCESS_DELAY_SECONDS", "3")
    ),
    "registration_session_ttl_seconds": int(
        os.getenv("REGISTRATION_SESSION_TTL_SECONDS", "1800")
    ),
}

"""Utilities for retrieving the Auth0 OAuth client registered on the app"""

from authlib.integrations.starlette_client import OAuth
from fastapi import Request

from school_portal.config import config


def create_oauth() -> OAuth:
    """Register the Auth0 client used by the dashboard login"""
    oauth = OAuth()
    oauth.register(
        "auth0",
        client_id=config["auth0_client_id"],
        client_secret=config["auth0_client_secret"],
        server_metadata_url=f'https://{config["auth0_domain"]}/.well-known/openid-configuration',
        client_kwargs={"scope": "openid profile email"},
    )
    return oauth


def get_auth0_client(request: Request) -> OAuth:
    """
    Fetch the Auth0 OAuth client stored on the FastAPI application state.

    Raises:
        RuntimeError: if the OAuth client has not been registered.
    """
    oauth = getattr(request.app.state, "oauth", None)
    if oauth is None:
        raise RuntimeError("Auth0 OAuth client is not configured on the application.")
    return oauth

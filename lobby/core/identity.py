"""Anonymous session identity.

Every browser is identified by an opaque token kept in a cookie. The server
stores nothing about a token beyond the room slots that reference it, and it
never validates one: any value a client presents is taken as its identity.
That makes a guessed token as good as the real one, which is acceptable for
casual games but is a real limitation.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Request, Response

from lobby.core.config import Settings

logger = logging.getLogger(__name__)


def issue_token(bits: int = 128) -> str:
    """
    Mint a new session token.

    Args:
        bits: Size of the random space the token is drawn from

    Returns:
        Random non-negative integer rendered as a decimal string
    """
    return str(secrets.randbits(bits))


def mask_token(token: Optional[str]) -> str:
    """Shorten a token for log output."""
    if not token:
        return "<none>"
    return f"{token[:4]}..." if len(token) > 4 else "****"


def read_session_token(request: Request, cookie_name: str) -> Optional[str]:
    """Return the session cookie value, or None when the cookie is not set."""
    value = request.cookies.get(cookie_name)
    if not value:
        return None
    return value


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the session cookie with a fixed time-to-live, scoped to the whole site."""
    ttl = settings.SESSION_TTL_SECONDS
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=ttl,
        expires=datetime.now(timezone.utc) + timedelta(seconds=ttl),
        path="/",
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


def resolve_or_issue(request: Request, response: Response, settings: Settings) -> str:
    """
    Return the caller's session token, issuing one if the cookie is missing.

    A missing cookie is not an error: a fresh token is minted and set on
    the response.

    Args:
        request: Incoming request
        response: Response the new cookie is attached to
        settings: Cookie name, lifetime and token size

    Returns:
        The caller's session token
    """
    token = read_session_token(request, settings.SESSION_COOKIE_NAME)
    if token is not None:
        return token

    token = issue_token(settings.SESSION_TOKEN_BITS)
    set_session_cookie(response, token, settings)
    logger.debug(f"Issued new session token {mask_token(token)}")
    return token

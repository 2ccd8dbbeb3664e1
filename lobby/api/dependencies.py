"""FastAPI dependency injection functions."""
from fastapi import Request, Response

from lobby.core.identity import resolve_or_issue
from lobby.services.lobby import LobbyContext


def get_lobby(request: Request) -> LobbyContext:
    """Return the LobbyContext the application was created with."""
    return request.app.state.lobby


def get_session_token(request: Request, response: Response) -> str:
    """
    Dependency resolving the caller's anonymous session token.

    A request without the session cookie is given a new token, set on the
    response as a cookie.

    Returns:
        The caller's session token
    """
    lobby: LobbyContext = request.app.state.lobby
    return resolve_or_issue(request, response, lobby.settings)

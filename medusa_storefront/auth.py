"""Session-cookie authentication middleware."""

import logging
from typing import Protocol

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

from .sessions import Session, SessionValidation

logger = logging.getLogger(__name__)

DEFAULT_COOKIE_NAME = "auth-session"


class SessionValidator(Protocol):
    """External session mechanism the middleware delegates to."""

    async def validate_session_token(self, token: str) -> SessionValidation: ...

    async def invalidate_session(self, session_id: str) -> None: ...


def set_session_token_cookie(
    response: Response,
    token: str,
    session: Session,
    cookie_name: str = DEFAULT_COOKIE_NAME,
) -> None:
    response.set_cookie(
        cookie_name,
        token,
        expires=session.expires_at,
        path="/",
        httponly=True,
        samesite="lax",
    )


def delete_session_token_cookie(response: Response, cookie_name: str = DEFAULT_COOKIE_NAME) -> None:
    response.delete_cookie(cookie_name, path="/")


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """
    Resolves the session cookie into request.state.user/session.

    A valid session refreshes the cookie with the session's expiry; an
    invalid one deletes the cookie. Unhandled errors become a plain 500.
    """

    def __init__(
        self,
        app: ASGIApp,
        validator: SessionValidator,
        cookie_name: str = DEFAULT_COOKIE_NAME,
    ) -> None:
        super().__init__(app)
        self.validator = validator
        self.cookie_name = cookie_name

    async def _handle_auth(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        token = request.cookies.get(self.cookie_name)

        if not token:
            request.state.user = None
            request.state.session = None
            return await call_next(request)

        result = await self.validator.validate_session_token(token)
        request.state.user = result.user
        request.state.session = result.session

        response = await call_next(request)
        # handlers that ended the session already cleared the cookie
        if getattr(request.state, "session_ended", False):
            return response
        if result.session is not None:
            set_session_token_cookie(response, token, result.session, self.cookie_name)
        else:
            delete_session_token_cookie(response, self.cookie_name)
        return response

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        logger.debug(f"Handling request: {request.url.path}")
        try:
            response = await self._handle_auth(request, call_next)
        except Exception as e:
            logger.error(f"Server error: {e}", exc_info=True)
            return PlainTextResponse("Internal Server Error", status_code=500)
        logger.debug(f"Response status: {response.status_code}")
        return response

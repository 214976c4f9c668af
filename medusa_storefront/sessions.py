"""Session tokens for storefront users."""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

SESSION_LIFETIME = timedelta(days=30)
RENEW_THRESHOLD = timedelta(days=15)


class User(BaseModel):
    """A signed-in storefront user."""

    id: str
    username: Optional[str] = None


class Session(BaseModel):
    """Server-side session; its ID is the SHA-256 of the cookie token."""

    id: str
    user_id: str
    expires_at: datetime


class SessionValidation(BaseModel):
    """Outcome of validating a session token; both fields None when invalid."""

    session: Optional[Session] = None
    user: Optional[User] = None


def generate_session_token() -> str:
    return secrets.token_urlsafe(20)


def session_id_from_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySessionStore:
    """
    Process-local session store.

    Sessions last SESSION_LIFETIME and are extended when validated with less
    than RENEW_THRESHOLD remaining.
    """

    def __init__(self) -> None:
        self.sessions: dict[str, Session] = {}
        self.users: dict[str, User] = {}

    async def create_session(self, user: User, token: Optional[str] = None) -> tuple[str, Session]:
        """
        Start a session for user.

        Returns:
            The token to put in the cookie, and the stored session
        """
        token = token or generate_session_token()
        session = Session(
            id=session_id_from_token(token),
            user_id=user.id,
            expires_at=_now() + SESSION_LIFETIME,
        )
        self.users[user.id] = user
        self.sessions[session.id] = session
        logger.info(f"Created session for user {user.id}")
        return token, session

    async def validate_session_token(self, token: str) -> SessionValidation:
        session_id = session_id_from_token(token)
        session = self.sessions.get(session_id)
        if session is None:
            return SessionValidation()

        user = self.users.get(session.user_id)
        now = _now()
        if user is None or now >= session.expires_at:
            self.sessions.pop(session_id, None)
            return SessionValidation()

        if now >= session.expires_at - RENEW_THRESHOLD:
            session = session.model_copy(update={"expires_at": now + SESSION_LIFETIME})
            self.sessions[session_id] = session
            logger.debug(f"Renewed session for user {user.id}")

        return SessionValidation(session=session, user=user)

    async def invalidate_session(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)

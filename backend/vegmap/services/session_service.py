"""
Anonymous session token and caller identity resolution.

A session is a browser-scoped opaque id kept in a long-lived cookie; it
correlates activity whether or not the caller is signed in. The user id is
resolved from the identity provider's bearer token and is None for anonymous
callers.
"""
from dataclasses import dataclass
from typing import Optional
import os
import uuid
import logging

from fastapi import Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from vegmap.middleware.auth import decode_subject, find_user_by_subject

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session_id")
SESSION_COOKIE_MAX_AGE = int(os.getenv("SESSION_COOKIE_MAX_AGE", str(60 * 60 * 24 * 30)))
SESSION_COOKIE_SECURE = os.getenv("ENVIRONMENT", "development") == "production"


@dataclass(frozen=True)
class TrackingContext:
    session_id: str
    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


def get_or_create_session_id(request: Request, response: Response) -> str:
    """Read the session cookie, minting and setting a new one on first contact"""
    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    if session_id:
        return session_id

    session_id = str(uuid.uuid4())
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session_id,
        max_age=SESSION_COOKIE_MAX_AGE,
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return session_id


async def resolve_user_id(db: AsyncSession, token: Optional[str]) -> Optional[str]:
    """Map the caller's bearer token to an internal user id; None means anonymous"""
    subject = decode_subject(token)
    if subject is None:
        return None

    try:
        user = await find_user_by_subject(db, subject)
    except Exception as e:
        logger.error(f"Error resolving user for subject {subject}: {e}", exc_info=True)
        return None

    if user is None:
        # the provider knows the user but they have not been synced yet
        logger.info(f"No local user for subject {subject}; treating caller as anonymous")
        return None
    return user.id

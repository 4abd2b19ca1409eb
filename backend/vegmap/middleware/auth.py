from fastapi import HTTPException, status
from jose import JWTError, jwt
from vegmap.models.user import User
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
from dotenv import load_dotenv, find_dotenv
import os
import logging

load_dotenv(find_dotenv(usecwd=True), override=False)

logger = logging.getLogger(__name__)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")


def decode_subject(token: Optional[str]) -> Optional[str]:
    """Return the identity provider's subject claim, or None if the token is unusable"""
    if not token:
        return None
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected bearer token: {e}")
        return None
    return payload.get("sub")


async def find_user_by_subject(db: AsyncSession, subject: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.auth_provider_id == subject))
    return result.scalar_one_or_none()


async def verify_token(token: Optional[str], db: AsyncSession) -> User:
    """Validate the bearer token and load the matching user"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    subject = decode_subject(token)
    if subject is None:
        raise credentials_exception

    user = await find_user_by_subject(db, subject)
    if user is None:
        raise credentials_exception

    return user

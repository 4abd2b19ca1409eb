"""
Dependency functions: caller identity, role checks and tracking context
"""
from typing import Optional
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from vegmap.database.connection import get_db
from vegmap.middleware.auth import verify_token
from vegmap.models.user import User
from vegmap.services.record_store import RecordStore, SqlRecordStore
from vegmap.services.session_service import TrackingContext, get_or_create_session_id, resolve_user_id

security = HTTPBearer(auto_error=False)


def bearer_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_current_user(
    token: Optional[str] = Depends(bearer_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    return await verify_token(token, db)


async def get_optional_user_id(
    token: Optional[str] = Depends(bearer_token),
    db: AsyncSession = Depends(get_db),
) -> Optional[str]:
    """Internal user id of the caller, None when anonymous"""
    return await resolve_user_id(db, token)


def require_admin():
    """Dependency that only lets administrators through"""
    async def admin_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != "admin":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Administrator role required"
            )
        return current_user
    return admin_checker


def get_record_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    return SqlRecordStore(db)


async def get_tracking_context(
    request: Request,
    response: Response,
    user_id: Optional[str] = Depends(get_optional_user_id),
) -> TrackingContext:
    session_id = get_or_create_session_id(request, response)
    return TrackingContext(session_id=session_id, user_id=user_id)

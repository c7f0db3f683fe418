import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.config import Settings, get_settings
from vidtube.db.session import get_db
from vidtube.db.repositories.user_repo import get_user_by_id
from vidtube.services.auth_service import decode_access_token, parse_subject
from vidtube.services.media_service import MediaStorage
from vidtube.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"


def _extract_access_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token
    if credentials and credentials.credentials:
        return credentials.credentials
    return None


async def _resolve_user(token: str, db: AsyncSession, settings: Settings) -> User | None:
    payload = decode_access_token(token, settings)
    if not payload:
        return None
    uid = parse_subject(payload)
    if uid is None:
        return None
    return await get_user_by_id(db, uid)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    token = _extract_access_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(token, settings)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    uid = parse_subject(payload)
    if uid is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    user = await get_user_by_id(db, uid)
    if not user:
        logger.warning(f"Access token for missing user {uid}")
        raise HTTPException(status_code=401, detail="User not found")
    return user


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User | None:
    """Like get_current_user, but anonymous callers get None instead of 401."""
    token = _extract_access_token(request, credentials)
    if not token:
        return None
    return await _resolve_user(token, db, settings)


@lru_cache(maxsize=1)
def _media_storage() -> MediaStorage:
    return MediaStorage(get_settings())


def get_media_storage() -> MediaStorage:
    return _media_storage()

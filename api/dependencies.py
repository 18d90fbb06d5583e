# api/dependencies.py
import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from models.database import STORE_ERRORS, get_session
from models.profile import Profile
from services.auth import decode_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

UNAUTHORIZED = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Unauthorized",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> Profile:
    """
    Resolve the acting profile from the bearer token, or fail with 401.
    A store outage during the lookup is a 503: the caller cannot be
    identified, which is not the same as being refused.
    """
    if credentials is None:
        raise UNAUTHORIZED

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise UNAUTHORIZED

    try:
        user_id = UUID(payload.sub)
    except ValueError:
        raise UNAUTHORIZED

    try:
        profile = await session.get(Profile, user_id)
    except STORE_ERRORS:
        logger.exception(f"Profile lookup for {user_id} failed")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service unavailable")
    if profile is None:
        raise UNAUTHORIZED
    return profile

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.core.exceptions import Unauthenticated
from cookbook.database import get_session_factory
from cookbook.schemas.user import Identity
from cookbook.services.auth import AuthService

# Username is the numeric user id
security = HTTPBasic(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPBasicCredentials] = Depends(security),
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> Identity:
    """Authenticate the caller before any service is touched."""
    if credentials is None:
        raise Unauthenticated("Missing credentials")
    try:
        user_id = int(credentials.username)
    except ValueError:
        raise Unauthenticated("User id must be numeric")
    return await AuthService(sessions).authenticate(user_id, credentials.password)

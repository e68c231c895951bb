from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.database import get_session_factory
from cookbook.core.dependencies import get_current_identity
from cookbook.schemas.user import UserCreate, UserRecord, Identity
from cookbook.services.auth import AuthService
from cookbook.services.user import UserService

router = APIRouter()


@router.post("/register", response_model=UserRecord, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Register a new user."""
    user_id = await AuthService(sessions).register(user_data)
    return await UserService(sessions).get(user_id)


@router.get("/me", response_model=Identity)
async def get_me(identity: Identity = Depends(get_current_identity)):
    """Resolve the presented credentials."""
    return identity

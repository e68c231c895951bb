from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.database import get_session_factory
from cookbook.core.dependencies import get_current_identity
from cookbook.schemas.user import UserRecord, UserUpdate, Identity, FollowResult, FollowRatio
from cookbook.services.follow import FollowService
from cookbook.services.user import UserService

router = APIRouter()


@router.get("/{user_id}", response_model=UserRecord)
async def get_user(
    user_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Get a user with follower and following ids."""
    return await UserService(sessions).get(user_id)


@router.patch("/me", response_model=UserRecord)
async def update_profile(
    data: UserUpdate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Update current user's gender and age."""
    return await UserService(sessions).update_profile(identity, data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    user_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Delete an account (self or administrator)."""
    await UserService(sessions).delete_account(identity, user_id)


@router.post("/{user_id}/follow", response_model=FollowResult)
async def toggle_follow(
    user_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Follow the user, or unfollow if already following."""
    return await FollowService(sessions).toggle(identity, user_id)


@router.get("/stats/follow-ratio", response_model=Optional[FollowRatio])
async def highest_follow_ratio(
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """User with the highest follower/following ratio, or null if nobody follows anyone."""
    return await FollowService(sessions).highest_follow_ratio()

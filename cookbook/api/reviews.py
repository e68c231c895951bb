from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.database import get_session_factory
from cookbook.core.dependencies import get_current_identity
from cookbook.schemas.review import ReviewRecord, LikeCount
from cookbook.schemas.user import Identity
from cookbook.services.review import ReviewService

router = APIRouter()


@router.get("/{review_id}", response_model=ReviewRecord)
async def get_review(
    review_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Get a review with the ids of users who liked it."""
    return await ReviewService(sessions).get(review_id)


@router.post("/{review_id}/like", response_model=LikeCount)
async def like_review(
    review_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Like a review."""
    likes = await ReviewService(sessions).like(identity, review_id)
    return LikeCount(review_id=review_id, likes=likes)


@router.delete("/{review_id}/like", response_model=LikeCount)
async def unlike_review(
    review_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Remove your like from a review."""
    likes = await ReviewService(sessions).unlike(identity, review_id)
    return LikeCount(review_id=review_id, likes=likes)

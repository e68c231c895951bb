from datetime import datetime, timezone
from typing import Callable, List, Optional
from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.core.exceptions import Forbidden, InvalidArgument, NotFound
from cookbook.core.logging import get_logger
from cookbook.database import transaction, insert_ignoring_conflicts
from cookbook.models import Recipe, Review, ReviewLike
from cookbook.schemas.review import ReviewRecord
from cookbook.schemas.user import Identity
from cookbook.services.ownership import require_owner
from cookbook.services.rating import RatingAggregator

logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _check_rating(rating: int) -> None:
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidArgument(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")


class ReviewService:
    """Review lifecycle and review likes.

    Every add/edit/delete commits its own transaction first and then asks the
    RatingAggregator to recompute the recipe, so the recompute always sees
    the committed review set.
    """

    def __init__(
        self,
        sessions: async_sessionmaker[AsyncSession],
        aggregator: Optional[RatingAggregator] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.sessions = sessions
        self.aggregator = aggregator or RatingAggregator(sessions)
        self.clock = clock

    async def add(self, author: Identity, recipe_id: int, rating: int, content: str) -> int:
        """Create a review and return its id."""
        _check_rating(rating)

        async with transaction(self.sessions) as session:
            result = await session.execute(select(Recipe.id).where(Recipe.id == recipe_id))
            if result.scalar_one_or_none() is None:
                raise NotFound("Recipe not found", resource="recipe", resource_id=recipe_id)

            review = Review(
                recipe_id=recipe_id,
                author_id=author.user_id,
                rating=rating,
                content=content or "",
                created_at=self.clock(),
            )
            session.add(review)
            await session.flush()
            review_id = review.id

        logger.info("User {} reviewed recipe {} (review {})", author.user_id, recipe_id, review_id)
        await self.aggregator.recompute(recipe_id)
        return review_id

    async def edit(
        self, author: Identity, recipe_id: int, review_id: int, rating: int, content: str
    ) -> None:
        """Change rating and text of the caller's own review."""
        _check_rating(rating)

        async with transaction(self.sessions) as session:
            review = await self._load(session, review_id)
            if review.author_id != author.user_id:
                raise Forbidden("Only the author can edit a review", resource="review", resource_id=review_id)
            if review.recipe_id != recipe_id:
                raise Forbidden("Review does not belong to this recipe", resource="review", resource_id=review_id)

            review.rating = rating
            review.content = content or ""
            review.updated_at = self.clock()

        logger.info("User {} edited review {}", author.user_id, review_id)
        await self.aggregator.recompute(recipe_id)

    async def delete(self, author: Identity, recipe_id: int, review_id: int) -> None:
        """Delete a review together with its likes."""
        async with transaction(self.sessions) as session:
            review = await self._load(session, review_id)
            require_owner(author, review.author_id, resource="review", resource_id=review_id)
            if review.recipe_id != recipe_id:
                raise Forbidden("Review does not belong to this recipe", resource="review", resource_id=review_id)

            await session.execute(delete(ReviewLike).where(ReviewLike.review_id == review_id))
            await session.execute(delete(Review).where(Review.id == review_id))

        logger.info("User {} deleted review {} on recipe {}", author.user_id, review_id, recipe_id)
        await self.aggregator.recompute(recipe_id)

    async def like(self, user: Identity, review_id: int) -> int:
        """Like a review; liking again is a no-op. Returns the like count."""
        async with transaction(self.sessions) as session:
            result = await session.execute(select(Review.author_id).where(Review.id == review_id))
            author_id = result.scalar_one_or_none()
            if author_id is None:
                raise NotFound("Review not found", resource="review", resource_id=review_id)
            if author_id == user.user_id:
                raise Forbidden("Cannot like your own review", resource="review", resource_id=review_id)

            await session.execute(
                insert_ignoring_conflicts(session, ReviewLike, review_id=review_id, user_id=user.user_id)
            )
            return await count_likes(session, review_id)

    async def unlike(self, user: Identity, review_id: int) -> int:
        """Remove a like if present. Returns the like count."""
        async with transaction(self.sessions) as session:
            await session.execute(
                delete(ReviewLike).where(
                    ReviewLike.review_id == review_id,
                    ReviewLike.user_id == user.user_id,
                )
            )
            return await count_likes(session, review_id)

    async def get(self, review_id: int) -> ReviewRecord:
        async with transaction(self.sessions) as session:
            review = await self._load(session, review_id)
            likes = await like_user_ids(session, review_id)

        record = ReviewRecord.model_validate(review)
        record.likes = likes
        return record

    async def get_like_user_ids(self, review_id: int) -> List[int]:
        async with transaction(self.sessions) as session:
            return await like_user_ids(session, review_id)

    async def _load(self, session: AsyncSession, review_id: int) -> Review:
        result = await session.execute(select(Review).where(Review.id == review_id))
        review = result.scalar_one_or_none()
        if not review:
            raise NotFound("Review not found", resource="review", resource_id=review_id)
        return review


async def count_likes(session: AsyncSession, review_id: int) -> int:
    result = await session.execute(
        select(func.count(ReviewLike.id)).where(ReviewLike.review_id == review_id)
    )
    return result.scalar_one()


async def like_user_ids(session: AsyncSession, review_id: int) -> List[int]:
    result = await session.execute(
        select(ReviewLike.user_id)
        .where(ReviewLike.review_id == review_id)
        .order_by(ReviewLike.user_id)
    )
    return list(result.scalars().all())

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.core.exceptions import NotFound
from cookbook.core.logging import get_logger
from cookbook.database import transaction
from cookbook.models import Recipe, Review
from cookbook.schemas.recipe import RatingSummary

logger = get_logger(__name__)

_CENTS = Decimal("0.01")


def round_rating(total: int, count: int) -> Optional[float]:
    """Average of ``count`` ratings summing to ``total``, 2 decimals, half-up.

    None when there are no ratings.
    """
    if not count:
        return None
    average = Decimal(total) / Decimal(count)
    return float(average.quantize(_CENTS, rounding=ROUND_HALF_UP))


class RatingAggregator:
    """Keeps Recipe.aggregated_rating and Recipe.review_count in line with reviews.

    Always a full recompute from the review rows, never an incremental
    adjustment. Review mutations are rare compared with reads, so one
    aggregate query per mutation is acceptable.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self.sessions = sessions

    async def recompute(self, recipe_id: int) -> RatingSummary:
        async with transaction(self.sessions) as session:
            summary = await recompute_rating(session, recipe_id)

        logger.debug(
            "Recipe {} rating recomputed: {} over {} review(s)",
            recipe_id, summary.aggregated_rating, summary.review_count,
        )
        return summary


async def recompute_rating(session: AsyncSession, recipe_id: int) -> RatingSummary:
    """Recompute and store one recipe's aggregate fields within ``session``."""
    result = await session.execute(
        select(func.count(Review.id), func.coalesce(func.sum(Review.rating), 0))
        .where(Review.recipe_id == recipe_id)
    )
    count, total = result.one()
    rating = round_rating(int(total), int(count))

    result = await session.execute(
        update(Recipe)
        .where(Recipe.id == recipe_id)
        .values(aggregated_rating=rating, review_count=count)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound("Recipe not found", resource="recipe", resource_id=recipe_id)

    return RatingSummary(recipe_id=recipe_id, aggregated_rating=rating, review_count=count)

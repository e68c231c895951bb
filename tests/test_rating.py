import pytest
from sqlalchemy import update

from cookbook.core.exceptions import NotFound
from cookbook.models import Recipe
from cookbook.services.rating import round_rating


class TestRoundRating:
    """Average rounding."""

    @pytest.mark.parametrize("total,count,expected", [
        (0, 0, None),
        (6, 2, 3.0),
        (4, 1, 4.0),
        (10, 3, 3.33),
        (11, 3, 3.67),
        (5, 3, 1.67),
        # 3.125 / 3.375 sit exactly on the half and round up
        (25, 8, 3.13),
        (27, 8, 3.38),
    ])
    def test_round_half_up(self, total, count, expected):
        assert round_rating(total, count) == expected


class TestRatingAggregator:
    """Full recompute from review rows."""

    @pytest.mark.asyncio
    async def test_no_reviews_means_no_rating(self, aggregator, recipe_id):
        summary = await aggregator.recompute(recipe_id)

        assert summary.aggregated_rating is None
        assert summary.review_count == 0

    @pytest.mark.asyncio
    async def test_recompute_repairs_drift(self, aggregator, review_service, recipe_service, sessions, make_user, recipe_id):
        """Test a recompute overwrites whatever the aggregate fields hold."""
        for i, rating in enumerate([5, 4, 4]):
            author = await make_user(f"critic{i}")
            await review_service.add(author, recipe_id, rating, "")

        async with sessions.begin() as session:
            await session.execute(
                update(Recipe).where(Recipe.id == recipe_id).values(aggregated_rating=1.0, review_count=99)
            )

        summary = await aggregator.recompute(recipe_id)

        assert summary.aggregated_rating == 4.33
        assert summary.review_count == 3
        recipe = await recipe_service.get(recipe_id)
        assert (recipe.aggregated_rating, recipe.review_count) == (4.33, 3)

    @pytest.mark.asyncio
    async def test_recompute_is_repeatable(self, aggregator, review_service, recipe_id, bob):
        await review_service.add(bob, recipe_id, 3, "")

        first = await aggregator.recompute(recipe_id)
        second = await aggregator.recompute(recipe_id)

        assert first == second

    @pytest.mark.asyncio
    async def test_recompute_only_counts_own_reviews(self, aggregator, review_service, recipe_service, recipe_id, alice, bob):
        from cookbook.schemas.recipe import RecipeCreate

        other = await recipe_service.create(alice, RecipeCreate(name="Toast"))
        await review_service.add(bob, recipe_id, 5, "")
        await review_service.add(bob, other, 1, "")

        assert (await aggregator.recompute(recipe_id)).aggregated_rating == 5.0
        assert (await aggregator.recompute(other)).aggregated_rating == 1.0

    @pytest.mark.asyncio
    async def test_missing_recipe(self, aggregator):
        with pytest.raises(NotFound):
            await aggregator.recompute(5150)

from typing import Optional
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.core.exceptions import InvalidArgument, NotFound
from cookbook.core.logging import get_logger
from cookbook.database import transaction
from cookbook.models import Recipe, Nutrition, RecipeIngredient, Review, ReviewLike
from cookbook.schemas.recipe import RecipeCreate, RecipeRecord, NutritionData, parse_duration
from cookbook.schemas.user import Identity
from cookbook.services.ownership import require_owner

logger = get_logger(__name__)


def _check_duration(field: str, value: Optional[str]) -> None:
    try:
        parse_duration(value)
    except ValueError:
        raise InvalidArgument(f"{field} must be an ISO-8601 duration such as PT1H30M")


class RecipeService:
    """Recipe creation, lookup, deletion and cook/prep time updates."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self.sessions = sessions

    async def create(self, owner: Identity, data: RecipeCreate) -> int:
        """Create a recipe with its nutrition and ingredients atomically."""
        _check_duration("cook_time", data.cook_time)
        _check_duration("prep_time", data.prep_time)

        async with transaction(self.sessions) as session:
            recipe = Recipe(
                owner_id=owner.user_id,
                name=data.name,
                description=data.description,
                category=data.category,
                cook_time=data.cook_time,
                prep_time=data.prep_time,
                aggregated_rating=None,
                review_count=0,
            )
            session.add(recipe)
            await session.flush()

            session.add(Nutrition(recipe_id=recipe.id, **data.nutrition.model_dump()))
            for name in dict.fromkeys(data.ingredients):
                session.add(RecipeIngredient(recipe_id=recipe.id, ingredient_name=name))
            recipe_id = recipe.id

        logger.info("User {} created recipe {}", owner.user_id, recipe_id)
        return recipe_id

    async def get(self, recipe_id: int) -> RecipeRecord:
        async with transaction(self.sessions) as session:
            recipe = await self._load(session, recipe_id)

            result = await session.execute(
                select(Nutrition).where(Nutrition.recipe_id == recipe_id)
            )
            nutrition = result.scalar_one_or_none()

            result = await session.execute(
                select(RecipeIngredient.ingredient_name)
                .where(RecipeIngredient.recipe_id == recipe_id)
                .order_by(RecipeIngredient.ingredient_name)
            )
            ingredients = list(result.scalars().all())

        record = RecipeRecord.model_validate(recipe)
        record.nutrition = NutritionData.model_validate(nutrition) if nutrition else None
        record.ingredients = ingredients
        return record

    async def delete(self, identity: Identity, recipe_id: int) -> None:
        """Delete a recipe and everything it owns: review likes, reviews,
        ingredients and nutrition, children first."""
        async with transaction(self.sessions) as session:
            recipe = await self._load(session, recipe_id)
            require_owner(identity, recipe.owner_id, resource="recipe", resource_id=recipe_id)

            review_ids = select(Review.id).where(Review.recipe_id == recipe_id)
            await session.execute(
                delete(ReviewLike)
                .where(ReviewLike.review_id.in_(review_ids))
                .execution_options(synchronize_session=False)
            )
            await session.execute(delete(Review).where(Review.recipe_id == recipe_id))
            await session.execute(delete(RecipeIngredient).where(RecipeIngredient.recipe_id == recipe_id))
            await session.execute(delete(Nutrition).where(Nutrition.recipe_id == recipe_id))
            await session.execute(delete(Recipe).where(Recipe.id == recipe_id))

        logger.info("User {} deleted recipe {}", identity.user_id, recipe_id)

    async def update_times(
        self,
        identity: Identity,
        recipe_id: int,
        cook_time: Optional[str] = None,
        prep_time: Optional[str] = None,
    ) -> RecipeRecord:
        """Replace cook and/or prep time; a None argument keeps the stored value."""
        _check_duration("cook_time", cook_time)
        _check_duration("prep_time", prep_time)

        values = {}
        if cook_time is not None:
            values["cook_time"] = cook_time
        if prep_time is not None:
            values["prep_time"] = prep_time

        async with transaction(self.sessions) as session:
            recipe = await self._load(session, recipe_id)
            require_owner(identity, recipe.owner_id, resource="recipe", resource_id=recipe_id)
            if values:
                await session.execute(
                    update(Recipe).where(Recipe.id == recipe_id).values(**values)
                )

        return await self.get(recipe_id)

    async def _load(self, session: AsyncSession, recipe_id: int) -> Recipe:
        result = await session.execute(select(Recipe).where(Recipe.id == recipe_id))
        recipe = result.scalar_one_or_none()
        if not recipe:
            raise NotFound("Recipe not found", resource="recipe", resource_id=recipe_id)
        return recipe

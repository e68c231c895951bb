from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from cookbook.database import get_session_factory
from cookbook.core.dependencies import get_current_identity
from cookbook.schemas.recipe import RecipeCreate, RecipeRecord, RecipeTimesUpdate, RatingSummary
from cookbook.schemas.review import ReviewCreate, ReviewUpdate, ReviewRecord
from cookbook.schemas.user import Identity
from cookbook.services.rating import RatingAggregator
from cookbook.services.recipe import RecipeService
from cookbook.services.review import ReviewService

router = APIRouter()


@router.post("", response_model=RecipeRecord, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    data: RecipeCreate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Create a recipe."""
    service = RecipeService(sessions)
    recipe_id = await service.create(identity, data)
    return await service.get(recipe_id)


@router.get("/{recipe_id}", response_model=RecipeRecord)
async def get_recipe(
    recipe_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Get a recipe with nutrition, ingredients and rating summary."""
    return await RecipeService(sessions).get(recipe_id)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Delete a recipe and its reviews."""
    await RecipeService(sessions).delete(identity, recipe_id)


@router.patch("/{recipe_id}/times", response_model=RecipeRecord)
async def update_times(
    recipe_id: int,
    data: RecipeTimesUpdate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Update cook and/or prep time."""
    return await RecipeService(sessions).update_times(
        identity, recipe_id, data.cook_time, data.prep_time
    )


@router.post("/{recipe_id}/rating", response_model=RatingSummary)
async def refresh_rating(
    recipe_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Recompute the recipe's aggregated rating from its reviews."""
    return await RatingAggregator(sessions).recompute(recipe_id)


@router.post("/{recipe_id}/reviews", response_model=ReviewRecord, status_code=status.HTTP_201_CREATED)
async def add_review(
    recipe_id: int,
    data: ReviewCreate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Review a recipe."""
    service = ReviewService(sessions)
    review_id = await service.add(identity, recipe_id, data.rating, data.content)
    return await service.get(review_id)


@router.put("/{recipe_id}/reviews/{review_id}", response_model=ReviewRecord)
async def edit_review(
    recipe_id: int,
    review_id: int,
    data: ReviewUpdate,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Edit your own review."""
    service = ReviewService(sessions)
    await service.edit(identity, recipe_id, review_id, data.rating, data.content)
    return await service.get(review_id)


@router.delete("/{recipe_id}/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    recipe_id: int,
    review_id: int,
    sessions: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    identity: Identity = Depends(get_current_identity),
):
    """Delete a review and its likes."""
    await ReviewService(sessions).delete(identity, recipe_id, review_id)

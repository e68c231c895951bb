from cookbook.schemas.user import (
    UserCreate, UserUpdate, UserRecord, Identity, FollowState, FollowResult, FollowRatio
)
from cookbook.schemas.recipe import (
    NutritionData, RecipeCreate, RecipeTimesUpdate, RecipeRecord, RatingSummary
)
from cookbook.schemas.review import (
    ReviewCreate, ReviewUpdate, ReviewRecord, LikeCount
)

__all__ = [
    "UserCreate", "UserUpdate", "UserRecord", "Identity", "FollowState", "FollowResult",
    "FollowRatio",
    "NutritionData", "RecipeCreate", "RecipeTimesUpdate", "RecipeRecord", "RatingSummary",
    "ReviewCreate", "ReviewUpdate", "ReviewRecord", "LikeCount",
]

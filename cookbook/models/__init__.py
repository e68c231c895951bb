from cookbook.models.user import User, UserRole, Gender, Role
from cookbook.models.follow import Follow
from cookbook.models.recipe import Recipe, Nutrition, RecipeIngredient
from cookbook.models.review import Review, ReviewLike

__all__ = [
    "User", "UserRole", "Gender", "Role", "Follow",
    "Recipe", "Nutrition", "RecipeIngredient", "Review", "ReviewLike",
]

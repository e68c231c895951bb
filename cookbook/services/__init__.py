from cookbook.services.auth import AuthService
from cookbook.services.follow import FollowService
from cookbook.services.rating import RatingAggregator
from cookbook.services.review import ReviewService
from cookbook.services.recipe import RecipeService
from cookbook.services.user import UserService
from cookbook.services.ownership import require_owner

__all__ = [
    "AuthService", "FollowService", "RatingAggregator",
    "ReviewService", "RecipeService", "UserService", "require_owner",
]

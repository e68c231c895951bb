from fastapi import APIRouter
from cookbook.api import auth, users, recipes, reviews

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(recipes.router, prefix="/recipes", tags=["Recipes"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class ReviewCreate(BaseModel):
    rating: int
    content: str = Field("", max_length=10000)


class ReviewUpdate(ReviewCreate):
    pass


class ReviewRecord(BaseModel):
    id: int
    recipe_id: int
    author_id: int
    rating: int
    content: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    likes: List[int] = []  # ids of users who liked the review

    model_config = ConfigDict(from_attributes=True)


class LikeCount(BaseModel):
    review_id: int
    likes: int

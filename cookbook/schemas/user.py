import enum
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List

from cookbook.models.user import Gender


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    gender: Gender = Gender.UNKNOWN
    age: Optional[int] = Field(None, gt=0)
    birthday: Optional[str] = None  # YYYY-MM-DD, used when age is absent


class UserUpdate(BaseModel):
    gender: Optional[Gender] = None
    age: Optional[int] = None


class UserRecord(BaseModel):
    id: int
    name: str
    gender: Gender
    age: Optional[int] = None
    follower_count: int = 0
    following_count: int = 0
    follower_ids: List[int] = []
    following_ids: List[int] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Identity(BaseModel):
    """An authenticated caller, as resolved by AuthService.authenticate."""

    user_id: int
    is_admin: bool = False

    model_config = ConfigDict(frozen=True)


class FollowState(str, enum.Enum):
    FOLLOWED = "FOLLOWED"
    UNFOLLOWED = "UNFOLLOWED"


class FollowResult(BaseModel):
    state: FollowState
    follower_id: int
    followee_id: int
    following_count: int  # of the follower
    follower_count: int   # of the followee


class FollowRatio(BaseModel):
    user_id: int
    name: str
    follower_count: int
    following_count: int
    ratio: float  # follower_count / following_count

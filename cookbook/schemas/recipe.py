from datetime import datetime, timedelta
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, computed_field
from typing import Optional, List


_duration = TypeAdapter(timedelta)


def parse_duration(value: Optional[str]) -> Optional[timedelta]:
    """Parse an ISO-8601 duration such as ``PT1H30M``.

    Raises ValueError for anything that is not an ISO-8601 duration.
    """
    if value is None:
        return None
    if not value.startswith("P"):
        raise ValueError(f"not an ISO-8601 duration: {value!r}")
    try:
        return _duration.validate_python(value)
    except ValidationError as exc:
        raise ValueError(f"not an ISO-8601 duration: {value!r}") from exc


class NutritionData(BaseModel):
    calories: Optional[float] = Field(None, ge=0)
    fat: Optional[float] = Field(None, ge=0)
    sugar: Optional[float] = Field(None, ge=0)
    protein: Optional[float] = Field(None, ge=0)
    carbohydrates: Optional[float] = Field(None, ge=0)

    model_config = ConfigDict(from_attributes=True)


class RecipeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    cook_time: Optional[str] = None
    prep_time: Optional[str] = None
    nutrition: NutritionData = NutritionData()
    ingredients: List[str] = []


class RecipeTimesUpdate(BaseModel):
    cook_time: Optional[str] = None
    prep_time: Optional[str] = None


class RecipeRecord(BaseModel):
    id: int
    owner_id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    cook_time: Optional[str] = None
    prep_time: Optional[str] = None
    aggregated_rating: Optional[float] = None
    review_count: int = 0
    created_at: datetime
    nutrition: Optional[NutritionData] = None
    ingredients: List[str] = []

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def total_time(self) -> Optional[timedelta]:
        """Cook time plus prep time; None when neither parses."""
        try:
            cook = parse_duration(self.cook_time)
            prep = parse_duration(self.prep_time)
        except ValueError:
            return None
        if cook is None and prep is None:
            return None
        return (cook or timedelta()) + (prep or timedelta())


class RatingSummary(BaseModel):
    recipe_id: int
    aggregated_rating: Optional[float] = None  # None when there are no reviews
    review_count: int = 0

"""Domain models for meal logging."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class MealLogEntry:
    """A meal actually eaten, as written to the meal log."""

    food_name: str
    calories: int
    protein: int
    carbs: int
    fat: int
    logged_at: datetime
    meal_type: str
    location_name: str
    location_type: str


@dataclass(frozen=True)
class MealLogRecord:
    """Meal log row with identifiers."""

    id: UUID
    user_id: UUID
    entry: MealLogEntry

"""Domain models for the meal planner."""

from dataclasses import dataclass, field
from uuid import UUID

DEFAULT_DAILY_CALORIE_TARGET = 2000


@dataclass(frozen=True)
class UserProfile:
    """Planning-relevant user preferences."""

    user_id: UUID
    dietary_preferences: list[str] = field(default_factory=list)
    daily_calorie_target: int = DEFAULT_DAILY_CALORIE_TARGET

"""User profile service."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from meal_planner.domain.models import DEFAULT_DAILY_CALORIE_TARGET, UserProfile


class ProfileRepository(Protocol):
    """Persistence interface for planning preferences."""

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the stored profile, if any."""

    def set_dietary_preferences(self, user_id: UUID, preferences: list[str]) -> None:
        """Replace the user's dietary preference labels."""


@dataclass
class ProfileService:
    """Service for dietary preferences and calorie targets."""

    repository: ProfileRepository
    default_daily_target: int = DEFAULT_DAILY_CALORIE_TARGET

    def get_profile(self, user_id: UUID) -> UserProfile:
        """Return the user's profile, falling back to defaults."""
        profile = self.repository.get_profile(user_id)
        if profile is None:
            return UserProfile(
                user_id=user_id, daily_calorie_target=self.default_daily_target
            )
        if profile.daily_calorie_target <= 0:
            return UserProfile(
                user_id=user_id,
                dietary_preferences=profile.dietary_preferences,
                daily_calorie_target=self.default_daily_target,
            )
        return profile

    def set_dietary_preferences(self, user_id: UUID, preferences: list[str]) -> None:
        """Store cleaned, de-duplicated preference labels."""
        cleaned: list[str] = []
        for label in preferences:
            value = label.strip()
            if value and value not in cleaned:
                cleaned.append(value)
        self.repository.set_dietary_preferences(user_id, cleaned)

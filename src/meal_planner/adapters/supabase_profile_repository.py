"""Supabase repository for user planning profiles."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from meal_planner.domain.models import DEFAULT_DAILY_CALORIE_TARGET, UserProfile
from meal_planner.domain.plan_documents import to_non_negative_int
from meal_planner.services.profiles import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for user profiles."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the stored profile for a user."""
        response = (
            self.client.table("user_profiles")
            .select("dietary_preferences, daily_calorie_target")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        preferences = row.get("dietary_preferences")
        target = row.get("daily_calorie_target")
        return UserProfile(
            user_id=user_id,
            dietary_preferences=[str(label) for label in preferences]
            if isinstance(preferences, list)
            else [],
            daily_calorie_target=(
                to_non_negative_int(target)
                if target is not None
                else DEFAULT_DAILY_CALORIE_TARGET
            ),
        )

    def set_dietary_preferences(self, user_id: UUID, preferences: list[str]) -> None:
        """Update the user's dietary preferences."""
        self.client.table("user_profiles").upsert(
            {
                "user_id": str(user_id),
                "dietary_preferences": preferences,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()

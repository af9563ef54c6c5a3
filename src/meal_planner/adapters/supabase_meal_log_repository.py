"""Supabase repository for meal logs."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from meal_planner.domain.meals import MealLogEntry, MealLogRecord
from meal_planner.domain.plan_documents import to_non_negative_int
from meal_planner.services.meal_logs import HOME_LOCATION_TYPES, MealLogRepository

_COLUMNS = (
    "id, user_id, food_name, calories, protein, carbs, fat, logged_at, "
    "meal_type, location_name, location_type"
)


@dataclass
class SupabaseMealLogRepository(MealLogRepository):
    """Supabase implementation for meal logs."""

    client: Client

    def create_meal_log(self, user_id: UUID, entry: MealLogEntry) -> UUID:
        """Insert a meal log row and return its id."""
        response = (
            self.client.table("meal_logs")
            .insert(
                {
                    "user_id": str(user_id),
                    "food_name": entry.food_name,
                    "calories": entry.calories,
                    "protein": entry.protein,
                    "carbs": entry.carbs,
                    "fat": entry.fat,
                    "logged_at": entry.logged_at.isoformat(),
                    "meal_type": entry.meal_type,
                    "location_name": entry.location_name,
                    "location_type": entry.location_type,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal log")
        return UUID(response.data[0]["id"])

    def list_meal_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealLogRecord]:
        """Return meal logs in the time range."""
        response = (
            self.client.table("meal_logs")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("logged_at", start.isoformat())
            .lt("logged_at", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def list_home_meal_logs(self, user_id: UUID, limit: int) -> list[MealLogRecord]:
        """Return recent meal logs cooked at home."""
        response = (
            self.client.table("meal_logs")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .in_("location_type", sorted(HOME_LOCATION_TYPES))
            .order("logged_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> MealLogRecord:
    return MealLogRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        entry=MealLogEntry(
            food_name=str(row.get("food_name") or ""),
            calories=to_non_negative_int(row.get("calories")),
            protein=to_non_negative_int(row.get("protein")),
            carbs=to_non_negative_int(row.get("carbs")),
            fat=to_non_negative_int(row.get("fat")),
            logged_at=datetime.fromisoformat(str(row["logged_at"])),
            meal_type=str(row.get("meal_type") or ""),
            location_name=str(row.get("location_name") or ""),
            location_type=str(row.get("location_type") or ""),
        ),
    )

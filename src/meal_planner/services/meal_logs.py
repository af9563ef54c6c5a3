"""Meal log service: what was actually eaten."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from meal_planner.domain.meals import MealLogEntry, MealLogRecord
from meal_planner.domain.plans import LocationType, MealSlot, MenuItem

HOME_LOCATION_TYPES = frozenset({"home", "custom"})


class MealLogRepository(Protocol):
    """Persistence interface for meal logs."""

    def create_meal_log(self, user_id: UUID, entry: MealLogEntry) -> UUID:
        """Append a meal log entry and return its id."""

    def list_meal_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealLogRecord]:
        """Return meal logs within [start, end)."""

    def list_home_meal_logs(self, user_id: UUID, limit: int) -> list[MealLogRecord]:
        """Return the most recent home-cooked meal logs."""


@dataclass
class MealLogService:
    """Records planned meals and summarizes the day's intake."""

    repository: MealLogRepository

    def log_planned_meal(
        self, user_id: UUID, slot: MealSlot, logged_at: datetime | None = None
    ) -> UUID | None:
        """Write a slot's dish to the meal log; slots without a dish are skipped."""
        item = slot.menu_item
        if item is None:
            return None
        entry = MealLogEntry(
            food_name=item.food_name,
            calories=item.calories,
            protein=item.protein,
            carbs=item.carbs,
            fat=item.fat,
            logged_at=logged_at or datetime.now(tz=UTC),
            meal_type=slot.name.strip().lower() or slot.id,
            location_name=(
                "Home" if slot.location_type is LocationType.HOME else "Restaurant"
            ),
            location_type=slot.location_type.value,
        )
        return self.repository.create_meal_log(user_id, entry)

    def consumed_calories(
        self, user_id: UUID, day: date, timezone_name: str = "UTC"
    ) -> int:
        """Return the calories logged on a calendar day in the given timezone."""
        tz = ZoneInfo(timezone_name)
        start = datetime(day.year, day.month, day.day, tzinfo=tz)
        end = start + timedelta(days=1)
        logs = self.repository.list_meal_logs(
            user_id, start.astimezone(UTC), end.astimezone(UTC)
        )
        return sum(
            log.entry.calories
            for log in logs
            if log.entry.logged_at.astimezone(tz).date() == day
        )

    def home_dishes(self, user_id: UUID, limit: int = 20) -> list[MenuItem]:
        """Return distinct dishes previously cooked at home, most recent first."""
        dishes: list[MenuItem] = []
        seen: set[str] = set()
        for log in self.repository.list_home_meal_logs(user_id, limit * 3):
            if log.entry.location_type not in HOME_LOCATION_TYPES:
                continue
            name = log.entry.food_name.strip()
            key = name.lower()
            if not name or key in seen:
                continue
            seen.add(key)
            dishes.append(
                MenuItem(
                    id=str(log.id),
                    food_name=name,
                    calories=log.entry.calories,
                    protein=log.entry.protein,
                    carbs=log.entry.carbs,
                    fat=log.entry.fat,
                )
            )
            if len(dishes) >= limit:
                break
        return dishes

    def home_dish_names(self, user_id: UUID, limit: int = 20) -> list[str]:
        """Return the names of distinct home-cooked dishes."""
        return [dish.food_name for dish in self.home_dishes(user_id, limit)]

"""Tests for meal log service."""

from datetime import UTC, date, datetime
from uuid import uuid4

from meal_planner.domain.meals import MealLogEntry
from meal_planner.domain.plans import LocationType, MealSlot, MenuItem
from meal_planner.services.meal_logs import MealLogService
from tests.conftest import InMemoryMealLogRepository


def _entry(
    name: str, calories: int, logged_at: datetime, location_type: str = "home"
) -> MealLogEntry:
    return MealLogEntry(
        food_name=name,
        calories=calories,
        protein=0,
        carbs=0,
        fat=0,
        logged_at=logged_at,
        meal_type="lunch",
        location_name="Home",
        location_type=location_type,
    )


def test_log_planned_meal_writes_entry(
    meal_log_repository: InMemoryMealLogRepository,
) -> None:
    service = MealLogService(meal_log_repository)
    user_id = uuid4()
    logged_at = datetime(2024, 5, 1, 12, 45, tzinfo=UTC)
    slot = MealSlot(
        id="lunch",
        name="Lunch",
        location_type=LocationType.RESTAURANT,
        menu_item=MenuItem(
            food_name="Fish Soup",
            calories=420,
            protein=32,
            carbs=40,
            fat=12,
            restaurant_name="Canteen 2",
        ),
    )

    log_id = service.log_planned_meal(user_id, slot, logged_at)

    assert log_id is not None
    record = meal_log_repository.records[0]
    assert record.user_id == user_id
    entry = record.entry
    assert (entry.food_name, entry.calories, entry.protein) == ("Fish Soup", 420, 32)
    assert entry.meal_type == "lunch"
    assert entry.location_name == "Restaurant"
    assert entry.location_type == "restaurant"
    assert entry.logged_at == logged_at


def test_log_planned_meal_skips_empty_slot(
    meal_log_repository: InMemoryMealLogRepository,
) -> None:
    service = MealLogService(meal_log_repository)

    assert service.log_planned_meal(uuid4(), MealSlot(id="lunch", name="Lunch")) is None
    assert meal_log_repository.records == []


def test_consumed_calories_uses_local_day(
    meal_log_repository: InMemoryMealLogRepository,
) -> None:
    service = MealLogService(meal_log_repository)
    user_id = uuid4()
    for name, calories, logged_at in [
        ("Kaya Toast", 350, datetime(2024, 4, 30, 23, 30, tzinfo=UTC)),
        ("Laksa", 600, datetime(2024, 5, 1, 5, 0, tzinfo=UTC)),
        ("Late Supper", 400, datetime(2024, 5, 1, 17, 0, tzinfo=UTC)),
    ]:
        meal_log_repository.create_meal_log(
            user_id, _entry(name, calories, logged_at)
        )
    meal_log_repository.create_meal_log(
        uuid4(), _entry("Other user", 999, datetime(2024, 5, 1, 5, 0, tzinfo=UTC))
    )

    assert service.consumed_calories(user_id, date(2024, 5, 1)) == 1000
    assert service.consumed_calories(user_id, date(2024, 5, 1), "Asia/Singapore") == (
        950
    )


def test_home_dish_names_are_distinct_and_recent_first(
    meal_log_repository: InMemoryMealLogRepository,
) -> None:
    service = MealLogService(meal_log_repository)
    user_id = uuid4()
    for name, hour, location_type in [
        ("Omelette", 8, "home"),
        ("Fish Soup", 12, "restaurant"),
        ("fried rice", 13, "custom"),
        ("omelette ", 18, "home"),
        ("Fried Rice", 19, "home"),
    ]:
        meal_log_repository.create_meal_log(
            user_id,
            _entry(name, 300, datetime(2024, 5, 1, hour, tzinfo=UTC), location_type),
        )

    assert service.home_dish_names(user_id) == ["Fried Rice", "omelette"]
    assert service.home_dish_names(user_id, limit=1) == ["Fried Rice"]


def test_log_planned_meal_uses_slot_name_for_generated_ids(
    meal_log_repository: InMemoryMealLogRepository,
) -> None:
    service = MealLogService(meal_log_repository)
    slot = MealSlot(
        id="1714564800000-0",
        name="Breakfast",
        menu_item=MenuItem(food_name="Kaya Toast", calories=350),
    )

    service.log_planned_meal(uuid4(), slot, datetime(2024, 5, 1, 8, tzinfo=UTC))

    assert meal_log_repository.records[0].entry.meal_type == "breakfast"


def test_home_dishes_carry_macros(
    meal_log_repository: InMemoryMealLogRepository,
) -> None:
    service = MealLogService(meal_log_repository)
    user_id = uuid4()
    log_id = meal_log_repository.create_meal_log(
        user_id,
        MealLogEntry(
            food_name="Omelette",
            calories=300,
            protein=20,
            carbs=2,
            fat=22,
            logged_at=datetime(2024, 5, 1, 8, tzinfo=UTC),
            meal_type="breakfast",
            location_name="Home",
            location_type="home",
        ),
    )

    assert service.home_dishes(user_id) == [
        MenuItem(
            id=str(log_id),
            food_name="Omelette",
            calories=300,
            protein=20,
            carbs=2,
            fat=22,
        )
    ]

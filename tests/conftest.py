"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID, uuid4

import pytest

from meal_planner.config import Settings
from meal_planner.containers import AppContainer
from meal_planner.domain.meals import MealLogEntry, MealLogRecord
from meal_planner.domain.models import UserProfile
from meal_planner.domain.plan_documents import PlanDocument
from meal_planner.domain.restaurants import GeoPoint, RestaurantRecord
from meal_planner.services.cache import InMemoryCache
from meal_planner.services.meal_logs import (
    HOME_LOCATION_TYPES,
    MealLogRepository,
    MealLogService,
)
from meal_planner.services.menus import NearbyMenuService, RestaurantRepository
from meal_planner.services.planning import (
    ActivePlanRegistry,
    ChatClient,
    PlanningService,
    PlanRepository,
)
from meal_planner.services.profiles import ProfileRepository, ProfileService

HOME_LOCATION = GeoPoint(latitude=1.355049655134308, longitude=103.68518139204353)


def make_record(  # noqa: PLR0913
    meal: str = "Lunch",
    dish: str = "Chicken Rice",
    calories: str = "500",
    restaurant: str = "home",
    address: str = "N/A",
    reason: str = "quick",
    macros: tuple[str, str, str] | None = ("30", "60", "15"),
) -> str:
    """Build one generated record in the wire format."""
    lines = [
        f"**Meal**: {meal}",
        f"**Dish**: {dish}",
        f"**Calories**: {calories}",
    ]
    if macros is not None:
        protein, carbs, fat = macros
        lines.extend(
            [f"**Protein**: {protein}", f"**Carbs**: {carbs}", f"**Fat**: {fat}"]
        )
    lines.extend(
        [
            f"**Restaurant**: {restaurant}",
            f"**Address**: {address}",
            f"**Why this dish**: {reason}",
        ]
    )
    return "\n".join(lines)


def make_blob(*records: str) -> str:
    """Join records with delimiter lines, the way completions arrive."""
    return "\n---\n".join(records) + "\n---"


@dataclass
class InMemoryPlanRepository(PlanRepository):
    """In-memory day plan storage for tests."""

    plans: dict[tuple[UUID, date], dict[str, object]] = field(default_factory=dict)
    saves: int = 0

    def get_plan(self, user_id: UUID, plan_date: date) -> PlanDocument | None:
        payload = self.plans.get((user_id, plan_date))
        if payload is None:
            return None
        return PlanDocument.model_validate(payload)

    def save_plan(self, user_id: UUID, plan_date: date, document: PlanDocument) -> None:
        self.plans[(user_id, plan_date)] = document.to_payload()
        self.saves += 1


@dataclass
class InMemoryMealLogRepository(MealLogRepository):
    """In-memory meal log storage for tests."""

    records: list[MealLogRecord] = field(default_factory=list)

    def create_meal_log(self, user_id: UUID, entry: MealLogEntry) -> UUID:
        record = MealLogRecord(id=uuid4(), user_id=user_id, entry=entry)
        self.records.append(record)
        return record.id

    def list_meal_logs(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealLogRecord]:
        return [
            record
            for record in self.records
            if record.user_id == user_id and start <= record.entry.logged_at < end
        ]

    def list_home_meal_logs(self, user_id: UUID, limit: int) -> list[MealLogRecord]:
        rows = [
            record
            for record in self.records
            if record.user_id == user_id
            and record.entry.location_type in HOME_LOCATION_TYPES
        ]
        rows.sort(key=lambda record: record.entry.logged_at, reverse=True)
        return rows[:limit]


@dataclass
class InMemoryRestaurantRepository(RestaurantRepository):
    """In-memory restaurant storage for tests."""

    restaurants: list[RestaurantRecord] = field(default_factory=list)
    calls: int = 0

    def list_restaurants(self) -> list[RestaurantRecord]:
        self.calls += 1
        return list(self.restaurants)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile storage for tests."""

    profiles: dict[UUID, UserProfile] = field(default_factory=dict)

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        return self.profiles.get(user_id)

    def set_dietary_preferences(self, user_id: UUID, preferences: list[str]) -> None:
        current = self.profiles.get(user_id)
        target = current.daily_calorie_target if current else 0
        self.profiles[user_id] = UserProfile(
            user_id=user_id,
            dietary_preferences=list(preferences),
            daily_calorie_target=target,
        )


@dataclass
class FakeChatClient(ChatClient):
    """Chat client replaying queued replies; exceptions in the queue are raised."""

    replies: list[str | Exception] = field(default_factory=list)
    prompts: list[tuple[str, str]] = field(default_factory=list)

    async def complete(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        self.prompts.append((system_prompt, user_prompt))
        if not self.replies:
            return ""
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        llm_api_key="llm-key",
        environment="local",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def plan_repository() -> InMemoryPlanRepository:
    return InMemoryPlanRepository()


@pytest.fixture
def meal_log_repository() -> InMemoryMealLogRepository:
    return InMemoryMealLogRepository()


@pytest.fixture
def restaurant_repository() -> InMemoryRestaurantRepository:
    return InMemoryRestaurantRepository(
        restaurants=[
            RestaurantRecord(
                id="r1",
                name="Canteen 2",
                address="35 Students Walk",
                location=GeoPoint(latitude=1.3485, longitude=103.6855),
                items=[
                    {
                        "foodName": "Fish Soup",
                        "calories": 420,
                        "protein": 32,
                        "carbs": 40,
                        "fat": 12,
                    }
                ],
            ),
            RestaurantRecord(
                id="r2",
                name="Far Away Diner",
                address="1 Changi Road",
                location=GeoPoint(latitude=1.3644, longitude=103.9915),
                items=[{"foodName": "Burger", "calories": 800}],
            ),
        ]
    )


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def planning_service(
    settings: Settings,
    chat_client: FakeChatClient,
    plan_repository: InMemoryPlanRepository,
    meal_log_repository: InMemoryMealLogRepository,
    restaurant_repository: InMemoryRestaurantRepository,
    profile_repository: InMemoryProfileRepository,
) -> PlanningService:
    return PlanningService(
        chat_client=chat_client,
        plan_repository=plan_repository,
        menu_service=NearbyMenuService(
            repository=restaurant_repository, cache=InMemoryCache()
        ),
        meal_log_service=MealLogService(meal_log_repository),
        profile_service=ProfileService(profile_repository),
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        radius_km=settings.search_radius_km,
        retry_attempts=settings.llm_retry_attempts,
        retry_delay_seconds=0,
    )


@pytest.fixture
def container(settings: Settings, planning_service: PlanningService) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        profile_service=planning_service.profile_service,
        meal_log_service=planning_service.meal_log_service,
        menu_service=planning_service.menu_service,
        planning_service=planning_service,
        active_plans=ActivePlanRegistry(planning_service),
        close_resources=close_resources,
    )

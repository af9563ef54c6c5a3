"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_planner.adapters.openai_chat_client import OpenAIChatClient
from meal_planner.adapters.supabase_meal_log_repository import (
    SupabaseMealLogRepository,
)
from meal_planner.adapters.supabase_plan_repository import SupabasePlanRepository
from meal_planner.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from meal_planner.adapters.supabase_restaurant_repository import (
    SupabaseRestaurantRepository,
)
from meal_planner.config import Settings
from meal_planner.services.cache import InMemoryCache
from meal_planner.services.meal_logs import MealLogService
from meal_planner.services.menus import NearbyMenuService
from meal_planner.services.planning import ActivePlanRegistry, PlanningService
from meal_planner.services.profiles import ProfileService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    profile_service: ProfileService
    meal_log_service: MealLogService
    menu_service: NearbyMenuService
    planning_service: PlanningService
    active_plans: ActivePlanRegistry
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_service = ProfileService(
        SupabaseProfileRepository(supabase_client),
        default_daily_target=resolved_settings.default_daily_calorie_target,
    )
    meal_log_service = MealLogService(SupabaseMealLogRepository(supabase_client))
    menu_service = NearbyMenuService(
        repository=SupabaseRestaurantRepository(supabase_client),
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.menu_cache_ttl_seconds,
    )
    chat_client = OpenAIChatClient.create(
        api_key=resolved_settings.llm_api_key,
        base_url=resolved_settings.llm_base_url,
        timeout_seconds=resolved_settings.llm_timeout_seconds,
    )
    planning_service = PlanningService(
        chat_client=chat_client,
        plan_repository=SupabasePlanRepository(supabase_client),
        menu_service=menu_service,
        meal_log_service=meal_log_service,
        profile_service=profile_service,
        model=resolved_settings.llm_model,
        temperature=resolved_settings.llm_temperature,
        radius_km=resolved_settings.search_radius_km,
        retry_attempts=resolved_settings.llm_retry_attempts,
    )

    async def close_resources() -> None:
        await chat_client.close()

    return AppContainer(
        settings=resolved_settings,
        profile_service=profile_service,
        meal_log_service=meal_log_service,
        menu_service=menu_service,
        planning_service=planning_service,
        active_plans=ActivePlanRegistry(
            planning_service, max_plans=resolved_settings.active_plan_limit
        ),
        close_resources=close_resources,
    )

"""Tests for container wiring."""

import asyncio

from meal_planner.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.planning_service.model == "deepseek-chat"
    assert container.planning_service.radius_km == 2.0
    assert container.active_plans.planning_service is container.planning_service
    assert container.profile_service.default_daily_target == 2000
    asyncio.run(container.close_resources())


def test_build_container_caps_active_plans(settings) -> None:
    container = build_container(settings.model_copy(update={"active_plan_limit": 8}))
    assert container.active_plans.max_plans == 8
    asyncio.run(container.close_resources())

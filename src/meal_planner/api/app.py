"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from meal_planner.api.plan_models import (
    GeneratePlanRequest,
    LocationModel,
    PreferencesRequest,
    SlotUpdateRequest,
    SwapSlotRequest,
)
from meal_planner.app_logging import configure_logging
from meal_planner.containers import AppContainer
from meal_planner.domain.plan_documents import SlotDocument
from meal_planner.domain.restaurants import GeoPoint
from meal_planner.services.planning import (
    GenerationFailedError,
    NoCaloriesRemainingError,
    PlanBusyError,
    PlanningError,
)
from meal_planner.services.slot_set import SlotSet

_PLAN_PATH = "/users/{user_id}/plans/{plan_date}"
_SLOT_PATH = _PLAN_PATH + "/slots/{slot_id}"


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(PlanningError)
    async def planning_error_handler(
        request: Request, exc: PlanningError
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        if isinstance(exc, GenerationFailedError):
            logger.warning("Plan generation failed: %s", exc)
            return JSONResponse(
                status_code=status.HTTP_502_BAD_GATEWAY,
                content={
                    "detail": _format_error(
                        state_container,
                        exc,
                        "Meal plan generation failed. Please try again.",
                    ),
                    "retryable": True,
                },
            )
        if isinstance(exc, NoCaloriesRemainingError):
            message = "You have used up your calories for today."
        elif isinstance(exc, PlanBusyError):
            message = "A plan update is already in progress."
        else:
            message = "The plan could not be updated."
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": message, "retryable": False},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get(_PLAN_PATH)
    async def get_plan(
        user_id: UUID, plan_date: date, request: Request
    ) -> dict[str, object]:
        """Return the working plan for a day."""
        state_container: AppContainer = request.app.state.container
        active = state_container.active_plans
        active.discard_other_days(user_id, plan_date)
        return _plan_view(active.get(user_id, plan_date))

    @app.post(_PLAN_PATH + "/reload")
    async def reload_plan(
        user_id: UUID, plan_date: date, request: Request
    ) -> dict[str, object]:
        """Drop unsaved edits and reload the plan from storage."""
        state_container: AppContainer = request.app.state.container
        return _plan_view(state_container.active_plans.reload(user_id, plan_date))

    @app.post(_PLAN_PATH + "/generate")
    async def generate_plan(
        user_id: UUID, plan_date: date, body: GeneratePlanRequest, request: Request
    ) -> dict[str, object]:
        """Regenerate the whole day's plan."""
        state_container: AppContainer = request.app.state.container
        slot_set = state_container.active_plans.get(user_id, plan_date)
        await state_container.planning_service.generate_plan(
            slot_set,
            meal_settings=body.meal_settings,
            feedback=body.feedback,
            location=_resolve_location(state_container, body),
        )
        return _plan_view(slot_set)

    @app.put(_PLAN_PATH)
    async def save_plan(
        user_id: UUID, plan_date: date, request: Request
    ) -> dict[str, object]:
        """Persist the working plan."""
        state_container: AppContainer = request.app.state.container
        slot_set = state_container.active_plans.get(user_id, plan_date)
        try:
            state_container.planning_service.save(slot_set)
        except Exception:
            logger.exception("Failed to save plan", extra={"user_id": str(user_id)})
            raise
        return _plan_view(slot_set)

    @app.patch(_SLOT_PATH)
    async def update_slot(  # noqa: PLR0913
        user_id: UUID,
        plan_date: date,
        slot_id: str,
        body: SlotUpdateRequest,
        request: Request,
    ) -> dict[str, object]:
        """Edit a slot's time or reminder flag."""
        state_container: AppContainer = request.app.state.container
        slot_set = state_container.active_plans.get(user_id, plan_date)
        if body.time is not None:
            slot_set.update_time(slot_id, body.time.strip())
        if body.notify is not None:
            slot_set.set_notify(slot_id, body.notify)
        return _plan_view(slot_set)

    @app.post(_SLOT_PATH + "/toggle-location")
    async def toggle_location(
        user_id: UUID, plan_date: date, slot_id: str, request: Request
    ) -> dict[str, object]:
        """Switch a slot between home and restaurant."""
        state_container: AppContainer = request.app.state.container
        slot_set = state_container.active_plans.get(user_id, plan_date)
        slot_set.toggle_location(slot_id)
        return _plan_view(slot_set)

    @app.post(_SLOT_PATH + "/rotate")
    async def rotate_alternative(
        user_id: UUID, plan_date: date, slot_id: str, request: Request
    ) -> dict[str, object]:
        """Replace a slot's dish with its next ranked alternative."""
        state_container: AppContainer = request.app.state.container
        slot_set = state_container.active_plans.get(user_id, plan_date)
        slot_set.rotate_alternative(slot_id)
        return _plan_view(slot_set)

    @app.post(_SLOT_PATH + "/swap")
    async def swap_slot(  # noqa: PLR0913
        user_id: UUID,
        plan_date: date,
        slot_id: str,
        body: SwapSlotRequest,
        request: Request,
    ) -> dict[str, object]:
        """Regenerate one slot's dish."""
        state_container: AppContainer = request.app.state.container
        slot_set = state_container.active_plans.get(user_id, plan_date)
        await state_container.planning_service.swap_slot(
            slot_set,
            slot_id,
            reason=body.reason,
            location=_resolve_location(state_container, body),
        )
        return _plan_view(slot_set)

    @app.post(_SLOT_PATH + "/complete")
    async def complete_slot(
        user_id: UUID, plan_date: date, slot_id: str, request: Request
    ) -> dict[str, object]:
        """Log a slot's dish as eaten."""
        state_container: AppContainer = request.app.state.container
        slot_set = state_container.active_plans.get(user_id, plan_date)
        try:
            state_container.planning_service.complete_slot(slot_set, slot_id)
        except Exception:
            logger.exception(
                "Failed to log planned meal", extra={"slot_id": slot_id}
            )
            raise
        return _plan_view(slot_set)

    @app.put("/users/{user_id}/preferences")
    async def set_preferences(
        user_id: UUID, body: PreferencesRequest, request: Request
    ) -> dict[str, object]:
        """Replace the user's dietary preferences."""
        state_container: AppContainer = request.app.state.container
        state_container.profile_service.set_dietary_preferences(
            user_id, body.dietary_preferences
        )
        profile = state_container.profile_service.get_profile(user_id)
        return {"dietary_preferences": profile.dietary_preferences}

    return app


def _plan_view(slot_set: SlotSet) -> dict[str, object]:
    """Serialize a working plan for API responses."""
    return {
        "date": slot_set.date_key,
        "state": slot_set.state.value,
        "daily_target": slot_set.daily_target,
        "consumed": slot_set.consumed,
        "remaining": slot_set.compute_remaining(),
        "generating": slot_set.generating,
        "pending_slot_ids": sorted(slot_set.pending_swaps),
        "slots": [
            SlotDocument.from_slot(slot).model_dump(mode="json", by_alias=True)
            for slot in slot_set.slots
        ],
    }


def _resolve_location(container: AppContainer, body: LocationModel) -> GeoPoint:
    """Use the caller's location, falling back to the configured default."""
    if body.latitude is not None and body.longitude is not None:
        return GeoPoint(latitude=body.latitude, longitude=body.longitude)
    return GeoPoint(
        latitude=container.settings.default_latitude,
        longitude=container.settings.default_longitude,
    )


def _format_error(container: AppContainer, exc: Exception, fallback: str) -> str:
    """Return a user-facing error message with local debug info."""
    if container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback

"""Day plan orchestration: load, generate, swap, complete and save."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol, TypeVar
from uuid import UUID

from meal_planner.domain.plan_documents import PlanDocument
from meal_planner.domain.plans import (
    GUARANTEED_MEALS,
    LocationType,
    MealSlot,
    MenuItem,
    ParsedDish,
)
from meal_planner.domain.restaurants import GeoPoint
from meal_planner.services.candidates import with_alternatives
from meal_planner.services.meal_logs import MealLogService
from meal_planner.services.menus import NearbyMenuService
from meal_planner.services.plan_generator import PlanGenerator, per_slot_budget
from meal_planner.services.profiles import ProfileService
from meal_planner.services.prompts import (
    ChatPrompt,
    build_plan_prompt,
    build_swap_prompt,
)
from meal_planner.services.slot_set import SlotSet, default_slots

_logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class PlanningError(Exception):
    """Base error for plan operations the caller should surface."""


class GenerationFailedError(PlanningError):
    """The text-generation call produced no usable meal."""


class NoCaloriesRemainingError(PlanningError):
    """The day's calorie target is already used up."""


class PlanBusyError(PlanningError):
    """A conflicting generation or swap is already in flight."""


class ChatClient(Protocol):
    """Interface for the text-generation collaborator."""

    async def complete(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Return the raw completion text."""


class PlanRepository(Protocol):
    """Persistence interface for day plans."""

    def get_plan(self, user_id: UUID, plan_date: date) -> PlanDocument | None:
        """Return the stored plan for a day, if present."""

    def save_plan(self, user_id: UUID, plan_date: date, document: PlanDocument) -> None:
        """Overwrite the stored plan for a day."""


@dataclass
class PlanningService:
    """Coordinates the collaborators around a day's SlotSet."""

    chat_client: ChatClient
    plan_repository: PlanRepository
    menu_service: NearbyMenuService
    meal_log_service: MealLogService
    profile_service: ProfileService
    model: str
    temperature: float = 0.7
    radius_km: float = 2.0
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3
    generator: PlanGenerator = field(default_factory=PlanGenerator)

    def load_day(
        self, user_id: UUID, plan_date: date, timezone_name: str = "UTC"
    ) -> SlotSet:
        """Load the stored plan for a day, or initialize default slots."""
        profile = self.profile_service.get_profile(user_id)
        consumed = self.meal_log_service.consumed_calories(
            user_id, plan_date, timezone_name
        )
        stored = self.plan_repository.get_plan(user_id, plan_date)
        if stored is None:
            return SlotSet(
                user_id=user_id,
                plan_date=plan_date,
                slots=default_slots(),
                daily_target=profile.daily_calorie_target,
                consumed=consumed,
                dietary_preferences=list(profile.dietary_preferences),
            )
        return SlotSet(
            user_id=user_id,
            plan_date=plan_date,
            slots=[slot.to_slot() for slot in stored.slots],
            daily_target=profile.daily_calorie_target,
            consumed=consumed,
            dietary_preferences=list(profile.dietary_preferences),
            created_at=stored.created_at,
            saved=True,
        )

    async def generate_plan(
        self,
        slot_set: SlotSet,
        meal_settings: dict[str, LocationType] | None = None,
        feedback: str = "",
        location: GeoPoint | None = None,
    ) -> list[MealSlot] | None:
        """Regenerate the whole day and install it.

        Returns the installed slots, or None when the SlotSet was closed or
        replaced while the completion was in flight.
        """
        remaining = slot_set.compute_remaining()
        if remaining <= 0:
            raise NoCaloriesRemainingError("No calories remaining for today")
        if slot_set.generating or slot_set.pending_swaps:
            raise PlanBusyError("A plan update is already in progress")

        settings = meal_settings or {}
        requested = [
            (meal, settings.get(meal, LocationType.HOME)) for meal in GUARANTEED_MEALS
        ]
        revision = slot_set.revision
        slot_set.generating = True
        try:
            profile = self.profile_service.get_profile(slot_set.user_id)
            needs_menu = any(mode is LocationType.RESTAURANT for _, mode in requested)
            nearby = self._nearby(location) if needs_menu else []
            home_items = self.meal_log_service.home_dishes(slot_set.user_id)
            budget = per_slot_budget(remaining, len(requested))
            prompt = build_plan_prompt(
                meal_settings=requested,
                remaining_calories=remaining,
                per_meal_budget=budget,
                dietary_preferences=profile.dietary_preferences,
                feedback=feedback,
                nearby_items=nearby,
                home_dishes=[dish.food_name for dish in home_items],
            )
            slots = await self._complete_until(
                prompt,
                lambda text: self.generator.generate(text, budget=budget),
                action="plan",
            )
        finally:
            slot_set.generating = False

        if slot_set.closed or slot_set.revision != revision:
            _logger.info("Discarding stale plan for %s", slot_set.date_key)
            return None
        if len(slots) < len(requested):
            _logger.warning(
                "Plan has fewer meals than requested: got=%s requested=%s",
                len(slots),
                len(requested),
            )
        slots = with_alternatives(slots, nearby_items=nearby, home_items=home_items)
        slot_set.dietary_preferences = list(profile.dietary_preferences)
        slot_set.replace_all(slots)
        return slots

    async def swap_slot(
        self,
        slot_set: SlotSet,
        slot_id: str,
        reason: str = "",
        location: GeoPoint | None = None,
    ) -> MealSlot | None:
        """Regenerate a single slot's dish.

        Returns the updated slot, or None when the id is unknown or the result
        arrived after the SlotSet was closed or replaced, or after the slot's
        dish or location was changed by another edit.
        """
        slot = slot_set.get(slot_id)
        if slot is None:
            return None
        if slot_set.generating:
            raise PlanBusyError("A full plan generation is in progress")
        token = slot_set.begin_swap(slot_id)
        if token is None:
            raise PlanBusyError(f"Slot {slot_id} is already being swapped")

        revision = slot_set.revision
        try:
            profile = self.profile_service.get_profile(slot_set.user_id)
            nearby = (
                self._nearby(location)
                if slot.location_type is LocationType.RESTAURANT
                else []
            )
            remaining = slot_set.compute_remaining()
            prompt = build_swap_prompt(
                slot=slot,
                reason=reason,
                remaining_calories=remaining,
                per_meal_budget=slot.budget or remaining,
                dietary_preferences=profile.dietary_preferences,
                nearby_items=nearby,
                home_dishes=self.meal_log_service.home_dish_names(slot_set.user_id),
            )
            dish: ParsedDish = await self._complete_until(
                prompt, self.generator.parse_first, action=f"swap:{slot_id}"
            )
        except BaseException:
            slot_set.finish_swap(slot_id, token)
            raise

        cancelled = not slot_set.is_swap_current(slot_id, token)
        slot_set.finish_swap(slot_id, token)
        if slot_set.closed or slot_set.revision != revision or cancelled:
            _logger.info("Discarding stale swap for slot %s", slot_id)
            return None
        slot_set.apply_swap(slot_id, dish)
        return slot_set.get(slot_id)

    def complete_slot(
        self,
        slot_set: SlotSet,
        slot_id: str,
        logged_at: datetime | None = None,
        timezone_name: str = "UTC",
    ) -> MealSlot | None:
        """Log a slot's dish as eaten, clear it and persist the plan."""
        slot = slot_set.get(slot_id)
        if slot is None or slot.menu_item is None:
            return None
        self.meal_log_service.log_planned_meal(
            slot_set.user_id, slot, logged_at or datetime.now(tz=UTC)
        )
        slot_set.complete(slot_id)
        slot_set.consumed = self.meal_log_service.consumed_calories(
            slot_set.user_id, slot_set.plan_date, timezone_name
        )
        self.save(slot_set)
        return slot_set.get(slot_id)

    def save(self, slot_set: SlotSet) -> PlanDocument:
        """Persist the slots verbatim under the day's key."""
        document = slot_set.to_document()
        self.plan_repository.save_plan(slot_set.user_id, slot_set.plan_date, document)
        slot_set.mark_saved()
        return document

    def _nearby(self, location: GeoPoint | None) -> list[MenuItem]:
        if location is None:
            return []
        return self.menu_service.fetch(location, self.radius_km)

    async def _complete_until(
        self,
        prompt: ChatPrompt,
        parse: Callable[[str], _T | None],
        *,
        action: str,
    ) -> _T:
        """Call the chat client, retrying while the output parses to nothing."""
        attempt = 0
        while True:
            attempt += 1
            try:
                text = await self.chat_client.complete(
                    model=self.model,
                    temperature=self.temperature,
                    system_prompt=prompt.system,
                    user_prompt=prompt.user,
                )
            except Exception as exc:
                _logger.warning(
                    "Generation %s failed (attempt %s/%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise GenerationFailedError(
                        f"Meal generation failed: {exc}"
                    ) from exc
            else:
                result = parse(text)
                if result:
                    return result
                _logger.warning(
                    "Generation %s returned no usable meal (attempt %s/%s)",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                )
                if attempt > self.retry_attempts:
                    raise GenerationFailedError(
                        "No meal plan returned. Try again or modify your feedback."
                    )
            await asyncio.sleep(self.retry_delay_seconds)


@dataclass
class ActivePlanRegistry:
    """Working SlotSets between requests, keyed by user and day.

    Holds at most ``max_plans`` entries; the least recently used plans with
    no generation or swap in flight are closed and dropped first.
    """

    planning_service: PlanningService
    max_plans: int = 256
    _plans: dict[tuple[UUID, date], SlotSet] = field(default_factory=dict)

    def get(self, user_id: UUID, plan_date: date) -> SlotSet:
        """Return the working plan, loading it on first use."""
        key = (user_id, plan_date)
        slot_set = self._plans.pop(key, None)
        if slot_set is None:
            slot_set = self.planning_service.load_day(user_id, plan_date)
        self._plans[key] = slot_set
        self._evict(keep=key)
        return slot_set

    def __len__(self) -> int:
        return len(self._plans)

    def reload(self, user_id: UUID, plan_date: date) -> SlotSet:
        """Drop the working plan, abandoning in-flight calls, and reload it."""
        previous = self._plans.pop((user_id, plan_date), None)
        if previous is not None:
            previous.close()
        return self.get(user_id, plan_date)

    def discard_other_days(self, user_id: UUID, keep: date) -> None:
        """Close and drop working plans for days other than ``keep``."""
        for key in [k for k in self._plans if k[0] == user_id and k[1] != keep]:
            self._plans.pop(key).close()

    def _evict(self, keep: tuple[UUID, date]) -> None:
        idle = [
            key
            for key, slot_set in self._plans.items()
            if key != keep
            and not slot_set.generating
            and not slot_set.pending_swaps
        ]
        for key in idle[: max(0, len(self._plans) - self.max_plans)]:
            _logger.info("Evicting working plan for %s", key[1].isoformat())
            self._plans.pop(key).close()

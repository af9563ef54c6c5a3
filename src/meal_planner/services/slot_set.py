"""Day plan slot collection and its edit operations."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from uuid import UUID

from meal_planner.domain.plan_documents import PlanDocument, SlotDocument
from meal_planner.domain.plans import (
    DEFAULT_SLOTS,
    MealSlot,
    MenuItem,
    ParsedDish,
    PlanState,
)


def remaining_calories(daily_target: int, consumed: int) -> int:
    """Return calories left for the day, never negative."""
    return max(0, daily_target - consumed)


def default_slots() -> list[MealSlot]:
    """Return the default empty slots for a new day."""
    return [
        MealSlot(id=slot.id, name=slot.name, time=slot.default_time)
        for slot in DEFAULT_SLOTS
    ]


@dataclass
class SlotSet:
    """Ordered meal slots for one user and calendar day.

    Every per-slot operation ignores identifiers that are not in the set.
    Edits that change a slot's dish or location cancel a swap pending on that
    slot, so the swap result is dropped when it arrives.
    ``revision`` changes whenever the slot list is replaced wholesale, so a
    caller holding an older revision knows its pending result is stale.
    """

    user_id: UUID
    plan_date: date
    slots: list[MealSlot] = field(default_factory=list)
    daily_target: int = 0
    consumed: int = 0
    dietary_preferences: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    saved: bool = False
    revision: int = 0
    generating: bool = False
    pending_swaps: dict[str, int] = field(default_factory=dict)
    closed: bool = False
    _swap_serial: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        ids = [slot.id for slot in self.slots]
        if len(ids) != len(set(ids)):
            raise ValueError("Slot identifiers must be unique within a day")

    @property
    def date_key(self) -> str:
        """Return the ISO date string the plan is stored under."""
        return self.plan_date.isoformat()

    @property
    def state(self) -> PlanState:
        """Return the lifecycle state of the plan."""
        if self.saved:
            return PlanState.SAVED
        if any(slot.is_planned or slot.logged for slot in self.slots):
            return PlanState.PLANNED
        return PlanState.UNPLANNED

    def compute_remaining(self) -> int:
        """Return the day's remaining calories."""
        return remaining_calories(self.daily_target, self.consumed)

    def get(self, slot_id: str) -> MealSlot | None:
        """Return the slot with the given id, if present."""
        for slot in self.slots:
            if slot.id == slot_id:
                return slot
        return None

    def replace_all(self, new_slots: list[MealSlot]) -> None:
        """Install a freshly generated slot list."""
        ids = [slot.id for slot in new_slots]
        if len(ids) != len(set(ids)):
            raise ValueError("Slot identifiers must be unique within a day")
        self.slots = list(new_slots)
        self.revision += 1
        self.pending_swaps.clear()
        self.saved = False

    def update_time(self, slot_id: str, new_time: str) -> bool:
        """Set a slot's time of day."""
        return self._update(slot_id, time=new_time)

    def set_notify(self, slot_id: str, notify: bool) -> bool:
        """Set a slot's reminder flag."""
        return self._update(slot_id, notify=notify)

    def toggle_location(self, slot_id: str) -> bool:
        """Flip home/restaurant, dropping the dish chosen for the old mode."""
        slot = self.get(slot_id)
        if slot is None:
            return False
        self.pending_swaps.pop(slot_id, None)
        return self._update(
            slot_id,
            location_type=slot.location_type.flipped(),
            menu_item=None,
            alternatives=[],
            reason="",
        )

    def begin_swap(self, slot_id: str) -> int | None:
        """Mark a slot as having a swap in flight and return its token."""
        if self.get(slot_id) is None or slot_id in self.pending_swaps:
            return None
        self._swap_serial += 1
        self.pending_swaps[slot_id] = self._swap_serial
        return self._swap_serial

    def is_swap_current(self, slot_id: str, token: int) -> bool:
        """Return True while the swap holding ``token`` was not cancelled."""
        return self.pending_swaps.get(slot_id) == token

    def finish_swap(self, slot_id: str, token: int | None = None) -> None:
        """Clear the in-flight marker for a slot, if it still holds ``token``."""
        if token is None or self.pending_swaps.get(slot_id) == token:
            self.pending_swaps.pop(slot_id, None)

    def apply_swap(self, slot_id: str, dish: ParsedDish) -> bool:
        """Replace only the dish and reason of a slot."""
        self.finish_swap(slot_id)
        return self._update(
            slot_id, menu_item=dish.to_menu_item(), reason=dish.reason, logged=False
        )

    def rotate_alternative(self, slot_id: str) -> bool:
        """Promote the first alternative; the current dish moves to the back."""
        slot = self.get(slot_id)
        if slot is None or slot.menu_item is None or not slot.alternatives:
            return False
        self.pending_swaps.pop(slot_id, None)
        options = [*slot.alternatives, slot.menu_item]
        return self._update(
            slot_id, menu_item=options[0], alternatives=options[1:], reason=""
        )

    def complete(self, slot_id: str) -> MenuItem | None:
        """Clear a slot's dish after it was logged, returning the dish."""
        slot = self.get(slot_id)
        if slot is None or slot.menu_item is None:
            return None
        self.pending_swaps.pop(slot_id, None)
        self._update(slot_id, menu_item=None, logged=True)
        return slot.menu_item

    def mark_saved(self) -> None:
        """Record that the current slots were persisted."""
        self.saved = True

    def close(self) -> None:
        """Stop accepting results from calls that are still in flight."""
        self.closed = True

    def to_document(self) -> PlanDocument:
        """Return the persisted representation of the slots."""
        return PlanDocument(
            slots=[SlotDocument.from_slot(slot) for slot in self.slots],
            created_at=self.created_at,
            dietary_preferences=list(self.dietary_preferences),
        )

    def _update(self, slot_id: str, **changes: object) -> bool:
        for index, slot in enumerate(self.slots):
            if slot.id == slot_id:
                self.slots[index] = replace(slot, **changes)
                self.saved = False
                return True
        return False

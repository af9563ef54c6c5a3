"""Pure transformation from generated text to meal slots."""

from dataclasses import dataclass
from datetime import UTC, datetime

from meal_planner.domain.plans import MealSlot, ParsedDish
from meal_planner.services.response_parser import parse_record, split_records


@dataclass
class PlanGenerator:
    """Turns a raw multi-record completion into ordered meal slots.

    Performs no I/O. Malformed records are skipped, so the result may hold
    fewer slots than meals were requested; an empty list means nothing usable
    was produced.
    """

    def generate(
        self,
        text: str,
        *,
        budget: int = 0,
        generated_at: datetime | None = None,
    ) -> list[MealSlot]:
        """Build one slot per well-formed record, preserving source order."""
        stamp = generated_at or datetime.now(tz=UTC)
        prefix = str(int(stamp.timestamp() * 1000))
        slots: list[MealSlot] = []
        for position, record in enumerate(split_records(text)):
            parsed = parse_record(record)
            if parsed is None:
                continue
            slots.append(
                MealSlot(
                    id=f"{prefix}-{position}",
                    name=parsed.meal,
                    time="",
                    location_type=parsed.location_type,
                    menu_item=parsed.to_menu_item(),
                    alternatives=[],
                    reason=parsed.reason,
                    notify=False,
                    budget=budget,
                )
            )
        return slots

    def parse_first(self, text: str) -> ParsedDish | None:
        """Return the first well-formed record of a completion, if any."""
        for record in split_records(text):
            parsed = parse_record(record)
            if parsed is not None:
                return parsed
        return None


def per_slot_budget(remaining_calories: int, meal_count: int) -> int:
    """Split the remaining calories evenly across requested meals."""
    if meal_count <= 0:
        return 0
    return max(remaining_calories, 0) // meal_count

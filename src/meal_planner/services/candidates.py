"""Budget-aware ranking of dish candidates for slot alternatives."""

from collections.abc import Iterable
from dataclasses import replace

from meal_planner.domain.plans import LocationType, MealSlot, MenuItem

MAX_ALTERNATIVES = 3


def rank_candidates(candidates: Iterable[MenuItem], budget: int) -> list[MenuItem]:
    """Return candidates within budget, closest to it first, then by protein.

    A budget of 0 or less means no budget is known and nothing is filtered.
    """
    pool = list(candidates)
    if budget > 0:
        pool = [item for item in pool if item.calories <= budget]
    return sorted(pool, key=lambda item: (abs(budget - item.calories), -item.protein))


def with_alternatives(
    slots: list[MealSlot],
    *,
    nearby_items: list[MenuItem],
    home_items: list[MenuItem],
    limit: int = MAX_ALTERNATIVES,
) -> list[MealSlot]:
    """Attach up to ``limit`` ranked alternatives to every planned slot."""
    result: list[MealSlot] = []
    for slot in slots:
        if slot.menu_item is None:
            result.append(slot)
            continue
        pool = (
            nearby_items
            if slot.location_type is LocationType.RESTAURANT
            else home_items
        )
        chosen = slot.menu_item.food_name.strip().lower()
        ranked = [
            item
            for item in rank_candidates(pool, slot.budget)
            if item.food_name.strip().lower() != chosen
        ]
        result.append(replace(slot, alternatives=ranked[:limit]))
    return result

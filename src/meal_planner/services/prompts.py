"""Prompt construction for plan generation and single-meal swaps."""

from collections.abc import Iterable
from dataclasses import dataclass

from meal_planner.domain.plans import LocationType, MealSlot, MenuItem
from meal_planner.services.response_parser import (
    LABEL_MEAL,
    LABEL_REASON,
    NO_ADDRESS_SENTINEL,
    render_record_template,
)

PLAN_SYSTEM_PROMPT = """\
You are a meal recommendation assistant.
Only return answers in the exact format specified below.
Never guess the calories for restaurant items; use the data provided.
Include macros (protein, carbs, fat) for each dish.
Ignore meal timing constraints."""

SWAP_SYSTEM_PROMPT = """\
You are a meal swapping assistant.
Only return the swapped meal in the exact format provided.
Include macros (protein, carbs, fat).
Use only the provided restaurant data if applicable.
Ignore meal timing constraints."""

NO_RESTAURANT_DATA = "No restaurant data found."
HOME_PLAN_INSTRUCTION = (
    "User will cook at home. You can invent a dish with realistic macros."
)
HOME_SWAP_INSTRUCTION = "User will cook at home. Provide realistic macros."


@dataclass(frozen=True)
class RestaurantGroup:
    """Dishes served by one restaurant."""

    name: str
    address: str
    dishes: list[MenuItem]


@dataclass(frozen=True)
class ChatPrompt:
    """System and user instructions for one completion call."""

    system: str
    user: str


def group_by_restaurant(items: Iterable[MenuItem]) -> list[RestaurantGroup]:
    """Group dishes by (restaurant name, address) in first-seen order."""
    groups: dict[tuple[str, str], list[MenuItem]] = {}
    for item in items:
        key = (
            item.restaurant_name or "Unknown",
            item.restaurant_address or NO_ADDRESS_SENTINEL,
        )
        groups.setdefault(key, []).append(item)
    return [
        RestaurantGroup(name=name, address=address, dishes=dishes)
        for (name, address), dishes in groups.items()
    ]


def format_restaurant_block(groups: list[RestaurantGroup]) -> str:
    """Format grouped dishes as the restaurant listing used in prompts."""
    if not groups:
        return NO_RESTAURANT_DATA
    lines: list[str] = []
    for group in groups:
        lines.append(f"Restaurant: {group.name}, {group.address}")
        lines.extend(f"  - {_format_dish(dish)}" for dish in group.dishes)
        lines.append("")
    return "\n".join(lines).strip()


def format_home_block(instruction: str, home_dishes: list[str]) -> str:
    """Format the home-cooking instruction, with past dishes as hints."""
    if not home_dishes:
        return instruction
    return f"{instruction}\nDishes previously cooked at home: {', '.join(home_dishes)}"


def format_preferences(preferences: list[str]) -> str:
    """Join dietary preference labels, or 'None' when there are none."""
    return ", ".join(preferences) if preferences else "None"


def build_plan_prompt(  # noqa: PLR0913
    *,
    meal_settings: list[tuple[str, LocationType]],
    remaining_calories: int,
    per_meal_budget: int,
    dietary_preferences: list[str],
    feedback: str,
    nearby_items: list[MenuItem],
    home_dishes: list[str],
) -> ChatPrompt:
    """Build the prompt for a full day plan."""
    restaurant_block = format_restaurant_block(group_by_restaurant(nearby_items))
    home_block = format_home_block(HOME_PLAN_INSTRUCTION, home_dishes)
    numbered = "\n".join(
        f"{index}) {meal.capitalize()}"
        for index, (meal, _) in enumerate(meal_settings, start=1)
    )
    lines = [
        "Generate a meal plan for today with these constraints:",
        "",
        f"**Calories Remaining**: {remaining_calories}",
        f"**Calorie Budget per Meal**: {per_meal_budget}",
        f"**Dietary Preferences**: {format_preferences(dietary_preferences)}",
        f"**User Feedback**: {feedback.strip() or 'None'}",
        "",
        f"We have {len(meal_settings)} guaranteed meals:",
        numbered,
        "",
        "If needed, feel free to add an extra snack.",
        "Keep each dish at or under the calorie budget per meal.",
        "",
        "For each meal, use exactly this format (no time required):",
        "",
        render_record_template(),
        "",
        "Available dishes per meal:",
    ]
    for meal, location in meal_settings:
        block = restaurant_block if location is LocationType.RESTAURANT else home_block
        lines.append("")
        lines.append(f"{meal.upper()} ({location.value}):")
        lines.append(block)
    return ChatPrompt(system=PLAN_SYSTEM_PROMPT, user="\n".join(lines))


def build_swap_prompt(  # noqa: PLR0913
    *,
    slot: MealSlot,
    reason: str,
    remaining_calories: int,
    per_meal_budget: int,
    dietary_preferences: list[str],
    nearby_items: list[MenuItem],
    home_dishes: list[str],
) -> ChatPrompt:
    """Build the prompt that regenerates one slot's dish."""
    if slot.location_type is LocationType.RESTAURANT:
        available = format_restaurant_block(group_by_restaurant(nearby_items))
    else:
        available = format_home_block(HOME_SWAP_INSTRUCTION, home_dishes)
    lines = [
        "I want to swap one meal.",
        "",
        f"**Meal to swap**: {slot.name}",
        f"**Reason**: {reason.strip() or 'None'}",
        f"**Calories Remaining**: {remaining_calories}",
        f"**Calorie Budget for this Meal**: {per_meal_budget}",
        f"**Dietary Preferences**: {format_preferences(dietary_preferences)}",
        f"**Meal Setting**: {slot.location_type.value}",
        "",
        "Keep the dish at or under the calorie budget for this meal.",
        "Here are available dishes for this meal:",
        available,
        "",
        "Only return this exact format:",
        render_record_template({LABEL_MEAL: slot.name, LABEL_REASON: "<reason>"}),
    ]
    return ChatPrompt(system=SWAP_SYSTEM_PROMPT, user="\n".join(lines))


def _format_dish(dish: MenuItem) -> str:
    return (
        f"{dish.food_name} ({dish.calories} cal, "
        f"P:{dish.protein}g C:{dish.carbs}g F:{dish.fat}g)"
    )

"""Record format shared by prompt construction and response parsing.

Generated plans come back as blocks separated by a ``---`` line, each block
holding ``**Label**: value`` lines. The labels below are the whole wire
format; prompts render their templates from the same constants so the two
sides cannot drift apart.
"""

import logging
import re

from meal_planner.domain.plans import ParsedDish

RECORD_FORMAT_VERSION = 1
RECORD_DELIMITER = "---"
HOME_SENTINEL = "home"
NO_ADDRESS_SENTINEL = "N/A"

LABEL_MEAL = "Meal"
LABEL_DISH = "Dish"
LABEL_CALORIES = "Calories"
LABEL_PROTEIN = "Protein"
LABEL_CARBS = "Carbs"
LABEL_FAT = "Fat"
LABEL_RESTAURANT = "Restaurant"
LABEL_ADDRESS = "Address"
LABEL_REASON = "Why this dish"

RECORD_LABELS: tuple[str, ...] = (
    LABEL_MEAL,
    LABEL_DISH,
    LABEL_CALORIES,
    LABEL_PROTEIN,
    LABEL_CARBS,
    LABEL_FAT,
    LABEL_RESTAURANT,
    LABEL_ADDRESS,
    LABEL_REASON,
)
MANDATORY_LABELS: frozenset[str] = frozenset(
    {
        LABEL_MEAL,
        LABEL_DISH,
        LABEL_CALORIES,
        LABEL_RESTAURANT,
        LABEL_ADDRESS,
        LABEL_REASON,
    }
)

_LABEL_PATTERNS = {
    label: re.compile(rf"\*\*{re.escape(label)}\*\*:[ \t]*(\S[^\r\n]*)")
    for label in RECORD_LABELS
}
_DELIMITER_PATTERN = re.compile(rf"^[ \t]*{re.escape(RECORD_DELIMITER)}[ \t]*$", re.M)
_LEADING_INT = re.compile(r"^\d+")
_DIGIT_GROUP = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")

_logger = logging.getLogger(__name__)


def render_record_template(values: dict[str, str] | None = None) -> str:
    """Render one delimited record with placeholders for the model to fill."""
    placeholders = {
        LABEL_MEAL: "<meal name>",
        LABEL_DISH: "<dish name>",
        LABEL_CALORIES: "<kcal>",
        LABEL_PROTEIN: "<g>",
        LABEL_CARBS: "<g>",
        LABEL_FAT: "<g>",
        LABEL_RESTAURANT: f"<restaurant name or '{HOME_SENTINEL}'>",
        LABEL_ADDRESS: f"<restaurant address or '{NO_ADDRESS_SENTINEL}'>",
        LABEL_REASON: "<short reason>",
    }
    placeholders.update(values or {})
    lines = [RECORD_DELIMITER]
    lines.extend(f"**{label}**: {placeholders[label]}" for label in RECORD_LABELS)
    lines.append(RECORD_DELIMITER)
    return "\n".join(lines)


def split_records(text: str) -> list[str]:
    """Split a raw completion into non-empty record blocks, in order."""
    return [chunk for chunk in _DELIMITER_PATTERN.split(text) if chunk.strip()]


def parse_record(record: str) -> ParsedDish | None:
    """Parse a single record, returning None when it is malformed."""
    fields: dict[str, str] = {}
    for label, pattern in _LABEL_PATTERNS.items():
        match = pattern.search(record)
        if match:
            fields[label] = match.group(1).strip()

    missing = MANDATORY_LABELS.difference(fields)
    if missing:
        _logger.debug("Dropping record missing labels: %s", sorted(missing))
        return None

    calories = _parse_int(fields[LABEL_CALORIES])
    if calories is None:
        _logger.debug("Dropping record with calories=%r", fields[LABEL_CALORIES])
        return None

    restaurant = fields[LABEL_RESTAURANT]
    if restaurant.lower() == HOME_SENTINEL:
        restaurant = ""

    return ParsedDish(
        meal=fields[LABEL_MEAL],
        dish=fields[LABEL_DISH],
        calories=calories,
        protein=_parse_int(fields.get(LABEL_PROTEIN, "")) or 0,
        carbs=_parse_int(fields.get(LABEL_CARBS, "")) or 0,
        fat=_parse_int(fields.get(LABEL_FAT, "")) or 0,
        restaurant_name=restaurant,
        address=fields[LABEL_ADDRESS],
        reason=fields[LABEL_REASON],
    )


def _parse_int(value: str) -> int | None:
    """Parse the leading integer of a value such as ``"1,200 kcal"``.

    Commas between digit groups are thousands separators.
    """
    match = _LEADING_INT.match(_DIGIT_GROUP.sub("", value.strip()))
    if match is None:
        return None
    return int(match.group(0))

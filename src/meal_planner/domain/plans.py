"""Domain models for daily meal plans."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class LocationType(StrEnum):
    """Where a planned meal is eaten."""

    HOME = "home"
    RESTAURANT = "restaurant"

    def flipped(self) -> "LocationType":
        """Return the other location mode."""
        if self is LocationType.HOME:
            return LocationType.RESTAURANT
        return LocationType.HOME


class PlanState(StrEnum):
    """Lifecycle state of a day's plan."""

    UNPLANNED = "unplanned"
    PLANNED = "planned"
    SAVED = "saved"


@dataclass(frozen=True)
class MenuItem:
    """A dish candidate, either from a restaurant menu or cooked at home."""

    food_name: str
    calories: int
    protein: int = 0
    carbs: int = 0
    fat: int = 0
    restaurant_name: str = ""
    restaurant_address: str = ""
    id: str = ""
    created_at: datetime | None = None

    @property
    def is_home(self) -> bool:
        """Return True when the dish has no restaurant provenance."""
        return not self.restaurant_name


@dataclass(frozen=True)
class MealSlot:
    """One meal occasion within a day.

    ``menu_item`` is None both before the slot is planned and after it has
    been logged; ``logged`` tells the two apart.
    """

    id: str
    name: str
    time: str = ""
    location_type: LocationType = LocationType.HOME
    menu_item: MenuItem | None = None
    alternatives: list[MenuItem] = field(default_factory=list)
    reason: str = ""
    notify: bool = False
    budget: int = 0
    logged: bool = False

    @property
    def is_planned(self) -> bool:
        """Return True when the slot currently holds a dish."""
        return self.menu_item is not None

    @property
    def is_completed(self) -> bool:
        """Return True when the slot's dish was logged."""
        return self.menu_item is None and self.logged


@dataclass(frozen=True)
class ParsedDish:
    """Structured dish parsed from one generated record."""

    meal: str
    dish: str
    calories: int
    protein: int
    carbs: int
    fat: int
    restaurant_name: str
    address: str
    reason: str

    @property
    def location_type(self) -> LocationType:
        """Return the location mode implied by the restaurant field."""
        if self.restaurant_name:
            return LocationType.RESTAURANT
        return LocationType.HOME

    def to_menu_item(self) -> MenuItem:
        """Convert the parsed record into a menu item."""
        return MenuItem(
            food_name=self.dish,
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
            restaurant_name=self.restaurant_name,
            restaurant_address=self.address,
        )


@dataclass(frozen=True)
class DefaultSlot:
    """Default meal occasion used to initialize an empty day."""

    id: str
    name: str
    default_time: str


DEFAULT_SLOTS: tuple[DefaultSlot, ...] = (
    DefaultSlot(id="breakfast", name="Breakfast", default_time="08:30"),
    DefaultSlot(id="lunch", name="Lunch", default_time="12:30"),
    DefaultSlot(id="snack", name="Snack", default_time="16:00"),
    DefaultSlot(id="dinner", name="Dinner", default_time="19:00"),
)

GUARANTEED_MEALS: tuple[str, ...] = ("breakfast", "lunch", "snack", "dinner", "snack")

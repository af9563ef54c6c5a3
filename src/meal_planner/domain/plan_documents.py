"""Persisted document shapes for day plans."""

import math
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from meal_planner.domain.plans import LocationType, MealSlot, MenuItem


def to_non_negative_int(value: object) -> int:
    """Read a stored numeric value; missing or non-numeric values become 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float) and math.isfinite(value):
        return max(int(value), 0)
    return 0


class MenuItemDocument(BaseModel):
    """Stored menu item."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    food_name: str = Field(default="", alias="foodName")
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0
    restaurant_name: str = Field(default="", alias="restaurantName")
    restaurant_address: str = Field(default="", alias="restaurantAddress")
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @field_validator("calories", "protein", "carbs", "fat", mode="before")
    @classmethod
    def _numeric_or_zero(cls, value: object) -> int:
        return to_non_negative_int(value)

    @field_validator("restaurant_name", "restaurant_address", "id", mode="before")
    @classmethod
    def _string_or_empty(cls, value: object) -> str:
        return "" if value is None else str(value)

    @classmethod
    def from_item(cls, item: MenuItem) -> "MenuItemDocument":
        return cls(
            id=item.id,
            food_name=item.food_name,
            calories=item.calories,
            protein=item.protein,
            carbs=item.carbs,
            fat=item.fat,
            restaurant_name=item.restaurant_name,
            restaurant_address=item.restaurant_address,
            created_at=item.created_at,
        )

    def to_item(self) -> MenuItem:
        return MenuItem(
            id=self.id,
            food_name=self.food_name,
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fat=self.fat,
            restaurant_name=self.restaurant_name,
            restaurant_address=self.restaurant_address,
            created_at=self.created_at,
        )


class SlotDocument(BaseModel):
    """Stored meal slot."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    time: str = ""
    location_type: LocationType = Field(
        default=LocationType.HOME, alias="locationType"
    )
    menu_item: MenuItemDocument | None = Field(default=None, alias="menuItem")
    alternatives: list[MenuItemDocument] = Field(default_factory=list)
    reason: str = ""
    notify: bool = False
    budget: int = 0
    logged: bool = False

    @field_validator("budget", mode="before")
    @classmethod
    def _budget_or_zero(cls, value: object) -> int:
        return to_non_negative_int(value)

    @field_validator("location_type", mode="before")
    @classmethod
    def _known_location(cls, value: object) -> LocationType:
        if isinstance(value, str) and value.strip().lower() == "restaurant":
            return LocationType.RESTAURANT
        return LocationType.HOME

    @field_validator("time", "reason", mode="before")
    @classmethod
    def _text_or_empty(cls, value: object) -> str:
        return "" if value is None else str(value)

    @classmethod
    def from_slot(cls, slot: MealSlot) -> "SlotDocument":
        return cls(
            id=slot.id,
            name=slot.name,
            time=slot.time,
            location_type=slot.location_type,
            menu_item=(
                MenuItemDocument.from_item(slot.menu_item) if slot.menu_item else None
            ),
            alternatives=[MenuItemDocument.from_item(alt) for alt in slot.alternatives],
            reason=slot.reason,
            notify=slot.notify,
            budget=slot.budget,
            logged=slot.logged,
        )

    def to_slot(self) -> MealSlot:
        return MealSlot(
            id=self.id,
            name=self.name,
            time=self.time,
            location_type=self.location_type,
            menu_item=self.menu_item.to_item() if self.menu_item else None,
            alternatives=[alt.to_item() for alt in self.alternatives],
            reason=self.reason,
            notify=self.notify,
            budget=self.budget,
            logged=self.logged,
        )


class PlanDocument(BaseModel):
    """Stored day plan: the verbatim slot list plus metadata."""

    model_config = ConfigDict(populate_by_name=True)

    slots: list[SlotDocument] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")
    dietary_preferences: list[str] = Field(
        default_factory=list, alias="dietaryPreferences"
    )

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-ready dict using the stored field names."""
        return self.model_dump(mode="json", by_alias=True)

"""Request models for the day plan API."""

from pydantic import BaseModel, Field

from meal_planner.domain.plans import LocationType


class LocationModel(BaseModel):
    """Optional caller location used for nearby restaurant lookup."""

    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)


class GeneratePlanRequest(LocationModel):
    """Full plan generation request."""

    meal_settings: dict[str, LocationType] = Field(default_factory=dict)
    feedback: str = ""


class SwapSlotRequest(LocationModel):
    """Single slot regeneration request."""

    reason: str = ""


class SlotUpdateRequest(BaseModel):
    """Editable slot fields."""

    time: str | None = None
    notify: bool | None = None


class PreferencesRequest(BaseModel):
    """Dietary preference labels."""

    dietary_preferences: list[str]

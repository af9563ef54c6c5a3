"""Domain models for restaurants and their menus."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GeoPoint:
    """Latitude/longitude pair in degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class RestaurantRecord:
    """Restaurant stored in the database with its raw menu items."""

    id: str
    name: str
    address: str
    location: GeoPoint | None
    items: list[dict[str, object]] = field(default_factory=list)

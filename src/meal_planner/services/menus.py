"""Nearby restaurant menu lookup."""

import logging
import math
from dataclasses import dataclass
from typing import Protocol

from meal_planner.domain.plan_documents import to_non_negative_int
from meal_planner.domain.plans import MenuItem
from meal_planner.domain.restaurants import GeoPoint, RestaurantRecord
from meal_planner.services.cache import Cache

EARTH_RADIUS_KM = 6371.0

_logger = logging.getLogger(__name__)


class RestaurantRepository(Protocol):
    """Read access to stored restaurants."""

    def list_restaurants(self) -> list[RestaurantRecord]:
        """Return every restaurant with its menu items."""


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points (haversine)."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(
        d_lon / 2
    ) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


@dataclass
class NearbyMenuService:
    """Flattens the menus of restaurants within a radius into dish candidates."""

    repository: RestaurantRepository
    cache: Cache
    ttl_seconds: int = 600

    def fetch(self, location: GeoPoint, radius_km: float) -> list[MenuItem]:
        """Return every dish served within radius_km of location."""
        cache_key = (
            f"menus:{location.latitude:.5f}:{location.longitude:.5f}:{radius_km:.2f}"
        )
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        items: list[MenuItem] = []
        for restaurant in self.repository.list_restaurants():
            if restaurant.location is None or not restaurant.items:
                continue
            if distance_km(restaurant.location, location) >= radius_km:
                continue
            items.extend(_menu_items(restaurant))
        _logger.info(
            "Nearby menu lookup: radius_km=%s dishes=%s", radius_km, len(items)
        )
        self.cache.set(cache_key, items, ttl_seconds=self.ttl_seconds)
        return items


def _menu_items(restaurant: RestaurantRecord) -> list[MenuItem]:
    items: list[MenuItem] = []
    for index, raw in enumerate(restaurant.items):
        name = str(raw.get("foodName") or "").strip()
        if not name:
            continue
        items.append(
            MenuItem(
                id=str(raw.get("id") or f"{restaurant.id}-{index}"),
                food_name=name,
                calories=to_non_negative_int(raw.get("calories")),
                protein=to_non_negative_int(raw.get("protein")),
                carbs=to_non_negative_int(raw.get("carbs")),
                fat=to_non_negative_int(raw.get("fat")),
                restaurant_name=restaurant.name,
                restaurant_address=restaurant.address,
            )
        )
    return items


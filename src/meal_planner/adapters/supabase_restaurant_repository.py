"""Supabase repository for restaurants and menus."""

from dataclasses import dataclass

from supabase import Client

from meal_planner.domain.restaurants import GeoPoint, RestaurantRecord
from meal_planner.services.menus import RestaurantRepository


@dataclass
class SupabaseRestaurantRepository(RestaurantRepository):
    """Supabase implementation for restaurant lookups."""

    client: Client

    def list_restaurants(self) -> list[RestaurantRecord]:
        """Return all restaurants with their menu items."""
        response = (
            self.client.table("restaurants")
            .select("id, name, address, latitude, longitude, items")
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> RestaurantRecord:
    latitude = row.get("latitude")
    longitude = row.get("longitude")
    location = (
        GeoPoint(latitude=float(latitude), longitude=float(longitude))
        if isinstance(latitude, int | float) and isinstance(longitude, int | float)
        else None
    )
    items = row.get("items")
    return RestaurantRecord(
        id=str(row.get("id", "")),
        name=str(row.get("name") or "Unknown"),
        address=str(row.get("address") or ""),
        location=location,
        items=[item for item in items if isinstance(item, dict)]
        if isinstance(items, list)
        else [],
    )

"""Supabase repository for day plans."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from meal_planner.domain.plan_documents import PlanDocument
from meal_planner.services.planning import PlanRepository


@dataclass
class SupabasePlanRepository(PlanRepository):
    """Supabase implementation for per-day plan documents."""

    client: Client

    def get_plan(self, user_id: UUID, plan_date: date) -> PlanDocument | None:
        """Return the stored plan for a day, if present."""
        response = (
            self.client.table("day_plans")
            .select("plan_json")
            .eq("user_id", str(user_id))
            .eq("plan_date", plan_date.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return PlanDocument.model_validate(response.data[0]["plan_json"])

    def save_plan(self, user_id: UUID, plan_date: date, document: PlanDocument) -> None:
        """Overwrite the stored plan for a day."""
        response = (
            self.client.table("day_plans")
            .upsert(
                {
                    "user_id": str(user_id),
                    "plan_date": plan_date.isoformat(),
                    "plan_json": document.to_payload(),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id,plan_date",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save day plan")

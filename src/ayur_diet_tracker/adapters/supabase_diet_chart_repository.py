"""Supabase repository for diet charts, meals and meal foods."""

from dataclasses import dataclass

from supabase import Client

from ayur_diet_tracker.adapters.supabase_rows import (
    PATIENT_EMBED,
    delete_returning,
    first_or_raise,
    parse_chart,
    parse_food,
    parse_meal,
)
from ayur_diet_tracker.domain.diet_charts import (
    DietChartRecord,
    MealFoodRecord,
    MealRecord,
)
from ayur_diet_tracker.services.diet_charts import DietChartRepository
from ayur_diet_tracker.services.validation import Page

CHART_SELECT = f"*, {PATIENT_EMBED}"


@dataclass
class SupabaseDietChartRepository(DietChartRepository):
    """Supabase implementation for diet charts."""

    client: Client

    def list_charts(  # noqa: PLR0913
        self,
        filters: dict[str, object],
        patient_ids: list[int] | None,
        sort: str,
        descending: bool,
        page: Page,
    ) -> list[DietChartRecord]:
        """Return a filtered page of charts."""
        query = self.client.table("diet_charts").select(CHART_SELECT)
        for column, value in filters.items():
            query = query.eq(column, value)
        if patient_ids is not None:
            query = query.in_("patient_id", patient_ids)
        response = (
            query.order(sort, desc=descending)
            .range(page.offset, page.offset + page.limit - 1)
            .execute()
        )
        return [parse_chart(row) for row in response.data or []]

    def list_all_charts(self) -> list[DietChartRecord]:
        """Return every chart."""
        response = (
            self.client.table("diet_charts")
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        return [parse_chart(row) for row in response.data or []]

    def list_charts_for_patient(
        self,
        patient_id: int,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[DietChartRecord]:
        """Return a patient's charts, newest first."""
        query = self.client.table("diet_charts").select("*").eq("patient_id", patient_id)
        if start_date:
            query = query.gte("created_at", start_date)
        if end_date:
            query = query.lte("created_at", end_date)
        response = query.order("created_at", desc=True).execute()
        return [parse_chart(row) for row in response.data or []]

    def count_patient_charts(self, patient_id: int, status: str | None) -> int:
        """Return the number of charts a patient has."""
        query = (
            self.client.table("diet_charts")
            .select("id", count="exact")
            .eq("patient_id", patient_id)
        )
        if status:
            query = query.eq("status", status)
        response = query.execute()
        return response.count or 0

    def list_patient_charts(
        self, patient_id: int, status: str | None, descending: bool, page: Page
    ) -> list[DietChartRecord]:
        """Return a page of a patient's charts."""
        query = (
            self.client.table("diet_charts")
            .select(CHART_SELECT)
            .eq("patient_id", patient_id)
        )
        if status:
            query = query.eq("status", status)
        response = (
            query.order("created_at", desc=descending)
            .range(page.offset, page.offset + page.limit - 1)
            .execute()
        )
        return [parse_chart(row) for row in response.data or []]

    def get_chart(self, chart_id: int) -> DietChartRecord | None:
        """Return a chart by id."""
        response = (
            self.client.table("diet_charts")
            .select(CHART_SELECT)
            .eq("id", chart_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_chart(response.data[0])

    def create_chart(self, payload: dict[str, object]) -> DietChartRecord:
        """Insert a chart row."""
        response = self.client.table("diet_charts").insert(payload).execute()
        return first_or_raise(response.data, parse_chart, "Failed to create diet chart")

    def update_chart(
        self, chart_id: int, payload: dict[str, object]
    ) -> DietChartRecord:
        """Update a chart row."""
        response = (
            self.client.table("diet_charts").update(payload).eq("id", chart_id).execute()
        )
        return first_or_raise(response.data, parse_chart, "Failed to update diet chart")

    def delete_chart(self, chart_id: int) -> DietChartRecord | None:
        """Delete a chart row."""
        rows = delete_returning(
            self.client.table("diet_charts").delete().eq("id", chart_id).execute,
            "Cannot delete diet chart with existing compliance records",
        )
        return parse_chart(rows[0]) if rows else None

    def list_meals(self, chart_ids: list[int]) -> list[MealRecord]:
        """Return meals for the given charts."""
        if not chart_ids:
            return []
        response = (
            self.client.table("meals")
            .select("*")
            .in_("diet_chart_id", chart_ids)
            .order("id", desc=False)
            .execute()
        )
        return [parse_meal(row) for row in response.data or []]

    def list_meal_foods(self, meal_ids: list[int]) -> list[MealFoodRecord]:
        """Return foods for the given meals."""
        if not meal_ids:
            return []
        response = (
            self.client.table("meal_foods")
            .select("*")
            .in_("meal_id", meal_ids)
            .order("id", desc=False)
            .execute()
        )
        return [parse_food(row) for row in response.data or []]

    def create_meal(self, payload: dict[str, object]) -> MealRecord:
        """Insert a meal row."""
        response = self.client.table("meals").insert(payload).execute()
        return first_or_raise(response.data, parse_meal, "Failed to create meal")

    def create_meal_foods(
        self, meal_id: int, foods: list[dict[str, object]]
    ) -> list[MealFoodRecord]:
        """Insert food rows for a meal."""
        payload = [{**food, "meal_id": meal_id} for food in foods]
        if not payload:
            return []
        response = self.client.table("meal_foods").insert(payload).execute()
        return [parse_food(row) for row in response.data or []]

    def delete_meals(self, chart_id: int) -> None:
        """Delete a chart's meal foods and meals."""
        meal_ids = [meal.id for meal in self.list_meals([chart_id])]
        if meal_ids:
            self.client.table("meal_foods").delete().in_("meal_id", meal_ids).execute()
        self.client.table("meals").delete().eq("diet_chart_id", chart_id).execute()

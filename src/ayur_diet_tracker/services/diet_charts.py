"""Diet chart service covering charts, meals and meal foods."""

import logging
from dataclasses import asdict, dataclass, fields
from datetime import UTC, datetime
from typing import Protocol

from ayur_diet_tracker.domain.diet_charts import (
    SCORE_FIELDS,
    VALID_CHART_STATUSES,
    VALID_DIETARY_FOCUS,
    DietChartDetail,
    DietChartRecord,
    MealFoodRecord,
    MealRecord,
    MealSummary,
)
from ayur_diet_tracker.domain.patients import PatientSummary
from ayur_diet_tracker.errors import NotFoundError, ValidationError
from ayur_diet_tracker.services.patients import PatientRepository
from ayur_diet_tracker.services.validation import (
    DEFAULT_MAX_LIMIT,
    Page,
    is_number,
    strip_or_none,
)

logger = logging.getLogger(__name__)

PATIENT_CHARTS_MAX_LIMIT = 50
CHART_SORT_COLUMNS = tuple(
    item.name for item in fields(DietChartRecord) if item.name != "patient"
)
CHART_VALUE_FIELDS = (
    "duration",
    "target_calories",
    "dietary_focus",
    "total_calories",
    "total_protein",
    "total_carbs",
    "total_fat",
    *SCORE_FIELDS,
)
MACRO_FIELDS = ("calories", "protein", "carbs", "fat")
FOOD_FIELDS = (
    "food_name",
    "quantity",
    "unit",
    *MACRO_FIELDS,
    "thermal_property",
    "digestibility",
    "rasa",
    "dosha_effect",
)


class DietChartRepository(Protocol):
    """Persistence interface for diet charts and their meals."""

    def list_charts(  # noqa: PLR0913
        self,
        filters: dict[str, object],
        patient_ids: list[int] | None,
        sort: str,
        descending: bool,
        page: Page,
    ) -> list[DietChartRecord]:
        """Return a filtered page of charts with embedded patients."""

    def list_all_charts(self) -> list[DietChartRecord]:
        """Return every chart."""

    def list_charts_for_patient(
        self,
        patient_id: int,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[DietChartRecord]:
        """Return a patient's charts created in the range, newest first."""

    def count_patient_charts(self, patient_id: int, status: str | None) -> int:
        """Return how many charts a patient has."""

    def list_patient_charts(
        self, patient_id: int, status: str | None, descending: bool, page: Page
    ) -> list[DietChartRecord]:
        """Return a page of a patient's charts with embedded patient."""

    def get_chart(self, chart_id: int) -> DietChartRecord | None:
        """Return a chart with its embedded patient, if present."""

    def create_chart(self, payload: dict[str, object]) -> DietChartRecord:
        """Create a chart and return it."""

    def update_chart(
        self, chart_id: int, payload: dict[str, object]
    ) -> DietChartRecord:
        """Update a chart and return it."""

    def delete_chart(self, chart_id: int) -> DietChartRecord | None:
        """Delete a chart and return the removed row."""

    def list_meals(self, chart_ids: list[int]) -> list[MealRecord]:
        """Return meals for the given charts, without foods."""

    def list_meal_foods(self, meal_ids: list[int]) -> list[MealFoodRecord]:
        """Return foods for the given meals."""

    def create_meal(self, payload: dict[str, object]) -> MealRecord:
        """Create a meal row."""

    def create_meal_foods(
        self, meal_id: int, foods: list[dict[str, object]]
    ) -> list[MealFoodRecord]:
        """Create food rows for a meal."""

    def delete_meals(self, chart_id: int) -> None:
        """Delete a chart's meals and their foods."""


@dataclass
class DietChartService:
    """Application service for diet charts."""

    repository: DietChartRepository
    patient_repository: PatientRepository

    def list_charts(  # noqa: PLR0913
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
        patient_id: int | None = None,
        status: str | None = None,
        dietary_focus: str | None = None,
        search: str | None = None,
        sort: str | None = None,
        order: str | None = None,
    ) -> list[DietChartRecord]:
        """Return a page of diet charts."""
        page = Page.build(limit, offset, default=10, maximum=DEFAULT_MAX_LIMIT)
        filters: dict[str, object] = {}
        if patient_id is not None:
            filters["patient_id"] = patient_id
        if status:
            filters["status"] = status
        if dietary_focus:
            filters["dietary_focus"] = dietary_focus
        patient_ids = None
        if search:
            patient_ids = self.patient_repository.search_patient_ids(search)
            if not patient_ids:
                return []
        return self.repository.list_charts(
            filters=filters,
            patient_ids=patient_ids,
            sort=sort if sort in CHART_SORT_COLUMNS else "created_at",
            descending=order != "asc",
            page=page,
        )

    def get_chart(self, chart_id: int) -> DietChartRecord:
        """Return a chart or raise when missing."""
        chart = self.repository.get_chart(chart_id)
        if chart is None:
            raise NotFoundError("Diet chart not found", "DIET_CHART_NOT_FOUND")
        return chart

    def get_detail(self, chart_id: int) -> DietChartDetail:
        """Return a chart with its patient profile and meals with foods."""
        chart = self.get_chart(chart_id)
        patient = (
            self.patient_repository.get_patient(chart.patient_id)
            if chart.patient_id is not None
            else None
        )
        return DietChartDetail(
            chart=chart, patient=patient, meals=self._load_meals([chart.id])
        )

    def create_chart(self, data: dict[str, object]) -> DietChartRecord:
        """Validate and create a chart, with optional meals."""
        patient_id = data.get("patient_id")
        if not patient_id:
            raise ValidationError("Patient ID is required", "MISSING_PATIENT_ID")
        self._require_patient(int(patient_id))
        _validate_chart_fields(data)

        meals = data.get("meals") or []
        now = datetime.now(tz=UTC).isoformat()
        payload: dict[str, object] = {
            "patient_id": patient_id,
            "special_instructions": strip_or_none(data.get("special_instructions")),
            "status": data.get("status") or "Active",
            "created_at": now,
            "updated_at": now,
        }
        for key in CHART_VALUE_FIELDS:
            payload[key] = data.get(key) or None
        if meals:
            totals = _sum_macros(
                [_sum_macros(meal.get("foods") or []) for meal in meals]
            )
            for macro, total in totals.items():
                key = f"total_{macro}"
                if payload[key] is None:
                    payload[key] = total

        chart = self.repository.create_chart(payload)
        for meal in meals:
            self._create_meal(chart.id, meal, now)
        logger.info(
            "Created diet chart",
            extra={"diet_chart_id": chart.id, "meals": len(meals)},
        )
        return self.repository.get_chart(chart.id) or chart

    def update_chart(self, chart_id: int, data: dict[str, object]) -> DietChartRecord:
        """Validate and apply a partial chart update."""
        self.get_chart(chart_id)
        patient_id = data.get("patient_id")
        if patient_id:
            self._require_patient(int(patient_id))
        _validate_chart_fields(data)

        payload: dict[str, object] = {"updated_at": datetime.now(tz=UTC).isoformat()}
        for key in ("patient_id", "status", *CHART_VALUE_FIELDS):
            if key in data:
                payload[key] = data[key]
        if "special_instructions" in data:
            payload["special_instructions"] = strip_or_none(
                data["special_instructions"]
            )
        self.repository.update_chart(chart_id, payload)
        return self.get_chart(chart_id)

    def delete_chart(self, chart_id: int) -> DietChartRecord:
        """Delete a chart along with its meals and meal foods."""
        self.get_chart(chart_id)
        self.repository.delete_meals(chart_id)
        deleted = self.repository.delete_chart(chart_id)
        if deleted is None:
            raise RuntimeError("Failed to delete diet chart")
        logger.info("Deleted diet chart", extra={"diet_chart_id": chart_id})
        return deleted

    def list_for_patient(
        self,
        patient_id: int,
        *,
        status: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order: str | None = None,
    ) -> dict[str, object]:
        """Return a patient's charts with meal summaries and pagination."""
        self._require_patient(patient_id, not_found=True)
        page = Page.build(limit, offset, default=10, maximum=PATIENT_CHARTS_MAX_LIMIT)
        status_filter = status if status in VALID_CHART_STATUSES else None

        total = self.repository.count_patient_charts(patient_id, status_filter)
        charts = self.repository.list_patient_charts(
            patient_id, status_filter, descending=order != "asc", page=page
        )
        summaries = _summarize_meals(
            self.repository.list_meals([chart.id for chart in charts])
        )
        return {
            "diet_charts": [
                {
                    **asdict(chart),
                    "meal_summary": asdict(
                        summaries.get(chart.id, MealSummary(0, []))
                    ),
                }
                for chart in charts
            ],
            "pagination": {
                "total": total,
                "limit": page.limit,
                "offset": page.offset,
                "has_more": page.offset + page.limit < total,
            },
        }

    def load_meals(self, chart_ids: list[int]) -> list[MealRecord]:
        """Return meals with foods for the given charts."""
        return self._load_meals(chart_ids)

    def _load_meals(self, chart_ids: list[int]) -> list[MealRecord]:
        if not chart_ids:
            return []
        meals = self.repository.list_meals(chart_ids)
        foods = self.repository.list_meal_foods([meal.id for meal in meals])
        by_meal: dict[int, list[MealFoodRecord]] = {}
        for food in foods:
            if food.meal_id is not None:
                by_meal.setdefault(food.meal_id, []).append(food)
        return [
            MealRecord(**{**_shallow(meal), "foods": by_meal.get(meal.id, [])})
            for meal in meals
        ]

    def _create_meal(self, chart_id: int, meal: dict[str, object], now: str) -> None:
        foods = meal.get("foods") or []
        totals = _sum_macros(foods)
        created = self.repository.create_meal(
            {
                "diet_chart_id": chart_id,
                "meal_type": meal.get("meal_type"),
                "meal_time": meal.get("meal_time"),
                **{f"total_{macro}": value for macro, value in totals.items()},
                "created_at": now,
            }
        )
        if foods:
            self.repository.create_meal_foods(
                created.id,
                [
                    {
                        **{key: food.get(key) for key in FOOD_FIELDS},
                        "created_at": now,
                    }
                    for food in foods
                ],
            )

    def _require_patient(self, patient_id: int, *, not_found: bool = False) -> None:
        if self.patient_repository.get_patient(patient_id) is not None:
            return
        if not_found:
            raise NotFoundError("Patient not found", "PATIENT_NOT_FOUND")
        raise ValidationError("Patient not found", "PATIENT_NOT_FOUND")


def _validate_chart_fields(data: dict[str, object]) -> None:
    for key in SCORE_FIELDS:
        score = data.get(key)
        if score is not None and (not is_number(score) or not 0 <= score <= 100):  # noqa: PLR2004
            raise ValidationError(
                f"{key} must be between 0 and 100", "INVALID_SCORE_RANGE"
            )
    duration = data.get("duration")
    if duration is not None and (not is_number(duration) or duration <= 0):
        raise ValidationError("Duration must be positive", "INVALID_DURATION")
    target = data.get("target_calories")
    if target is not None and (not is_number(target) or target <= 0):
        raise ValidationError(
            "Target calories must be positive", "INVALID_TARGET_CALORIES"
        )
    focus = data.get("dietary_focus")
    if focus and focus not in VALID_DIETARY_FOCUS:
        raise ValidationError(
            "Invalid dietary focus. Must be one of: " + ", ".join(VALID_DIETARY_FOCUS),
            "INVALID_DIETARY_FOCUS",
        )
    status = data.get("status")
    if status and status not in VALID_CHART_STATUSES:
        raise ValidationError(
            "Invalid status. Must be one of: " + ", ".join(VALID_CHART_STATUSES),
            "INVALID_STATUS",
        )


def _sum_macros(items: list[dict[str, object]]) -> dict[str, float]:
    """Sum calories/protein/carbs/fat across items, reading plain or total_ keys."""
    totals = dict.fromkeys(MACRO_FIELDS, 0.0)
    for item in items:
        for macro in MACRO_FIELDS:
            value = item.get(macro, item.get(f"total_{macro}"))
            if is_number(value):
                totals[macro] += float(value)
    return {macro: round(total, 2) for macro, total in totals.items()}


def _summarize_meals(meals: list[MealRecord]) -> dict[int, MealSummary]:
    counts: dict[int, int] = {}
    types: dict[int, list[str]] = {}
    for meal in meals:
        if meal.diet_chart_id is None:
            continue
        counts[meal.diet_chart_id] = counts.get(meal.diet_chart_id, 0) + 1
        chart_types = types.setdefault(meal.diet_chart_id, [])
        if meal.meal_type and meal.meal_type not in chart_types:
            chart_types.append(meal.meal_type)
    return {
        chart_id: MealSummary(total_meals=count, meal_types=types[chart_id])
        for chart_id, count in counts.items()
    }


def _shallow(meal: MealRecord) -> dict[str, object]:
    return {item.name: getattr(meal, item.name) for item in fields(meal)}

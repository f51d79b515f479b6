"""Row parsing and error helpers shared by the Supabase repositories."""

from collections.abc import Callable
from typing import TypeVar

from postgrest.exceptions import APIError

from ayur_diet_tracker.domain.compliance import ComplianceRecord
from ayur_diet_tracker.domain.diet_charts import (
    DietChartRecord,
    DietChartSummary,
    MealFoodRecord,
    MealRecord,
)
from ayur_diet_tracker.domain.patients import PatientRecord, PatientSummary
from ayur_diet_tracker.errors import ConflictError

FOREIGN_KEY_VIOLATION = "23503"

PATIENT_EMBED = "patient:patients(id, name, age, gender, dosha, phone, email, status)"
CHART_EMBED = (
    "diet_chart:diet_charts(id, duration, target_calories, dietary_focus, status)"
)

T = TypeVar("T")


def delete_returning(
    execute: Callable[[], object], message: str
) -> list[dict[str, object]]:
    """Run a delete, mapping foreign-key violations to ConflictError."""
    try:
        response = execute()
    except APIError as exc:
        if exc.code == FOREIGN_KEY_VIOLATION:
            raise ConflictError(message, "FOREIGN_KEY_CONSTRAINT") from exc
        raise
    return response.data or []


def first_or_raise(
    rows: list[dict[str, object]], parse: Callable[[dict[str, object]], T], error: str
) -> T:
    """Parse the first returned row or raise when nothing came back."""
    if not rows:
        raise RuntimeError(error)
    return parse(rows[0])


def parse_patient(row: dict[str, object]) -> PatientRecord:
    return PatientRecord(
        id=int(row["id"]),
        name=str(row.get("name") or ""),
        age=int(row.get("age") or 0),
        gender=str(row.get("gender") or ""),
        dosha=str(row.get("dosha") or ""),
        phone=row.get("phone"),
        email=row.get("email"),
        height=_float_or_none(row.get("height")),
        weight=_float_or_none(row.get("weight")),
        bmi=_float_or_none(row.get("bmi")),
        dietary_habits=row.get("dietary_habits"),
        meal_frequency=row.get("meal_frequency"),
        water_intake=_float_or_none(row.get("water_intake")),
        health_conditions=row.get("health_conditions"),
        allergies=row.get("allergies"),
        notes=row.get("notes"),
        status=str(row.get("status") or "Active"),
        created_at=str(row.get("created_at") or ""),
        updated_at=str(row.get("updated_at") or ""),
    )


def parse_patient_summary(row: object) -> PatientSummary | None:
    if not isinstance(row, dict):
        return None
    return PatientSummary(
        id=int(row["id"]),
        name=str(row.get("name") or ""),
        age=row.get("age"),
        gender=row.get("gender"),
        dosha=row.get("dosha"),
        phone=row.get("phone"),
        email=row.get("email"),
        status=row.get("status"),
    )


def parse_chart(row: dict[str, object]) -> DietChartRecord:
    return DietChartRecord(
        id=int(row["id"]),
        patient_id=row.get("patient_id"),
        duration=row.get("duration"),
        target_calories=row.get("target_calories"),
        dietary_focus=row.get("dietary_focus"),
        special_instructions=row.get("special_instructions"),
        total_calories=_float_or_none(row.get("total_calories")),
        total_protein=_float_or_none(row.get("total_protein")),
        total_carbs=_float_or_none(row.get("total_carbs")),
        total_fat=_float_or_none(row.get("total_fat")),
        dosha_balance_score=row.get("dosha_balance_score"),
        rasa_score=row.get("rasa_score"),
        digestibility_score=row.get("digestibility_score"),
        status=str(row.get("status") or "Active"),
        created_at=str(row.get("created_at") or ""),
        updated_at=str(row.get("updated_at") or ""),
        patient=parse_patient_summary(row.get("patient")),
    )


def parse_chart_summary(row: object) -> DietChartSummary | None:
    if not isinstance(row, dict):
        return None
    return DietChartSummary(
        id=int(row["id"]),
        duration=row.get("duration"),
        target_calories=row.get("target_calories"),
        dietary_focus=row.get("dietary_focus"),
        status=row.get("status"),
    )


def parse_record(row: dict[str, object]) -> ComplianceRecord:
    return ComplianceRecord(
        id=int(row["id"]),
        patient_id=row.get("patient_id"),
        diet_chart_id=row.get("diet_chart_id"),
        date=row.get("date"),
        compliance_percentage=row.get("compliance_percentage"),
        meals_followed=row.get("meals_followed"),
        meals_total=row.get("meals_total"),
        notes=row.get("notes"),
        created_at=str(row.get("created_at") or ""),
        patient=parse_patient_summary(row.get("patient")),
        diet_chart=parse_chart_summary(row.get("diet_chart")),
    )


def parse_meal(row: dict[str, object]) -> MealRecord:
    return MealRecord(
        id=int(row["id"]),
        diet_chart_id=row.get("diet_chart_id"),
        meal_type=row.get("meal_type"),
        meal_time=row.get("meal_time"),
        total_calories=_float_or_none(row.get("total_calories")),
        total_protein=_float_or_none(row.get("total_protein")),
        total_carbs=_float_or_none(row.get("total_carbs")),
        total_fat=_float_or_none(row.get("total_fat")),
        created_at=str(row.get("created_at") or ""),
    )


def parse_food(row: dict[str, object]) -> MealFoodRecord:
    return MealFoodRecord(
        id=int(row["id"]),
        meal_id=row.get("meal_id"),
        food_name=row.get("food_name"),
        quantity=_float_or_none(row.get("quantity")),
        unit=row.get("unit"),
        calories=_float_or_none(row.get("calories")),
        protein=_float_or_none(row.get("protein")),
        carbs=_float_or_none(row.get("carbs")),
        fat=_float_or_none(row.get("fat")),
        thermal_property=row.get("thermal_property"),
        digestibility=row.get("digestibility"),
        rasa=row.get("rasa"),
        dosha_effect=row.get("dosha_effect"),
        created_at=str(row.get("created_at") or ""),
    )


def _float_or_none(value: object) -> float | None:
    if value is None:
        return None
    return float(value)

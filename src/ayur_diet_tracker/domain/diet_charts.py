"""Domain models for diet charts and their meals."""

from dataclasses import dataclass, field

from ayur_diet_tracker.domain.patients import PatientRecord, PatientSummary

VALID_DIETARY_FOCUS = (
    "weight loss",
    "weight gain",
    "maintenance",
    "therapeutic",
    "digestive health",
    "immunity boost",
)
VALID_CHART_STATUSES = ("Active", "Completed", "Archived")
SCORE_FIELDS = ("dosha_balance_score", "rasa_score", "digestibility_score")


@dataclass(frozen=True)
class DietChartSummary:
    """Compact diet chart view embedded in compliance records."""

    id: int
    duration: int | None = None
    target_calories: int | None = None
    dietary_focus: str | None = None
    status: str | None = None


@dataclass(frozen=True)
class DietChartRecord:
    """Diet chart row with an optional embedded patient."""

    id: int
    patient_id: int | None
    duration: int | None
    target_calories: int | None
    dietary_focus: str | None
    special_instructions: str | None
    total_calories: float | None
    total_protein: float | None
    total_carbs: float | None
    total_fat: float | None
    dosha_balance_score: int | None
    rasa_score: int | None
    digestibility_score: int | None
    status: str
    created_at: str
    updated_at: str
    patient: PatientSummary | None = None


@dataclass(frozen=True)
class MealFoodRecord:
    """A food item inside a meal."""

    id: int
    meal_id: int | None
    food_name: str | None
    quantity: float | None
    unit: str | None
    calories: float | None
    protein: float | None
    carbs: float | None
    fat: float | None
    thermal_property: str | None
    digestibility: str | None
    rasa: str | None
    dosha_effect: str | None
    created_at: str


@dataclass(frozen=True)
class MealRecord:
    """A meal belonging to a diet chart."""

    id: int
    diet_chart_id: int | None
    meal_type: str | None
    meal_time: str | None
    total_calories: float | None
    total_protein: float | None
    total_carbs: float | None
    total_fat: float | None
    created_at: str
    foods: list[MealFoodRecord] = field(default_factory=list)


@dataclass(frozen=True)
class DietChartDetail:
    """Diet chart with full patient profile and meals."""

    chart: DietChartRecord
    patient: PatientRecord | None
    meals: list[MealRecord]


@dataclass(frozen=True)
class MealSummary:
    """Meal counts for a diet chart."""

    total_meals: int
    meal_types: list[str]

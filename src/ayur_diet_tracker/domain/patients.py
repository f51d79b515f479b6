"""Domain models for patients."""

from dataclasses import dataclass

VALID_DOSHAS = ("Vata", "Pitta", "Kapha", "Vata-Pitta", "Pitta-Kapha", "Kapha-Vata")
VALID_STATUSES = ("Active", "Inactive")
VALID_DIETARY_HABITS = ("vegetarian", "non-vegetarian", "vegan", "eggetarian")

UNDERWEIGHT_BMI = 18.5
NORMAL_BMI = 25
OVERWEIGHT_BMI = 30


@dataclass(frozen=True)
class PatientSummary:
    """Compact patient view embedded in other records."""

    id: int
    name: str
    age: int | None = None
    gender: str | None = None
    dosha: str | None = None
    phone: str | None = None
    email: str | None = None
    status: str | None = None


@dataclass(frozen=True)
class PatientRecord:
    """Represents a patient stored in the database."""

    id: int
    name: str
    age: int
    gender: str
    dosha: str
    phone: str | None
    email: str | None
    height: float | None
    weight: float | None
    bmi: float | None
    dietary_habits: str | None
    meal_frequency: int | None
    water_intake: float | None
    health_conditions: str | None
    allergies: str | None
    notes: str | None
    status: str
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class BmiAnalysis:
    """BMI value with its category."""

    value: float
    category: str
    height: float
    weight: float


def calculate_bmi(height_cm: float, weight_kg: float) -> float:
    """Return BMI rounded to two decimals, or 0 for non-positive inputs."""
    if height_cm <= 0 or weight_kg <= 0:
        return 0
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 2)


def bmi_category(bmi: float) -> str:
    """Return the WHO category for a BMI value."""
    if bmi < UNDERWEIGHT_BMI:
        return "Underweight"
    if bmi < NORMAL_BMI:
        return "Normal"
    if bmi < OVERWEIGHT_BMI:
        return "Overweight"
    return "Obese"


def analyze_bmi(height_cm: float | None, weight_kg: float | None) -> BmiAnalysis | None:
    """Build a BMI analysis when both measurements are present."""
    if not height_cm or not weight_kg:
        return None
    value = calculate_bmi(height_cm, weight_kg)
    return BmiAnalysis(
        value=value,
        category=bmi_category(value),
        height=height_cm,
        weight=weight_kg,
    )

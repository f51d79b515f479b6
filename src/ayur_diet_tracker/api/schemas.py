"""Request bodies accepted by the API."""

from pydantic import BaseModel


class PatientBody(BaseModel):
    """Patient fields for create and update requests."""

    name: str | None = None
    age: int | None = None
    gender: str | None = None
    dosha: str | None = None
    phone: str | None = None
    email: str | None = None
    height: float | None = None
    weight: float | None = None
    dietary_habits: str | None = None
    meal_frequency: int | None = None
    water_intake: float | None = None
    health_conditions: str | None = None
    allergies: str | None = None
    notes: str | None = None
    status: str | None = None


class MealFoodBody(BaseModel):
    """A food inside a meal of a new diet chart."""

    food_name: str
    quantity: float | None = None
    unit: str | None = None
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    thermal_property: str | None = None
    digestibility: str | None = None
    rasa: str | None = None
    dosha_effect: str | None = None


class MealBody(BaseModel):
    """A meal of a new diet chart."""

    meal_type: str
    meal_time: str | None = None
    foods: list[MealFoodBody] = []


class DietChartBody(BaseModel):
    """Diet chart fields for create and update requests."""

    patient_id: int | None = None
    duration: int | None = None
    target_calories: int | None = None
    dietary_focus: str | None = None
    special_instructions: str | None = None
    total_calories: float | None = None
    total_protein: float | None = None
    total_carbs: float | None = None
    total_fat: float | None = None
    dosha_balance_score: int | None = None
    rasa_score: int | None = None
    digestibility_score: int | None = None
    status: str | None = None
    meals: list[MealBody] | None = None


class ComplianceBody(BaseModel):
    """Compliance record fields for create and update requests."""

    patient_id: int | None = None
    diet_chart_id: int | None = None
    date: str | None = None
    compliance_percentage: int | None = None
    meals_followed: int | None = None
    meals_total: int | None = None
    notes: str | None = None


class ProfileBody(BaseModel):
    """Profile settings update."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    specialization: str | None = None
    clinic_name: str | None = None

"""Patient management service."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from ayur_diet_tracker.domain.compliance import ComplianceRecord
from ayur_diet_tracker.domain.diet_charts import DietChartRecord
from ayur_diet_tracker.domain.patients import (
    VALID_DIETARY_HABITS,
    VALID_DOSHAS,
    VALID_STATUSES,
    PatientRecord,
    calculate_bmi,
)
from ayur_diet_tracker.errors import NotFoundError, ValidationError
from ayur_diet_tracker.services.validation import (
    DEFAULT_MAX_LIMIT,
    Page,
    is_email,
    is_number,
    is_positive_int,
    strip_or_none,
)

logger = logging.getLogger(__name__)

PATIENT_SORT_COLUMNS = ("name", "age", "created_at", "updated_at")
OPTIONAL_TEXT_FIELDS = ("phone", "health_conditions", "allergies", "notes")
OPTIONAL_VALUE_FIELDS = (
    "height",
    "weight",
    "dietary_habits",
    "meal_frequency",
    "water_intake",
)


class PatientRepository(Protocol):
    """Persistence interface for patients."""

    def list_patients(  # noqa: PLR0913
        self,
        search: str | None,
        status: str | None,
        sort: str,
        descending: bool,
        page: Page,
    ) -> list[PatientRecord]:
        """Return a filtered, sorted page of patients."""

    def list_all_patients(self) -> list[PatientRecord]:
        """Return every patient."""

    def get_patient(self, patient_id: int) -> PatientRecord | None:
        """Return a patient by id, if present."""

    def search_patient_ids(self, query: str) -> list[int]:
        """Return ids of patients whose name matches the query."""

    def create_patient(self, payload: dict[str, object]) -> PatientRecord:
        """Create a patient and return it."""

    def update_patient(
        self, patient_id: int, payload: dict[str, object]
    ) -> PatientRecord:
        """Update a patient and return it."""

    def delete_patient(self, patient_id: int) -> PatientRecord | None:
        """Delete a patient and return the deleted row."""


class PatientChartLookup(Protocol):
    """Lookup for diet charts that belong to a patient."""

    def list_charts_for_patient(self, patient_id: int) -> list[DietChartRecord]:
        """Return the patient's diet charts, newest first."""


class PatientRecordLookup(Protocol):
    """Lookup for compliance records that belong to a patient."""

    def list_records_for_patient(self, patient_id: int) -> list[ComplianceRecord]:
        """Return the patient's compliance records, newest date first."""


@dataclass(frozen=True)
class PatientWithRelations:
    """Patient with diet charts and compliance history."""

    patient: PatientRecord
    diet_charts: list[DietChartRecord]
    compliance_records: list[ComplianceRecord]


@dataclass
class PatientService:
    """Application service for patient CRUD."""

    repository: PatientRepository
    charts: PatientChartLookup
    records: PatientRecordLookup

    def list_patients(  # noqa: PLR0913
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
        search: str | None = None,
        status: str | None = None,
        sort: str | None = None,
        order: str | None = None,
    ) -> list[PatientRecord]:
        """Return a page of patients."""
        page = Page.build(limit, offset, default=10, maximum=DEFAULT_MAX_LIMIT)
        sort_column = sort if sort in PATIENT_SORT_COLUMNS else "created_at"
        return self.repository.list_patients(
            search=search or None,
            status=status if status in VALID_STATUSES else None,
            sort=sort_column,
            descending=order != "asc",
            page=page,
        )

    def get_patient(self, patient_id: int) -> PatientRecord:
        """Return a patient or raise when missing."""
        patient = self.repository.get_patient(patient_id)
        if patient is None:
            raise NotFoundError("Patient not found", "PATIENT_NOT_FOUND")
        return patient

    def get_with_relations(self, patient_id: int) -> PatientWithRelations:
        """Return a patient together with charts and compliance records."""
        patient = self.get_patient(patient_id)
        return PatientWithRelations(
            patient=patient,
            diet_charts=self.charts.list_charts_for_patient(patient_id),
            compliance_records=self.records.list_records_for_patient(patient_id),
        )

    def create_patient(self, data: dict[str, object]) -> PatientRecord:
        """Validate and create a patient."""
        errors = validate_patient_data(data, is_update=False)
        if errors:
            raise ValidationError(", ".join(errors), "VALIDATION_ERROR")

        now = datetime.now(tz=UTC).isoformat()
        payload: dict[str, object] = {
            "name": str(data["name"]).strip(),
            "age": data["age"],
            "gender": str(data["gender"]).strip(),
            "dosha": data["dosha"],
            "status": data.get("status") or "Active",
            "created_at": now,
            "updated_at": now,
        }
        for key in OPTIONAL_TEXT_FIELDS:
            value = strip_or_none(data.get(key))
            if value:
                payload[key] = value
        email = strip_or_none(data.get("email"))
        if email:
            payload["email"] = email.lower()
        for key in OPTIONAL_VALUE_FIELDS:
            if data.get(key) is not None:
                payload[key] = data[key]

        height = payload.get("height")
        weight = payload.get("weight")
        if height and weight:
            payload["bmi"] = calculate_bmi(float(height), float(weight))

        patient = self.repository.create_patient(payload)
        logger.info("Created patient", extra={"patient_id": patient.id})
        return patient

    def update_patient(self, patient_id: int, data: dict[str, object]) -> PatientRecord:
        """Validate and apply a partial patient update."""
        errors = validate_patient_data(data, is_update=True)
        if errors:
            raise ValidationError(", ".join(errors), "VALIDATION_ERROR")
        current = self.get_patient(patient_id)

        payload: dict[str, object] = {"updated_at": datetime.now(tz=UTC).isoformat()}
        for key in ("name", "gender"):
            if key in data and data[key] is not None:
                payload[key] = str(data[key]).strip()
        for key in ("age", "dosha", "status"):
            if key in data and data[key] is not None:
                payload[key] = data[key]
        for key in OPTIONAL_TEXT_FIELDS:
            if key in data:
                payload[key] = strip_or_none(data[key])
        if "email" in data:
            email = strip_or_none(data["email"])
            payload["email"] = email.lower() if email else None
        for key in OPTIONAL_VALUE_FIELDS:
            if key in data:
                payload[key] = data[key]

        height = payload.get("height", current.height)
        weight = payload.get("weight", current.weight)
        if height and weight:
            payload["bmi"] = calculate_bmi(float(height), float(weight))
        elif ("height" in payload and payload["height"] is None) or (
            "weight" in payload and payload["weight"] is None
        ):
            payload["bmi"] = None

        return self.repository.update_patient(patient_id, payload)

    def delete_patient(self, patient_id: int) -> PatientRecord:
        """Delete a patient and return the removed row."""
        self.get_patient(patient_id)
        deleted = self.repository.delete_patient(patient_id)
        if deleted is None:
            raise NotFoundError("Patient not found", "PATIENT_NOT_FOUND")
        logger.info("Deleted patient", extra={"patient_id": patient_id})
        return deleted


def validate_patient_data(  # noqa: C901, PLR0912
    data: dict[str, object], *, is_update: bool
) -> list[str]:
    """Return human-readable validation errors for patient data."""
    errors: list[str] = []
    doshas = ", ".join(VALID_DOSHAS)

    if not is_update:
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            errors.append("Name is required")
        if not is_positive_int(data.get("age")):
            errors.append("Age must be a positive integer")
        gender = data.get("gender")
        if not isinstance(gender, str) or not gender.strip():
            errors.append("Gender is required")
        if data.get("dosha") not in VALID_DOSHAS:
            errors.append(f"Dosha must be one of: {doshas}")
    else:
        if data.get("age") is not None and not is_positive_int(data["age"]):
            errors.append("Age must be a positive integer")
        if data.get("dosha") is not None and data["dosha"] not in VALID_DOSHAS:
            errors.append(f"Dosha must be one of: {doshas}")

    email = data.get("email")
    if email and (not isinstance(email, str) or not is_email(email.strip())):
        errors.append("Email must be a valid email format")
    for key, label in (("height", "Height"), ("weight", "Weight")):
        value = data.get(key)
        if value is not None and (not is_number(value) or value <= 0):
            errors.append(f"{label} must be a positive number")
    status = data.get("status")
    if status and status not in VALID_STATUSES:
        errors.append(f"Status must be one of: {', '.join(VALID_STATUSES)}")
    habits = data.get("dietary_habits")
    if habits and habits not in VALID_DIETARY_HABITS:
        errors.append(
            f"Dietary habits must be one of: {', '.join(VALID_DIETARY_HABITS)}"
        )
    frequency = data.get("meal_frequency")
    if frequency is not None and not is_positive_int(frequency):
        errors.append("Meal frequency must be a positive integer")
    water = data.get("water_intake")
    if water is not None and (not is_number(water) or water < 0):
        errors.append("Water intake must be a non-negative number")
    return errors

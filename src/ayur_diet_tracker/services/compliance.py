"""Compliance record service and listings with analytics."""

import logging
from dataclasses import asdict, dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from ayur_diet_tracker.domain.compliance import ComplianceFilters, ComplianceRecord
from ayur_diet_tracker.errors import NotFoundError, ValidationError
from ayur_diet_tracker.services.compliance_analytics import summarize
from ayur_diet_tracker.services.diet_charts import DietChartRepository
from ayur_diet_tracker.services.patients import PatientRepository
from ayur_diet_tracker.services.validation import (
    DEFAULT_MAX_LIMIT,
    Page,
    is_date_format,
    is_number,
    require_date_range,
    strip_or_none,
)

logger = logging.getLogger(__name__)

COMPLIANCE_SORT_COLUMNS = ("date", "compliance_percentage", "created_at")
REQUIRED_FIELDS = (
    ("patient_id", "Patient ID", "MISSING_PATIENT_ID"),
    ("diet_chart_id", "Diet chart ID", "MISSING_DIET_CHART_ID"),
    ("date", "Date", "MISSING_DATE"),
    ("compliance_percentage", "Compliance percentage", "MISSING_COMPLIANCE_PERCENTAGE"),
    ("meals_followed", "Meals followed", "MISSING_MEALS_FOLLOWED"),
    ("meals_total", "Meals total", "MISSING_MEALS_TOTAL"),
)
CHART_LISTING_DEFAULT_LIMIT = 30


class ComplianceRepository(Protocol):
    """Persistence interface for compliance records."""

    def list_records(  # noqa: PLR0913
        self,
        filters: ComplianceFilters,
        patient_ids: list[int] | None,
        sort: str,
        descending: bool,
        page: Page,
    ) -> list[ComplianceRecord]:
        """Return a filtered page of records with patient and chart embeds."""

    def list_matching(
        self, filters: ComplianceFilters, descending: bool = True
    ) -> list[ComplianceRecord]:
        """Return every record matching the filters, ordered by date."""

    def list_records_for_patient(
        self,
        patient_id: int,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[ComplianceRecord]:
        """Return the patient's records in the range, newest date first."""

    def list_all_records(self) -> list[ComplianceRecord]:
        """Return every record."""

    def get_record(self, record_id: int) -> ComplianceRecord | None:
        """Return a record with embeds, if present."""

    def create_record(self, payload: dict[str, object]) -> ComplianceRecord:
        """Create a record and return it."""

    def update_record(
        self, record_id: int, payload: dict[str, object]
    ) -> ComplianceRecord:
        """Update a record and return it."""

    def delete_record(self, record_id: int) -> ComplianceRecord | None:
        """Delete a record and return the removed row."""


@dataclass
class ComplianceService:
    """Application service for daily compliance tracking."""

    repository: ComplianceRepository
    patient_repository: PatientRepository
    chart_repository: DietChartRepository

    def list_records(  # noqa: PLR0913
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
        patient_id: int | None = None,
        diet_chart_id: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        search: str | None = None,
        sort: str | None = None,
        order: str | None = None,
    ) -> list[ComplianceRecord]:
        """Return a page of compliance records."""
        require_date_range(start_date, end_date)
        page = Page.build(limit, offset, default=10, maximum=DEFAULT_MAX_LIMIT)
        filters = ComplianceFilters(
            patient_id=patient_id,
            diet_chart_id=diet_chart_id,
            start_date=start_date or None,
            end_date=end_date or None,
            search=search or None,
        )
        patient_ids = (
            self.patient_repository.search_patient_ids(search) if search else None
        )
        return self.repository.list_records(
            filters=filters,
            patient_ids=patient_ids,
            sort=sort if sort in COMPLIANCE_SORT_COLUMNS else "date",
            descending=order != "asc",
            page=page,
        )

    def get_record(self, record_id: int) -> ComplianceRecord:
        """Return a record or raise when missing."""
        record = self.repository.get_record(record_id)
        if record is None:
            raise NotFoundError(
                "Compliance record not found", "COMPLIANCE_RECORD_NOT_FOUND"
            )
        return record

    def create_record(self, data: dict[str, object]) -> ComplianceRecord:
        """Validate and create a compliance record."""
        for key, label, code in REQUIRED_FIELDS:
            value = data.get(key)
            if value is None or value == "":
                raise ValidationError(f"{label} is required", code)
        _validate_record_fields(data)
        _require_meals_within_total(data["meals_followed"], data["meals_total"])
        self._require_references(data)

        payload = {
            "patient_id": data["patient_id"],
            "diet_chart_id": data["diet_chart_id"],
            "date": data["date"],
            "compliance_percentage": data["compliance_percentage"],
            "meals_followed": data["meals_followed"],
            "meals_total": data["meals_total"],
            "notes": strip_or_none(data.get("notes")),
            "created_at": datetime.now(tz=UTC).isoformat(),
        }
        record = self.repository.create_record(payload)
        logger.info(
            "Created compliance record",
            extra={"record_id": record.id, "patient_id": record.patient_id},
        )
        return self.repository.get_record(record.id) or record

    def update_record(
        self, record_id: int, data: dict[str, object]
    ) -> ComplianceRecord:
        """Validate and apply a partial update."""
        current = self.get_record(record_id)
        _validate_record_fields(data)
        followed = data.get("meals_followed", current.meals_followed)
        total = data.get("meals_total", current.meals_total)
        if followed is not None and total is not None:
            _require_meals_within_total(followed, total)
        self._require_references(data)

        payload: dict[str, object] = {}
        for key in (
            "patient_id",
            "diet_chart_id",
            "date",
            "compliance_percentage",
            "meals_followed",
            "meals_total",
        ):
            if key in data and data[key] is not None:
                payload[key] = data[key]
        if "notes" in data:
            payload["notes"] = strip_or_none(data["notes"])
        if payload:
            self.repository.update_record(record_id, payload)
        return self.get_record(record_id)

    def delete_record(self, record_id: int) -> ComplianceRecord:
        """Delete a record and return the removed row."""
        self.get_record(record_id)
        deleted = self.repository.delete_record(record_id)
        if deleted is None:
            raise RuntimeError("Failed to delete compliance record")
        logger.info("Deleted compliance record", extra={"record_id": record_id})
        return deleted

    def list_for_chart(  # noqa: PLR0913
        self,
        chart_id: int,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> dict[str, object]:
        """Return a chart's records with statistics over every match."""
        if self.chart_repository.get_chart(chart_id) is None:
            raise NotFoundError("Diet chart not found", "CHART_NOT_FOUND")
        require_date_range(
            start_date,
            end_date,
            start_code="INVALID_START_DATE",
            end_code="INVALID_END_DATE",
            strict=True,
        )
        page = Page.build(
            limit,
            offset,
            default=CHART_LISTING_DEFAULT_LIMIT,
            maximum=DEFAULT_MAX_LIMIT,
        )
        filters = ComplianceFilters(
            diet_chart_id=chart_id,
            start_date=start_date or None,
            end_date=end_date or None,
        )
        matching = self.repository.list_matching(filters)
        records = self.repository.list_records(
            filters=filters, patient_ids=None, sort="date", descending=True, page=page
        )
        summary = summarize([record.to_entry() for record in matching])
        return {
            "records": [asdict(record) for record in records],
            "statistics": asdict(summary),
            "pagination": {
                "limit": page.limit,
                "offset": page.offset,
                "total": len(matching),
            },
        }

    def list_for_patient(  # noqa: PLR0913
        self,
        patient_id: int,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
        diet_chart_id: int | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order: str | None = None,
    ) -> dict[str, object]:
        """Return a patient's records with pagination and statistics."""
        if self.patient_repository.get_patient(patient_id) is None:
            raise NotFoundError("Patient not found", "PATIENT_NOT_FOUND")
        require_date_range(start_date, end_date)
        if order is not None and order not in ("asc", "desc"):
            raise ValidationError(
                "Invalid order. Must be 'asc' or 'desc'", "INVALID_ORDER"
            )
        page = Page.build(limit, offset, default=10, maximum=DEFAULT_MAX_LIMIT)
        filters = ComplianceFilters(
            patient_id=patient_id,
            diet_chart_id=diet_chart_id,
            start_date=start_date or None,
            end_date=end_date or None,
        )
        descending = order != "asc"
        matching = self.repository.list_matching(filters, descending=descending)
        records = self.repository.list_records(
            filters=filters,
            patient_ids=None,
            sort="date",
            descending=descending,
            page=page,
        )
        summary = summarize([record.to_entry() for record in matching])
        total = len(matching)
        return {
            "data": [asdict(replace(record, patient=None)) for record in records],
            "pagination": {
                "total": total,
                "limit": page.limit,
                "offset": page.offset,
                "has_more": page.offset + page.limit < total,
            },
            "statistics": {
                "total_records": summary.total_records,
                "average_compliance": summary.average_compliance,
                "trend": summary.trend,
            },
        }

    def _require_references(self, data: dict[str, object]) -> None:
        patient_id = data.get("patient_id")
        if patient_id and self.patient_repository.get_patient(int(patient_id)) is None:
            raise ValidationError("Patient not found", "PATIENT_NOT_FOUND")
        chart_id = data.get("diet_chart_id")
        if chart_id and self.chart_repository.get_chart(int(chart_id)) is None:
            raise ValidationError("Diet chart not found", "DIET_CHART_NOT_FOUND")


def _validate_record_fields(data: dict[str, object]) -> None:
    record_date = data.get("date")
    if record_date is not None:
        if not isinstance(record_date, str) or not is_date_format(record_date):
            raise ValidationError(
                "Invalid date format. Use YYYY-MM-DD", "INVALID_DATE_FORMAT"
            )
        if record_date > datetime.now(tz=UTC).date().isoformat():
            raise ValidationError(
                "Cannot record compliance for future dates", "FUTURE_DATE_NOT_ALLOWED"
            )
    percentage = data.get("compliance_percentage")
    if percentage is not None and (
        not is_number(percentage) or not 0 <= percentage <= 100  # noqa: PLR2004
    ):
        raise ValidationError(
            "Compliance percentage must be between 0 and 100",
            "INVALID_COMPLIANCE_PERCENTAGE",
        )
    for key in ("meals_followed", "meals_total"):
        count = data.get(key)
        if count is not None and (not is_number(count) or count < 0):
            raise ValidationError(
                "Meal counts must be non-negative", "INVALID_MEALS_COUNT"
            )


def _require_meals_within_total(followed: object, total: object) -> None:
    if is_number(followed) and is_number(total) and followed > total:
        raise ValidationError(
            "Meals followed cannot exceed total meals", "MEALS_FOLLOWED_EXCEEDS_TOTAL"
        )

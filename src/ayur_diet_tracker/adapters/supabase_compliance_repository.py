"""Supabase repository for compliance records."""

from dataclasses import dataclass

from supabase import Client

from ayur_diet_tracker.adapters.supabase_rows import (
    CHART_EMBED,
    PATIENT_EMBED,
    delete_returning,
    first_or_raise,
    parse_record,
)
from ayur_diet_tracker.domain.compliance import ComplianceFilters, ComplianceRecord
from ayur_diet_tracker.services.compliance import ComplianceRepository
from ayur_diet_tracker.services.validation import Page, is_date_format

RECORD_SELECT = f"*, {PATIENT_EMBED}, {CHART_EMBED}"


@dataclass
class SupabaseComplianceRepository(ComplianceRepository):
    """Supabase implementation for compliance records."""

    client: Client

    def list_records(  # noqa: PLR0913
        self,
        filters: ComplianceFilters,
        patient_ids: list[int] | None,
        sort: str,
        descending: bool,
        page: Page,
    ) -> list[ComplianceRecord]:
        """Return a filtered page of records."""
        query = self._filtered(RECORD_SELECT, filters)
        if filters.search:
            conditions = [f"notes.ilike.%{filters.search}%"]
            if is_date_format(filters.search):
                conditions.append(f"date.eq.{filters.search}")
            if patient_ids:
                conditions.append(
                    "patient_id.in.({})".format(",".join(map(str, patient_ids)))
                )
            query = query.or_(",".join(conditions))
        response = (
            query.order(sort, desc=descending)
            .range(page.offset, page.offset + page.limit - 1)
            .execute()
        )
        return [parse_record(row) for row in response.data or []]

    def list_matching(
        self, filters: ComplianceFilters, descending: bool = True
    ) -> list[ComplianceRecord]:
        """Return every record matching the filters."""
        response = (
            self._filtered("*", filters).order("date", desc=descending).execute()
        )
        return [parse_record(row) for row in response.data or []]

    def list_records_for_patient(
        self,
        patient_id: int,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[ComplianceRecord]:
        """Return the patient's records, newest date first."""
        return self.list_matching(
            ComplianceFilters(
                patient_id=patient_id, start_date=start_date, end_date=end_date
            )
        )

    def list_all_records(self) -> list[ComplianceRecord]:
        """Return every record."""
        response = (
            self.client.table("compliance_records")
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        return [parse_record(row) for row in response.data or []]

    def get_record(self, record_id: int) -> ComplianceRecord | None:
        """Return a record by id."""
        response = (
            self.client.table("compliance_records")
            .select(RECORD_SELECT)
            .eq("id", record_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_record(response.data[0])

    def create_record(self, payload: dict[str, object]) -> ComplianceRecord:
        """Insert a record row."""
        response = self.client.table("compliance_records").insert(payload).execute()
        return first_or_raise(
            response.data, parse_record, "Failed to create compliance record"
        )

    def update_record(
        self, record_id: int, payload: dict[str, object]
    ) -> ComplianceRecord:
        """Update a record row."""
        response = (
            self.client.table("compliance_records")
            .update(payload)
            .eq("id", record_id)
            .execute()
        )
        return first_or_raise(
            response.data, parse_record, "Failed to update compliance record"
        )

    def delete_record(self, record_id: int) -> ComplianceRecord | None:
        """Delete a record row."""
        rows = delete_returning(
            self.client.table("compliance_records").delete().eq("id", record_id).execute,
            "Cannot delete compliance record",
        )
        return parse_record(rows[0]) if rows else None

    def _filtered(self, columns: str, filters: ComplianceFilters):  # noqa: ANN202
        query = self.client.table("compliance_records").select(columns)
        if filters.patient_id is not None:
            query = query.eq("patient_id", filters.patient_id)
        if filters.diet_chart_id is not None:
            query = query.eq("diet_chart_id", filters.diet_chart_id)
        if filters.start_date:
            query = query.gte("date", filters.start_date)
        if filters.end_date:
            query = query.lte("date", filters.end_date)
        return query

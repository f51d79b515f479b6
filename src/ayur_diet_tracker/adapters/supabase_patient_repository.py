"""Supabase repository for patients."""

from dataclasses import dataclass

from supabase import Client

from ayur_diet_tracker.adapters.supabase_rows import (
    delete_returning,
    first_or_raise,
    parse_patient,
)
from ayur_diet_tracker.domain.patients import PatientRecord
from ayur_diet_tracker.services.patients import PatientRepository
from ayur_diet_tracker.services.validation import Page


@dataclass
class SupabasePatientRepository(PatientRepository):
    """Supabase implementation for patients."""

    client: Client

    def list_patients(  # noqa: PLR0913
        self,
        search: str | None,
        status: str | None,
        sort: str,
        descending: bool,
        page: Page,
    ) -> list[PatientRecord]:
        """Return a filtered, sorted page of patients."""
        query = self.client.table("patients").select("*")
        if search:
            pattern = f"%{search}%"
            query = query.or_(
                f"name.ilike.{pattern},email.ilike.{pattern},phone.ilike.{pattern}"
            )
        if status:
            query = query.eq("status", status)
        response = (
            query.order(sort, desc=descending)
            .range(page.offset, page.offset + page.limit - 1)
            .execute()
        )
        return [parse_patient(row) for row in response.data or []]

    def list_all_patients(self) -> list[PatientRecord]:
        """Return every patient."""
        response = (
            self.client.table("patients")
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        return [parse_patient(row) for row in response.data or []]

    def get_patient(self, patient_id: int) -> PatientRecord | None:
        """Return a patient by id."""
        response = (
            self.client.table("patients")
            .select("*")
            .eq("id", patient_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_patient(response.data[0])

    def search_patient_ids(self, query: str) -> list[int]:
        """Return ids of patients whose name contains the query."""
        response = (
            self.client.table("patients")
            .select("id")
            .ilike("name", f"%{query}%")
            .execute()
        )
        return [int(row["id"]) for row in response.data or []]

    def create_patient(self, payload: dict[str, object]) -> PatientRecord:
        """Insert a patient row."""
        response = self.client.table("patients").insert(payload).execute()
        return first_or_raise(response.data, parse_patient, "Failed to create patient")

    def update_patient(
        self, patient_id: int, payload: dict[str, object]
    ) -> PatientRecord:
        """Update a patient row."""
        response = (
            self.client.table("patients").update(payload).eq("id", patient_id).execute()
        )
        return first_or_raise(response.data, parse_patient, "Failed to update patient")

    def delete_patient(self, patient_id: int) -> PatientRecord | None:
        """Delete a patient row."""
        rows = delete_returning(
            self.client.table("patients").delete().eq("id", patient_id).execute,
            "Cannot delete patient with existing diet charts or compliance records",
        )
        return parse_patient(rows[0]) if rows else None

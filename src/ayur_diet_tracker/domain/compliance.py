"""Domain models for diet compliance tracking."""

from dataclasses import dataclass
from enum import StrEnum

from ayur_diet_tracker.domain.diet_charts import DietChartSummary
from ayur_diet_tracker.domain.patients import PatientSummary


class Trend(StrEnum):
    """Direction of compliance over time."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


@dataclass(frozen=True)
class ComplianceEntry:
    """A single day of adherence data fed into analytics.

    A ``None`` percentage means nothing was recorded for the day. Such entries
    count toward totals but never toward averages or best/worst days.
    """

    date: str
    compliance_percentage: float | None
    meals_followed: int = 0
    meals_total: int = 0


@dataclass(frozen=True)
class DayScore:
    """Compliance percentage on a specific date."""

    date: str
    compliance_percentage: float


@dataclass(frozen=True)
class ComplianceSummary:
    """Aggregated compliance statistics."""

    average_compliance: int
    total_records: int
    trend: Trend
    best_day: DayScore | None
    worst_day: DayScore | None


@dataclass(frozen=True)
class ComplianceRecord:
    """Compliance record row, optionally joined with its patient and chart."""

    id: int
    patient_id: int | None
    diet_chart_id: int | None
    date: str | None
    compliance_percentage: int | None
    meals_followed: int | None
    meals_total: int | None
    notes: str | None
    created_at: str
    patient: PatientSummary | None = None
    diet_chart: DietChartSummary | None = None

    def to_entry(self) -> ComplianceEntry:
        """Return the analytics view of this record."""
        return ComplianceEntry(
            date=self.date or "",
            compliance_percentage=self.compliance_percentage,
            meals_followed=self.meals_followed or 0,
            meals_total=self.meals_total or 0,
        )


@dataclass(frozen=True)
class ComplianceFilters:
    """Filters shared by compliance listings."""

    patient_id: int | None = None
    diet_chart_id: int | None = None
    start_date: str | None = None
    end_date: str | None = None
    search: str | None = None

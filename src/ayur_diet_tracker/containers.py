"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from ayur_diet_tracker.adapters.supabase_compliance_repository import (
    SupabaseComplianceRepository,
)
from ayur_diet_tracker.adapters.supabase_diet_chart_repository import (
    SupabaseDietChartRepository,
)
from ayur_diet_tracker.adapters.supabase_patient_repository import (
    SupabasePatientRepository,
)
from ayur_diet_tracker.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from ayur_diet_tracker.config import Settings
from ayur_diet_tracker.services.compliance import ComplianceService
from ayur_diet_tracker.services.diet_charts import DietChartService
from ayur_diet_tracker.services.patients import PatientService
from ayur_diet_tracker.services.profile import ProfileService
from ayur_diet_tracker.services.reports import ReportService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    patient_service: PatientService
    diet_chart_service: DietChartService
    compliance_service: ComplianceService
    report_service: ReportService
    profile_service: ProfileService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    patient_repository = SupabasePatientRepository(supabase_client)
    chart_repository = SupabaseDietChartRepository(supabase_client)
    compliance_repository = SupabaseComplianceRepository(supabase_client)
    profile_repository = SupabaseProfileRepository(supabase_client)

    async def close_resources() -> None:
        supabase_client.postgrest.session.close()

    return AppContainer(
        settings=resolved_settings,
        patient_service=PatientService(
            repository=patient_repository,
            charts=chart_repository,
            records=compliance_repository,
        ),
        diet_chart_service=DietChartService(
            repository=chart_repository,
            patient_repository=patient_repository,
        ),
        compliance_service=ComplianceService(
            repository=compliance_repository,
            patient_repository=patient_repository,
            chart_repository=chart_repository,
        ),
        report_service=ReportService(
            patient_repository=patient_repository,
            chart_repository=chart_repository,
            compliance_repository=compliance_repository,
        ),
        profile_service=ProfileService(profile_repository),
        close_resources=close_resources,
    )

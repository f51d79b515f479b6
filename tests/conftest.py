"""Shared test fixtures."""

from dataclasses import asdict, dataclass, field

import pytest

from ayur_diet_tracker.adapters.supabase_rows import (
    parse_chart,
    parse_food,
    parse_meal,
    parse_patient,
    parse_record,
)
from ayur_diet_tracker.config import Settings
from ayur_diet_tracker.containers import AppContainer
from ayur_diet_tracker.domain.compliance import ComplianceFilters, ComplianceRecord
from ayur_diet_tracker.domain.diet_charts import (
    DietChartRecord,
    MealFoodRecord,
    MealRecord,
)
from ayur_diet_tracker.domain.patients import PatientRecord
from ayur_diet_tracker.domain.profile import ProfileSettings
from ayur_diet_tracker.errors import ConflictError
from ayur_diet_tracker.services.compliance import (
    ComplianceRepository,
    ComplianceService,
)
from ayur_diet_tracker.services.diet_charts import (
    DietChartRepository,
    DietChartService,
)
from ayur_diet_tracker.services.patients import PatientRepository, PatientService
from ayur_diet_tracker.services.profile import ProfileRepository, ProfileService
from ayur_diet_tracker.services.reports import ReportService
from ayur_diet_tracker.services.validation import Page

PATIENT_DEFAULTS = {
    "name": "Asha Rao",
    "age": 34,
    "gender": "Female",
    "dosha": "Vata",
    "status": "Active",
    "created_at": "2024-01-01T09:00:00+00:00",
    "updated_at": "2024-01-01T09:00:00+00:00",
}
CHART_DEFAULTS = {
    "duration": 30,
    "target_calories": 1800,
    "dietary_focus": "maintenance",
    "status": "Active",
    "created_at": "2024-01-01T10:00:00+00:00",
    "updated_at": "2024-01-01T10:00:00+00:00",
}


def _sorted(items: list, sort: str, descending: bool) -> list:
    present = [item for item in items if getattr(item, sort) is not None]
    missing = [item for item in items if getattr(item, sort) is None]
    ordered = sorted(present, key=lambda item: getattr(item, sort), reverse=descending)
    return ordered + missing


def _paged(items: list, page: Page) -> list:
    return items[page.offset : page.offset + page.limit]


@dataclass
class InMemoryPatientRepository(PatientRepository):
    """In-memory patient repository for tests."""

    patients: dict[int, PatientRecord] = field(default_factory=dict)
    protected_ids: set[int] = field(default_factory=set)
    next_id: int = 1

    def add(self, **values: object) -> PatientRecord:
        return self.create_patient({**PATIENT_DEFAULTS, **values})

    def list_patients(  # noqa: PLR0913
        self,
        search: str | None,
        status: str | None,
        sort: str,
        descending: bool,
        page: Page,
    ) -> list[PatientRecord]:
        patients = list(self.patients.values())
        if search:
            needle = search.lower()
            patients = [
                p
                for p in patients
                if any(
                    needle in (value or "").lower()
                    for value in (p.name, p.email, p.phone)
                )
            ]
        if status:
            patients = [p for p in patients if p.status == status]
        return _paged(_sorted(patients, sort, descending), page)

    def list_all_patients(self) -> list[PatientRecord]:
        return list(self.patients.values())

    def get_patient(self, patient_id: int) -> PatientRecord | None:
        return self.patients.get(patient_id)

    def search_patient_ids(self, query: str) -> list[int]:
        return [
            p.id for p in self.patients.values() if query.lower() in p.name.lower()
        ]

    def create_patient(self, payload: dict[str, object]) -> PatientRecord:
        patient = parse_patient({**payload, "id": self.next_id})
        self.patients[patient.id] = patient
        self.next_id += 1
        return patient

    def update_patient(
        self, patient_id: int, payload: dict[str, object]
    ) -> PatientRecord:
        patient = parse_patient({**asdict(self.patients[patient_id]), **payload})
        self.patients[patient_id] = patient
        return patient

    def delete_patient(self, patient_id: int) -> PatientRecord | None:
        if patient_id in self.protected_ids:
            raise ConflictError(
                "Cannot delete patient with existing diet charts or compliance records",
                "FOREIGN_KEY_CONSTRAINT",
            )
        return self.patients.pop(patient_id, None)


@dataclass
class InMemoryDietChartRepository(DietChartRepository):
    """In-memory diet chart repository for tests."""

    patients: InMemoryPatientRepository
    charts: dict[int, DietChartRecord] = field(default_factory=dict)
    meals: dict[int, MealRecord] = field(default_factory=dict)
    foods: dict[int, MealFoodRecord] = field(default_factory=dict)
    next_id: int = 1

    def add(self, **values: object) -> DietChartRecord:
        return self.create_chart({**CHART_DEFAULTS, **values})

    def list_charts(  # noqa: PLR0913
        self,
        filters: dict[str, object],
        patient_ids: list[int] | None,
        sort: str,
        descending: bool,
        page: Page,
    ) -> list[DietChartRecord]:
        charts = [
            self._embed(chart)
            for chart in self.charts.values()
            if all(getattr(chart, key) == value for key, value in filters.items())
            and (patient_ids is None or chart.patient_id in patient_ids)
        ]
        return _paged(_sorted(charts, sort, descending), page)

    def list_all_charts(self) -> list[DietChartRecord]:
        return list(self.charts.values())

    def list_charts_for_patient(
        self,
        patient_id: int,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[DietChartRecord]:
        charts = [
            chart
            for chart in self.charts.values()
            if chart.patient_id == patient_id
            and (not start_date or chart.created_at >= start_date)
            and (not end_date or chart.created_at <= end_date)
        ]
        return _sorted(charts, "created_at", descending=True)

    def count_patient_charts(self, patient_id: int, status: str | None) -> int:
        return len(self._patient_charts(patient_id, status))

    def list_patient_charts(
        self, patient_id: int, status: str | None, descending: bool, page: Page
    ) -> list[DietChartRecord]:
        charts = self._patient_charts(patient_id, status)
        return _paged(_sorted(charts, "created_at", descending), page)

    def get_chart(self, chart_id: int) -> DietChartRecord | None:
        chart = self.charts.get(chart_id)
        return self._embed(chart) if chart else None

    def create_chart(self, payload: dict[str, object]) -> DietChartRecord:
        chart = parse_chart({**payload, "id": self.next_id})
        self.charts[chart.id] = chart
        self.next_id += 1
        return chart

    def update_chart(
        self, chart_id: int, payload: dict[str, object]
    ) -> DietChartRecord:
        values = {**asdict(self.charts[chart_id]), **payload, "patient": None}
        chart = parse_chart(values)
        self.charts[chart_id] = chart
        return chart

    def delete_chart(self, chart_id: int) -> DietChartRecord | None:
        return self.charts.pop(chart_id, None)

    def list_meals(self, chart_ids: list[int]) -> list[MealRecord]:
        return [meal for meal in self.meals.values() if meal.diet_chart_id in chart_ids]

    def list_meal_foods(self, meal_ids: list[int]) -> list[MealFoodRecord]:
        return [food for food in self.foods.values() if food.meal_id in meal_ids]

    def create_meal(self, payload: dict[str, object]) -> MealRecord:
        meal = parse_meal({**payload, "id": len(self.meals) + 1})
        self.meals[meal.id] = meal
        return meal

    def create_meal_foods(
        self, meal_id: int, foods: list[dict[str, object]]
    ) -> list[MealFoodRecord]:
        created = []
        for food in foods:
            record = parse_food({**food, "meal_id": meal_id, "id": len(self.foods) + 1})
            self.foods[record.id] = record
            created.append(record)
        return created

    def delete_meals(self, chart_id: int) -> None:
        meal_ids = [m.id for m in self.meals.values() if m.diet_chart_id == chart_id]
        self.foods = {
            key: food for key, food in self.foods.items() if food.meal_id not in meal_ids
        }
        self.meals = {
            key: meal for key, meal in self.meals.items() if key not in meal_ids
        }

    def _patient_charts(
        self, patient_id: int, status: str | None
    ) -> list[DietChartRecord]:
        return [
            self._embed(chart)
            for chart in self.charts.values()
            if chart.patient_id == patient_id and (not status or chart.status == status)
        ]

    def _embed(self, chart: DietChartRecord) -> DietChartRecord:
        patient = self.patients.get_patient(chart.patient_id or 0)
        return parse_chart(
            {**asdict(chart), "patient": asdict(patient) if patient else None}
        )


@dataclass
class InMemoryComplianceRepository(ComplianceRepository):
    """In-memory compliance repository for tests."""

    patients: InMemoryPatientRepository
    charts: InMemoryDietChartRepository
    records: dict[int, ComplianceRecord] = field(default_factory=dict)
    next_id: int = 1

    def add(self, **values: object) -> ComplianceRecord:
        payload = {
            "meals_followed": 3,
            "meals_total": 4,
            "created_at": f"{values.get('date', '2024-01-01')}T20:00:00+00:00",
            **values,
        }
        return self.create_record(payload)

    def list_records(  # noqa: PLR0913
        self,
        filters: ComplianceFilters,
        patient_ids: list[int] | None,
        sort: str,
        descending: bool,
        page: Page,
    ) -> list[ComplianceRecord]:
        records = self._matching(filters)
        if filters.search:
            needle = filters.search.lower()
            records = [
                r
                for r in records
                if needle in (r.notes or "").lower()
                or r.date == filters.search
                or r.patient_id in (patient_ids or [])
            ]
        ordered = _sorted(records, sort, descending)
        return [self._embed(record) for record in _paged(ordered, page)]

    def list_matching(
        self, filters: ComplianceFilters, descending: bool = True
    ) -> list[ComplianceRecord]:
        return _sorted(self._matching(filters), "date", descending)

    def list_records_for_patient(
        self,
        patient_id: int,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[ComplianceRecord]:
        return self.list_matching(
            ComplianceFilters(
                patient_id=patient_id, start_date=start_date, end_date=end_date
            )
        )

    def list_all_records(self) -> list[ComplianceRecord]:
        return list(self.records.values())

    def get_record(self, record_id: int) -> ComplianceRecord | None:
        record = self.records.get(record_id)
        return self._embed(record) if record else None

    def create_record(self, payload: dict[str, object]) -> ComplianceRecord:
        record = parse_record({**payload, "id": self.next_id})
        self.records[record.id] = record
        self.next_id += 1
        return record

    def update_record(
        self, record_id: int, payload: dict[str, object]
    ) -> ComplianceRecord:
        values = {
            **asdict(self.records[record_id]),
            **payload,
            "patient": None,
            "diet_chart": None,
        }
        record = parse_record(values)
        self.records[record_id] = record
        return record

    def delete_record(self, record_id: int) -> ComplianceRecord | None:
        return self.records.pop(record_id, None)

    def _matching(self, filters: ComplianceFilters) -> list[ComplianceRecord]:
        return [
            r
            for r in self.records.values()
            if (filters.patient_id is None or r.patient_id == filters.patient_id)
            and (
                filters.diet_chart_id is None
                or r.diet_chart_id == filters.diet_chart_id
            )
            and (not filters.start_date or (r.date or "") >= filters.start_date)
            and (not filters.end_date or (r.date or "") <= filters.end_date)
        ]

    def _embed(self, record: ComplianceRecord) -> ComplianceRecord:
        patient = self.patients.get_patient(record.patient_id or 0)
        chart = self.charts.charts.get(record.diet_chart_id or 0)
        return parse_record(
            {
                **asdict(record),
                "patient": asdict(patient) if patient else None,
                "diet_chart": asdict(chart) if chart else None,
            }
        )


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profile: ProfileSettings | None = None

    def get_profile(self) -> ProfileSettings | None:
        return self.profile

    def create_profile(self, payload: dict[str, object]) -> ProfileSettings:
        self.profile = ProfileSettings(
            **{
                "id": 1,
                "first_name": None,
                "last_name": None,
                "email": None,
                "phone": None,
                "specialization": None,
                "clinic_name": None,
                **payload,
            }
        )
        return self.profile

    def update_profile(
        self, profile_id: int, payload: dict[str, object]
    ) -> ProfileSettings:
        assert self.profile is not None
        self.profile = ProfileSettings(**{**asdict(self.profile), **payload})
        return self.profile


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        environment="test",
    )


@pytest.fixture
def patient_repository() -> InMemoryPatientRepository:
    return InMemoryPatientRepository()


@pytest.fixture
def chart_repository(
    patient_repository: InMemoryPatientRepository,
) -> InMemoryDietChartRepository:
    return InMemoryDietChartRepository(patients=patient_repository)


@pytest.fixture
def compliance_repository(
    patient_repository: InMemoryPatientRepository,
    chart_repository: InMemoryDietChartRepository,
) -> InMemoryComplianceRepository:
    return InMemoryComplianceRepository(
        patients=patient_repository, charts=chart_repository
    )


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def container(
    settings: Settings,
    patient_repository: InMemoryPatientRepository,
    chart_repository: InMemoryDietChartRepository,
    compliance_repository: InMemoryComplianceRepository,
    profile_repository: InMemoryProfileRepository,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        patient_service=PatientService(
            repository=patient_repository,
            charts=chart_repository,
            records=compliance_repository,
        ),
        diet_chart_service=DietChartService(
            repository=chart_repository, patient_repository=patient_repository
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

"""Tests for compliance service."""

from datetime import UTC, datetime, timedelta

import pytest

from ayur_diet_tracker.errors import NotFoundError, ValidationError
from ayur_diet_tracker.services.compliance import ComplianceService
from tests.conftest import (
    InMemoryComplianceRepository,
    InMemoryDietChartRepository,
    InMemoryPatientRepository,
)

SEED_DAYS = (
    ("2024-01-01", 92),
    ("2024-01-02", 88),
    ("2024-01-03", 95),
    ("2024-01-04", 90),
    ("2024-01-05", 85),
    ("2024-01-06", 93),
)


@pytest.fixture
def service(
    patient_repository: InMemoryPatientRepository,
    chart_repository: InMemoryDietChartRepository,
    compliance_repository: InMemoryComplianceRepository,
) -> ComplianceService:
    patient = patient_repository.add()
    chart_repository.add(patient_id=patient.id)
    return ComplianceService(
        repository=compliance_repository,
        patient_repository=patient_repository,
        chart_repository=chart_repository,
    )


@pytest.fixture
def seeded(compliance_repository: InMemoryComplianceRepository) -> None:
    for day, percentage in SEED_DAYS:
        compliance_repository.add(
            patient_id=1, diet_chart_id=1, date=day, compliance_percentage=percentage
        )


def _valid(**overrides: object) -> dict[str, object]:
    return {
        "patient_id": 1,
        "diet_chart_id": 1,
        "date": "2024-02-01",
        "compliance_percentage": 75,
        "meals_followed": 3,
        "meals_total": 4,
        **overrides,
    }


def test_create_record_embeds_patient_and_chart(service: ComplianceService) -> None:
    record = service.create_record(_valid(notes="  skipped dinner  "))

    assert record.notes == "skipped dinner"
    assert record.patient is not None
    assert record.patient.id == 1
    assert record.diet_chart is not None
    assert record.diet_chart.dietary_focus == "maintenance"


@pytest.mark.parametrize(
    ("data", "code"),
    [
        (_valid(patient_id=None), "MISSING_PATIENT_ID"),
        (_valid(diet_chart_id=None), "MISSING_DIET_CHART_ID"),
        (_valid(date=None), "MISSING_DATE"),
        (_valid(compliance_percentage=None), "MISSING_COMPLIANCE_PERCENTAGE"),
        (_valid(meals_followed=None), "MISSING_MEALS_FOLLOWED"),
        (_valid(meals_total=None), "MISSING_MEALS_TOTAL"),
        (_valid(date="01/02/2024"), "INVALID_DATE_FORMAT"),
        (_valid(compliance_percentage=101), "INVALID_COMPLIANCE_PERCENTAGE"),
        (_valid(meals_followed=-1), "INVALID_MEALS_COUNT"),
        (_valid(meals_followed=5, meals_total=4), "MEALS_FOLLOWED_EXCEEDS_TOTAL"),
        (_valid(patient_id=42), "PATIENT_NOT_FOUND"),
        (_valid(diet_chart_id=42), "DIET_CHART_NOT_FOUND"),
    ],
)
def test_create_record_validation_codes(
    service: ComplianceService, data: dict[str, object], code: str
) -> None:
    with pytest.raises(ValidationError) as excinfo:
        service.create_record(data)

    assert excinfo.value.code == code


def test_create_record_rejects_future_dates(service: ComplianceService) -> None:
    tomorrow = (datetime.now(tz=UTC).date() + timedelta(days=2)).isoformat()

    with pytest.raises(ValidationError) as excinfo:
        service.create_record(_valid(date=tomorrow))

    assert excinfo.value.code == "FUTURE_DATE_NOT_ALLOWED"


def test_update_checks_meals_against_merged_values(service: ComplianceService) -> None:
    record = service.create_record(_valid(meals_followed=2, meals_total=4))

    with pytest.raises(ValidationError) as excinfo:
        service.update_record(record.id, {"meals_total": 1})
    updated = service.update_record(record.id, {"meals_followed": 4, "notes": ""})

    assert excinfo.value.code == "MEALS_FOLLOWED_EXCEEDS_TOTAL"
    assert updated.meals_followed == 4
    assert updated.notes is None


def test_delete_missing_record(service: ComplianceService) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        service.delete_record(123)

    assert excinfo.value.code == "COMPLIANCE_RECORD_NOT_FOUND"


@pytest.mark.usefixtures("seeded")
def test_list_for_chart_statistics_cover_all_matches(
    service: ComplianceService,
) -> None:
    result = service.list_for_chart(1, limit=2)

    assert [record["date"] for record in result["records"]] == [
        "2024-01-06",
        "2024-01-05",
    ]
    assert result["records"][0]["patient"]["name"] == "Asha Rao"
    assert result["pagination"] == {"limit": 2, "offset": 0, "total": 6}
    assert result["statistics"] == {
        "average_compliance": 91,
        "total_records": 6,
        "trend": "stable",
        "best_day": {"date": "2024-01-03", "compliance_percentage": 95},
        "worst_day": {"date": "2024-01-05", "compliance_percentage": 85},
    }


@pytest.mark.usefixtures("seeded")
def test_list_for_chart_filters_dates(service: ComplianceService) -> None:
    result = service.list_for_chart(1, start_date="2024-01-04", end_date="2024-01-05")

    assert result["statistics"]["total_records"] == 2
    assert result["statistics"]["average_compliance"] == 88


def test_list_for_chart_errors(service: ComplianceService) -> None:
    with pytest.raises(NotFoundError) as missing:
        service.list_for_chart(99)
    with pytest.raises(ValidationError) as bad_start:
        service.list_for_chart(1, start_date="2024-02-30")
    with pytest.raises(ValidationError) as bad_end:
        service.list_for_chart(1, end_date="tomorrow")

    assert missing.value.code == "CHART_NOT_FOUND"
    assert bad_start.value.code == "INVALID_START_DATE"
    assert bad_end.value.code == "INVALID_END_DATE"


@pytest.mark.usefixtures("seeded")
def test_list_for_patient_pagination_and_statistics(
    service: ComplianceService,
) -> None:
    result = service.list_for_patient(1, limit=4, offset=0, order="asc")

    assert [record["date"] for record in result["data"]] == [
        "2024-01-01",
        "2024-01-02",
        "2024-01-03",
        "2024-01-04",
    ]
    assert result["data"][0]["patient"] is None
    assert result["data"][0]["diet_chart"]["id"] == 1
    assert result["pagination"] == {
        "total": 6,
        "limit": 4,
        "offset": 0,
        "has_more": True,
    }
    assert result["statistics"] == {
        "total_records": 6,
        "average_compliance": 91,
        "trend": "stable",
    }


def test_list_for_patient_errors(service: ComplianceService) -> None:
    with pytest.raises(NotFoundError):
        service.list_for_patient(99)
    with pytest.raises(ValidationError) as bad_order:
        service.list_for_patient(1, order="sideways")
    with pytest.raises(ValidationError) as bad_date:
        service.list_for_patient(1, start_date="2024/01/01")

    assert bad_order.value.code == "INVALID_ORDER"
    assert bad_date.value.code == "INVALID_DATE_FORMAT"


@pytest.mark.usefixtures("seeded")
def test_list_records_search_matches_notes_and_patient_name(
    service: ComplianceService,
    patient_repository: InMemoryPatientRepository,
    compliance_repository: InMemoryComplianceRepository,
) -> None:
    other = patient_repository.add(name="Devika")
    compliance_repository.add(
        patient_id=other.id,
        diet_chart_id=1,
        date="2024-01-07",
        compliance_percentage=50,
        notes="travel week",
    )

    by_name = service.list_records(search="asha", limit=100)
    by_notes = service.list_records(search="travel")

    assert len(by_name) == 6
    assert [record.patient_id for record in by_notes] == [other.id]

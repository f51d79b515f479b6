"""Patient endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status

from ayur_diet_tracker.api.schemas import PatientBody

if TYPE_CHECKING:
    from ayur_diet_tracker.containers import AppContainer

router = APIRouter(prefix="/api/patients", tags=["patients"])


@router.get("")
async def list_patients(  # noqa: PLR0913
    request: Request,
    limit: int | None = None,
    offset: int | None = None,
    search: str | None = None,
    sort: str | None = None,
    order: str | None = None,
    status: str | None = None,
) -> list[dict[str, object]]:
    """Return a page of patients."""
    container: AppContainer = request.app.state.container
    patients = container.patient_service.list_patients(
        limit=limit,
        offset=offset,
        search=search,
        status=status,
        sort=sort,
        order=order,
    )
    return [asdict(patient) for patient in patients]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_patient(body: PatientBody, request: Request) -> dict[str, object]:
    """Create a patient."""
    container: AppContainer = request.app.state.container
    patient = container.patient_service.create_patient(
        body.model_dump(exclude_unset=True)
    )
    return asdict(patient)


@router.get("/{patient_id}")
async def get_patient(patient_id: int, request: Request) -> dict[str, object]:
    """Return a patient with diet charts and compliance records."""
    container: AppContainer = request.app.state.container
    result = container.patient_service.get_with_relations(patient_id)
    return {
        **asdict(result.patient),
        "diet_charts": [asdict(chart) for chart in result.diet_charts],
        "compliance_records": [asdict(record) for record in result.compliance_records],
    }


@router.put("/{patient_id}")
async def update_patient(
    patient_id: int, body: PatientBody, request: Request
) -> dict[str, object]:
    """Apply a partial update to a patient."""
    container: AppContainer = request.app.state.container
    patient = container.patient_service.update_patient(
        patient_id, body.model_dump(exclude_unset=True)
    )
    return asdict(patient)


@router.delete("/{patient_id}")
async def delete_patient(patient_id: int, request: Request) -> dict[str, object]:
    """Delete a patient."""
    container: AppContainer = request.app.state.container
    patient = container.patient_service.delete_patient(patient_id)
    return {"message": "Patient deleted successfully", "patient": asdict(patient)}

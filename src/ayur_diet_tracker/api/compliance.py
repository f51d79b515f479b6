"""Compliance record endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status

from ayur_diet_tracker.api.schemas import ComplianceBody

if TYPE_CHECKING:
    from ayur_diet_tracker.containers import AppContainer

router = APIRouter(prefix="/api/compliance", tags=["compliance"])


@router.get("")
async def list_compliance(  # noqa: PLR0913
    request: Request,
    limit: int | None = None,
    offset: int | None = None,
    patient_id: int | None = None,
    diet_chart_id: int | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    search: str | None = None,
    sort: str | None = None,
    order: str | None = None,
) -> list[dict[str, object]]:
    """Return a page of compliance records."""
    container: AppContainer = request.app.state.container
    records = container.compliance_service.list_records(
        limit=limit,
        offset=offset,
        patient_id=patient_id,
        diet_chart_id=diet_chart_id,
        start_date=start_date,
        end_date=end_date,
        search=search,
        sort=sort,
        order=order,
    )
    return [asdict(record) for record in records]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_compliance(body: ComplianceBody, request: Request) -> dict[str, object]:
    """Record a day of compliance."""
    container: AppContainer = request.app.state.container
    record = container.compliance_service.create_record(
        body.model_dump(exclude_unset=True)
    )
    return asdict(record)


@router.get("/chart/{chart_id}")
async def list_chart_compliance(  # noqa: PLR0913
    chart_id: int,
    request: Request,
    start_date: str | None = None,
    end_date: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict[str, object]:
    """Return a chart's compliance records with statistics."""
    container: AppContainer = request.app.state.container
    return container.compliance_service.list_for_chart(
        chart_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )


@router.get("/patient/{patient_id}")
async def list_patient_compliance(  # noqa: PLR0913
    patient_id: int,
    request: Request,
    start_date: str | None = None,
    end_date: str | None = None,
    diet_chart_id: int | None = None,
    limit: int | None = None,
    offset: int | None = None,
    order: str | None = None,
) -> dict[str, object]:
    """Return a patient's compliance records with statistics."""
    container: AppContainer = request.app.state.container
    return container.compliance_service.list_for_patient(
        patient_id,
        start_date=start_date,
        end_date=end_date,
        diet_chart_id=diet_chart_id,
        limit=limit,
        offset=offset,
        order=order,
    )


@router.get("/{record_id}")
async def get_compliance(record_id: int, request: Request) -> dict[str, object]:
    """Return a single compliance record."""
    container: AppContainer = request.app.state.container
    return asdict(container.compliance_service.get_record(record_id))


@router.put("/{record_id}")
async def update_compliance(
    record_id: int, body: ComplianceBody, request: Request
) -> dict[str, object]:
    """Apply a partial update to a compliance record."""
    container: AppContainer = request.app.state.container
    record = container.compliance_service.update_record(
        record_id, body.model_dump(exclude_unset=True)
    )
    return asdict(record)


@router.delete("/{record_id}")
async def delete_compliance(record_id: int, request: Request) -> dict[str, object]:
    """Delete a compliance record."""
    container: AppContainer = request.app.state.container
    record = container.compliance_service.delete_record(record_id)
    return {
        "message": "Compliance record deleted successfully",
        "deleted": asdict(record),
    }

"""Diet chart endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status

from ayur_diet_tracker.api.schemas import DietChartBody

if TYPE_CHECKING:
    from ayur_diet_tracker.containers import AppContainer

router = APIRouter(prefix="/api/diet-charts", tags=["diet-charts"])


@router.get("")
async def list_diet_charts(  # noqa: PLR0913
    request: Request,
    limit: int | None = None,
    offset: int | None = None,
    patient_id: int | None = None,
    status: str | None = None,
    dietary_focus: str | None = None,
    search: str | None = None,
    sort: str | None = None,
    order: str | None = None,
) -> list[dict[str, object]]:
    """Return a page of diet charts with their patients."""
    container: AppContainer = request.app.state.container
    charts = container.diet_chart_service.list_charts(
        limit=limit,
        offset=offset,
        patient_id=patient_id,
        status=status,
        dietary_focus=dietary_focus,
        search=search,
        sort=sort,
        order=order,
    )
    return [asdict(chart) for chart in charts]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_diet_chart(body: DietChartBody, request: Request) -> dict[str, object]:
    """Create a diet chart, optionally with meals and foods."""
    container: AppContainer = request.app.state.container
    chart = container.diet_chart_service.create_chart(
        body.model_dump(exclude_unset=True)
    )
    return asdict(chart)


@router.get("/patient/{patient_id}")
async def list_patient_diet_charts(  # noqa: PLR0913
    patient_id: int,
    request: Request,
    status: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    order: str | None = None,
) -> dict[str, object]:
    """Return a patient's diet charts with meal summaries."""
    container: AppContainer = request.app.state.container
    return container.diet_chart_service.list_for_patient(
        patient_id, status=status, limit=limit, offset=offset, order=order
    )


@router.get("/{chart_id}")
async def get_diet_chart(chart_id: int, request: Request) -> dict[str, object]:
    """Return a chart with its patient and meals."""
    container: AppContainer = request.app.state.container
    detail = container.diet_chart_service.get_detail(chart_id)
    return {
        **asdict(detail.chart),
        "patient": asdict(detail.patient) if detail.patient else None,
        "meals": [asdict(meal) for meal in detail.meals],
    }


@router.put("/{chart_id}")
async def update_diet_chart(
    chart_id: int, body: DietChartBody, request: Request
) -> dict[str, object]:
    """Apply a partial update to a diet chart."""
    container: AppContainer = request.app.state.container
    chart = container.diet_chart_service.update_chart(
        chart_id, body.model_dump(exclude_unset=True, exclude={"meals"})
    )
    return asdict(chart)


@router.delete("/{chart_id}")
async def delete_diet_chart(chart_id: int, request: Request) -> dict[str, object]:
    """Delete a diet chart with its meals."""
    container: AppContainer = request.app.state.container
    chart = container.diet_chart_service.delete_chart(chart_id)
    return {
        "message": "Diet chart deleted successfully",
        "deleted_record": asdict(chart),
    }

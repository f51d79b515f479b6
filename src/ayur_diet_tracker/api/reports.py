"""Reporting endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

if TYPE_CHECKING:
    from ayur_diet_tracker.containers import AppContainer

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/patient/{patient_id}")
async def patient_report(
    patient_id: int,
    request: Request,
    start_date: str | None = None,
    end_date: str | None = None,
    include_meals: bool = False,
) -> dict[str, object]:
    """Return a patient's progress report."""
    container: AppContainer = request.app.state.container
    return container.report_service.patient_report(
        patient_id,
        start_date=start_date,
        end_date=end_date,
        include_meals=include_meals,
    )


@router.get("/dashboard")
async def dashboard(request: Request, period: str = "month") -> dict[str, object]:
    """Return practice-wide dashboard statistics."""
    container: AppContainer = request.app.state.container
    return container.report_service.dashboard(period)

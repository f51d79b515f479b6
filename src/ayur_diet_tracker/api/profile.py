"""Practitioner profile endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from ayur_diet_tracker.api.schemas import ProfileBody

if TYPE_CHECKING:
    from ayur_diet_tracker.containers import AppContainer

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("")
async def get_profile(request: Request) -> dict[str, object]:
    """Return the profile settings."""
    container: AppContainer = request.app.state.container
    return asdict(container.profile_service.get_profile())


@router.put("")
async def update_profile(body: ProfileBody, request: Request) -> dict[str, object]:
    """Save the profile settings."""
    container: AppContainer = request.app.state.container
    profile = container.profile_service.save_profile(
        body.model_dump(exclude_unset=True)
    )
    return asdict(profile)

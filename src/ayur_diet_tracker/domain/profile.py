"""Domain model for practitioner profile settings."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProfileSettings:
    """The dietitian's profile shown in settings."""

    id: int | None
    first_name: str | None
    last_name: str | None
    email: str | None
    phone: str | None
    specialization: str | None
    clinic_name: str | None
    updated_at: str


EMPTY_PROFILE = ProfileSettings(
    id=None,
    first_name="",
    last_name="",
    email="",
    phone="",
    specialization="",
    clinic_name="",
    updated_at="",
)

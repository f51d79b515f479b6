"""Practitioner profile settings service."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from ayur_diet_tracker.domain.profile import EMPTY_PROFILE, ProfileSettings
from ayur_diet_tracker.errors import ValidationError
from ayur_diet_tracker.services.validation import is_email

TRIMMED_FIELDS = ("first_name", "last_name", "specialization", "clinic_name")


class ProfileRepository(Protocol):
    """Persistence interface for the single profile row."""

    def get_profile(self) -> ProfileSettings | None:
        """Return the stored profile, if any."""

    def create_profile(self, payload: dict[str, object]) -> ProfileSettings:
        """Insert the profile row."""

    def update_profile(
        self, profile_id: int, payload: dict[str, object]
    ) -> ProfileSettings:
        """Update the profile row."""


@dataclass
class ProfileService:
    """Service for reading and saving profile settings."""

    repository: ProfileRepository

    def get_profile(self) -> ProfileSettings:
        """Return the profile or an empty default."""
        return self.repository.get_profile() or EMPTY_PROFILE

    def save_profile(self, data: dict[str, object]) -> ProfileSettings:
        """Insert or update the profile."""
        email = data.get("email")
        if isinstance(email, str) and email.strip() and not is_email(email.strip()):
            raise ValidationError("Invalid email format", "INVALID_EMAIL_FORMAT")

        payload: dict[str, object] = {}
        for key in TRIMMED_FIELDS:
            if key in data:
                value = data[key]
                payload[key] = value.strip() if isinstance(value, str) else value
        if "email" in data:
            payload["email"] = email.strip().lower() if isinstance(email, str) else email
        if "phone" in data:
            payload["phone"] = data["phone"]
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()

        existing = self.repository.get_profile()
        if existing is None or existing.id is None:
            return self.repository.create_profile(payload)
        return self.repository.update_profile(existing.id, payload)

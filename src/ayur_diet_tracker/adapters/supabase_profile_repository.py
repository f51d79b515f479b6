"""Supabase repository for practitioner profile settings."""

from dataclasses import dataclass

from supabase import Client

from ayur_diet_tracker.adapters.supabase_rows import first_or_raise
from ayur_diet_tracker.domain.profile import ProfileSettings
from ayur_diet_tracker.services.profile import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for the profile_settings table."""

    client: Client

    def get_profile(self) -> ProfileSettings | None:
        """Return the first profile row."""
        response = (
            self.client.table("profile_settings")
            .select("*")
            .order("id", desc=False)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def create_profile(self, payload: dict[str, object]) -> ProfileSettings:
        """Insert the profile row."""
        response = self.client.table("profile_settings").insert(payload).execute()
        return first_or_raise(response.data, _parse_profile, "Failed to save profile")

    def update_profile(
        self, profile_id: int, payload: dict[str, object]
    ) -> ProfileSettings:
        """Update the profile row."""
        response = (
            self.client.table("profile_settings")
            .update(payload)
            .eq("id", profile_id)
            .execute()
        )
        return first_or_raise(response.data, _parse_profile, "Failed to save profile")


def _parse_profile(row: dict[str, object]) -> ProfileSettings:
    return ProfileSettings(
        id=int(row["id"]),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        email=row.get("email"),
        phone=row.get("phone"),
        specialization=row.get("specialization"),
        clinic_name=row.get("clinic_name"),
        updated_at=str(row.get("updated_at") or ""),
    )

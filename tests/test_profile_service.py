"""Tests for profile service."""

import pytest

from ayur_diet_tracker.domain.profile import EMPTY_PROFILE
from ayur_diet_tracker.errors import ValidationError
from ayur_diet_tracker.services.profile import ProfileService
from tests.conftest import InMemoryProfileRepository


def test_get_profile_defaults_to_empty() -> None:
    service = ProfileService(InMemoryProfileRepository())

    assert service.get_profile() == EMPTY_PROFILE


def test_save_profile_inserts_then_updates() -> None:
    repository = InMemoryProfileRepository()
    service = ProfileService(repository)

    created = service.save_profile(
        {"first_name": " Anjali ", "email": " Dr.Anjali@Clinic.IN "}
    )
    updated = service.save_profile({"clinic_name": "Veda Wellness  "})

    assert created.id == 1
    assert created.first_name == "Anjali"
    assert created.email == "dr.anjali@clinic.in"
    assert updated.id == 1
    assert updated.first_name == "Anjali"
    assert updated.clinic_name == "Veda Wellness"


def test_save_profile_rejects_bad_email() -> None:
    service = ProfileService(InMemoryProfileRepository())

    with pytest.raises(ValidationError) as excinfo:
        service.save_profile({"email": "not-an-email"})

    assert excinfo.value.code == "INVALID_EMAIL_FORMAT"

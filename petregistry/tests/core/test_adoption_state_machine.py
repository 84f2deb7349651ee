"""Tests for adoption and pet state machine guard clauses.

Verifies that state transitions are properly validated and that
invalid transitions raise appropriate errors.
"""

import pytest

from petregistry.core.models import (
    AdoptionRecord,
    AdoptionStatus,
    Pet,
    PetStatus,
    Shelter,
    User,
)


@pytest.fixture
def adoption() -> AdoptionRecord:
    """Create a sample pending adoption record."""
    return AdoptionRecord(
        id="adoption-001",
        pet_id="pet-001",
        user_id="user-001",
        pet_name="Rex",
        user_name="Ada Lovelace",
        user_phone_number="5551234567",
        address="12 Analytical Way",
        reason_for_adoption="Needs a running partner",
        date_of_adoption="2024-01-01T12:00:00+00:00",
    )


@pytest.fixture
def pet() -> Pet:
    """Create a sample available pet."""
    return Pet(
        id="pet-001",
        name="Rex",
        species="Dog",
        breed="Beagle",
        gender="male",
        age="3",
        pet_image="rex.png",
        description="Friendly",
        health_status="vaccinated",
        shelter_id="shelter-001",
    )


# ============================================================================
# AdoptionRecord transitions
# ============================================================================


def test_new_adoption_defaults_to_pending(adoption: AdoptionRecord) -> None:
    assert adoption.status == AdoptionStatus.PENDING
    assert adoption.is_pending


def test_complete_from_pending(adoption: AdoptionRecord) -> None:
    adoption.complete()
    assert adoption.status == AdoptionStatus.COMPLETED
    assert not adoption.is_pending


def test_fail_from_pending(adoption: AdoptionRecord) -> None:
    adoption.fail()
    assert adoption.status == AdoptionStatus.FAILED


@pytest.mark.parametrize("terminal", [AdoptionStatus.COMPLETED, AdoptionStatus.FAILED])
def test_complete_from_terminal_state_fails(
    adoption: AdoptionRecord, terminal: AdoptionStatus
) -> None:
    adoption.status = terminal
    with pytest.raises(ValueError, match=r"Only pending adoptions can be completed"):
        adoption.complete()
    assert adoption.status == terminal


@pytest.mark.parametrize("terminal", [AdoptionStatus.COMPLETED, AdoptionStatus.FAILED])
def test_fail_from_terminal_state_fails(
    adoption: AdoptionRecord, terminal: AdoptionStatus
) -> None:
    adoption.status = terminal
    with pytest.raises(ValueError, match=r"Only pending adoptions can be failed"):
        adoption.fail()
    assert adoption.status == terminal


# ============================================================================
# Pet transitions
# ============================================================================


def test_pet_defaults_to_not_adopted(pet: Pet) -> None:
    assert pet.status == PetStatus.NOT_ADOPTED
    assert pet.is_available


def test_mark_adopted(pet: Pet) -> None:
    pet.mark_adopted()
    assert pet.status == PetStatus.ADOPTED
    assert not pet.is_available


def test_mark_adopted_twice_fails(pet: Pet) -> None:
    pet.mark_adopted()
    with pytest.raises(ValueError, match="already adopted"):
        pet.mark_adopted()


def test_status_values_match_wire_format() -> None:
    assert PetStatus.NOT_ADOPTED.value == "notAdopted"
    assert PetStatus.ADOPTED.value == "adopted"
    assert [s.value for s in AdoptionStatus] == ["pending", "completed", "failed"]


# ============================================================================
# Cross-reference lists
# ============================================================================


def test_shelter_add_pet_rejects_duplicates() -> None:
    shelter = Shelter(
        id="shelter-001",
        owner="caller-1",
        name="Happy Tails",
        location="Springfield",
        phone_number="5550001111",
        email="hello@happytails.org",
    )
    shelter.add_pet("pet-001")
    with pytest.raises(ValueError, match="already listed"):
        shelter.add_pet("pet-001")
    assert shelter.pets == ["pet-001"]


def test_user_add_application_keeps_order() -> None:
    user = User(
        id="user-001",
        owner="caller-1",
        name="Ada",
        phone_number="5551234567",
        email="ada@example.com",
        address="12 Analytical Way",
    )
    user.add_application("adoption-b")
    user.add_application("adoption-a")
    assert user.applications == ["adoption-b", "adoption-a"]

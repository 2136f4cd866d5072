from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from outfitter.core.exceptions import NotFoundError, ValidationError
from outfitter.models import ContractStatus, HuntContract, HuntType, TagStatus
from outfitter.services.hunt_service import HuntService, weapon_from_hunt_code, workflow_state
from outfitter.services.season_window_service import SeasonWindow


@pytest.mark.parametrize(
    "hunt_code, weapon",
    [
        ("EE-1-061-O1-R", "Rifle"),
        ("DE-2-012-O1-A", "Bow"),
        ("EM-3-201-O1-M", "Muzzleloader"),
        ("EE", None),
        (None, None),
    ],
)
def test_weapon_from_hunt_code(hunt_code, weapon):
    assert weapon_from_hunt_code(hunt_code) == weapon


def test_drawn_tag_creates_contract_once(session, make_hunt, season_lookup):
    hunt = make_hunt(tag_status=TagStatus.APPLIED.value)
    service = HuntService(db=session, season_lookup=season_lookup)

    updated, contract, created = service.update_tag_status(hunt.id, "DRAWN", outfitter_id=1)
    _, again, created_again = service.update_tag_status(hunt.id, "drawn", outfitter_id=1)

    assert updated.tag_status == TagStatus.DRAWN.value
    assert created is True and created_again is False
    assert contract.id == again.id
    assert session.query(HuntContract).count() == 1


def test_non_trigger_status_returns_existing_contract_without_creating(session, make_hunt, season_lookup):
    hunt = make_hunt(tag_status=TagStatus.PENDING.value)
    _, contract, created = HuntService(db=session, season_lookup=season_lookup).update_tag_status(
        hunt.id, "unsuccessful"
    )

    assert contract is None and created is False
    assert session.query(HuntContract).count() == 0


def test_tag_status_guards(session, make_hunt, season_lookup):
    service = HuntService(db=session, season_lookup=season_lookup)
    orphan = make_hunt(client_email=None, tag_status=TagStatus.PENDING.value)

    with pytest.raises(ValidationError):
        service.update_tag_status(orphan.id, "won")
    with pytest.raises(ValidationError):
        service.update_tag_status(orphan.id, "confirmed")
    with pytest.raises(NotFoundError):
        service.update_tag_status(orphan.id, "pending", outfitter_id=2)


def test_tag_purchase_uses_client_dates_and_creates_contract(session, season_lookup):
    hunt, contract = HuntService(db=session, season_lookup=season_lookup).record_tag_purchase(
        outfitter_id=1,
        client_email=" Hunter@Example.com ",
        species="Deer",
        unit="12",
        hunt_code="DE-2-012-P1-A",
        client_start_date="2025-10-02",
        client_end_date="2025-10-06",
    )

    assert hunt.title == "Deer Hunt - Archery"
    assert hunt.weapon == "Bow"
    assert hunt.hunt_type == HuntType.PRIVATE_LAND.value
    assert hunt.tag_status == TagStatus.CONFIRMED.value
    assert hunt.client_email == "hunter@example.com"
    assert hunt.start_time.date() == date(2025, 10, 2)
    assert hunt.end_time.date() == date(2025, 10, 6)
    assert contract.hunt_id == hunt.id
    assert contract.status == ContractStatus.PENDING_CLIENT_COMPLETION.value


def test_tag_purchase_falls_back_to_season_window(session, season_lookup):
    season_lookup.windows["EE-1-061-P1-R"] = SeasonWindow(date(2025, 10, 10), date(2025, 10, 20))

    hunt, _ = HuntService(db=session, season_lookup=season_lookup).record_tag_purchase(
        outfitter_id=1, client_email="hunter@example.com", species="Elk", hunt_code="EE-1-061-P1-R"
    )

    assert hunt.hunt_window_start == date(2025, 10, 10)
    assert hunt.hunt_window_end == date(2025, 10, 20)
    assert hunt.start_time.date() == date(2025, 10, 10)
    assert hunt.end_time.date() == date(2025, 10, 20)


def test_tag_purchase_without_dates_gets_placeholder(session, season_lookup):
    hunt, _ = HuntService(db=session, season_lookup=season_lookup).record_tag_purchase(
        outfitter_id=1, client_email="hunter@example.com", species="Pronghorn", client_name="Sam Rivers"
    )

    expected_start = datetime.now(timezone.utc).date() + timedelta(days=30)
    assert hunt.title == "Pronghorn Hunt - Sam Rivers"
    assert hunt.weapon is None
    assert hunt.start_time.date() == expected_start
    assert hunt.end_time.date() == expected_start + timedelta(days=5)


def test_tag_purchase_requires_email_and_species(session, season_lookup):
    service = HuntService(db=session, season_lookup=season_lookup)
    with pytest.raises(ValidationError):
        service.record_tag_purchase(outfitter_id=1, client_email="", species="Elk")
    with pytest.raises(ValidationError):
        service.record_tag_purchase(outfitter_id=1, client_email="hunter@example.com", species="   ")


def test_workflow_state_walks_the_tag_to_contract_path(make_hunt):
    hunt = make_hunt(client_email=None)
    assert workflow_state(hunt, None).step == 0

    hunt.client_email = "hunter@example.com"
    hunt.tag_status = TagStatus.APPLIED.value
    awaiting = workflow_state(hunt, None)
    assert (awaiting.step, awaiting.next_action) == (1, "mark_drawn")

    hunt.hunt_type = HuntType.PRIVATE_LAND.value
    assert workflow_state(hunt, None).next_action == "mark_confirmed"

    hunt.tag_status = TagStatus.UNSUCCESSFUL.value
    assert workflow_state(hunt, None).step == -1

    hunt.tag_status = TagStatus.CONFIRMED.value
    assert workflow_state(hunt, None).label == "Generate contract"

    contract = HuntContract(status=ContractStatus.PENDING_ADMIN_REVIEW.value)
    assert workflow_state(hunt, contract).label == "Awaiting Review"
    contract.status = ContractStatus.CLIENT_SIGNED.value
    contract.docusign_status = "signed"
    assert workflow_state(hunt, contract).to_dict() == {
        "step": 5,
        "label": "Awaiting Signatures",
        "description": "Signature status: signed",
        "next_action": "wait_for_signatures",
    }
    contract.status = ContractStatus.FULLY_EXECUTED.value
    assert workflow_state(hunt, contract).step == 6

from __future__ import annotations

from datetime import date

import pytest

from outfitter.core.exceptions import ConflictError, NotFoundError, OwnershipError, ValidationError
from outfitter.models import ContractStatus, HuntContract
from outfitter.services.booking_service import BookingService
from outfitter.services.contract_service import ContractService, needs_complete_booking
from outfitter.services.season_window_service import SeasonWindow

WINDOW = {"hunt_window_start": date(2025, 9, 1), "hunt_window_end": date(2025, 9, 20)}
ADDONS = {"extra_days": 2, "extra_non_hunters": 1}


def test_complete_booking_end_to_end(session, make_hunt, elk_plan, season_lookup):
    hunt = make_hunt(**WINDOW)
    service = BookingService(db=session, season_lookup=season_lookup)

    result = service.complete_booking(
        client_email="HUNTER@example.com",
        hunt_id=hunt.id,
        pricing_item_id=elk_plan.id,
        client_start_date="2025-09-01",
        client_end_date="2025-09-07",
        addon_quantities=ADDONS,
    )

    contract = result.contract
    assert result.contract_created is True
    assert contract.status == ContractStatus.PENDING_CLIENT_COMPLETION.value
    assert needs_complete_booking(contract) is False
    assert contract.client_selected_start_date == date(2025, 9, 1)
    assert contract.client_selected_end_date == date(2025, 9, 7)
    assert contract.calculated_guide_fee_cents == 450000
    assert contract.calculated_addons_cents == 27500
    assert contract.contract_total_cents == 477500
    assert contract.content.endswith(
        "5-Day Elk Rifle Hunt: $4500.00\n"
        "Extra days (2 × $100.00/day): $200.00\n"
        "Non-hunters (1 × $75.00/person): $75.00\n"
        "\n"
        "Total: $4775.00"
    )
    assert result.hunt.selected_pricing_item_id == elk_plan.id
    assert result.hunt.start_time.date() == date(2025, 9, 1)
    assert result.hunt.client_addon_data == ADDONS


def test_rebooking_updates_the_existing_contract(session, make_hunt, elk_plan, season_lookup):
    hunt = make_hunt(**WINDOW)
    service = BookingService(db=session, season_lookup=season_lookup)
    first = service.complete_booking("hunter@example.com", hunt.id, elk_plan.id, "2025-09-01", "2025-09-07", ADDONS)

    second = service.complete_booking(
        "hunter@example.com", hunt.id, elk_plan.id, "2025-09-02", "2025-09-06", {}
    )

    assert second.contract_created is False
    assert second.contract.id == first.contract.id
    assert session.query(HuntContract).count() == 1
    assert second.contract.contract_total_cents == 450000
    assert second.contract.content.count("\nBILL\n") == 1
    assert "extra_days" not in second.contract.client_completion_data


@pytest.mark.parametrize("end_date, actual_days", [("2025-09-06", 6), ("2025-09-08", 8)])
def test_day_count_must_match_plan_plus_extra_days(session, make_hunt, elk_plan, season_lookup, end_date, actual_days):
    hunt = make_hunt(**WINDOW)

    with pytest.raises(ValidationError) as exc_info:
        BookingService(db=session, season_lookup=season_lookup).complete_booking(
            "hunter@example.com", hunt.id, elk_plan.id, "2025-09-01", end_date, ADDONS
        )

    error = exc_info.value
    assert "total of 7 days" in error.message
    assert f"spans {actual_days} days" in error.message
    assert error.details["required_days"] == 7
    assert error.details["actual_days"] == actual_days
    assert session.query(HuntContract).count() == 0


def test_dates_outside_season_window_are_rejected(session, make_hunt, elk_plan, season_lookup):
    hunt = make_hunt(**WINDOW)

    with pytest.raises(ValidationError) as exc_info:
        BookingService(db=session, season_lookup=season_lookup).complete_booking(
            "hunter@example.com", hunt.id, elk_plan.id, "2025-08-30", "2025-09-05", ADDONS
        )
    assert exc_info.value.message == "Hunt dates must be within your hunt code season (2025-09-01 – 2025-09-20)."


def test_season_lookup_supplies_window_when_not_stored(session, make_hunt, elk_plan, season_lookup):
    season_lookup.windows["EE-1-061-O1-R"] = SeasonWindow(date(2025, 10, 1), date(2025, 10, 14))
    hunt = make_hunt()
    service = BookingService(db=session, season_lookup=season_lookup)

    with pytest.raises(ValidationError):
        service.complete_booking("hunter@example.com", hunt.id, elk_plan.id, "2025-09-01", "2025-09-07", ADDONS)

    result = service.complete_booking("hunter@example.com", hunt.id, elk_plan.id, "2025-10-01", "2025-10-07", ADDONS)
    assert result.contract.contract_total_cents == 477500


def test_unknown_window_skips_validation(session, make_hunt, elk_plan, season_lookup):
    hunt = make_hunt(hunt_code=None)
    result = BookingService(db=session, season_lookup=season_lookup).complete_booking(
        "hunter@example.com", hunt.id, elk_plan.id, "2024-01-01", "2024-01-05", {}
    )
    assert result.contract.contract_total_cents == 450000


def test_booking_guards(session, make_hunt, elk_plan, make_pricing_item, season_lookup):
    hunt = make_hunt(**WINDOW)
    spotter = make_pricing_item("Spotter", "50", category="Add-ons")
    service = BookingService(db=session, season_lookup=season_lookup)

    with pytest.raises(OwnershipError):
        service.complete_booking("intruder@example.com", hunt.id, elk_plan.id, "2025-09-01", "2025-09-05")
    with pytest.raises(NotFoundError):
        service.complete_booking("hunter@example.com", 9999, elk_plan.id, "2025-09-01", "2025-09-05")
    with pytest.raises(NotFoundError):
        service.complete_booking("hunter@example.com", hunt.id, 9999, "2025-09-01", "2025-09-05")
    with pytest.raises(ValidationError):
        service.complete_booking("hunter@example.com", hunt.id, spotter.id, "2025-09-01", "2025-09-05")
    with pytest.raises(ValidationError):
        service.complete_booking("hunter@example.com", hunt.id, elk_plan.id, "2025-09-05", "2025-09-01")
    with pytest.raises(ValidationError):
        service.complete_booking("hunter@example.com", hunt.id, elk_plan.id, None, "2025-09-05")


def test_locked_contract_cannot_be_rebooked(session, make_hunt, elk_plan, season_lookup):
    hunt = make_hunt(**WINDOW)
    contract, _ = ContractService(db=session, season_lookup=season_lookup).ensure_contract_for_hunt(hunt.id)
    contract.status = ContractStatus.CLIENT_SIGNED.value
    session.commit()

    with pytest.raises(ConflictError) as exc_info:
        BookingService(db=session, season_lookup=season_lookup).complete_booking(
            "hunter@example.com", hunt.id, elk_plan.id, "2025-09-01", "2025-09-05"
        )
    assert "client_signed" in exc_info.value.message


def test_booking_options_lists_matching_plans_and_rates(session, make_hunt, elk_plan, make_pricing_item, season_lookup):
    make_pricing_item("Deer Rifle", "2500", species="Deer")
    make_pricing_item("Extra Day", "125", category="Add-ons")
    hunt = make_hunt(**WINDOW)

    options = BookingService(db=session, season_lookup=season_lookup).booking_options("hunter@example.com", hunt.id)

    assert [plan.id for plan in options.plans] == [elk_plan.id]
    assert [item.title for item in options.addon_items] == ["Extra Day"]
    assert options.addon_rates.as_dict()["extra_days"] == 125.0
    assert options.window == SeasonWindow(date(2025, 9, 1), date(2025, 9, 20))
    assert options.contract is None

from __future__ import annotations

from datetime import date

import pytest

from outfitter.core.exceptions import ConflictError, OwnershipError, ValidationError
from outfitter.models import ContractStatus, ContractTemplate, HuntContract, PaymentItem, TagStatus
from outfitter.services.booking_service import BookingService
from outfitter.services.contract_service import ContractService, needs_complete_booking, submitted_quantities
from outfitter.services.season_window_service import SeasonWindow

WINDOW = {"hunt_window_start": date(2025, 9, 1), "hunt_window_end": date(2025, 9, 20)}


def _submission(plan, **overrides):
    payload = {
        "acknowledged": True,
        "client_start_date": "2025-09-01",
        "client_end_date": "2025-09-07",
        "selected_pricing_item_id": plan.id,
        "extra_days": 2,
    }
    payload.update(overrides)
    return payload


def _submitted_contract(session, make_hunt, plan, season_lookup):
    hunt = make_hunt(**WINDOW)
    service = ContractService(db=session, season_lookup=season_lookup)
    contract, _ = service.ensure_contract_for_hunt(hunt.id)
    service.submit_completion(contract.id, "hunter@example.com", _submission(plan))
    return service, contract


def test_ensure_contract_creates_exactly_one_per_hunt(session, make_hunt, season_lookup):
    hunt = make_hunt()
    service = ContractService(db=session, season_lookup=season_lookup)

    first, created = service.ensure_contract_for_hunt(hunt.id)
    second, created_again = service.ensure_contract_for_hunt(hunt.id)

    assert created is True and created_again is False
    assert first.id == second.id
    assert session.query(HuntContract).filter(HuntContract.hunt_id == hunt.id).count() == 1
    assert first.status == ContractStatus.PENDING_CLIENT_COMPLETION.value
    assert first.content.startswith("HUNT CONTRACT")
    assert first.content_preamble == first.content
    session.refresh(hunt)
    assert hunt.contract_generated_at is not None


def test_active_template_is_rendered_for_new_contract(session, make_hunt, season_lookup):
    session.add(
        ContractTemplate(outfitter_id=1, name="Standard", content="Agreement for {{client_name}} hunting {{species}}.")
    )
    session.commit()
    hunt = make_hunt()

    contract, _ = ContractService(db=session, season_lookup=season_lookup).ensure_contract_for_hunt(
        hunt.id, client_name="Sam Rivers"
    )

    assert contract.content == "Agreement for Sam Rivers hunting Elk."
    assert contract.template_id is not None


def test_ensure_contract_requires_client_email(session, make_hunt, season_lookup):
    hunt = make_hunt(client_email=None)
    with pytest.raises(ValidationError):
        ContractService(db=session, season_lookup=season_lookup).ensure_contract_for_hunt(hunt.id)


def test_client_listing_auto_creates_for_confirmed_tags_case_insensitively(session, make_hunt, season_lookup):
    drawn = make_hunt(client_email="Hunter@Example.com")
    make_hunt(client_email="hunter@example.com", tag_status=TagStatus.PENDING.value)
    service = ContractService(db=session, season_lookup=season_lookup)

    views = service.get_contracts_for_client("  HUNTER@example.com ")
    again = service.get_contracts_for_client("hunter@example.com")

    assert [view.contract.hunt_id for view in views] == [drawn.id]
    assert len(again) == 1
    assert views[0].needs_complete_booking is True
    assert views[0].bill is None
    assert session.query(HuntContract).count() == 1


def test_listing_with_repair_materializes_stale_bills(session, make_hunt, elk_plan, season_lookup):
    hunt = make_hunt()
    service = ContractService(db=session, season_lookup=season_lookup)
    contract, _ = service.ensure_contract_for_hunt(hunt.id)
    contract.selected_pricing_item_id = elk_plan.id
    contract.client_selected_start_date = date(2025, 9, 1)
    contract.client_selected_end_date = date(2025, 9, 5)
    session.commit()

    views = service.get_contracts_for_client("hunter@example.com", repair=True)

    assert views[0].contract.content.endswith("Total: $4500.00")
    assert views[0].contract.contract_total_cents == 450000
    assert views[0].needs_complete_booking is False


def test_submit_completion_moves_to_admin_review(session, make_hunt, elk_plan, season_lookup):
    service, contract = _submitted_contract(session, make_hunt, elk_plan, season_lookup)

    session.refresh(contract)
    assert contract.status == ContractStatus.PENDING_ADMIN_REVIEW.value
    assert contract.client_completed_at is not None
    assert contract.client_selected_start_date == date(2025, 9, 1)
    assert contract.contract_total_cents == 470000
    assert contract.client_completion_data["acknowledged"] is True
    assert "Extra days (2 × $100.00/day): $200.00" in contract.content


def test_second_submission_is_rejected_by_status(session, make_hunt, elk_plan, season_lookup):
    service, contract = _submitted_contract(session, make_hunt, elk_plan, season_lookup)

    with pytest.raises(ConflictError) as exc_info:
        service.submit_completion(contract.id, "hunter@example.com", _submission(elk_plan))
    assert "pending_admin_review" in exc_info.value.message


def test_submission_dates_must_fall_in_season_window(session, make_hunt, elk_plan, season_lookup):
    hunt = make_hunt(**WINDOW)
    service = ContractService(db=session, season_lookup=season_lookup)
    contract, _ = service.ensure_contract_for_hunt(hunt.id)

    with pytest.raises(ValidationError) as exc_info:
        service.submit_completion(
            contract.id,
            "hunter@example.com",
            _submission(elk_plan, client_start_date="2025-08-31"),
        )
    assert "2025-09-01 – 2025-09-20" in exc_info.value.message
    session.refresh(contract)
    assert contract.status == ContractStatus.PENDING_CLIENT_COMPLETION.value


def test_submission_uses_season_lookup_when_window_not_stored(session, make_hunt, elk_plan, season_lookup):
    season_lookup.windows["EE-1-061-O1-R"] = SeasonWindow(date(2025, 10, 1), date(2025, 10, 14))
    hunt = make_hunt()
    service = ContractService(db=session, season_lookup=season_lookup)
    contract, _ = service.ensure_contract_for_hunt(hunt.id)

    with pytest.raises(ValidationError):
        service.submit_completion(contract.id, "hunter@example.com", _submission(elk_plan))
    assert season_lookup.calls == ["EE-1-061-O1-R"]


def test_submission_requires_owner_and_acknowledgement(session, make_hunt, elk_plan, season_lookup):
    hunt = make_hunt(**WINDOW)
    service = ContractService(db=session, season_lookup=season_lookup)
    contract, _ = service.ensure_contract_for_hunt(hunt.id)

    with pytest.raises(OwnershipError):
        service.submit_completion(contract.id, "someone@else.com", _submission(elk_plan))
    with pytest.raises(ValidationError):
        service.submit_completion(contract.id, "HUNTER@example.com", _submission(elk_plan, acknowledged=False))

    updated = service.submit_completion(contract.id, " Hunter@Example.com ", _submission(elk_plan))
    assert updated.status == ContractStatus.PENDING_ADMIN_REVIEW.value


def test_approve_and_reject_review_decisions(session, make_hunt, elk_plan, season_lookup):
    service, contract = _submitted_contract(session, make_hunt, elk_plan, season_lookup)

    rejected = service.reject(contract.id, reviewer="guide@outfitter.com", notes="Dates conflict with camp")
    assert rejected.status == ContractStatus.PENDING_CLIENT_COMPLETION.value
    assert rejected.client_completed_at is None
    assert rejected.admin_review_notes == "Dates conflict with camp"

    with pytest.raises(ConflictError):
        service.approve(contract.id, reviewer="guide@outfitter.com")

    service.submit_completion(contract.id, "hunter@example.com", _submission(elk_plan))
    approved = service.approve(contract.id, reviewer="guide@outfitter.com")
    assert approved.status == ContractStatus.READY_FOR_SIGNATURE.value
    assert approved.admin_reviewed_by == "guide@outfitter.com"


def test_status_follows_signature_pair_and_bills_guide_fee(session, make_hunt, elk_plan, season_lookup):
    service, contract = _submitted_contract(session, make_hunt, elk_plan, season_lookup)
    service.approve(contract.id, reviewer="guide@outfitter.com")

    signed = service.sign(contract.id, signer_role="client", signer_email="hunter@example.com")
    assert signed.status == ContractStatus.CLIENT_SIGNED.value
    with pytest.raises(ConflictError):
        service.sign(contract.id, signer_role="client", signer_email="hunter@example.com")

    executed = service.sign(contract.id, signer_role="admin", outfitter_id=1)
    assert executed.status == ContractStatus.FULLY_EXECUTED.value

    payment = session.query(PaymentItem).filter(PaymentItem.contract_id == contract.id).one()
    assert payment.subtotal_cents == 470000
    assert payment.platform_fee_cents == 23500
    assert payment.total_cents == 493500


def test_admin_may_sign_first(session, make_hunt, elk_plan, season_lookup):
    service, contract = _submitted_contract(session, make_hunt, elk_plan, season_lookup)
    service.approve(contract.id, reviewer="guide@outfitter.com")

    assert service.sign(contract.id, signer_role="admin").status == ContractStatus.ADMIN_SIGNED.value
    final = service.sign(contract.id, signer_role="client", signer_email="hunter@example.com")
    assert final.status == ContractStatus.FULLY_EXECUTED.value


def test_incomplete_booking_blocks_signing(session, make_hunt, season_lookup):
    hunt = make_hunt()
    contract = HuntContract(
        outfitter_id=1,
        hunt_id=hunt.id,
        client_email="hunter@example.com",
        status=ContractStatus.READY_FOR_SIGNATURE.value,
        content="Terms",
    )
    session.add(contract)
    session.commit()

    assert needs_complete_booking(contract) is True
    with pytest.raises(ValidationError):
        ContractService(db=session, season_lookup=season_lookup).sign(
            contract.id, signer_role="client", signer_email="hunter@example.com"
        )


def test_needs_complete_booking_accepts_plan_from_completion_data():
    contract = HuntContract(
        client_completion_data={"selected_pricing_item_id": 7},
        client_selected_start_date=date(2025, 9, 1),
        client_selected_end_date=date(2025, 9, 5),
    )
    assert needs_complete_booking(contract) is False

    contract.client_selected_end_date = None
    assert needs_complete_booking(contract) is True


def test_cancel_respects_terminal_states(session, make_hunt, season_lookup):
    service = ContractService(db=session, season_lookup=season_lookup)
    contract, _ = service.ensure_contract_for_hunt(make_hunt().id)

    cancelled = service.cancel(contract.id, reason="Client withdrew")
    assert cancelled.status == ContractStatus.CANCELLED.value
    with pytest.raises(ConflictError):
        service.cancel(contract.id)


def test_send_to_signature_requires_approval(session, make_hunt, elk_plan, season_lookup):
    service, contract = _submitted_contract(session, make_hunt, elk_plan, season_lookup)

    with pytest.raises(ConflictError):
        service.send_to_signature(contract.id)

    service.approve(contract.id, reviewer="guide@outfitter.com")
    sent = service.send_to_signature(contract.id, envelope_id="env-123")
    assert sent.status == ContractStatus.SENT_TO_DOCUSIGN.value
    assert sent.docusign_envelope_id == "env-123"
    assert sent.docusign_status == "sent"


def test_acknowledgment_only_submission_keeps_booked_addons(session, make_hunt, elk_plan, season_lookup):
    hunt = make_hunt(**WINDOW)
    booked = BookingService(db=session, season_lookup=season_lookup).complete_booking(
        "hunter@example.com",
        hunt.id,
        elk_plan.id,
        "2025-09-01",
        "2025-09-07",
        {"extra_days": 2, "extra_non_hunters": 1},
    )
    assert booked.contract.contract_total_cents == 477500

    submitted = ContractService(db=session, season_lookup=season_lookup).submit_completion(
        booked.contract.id, "hunter@example.com", {"acknowledged": True}
    )

    assert submitted.status == ContractStatus.PENDING_ADMIN_REVIEW.value
    assert submitted.contract_total_cents == 477500
    assert submitted.client_completion_data["extra_days"] == 2
    assert submitted.client_completion_data["extra_non_hunters"] == 1
    assert submitted.content.endswith("Total: $4775.00")


def test_submitted_quantities_prefer_explicit_values_over_stored():
    stored = {"extra_days": 2, "extra_non_hunters": 1, "extra_spotters": 1}

    quantities = submitted_quantities({"additional_days": 3, "extra_non_hunters": 0}, stored)

    assert quantities.extra_days == 3
    assert quantities.extra_non_hunters == 0
    assert quantities.extra_spotters == 1
    assert quantities.rifle_rental == 0


def test_submission_rejects_addon_as_guide_fee_plan(session, make_hunt, make_pricing_item, season_lookup):
    hunt = make_hunt(**WINDOW)
    extra_day = make_pricing_item("Extra Day", "100", category="Add-ons", addon_type="extra_days")
    service = ContractService(db=session, season_lookup=season_lookup)
    contract, _ = service.ensure_contract_for_hunt(hunt.id)

    with pytest.raises(ValidationError):
        service.submit_completion(
            contract.id,
            "hunter@example.com",
            _submission(extra_day, client_end_date="2025-09-05", extra_days=None),
        )

    session.refresh(contract)
    assert contract.status == ContractStatus.PENDING_CLIENT_COMPLETION.value
    assert contract.selected_pricing_item_id is None
    assert contract.contract_total_cents is None

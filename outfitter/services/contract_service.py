"""Hunt contract lifecycle: creation, client completion, review, signing."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from outfitter.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    OutfitterError,
    OwnershipError,
    ValidationError,
)
from outfitter.models import (
    ContractStatus,
    ContractTemplate,
    DocuSignStatus,
    Hunt,
    HuntContract,
    PricingItem,
    TagStatus,
    UserRole,
)
from outfitter.orchestration.state_machine import (
    SIGNABLE_STATUSES,
    InvalidTransitionError,
    contract_state_machine,
)
from outfitter.services.base_service import BaseService
from outfitter.services.bill_calculator import QUANTITY_ALIASES, AddonQuantities, Bill
from outfitter.services.contract_document import (
    build_template_context,
    default_contract_text,
    render_template,
)
from outfitter.services.contract_materializer import (
    ContractMaterializer,
    RepairReport,
    has_billable_inputs,
    selected_pricing_item_id,
)
from outfitter.services.guide_fee_billing_service import GuideFeeBillingService
from outfitter.services.pricing_catalog import AddonRates, PricingCatalogService
from outfitter.services.season_window_service import (
    SeasonWindow,
    SeasonWindowLookup,
    get_season_lookup,
    resolve_hunt_window,
)
from outfitter.utils.validators import (
    as_utc,
    emails_match,
    end_of_day_utc,
    normalize_email,
    parse_date,
    sanitize_text,
    start_of_day_utc,
)

logger = logging.getLogger(__name__)

CONTRACT_TRIGGER_TAG_STATUSES = frozenset({TagStatus.DRAWN.value, TagStatus.CONFIRMED.value})

_LOCKED_STATUSES = frozenset(
    {
        ContractStatus.CLIENT_SIGNED.value,
        ContractStatus.ADMIN_SIGNED.value,
        ContractStatus.FULLY_EXECUTED.value,
        ContractStatus.CANCELLED.value,
    }
)


def needs_complete_booking(contract: HuntContract) -> bool:
    """True until a guide-fee plan and both client-selected dates are present."""
    has_plan = selected_pricing_item_id(contract) is not None
    has_dates = contract.client_selected_start_date is not None and contract.client_selected_end_date is not None
    return not (has_plan and has_dates)


def is_fully_executed(contract: HuntContract) -> bool:
    return contract.client_signed_at is not None and contract.admin_signed_at is not None


def is_locked(contract: HuntContract) -> bool:
    """Signed, executed or cancelled contracts no longer accept booking changes."""
    return (
        contract.status in _LOCKED_STATUSES
        or contract.client_signed_at is not None
        or contract.admin_signed_at is not None
    )


def signature_status_for(contract: HuntContract) -> str | None:
    """Status implied by the signature timestamp pair, or None when nobody has signed."""
    if is_fully_executed(contract):
        return ContractStatus.FULLY_EXECUTED.value
    if contract.client_signed_at is not None:
        return ContractStatus.CLIENT_SIGNED.value
    if contract.admin_signed_at is not None:
        return ContractStatus.ADMIN_SIGNED.value
    return None


def submitted_quantities(payload: Mapping[str, Any], stored: Mapping[str, Any] | None) -> AddonQuantities:
    """Add-on quantities for a submission; keys the client left out keep their stored values."""
    data = dict(payload)
    previous = AddonQuantities.from_payload(stored)
    for field in fields(AddonQuantities):
        key = field.name
        keys = [key, *(alias for alias, canonical in QUANTITY_ALIASES.items() if canonical == key)]
        if all(data.get(name) in (None, "") for name in keys):
            data[key] = getattr(previous, key)
    return AddonQuantities.from_payload(data)


def assert_owned_by(contract: HuntContract, client_email: str | None) -> None:
    if not emails_match(contract.client_email, client_email):
        raise OwnershipError(
            "This contract is not assigned to you.",
            details={"contract_id": contract.id},
        )


def validate_dates_in_window(start: date, end: date, window: SeasonWindow | None) -> None:
    if start > end:
        raise ValidationError(
            "End date must be on or after start date.",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )
    if window is not None and not window.contains(start, end):
        raise ValidationError(
            f"Hunt dates must be within your hunt code season ({window.label()}).",
            details={
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "window_start": window.start.isoformat(),
                "window_end": window.end.isoformat(),
            },
        )


@dataclass(frozen=True)
class ContractView:
    """A contract as presented to callers, with derived fields resolved."""

    contract: HuntContract
    needs_complete_booking: bool
    hunt: Hunt | None
    addon_rates: AddonRates
    bill: Bill | None


class ContractService(BaseService):
    """Service owning the contract status field and its transitions."""

    def __init__(self, db: Session | None = None, season_lookup: SeasonWindowLookup | None = None) -> None:
        super().__init__(db=db)
        self.season_lookup = season_lookup if season_lookup is not None else get_season_lookup()

    # -- lookups -------------------------------------------------------

    def get_contract(self, contract_id: int) -> HuntContract | None:
        return self.db.get(HuntContract, contract_id)

    def require_contract(self, contract_id: int, outfitter_id: int | None = None) -> HuntContract:
        contract = self.get_contract(contract_id)
        if contract is None or (outfitter_id is not None and contract.outfitter_id != outfitter_id):
            raise NotFoundError("Contract not found.", details={"contract_id": contract_id})
        return contract

    def get_for_hunt(self, hunt_id: int) -> HuntContract | None:
        return (
            self.db.query(HuntContract)
            .filter(HuntContract.hunt_id == hunt_id)
            .order_by(HuntContract.id)
            .first()
        )

    def list_contracts(self, outfitter_id: int, status: str | None = None) -> list[HuntContract]:
        query = self.db.query(HuntContract).filter(HuntContract.outfitter_id == outfitter_id)
        if status:
            query = query.filter(HuntContract.status == status)
        return query.order_by(HuntContract.created_at.desc(), HuntContract.id.desc()).all()

    def get_client_contract(self, contract_id: int, client_email: str) -> HuntContract:
        contract = self.require_contract(contract_id)
        assert_owned_by(contract, client_email)
        return contract

    def build_view(self, contract: HuntContract) -> ContractView:
        materializer = ContractMaterializer(db=self.db)
        catalog = PricingCatalogService(db=self.db)
        return ContractView(
            contract=contract,
            needs_complete_booking=needs_complete_booking(contract),
            hunt=contract.hunt,
            addon_rates=catalog.addon_rates(contract.outfitter_id),
            bill=materializer.compute_for(contract) if has_billable_inputs(contract) else None,
        )

    def get_contracts_for_client(self, client_email: str, repair: bool = False) -> list[ContractView]:
        """Client's contracts, creating any missing ones for confirmed tags first."""
        email = normalize_email(client_email)
        if not email:
            raise AuthenticationError("Authenticated client email is required.")

        hunts = (
            self.db.query(Hunt)
            .filter(
                func.lower(Hunt.client_email) == email,
                Hunt.tag_status.in_(sorted(CONTRACT_TRIGGER_TAG_STATUSES)),
            )
            .all()
        )
        for hunt in hunts:
            if self.get_for_hunt(hunt.id) is not None:
                continue
            try:
                self.ensure_contract_for_hunt(hunt.id)
            except OutfitterError as exc:
                self.rollback()
                logger.warning(
                    "contract.auto_create.failed",
                    extra={"event": "contract.auto_create.failed", "hunt_id": hunt.id, "error": exc.message},
                )

        contracts = (
            self.db.query(HuntContract)
            .filter(func.lower(HuntContract.client_email) == email)
            .order_by(HuntContract.created_at.desc(), HuntContract.id.desc())
            .all()
        )
        if repair and contracts:
            self.repair_bills([contract.id for contract in contracts])
            contracts = [self.require_contract(contract.id) for contract in contracts]
        return [self.build_view(contract) for contract in contracts]

    # -- creation ------------------------------------------------------

    def _active_template(self, outfitter_id: int) -> ContractTemplate | None:
        return (
            self.db.query(ContractTemplate)
            .filter(ContractTemplate.outfitter_id == outfitter_id, ContractTemplate.is_active.is_(True))
            .order_by(ContractTemplate.created_at.desc(), ContractTemplate.id.desc())
            .first()
        )

    def ensure_contract_for_hunt(
        self,
        hunt_id: int,
        client_name: str | None = None,
        outfitter_name: str | None = None,
    ) -> tuple[HuntContract, bool]:
        """Create the hunt's contract unless one exists; returns ``(contract, created)``."""
        hunt = self.db.get(Hunt, hunt_id)
        if hunt is None:
            raise NotFoundError("Hunt not found.", details={"hunt_id": hunt_id})
        client_email = normalize_email(hunt.client_email)
        if not client_email:
            raise ValidationError("Hunt has no client email.", details={"hunt_id": hunt_id})

        existing = self.get_for_hunt(hunt_id)
        if existing is not None:
            return existing, False

        context = build_template_context(hunt, client_name=client_name, outfitter_name=outfitter_name)
        template = self._active_template(hunt.outfitter_id)
        preamble = render_template(template.content, context) if template else default_contract_text(context)

        completion: dict[str, Any] = AddonQuantities.from_payload(hunt.client_addon_data).as_payload()
        if hunt.selected_pricing_item_id:
            completion["selected_pricing_item_id"] = hunt.selected_pricing_item_id

        contract = HuntContract(
            outfitter_id=hunt.outfitter_id,
            hunt_id=hunt.id,
            template_id=template.id if template else None,
            client_email=client_email,
            client_name=context["client_name"],
            status=ContractStatus.PENDING_CLIENT_COMPLETION.value,
            content=preamble.rstrip(),
            content_preamble=preamble.rstrip(),
            selected_pricing_item_id=hunt.selected_pricing_item_id,
            client_completion_data=completion or None,
            docusign_status=DocuSignStatus.NOT_SENT.value,
        )
        self.db.add(contract)
        self.db.flush()
        ContractMaterializer(db=self.db).materialize(contract)
        hunt.contract_generated_at = self._utcnow()
        self.commit()
        self.db.refresh(contract)
        logger.info(
            "contract.auto_created",
            extra={"event": "contract.auto_created", "contract_id": contract.id, "hunt_id": hunt.id},
        )
        return contract, True

    # -- transitions ---------------------------------------------------

    def transition(self, contract: HuntContract, target: str) -> None:
        try:
            contract_state_machine.assert_transition(contract.status, target)
        except InvalidTransitionError as exc:
            raise ConflictError(
                f"Contract cannot move from {contract.status} to {target}.",
                details={"current_status": contract.status, "target_status": target},
            ) from exc
        contract.status = target

    def release_to_client(self, contract_id: int, outfitter_id: int | None = None) -> HuntContract:
        contract = self.require_contract(contract_id, outfitter_id)
        self.transition(contract, ContractStatus.PENDING_CLIENT_COMPLETION.value)
        self.commit()
        self.db.refresh(contract)
        return contract

    def _resolve_submission_dates(self, payload: Mapping[str, Any], hunt: Hunt | None) -> tuple[date, date]:
        start = parse_date(payload.get("client_start_date"))
        end = parse_date(payload.get("client_end_date"))
        if start is None and hunt is not None:
            start = parse_date(as_utc(hunt.start_time))
        if end is None and hunt is not None:
            end = parse_date(as_utc(hunt.end_time))
        if start is None or end is None:
            raise ValidationError(
                "Hunt start and end dates are required.",
                details={
                    "client_start_date": start.isoformat() if start else None,
                    "client_end_date": end.isoformat() if end else None,
                },
            )
        return start, end

    def _require_plan(self, outfitter_id: int, raw_id: Any) -> PricingItem | None:
        if raw_id in (None, ""):
            return None
        try:
            item_id = int(raw_id)
        except (TypeError, ValueError) as exc:
            raise ValidationError("selected_pricing_item_id must be an integer.") from exc
        return PricingCatalogService(db=self.db).require_plan(outfitter_id, item_id)

    def submit_completion(self, contract_id: int, client_email: str, payload: Mapping[str, Any]) -> HuntContract:
        """Client submission: ``pending_client_completion -> pending_admin_review``."""
        contract = self.require_contract(contract_id)
        assert_owned_by(contract, client_email)
        if contract.status != ContractStatus.PENDING_CLIENT_COMPLETION.value:
            raise ConflictError(
                f"Contract cannot be completed in current status: {contract.status}",
                details={"current_status": contract.status},
            )
        if payload.get("acknowledged") is not True:
            raise ValidationError(
                "You must acknowledge the contract terms before submitting.",
                details={"acknowledged": payload.get("acknowledged")},
            )

        hunt = contract.hunt
        start, end = self._resolve_submission_dates(payload, hunt)
        window = resolve_hunt_window(hunt, self.season_lookup) if hunt is not None else None
        validate_dates_in_window(start, end, window)

        plan = self._require_plan(contract.outfitter_id, payload.get("selected_pricing_item_id"))
        quantities = submitted_quantities(payload, contract.client_completion_data)

        if hunt is not None:
            if payload.get("client_start_date") or payload.get("client_end_date"):
                hunt.start_time = start_of_day_utc(start)
                hunt.end_time = end_of_day_utc(end)
            if plan is not None:
                hunt.selected_pricing_item_id = plan.id

        completion: dict[str, Any] = {
            **quantities.as_payload(),
            "client_start_date": start.isoformat(),
            "client_end_date": end.isoformat(),
            "acknowledged": True,
        }
        plan_id = plan.id if plan is not None else selected_pricing_item_id(contract)
        if plan_id is not None:
            completion["selected_pricing_item_id"] = plan_id
            contract.selected_pricing_item_id = plan_id
        for key in ("client_name", "client_phone", "notes"):
            if payload.get(key):
                completion[key] = sanitize_text(str(payload[key]), max_len=2000)

        contract.client_completion_data = completion
        contract.client_selected_start_date = start
        contract.client_selected_end_date = end
        ContractMaterializer(db=self.db).materialize(contract)
        self.transition(contract, ContractStatus.PENDING_ADMIN_REVIEW.value)
        contract.client_completed_at = self._utcnow()
        self.commit()
        self.db.refresh(contract)
        logger.info(
            "contract.submitted",
            extra={
                "event": "contract.submitted",
                "contract_id": contract.id,
                "total_cents": contract.contract_total_cents,
            },
        )
        return contract

    def _require_pending_review(self, contract: HuntContract) -> None:
        if contract.status != ContractStatus.PENDING_ADMIN_REVIEW.value:
            raise ConflictError(
                f"Contract is not pending review. Current status: {contract.status}",
                details={"current_status": contract.status},
            )

    def _record_review(self, contract: HuntContract, reviewer: str, notes: str | None) -> None:
        contract.admin_reviewed_at = self._utcnow()
        contract.admin_reviewed_by = reviewer
        contract.admin_review_notes = sanitize_text(notes, max_len=5000) or None

    def approve(self, contract_id: int, reviewer: str, notes: str | None = None, outfitter_id: int | None = None) -> HuntContract:
        contract = self.require_contract(contract_id, outfitter_id)
        self._require_pending_review(contract)
        self.transition(contract, ContractStatus.READY_FOR_SIGNATURE.value)
        self._record_review(contract, reviewer, notes)
        self.commit()
        self.db.refresh(contract)
        logger.info(
            "contract.approved",
            extra={"event": "contract.approved", "contract_id": contract.id, "reviewer": reviewer},
        )
        return contract

    def reject(self, contract_id: int, reviewer: str, notes: str | None = None, outfitter_id: int | None = None) -> HuntContract:
        """Return the contract to the client; their previous submission is discarded."""
        contract = self.require_contract(contract_id, outfitter_id)
        self._require_pending_review(contract)
        self.transition(contract, ContractStatus.PENDING_CLIENT_COMPLETION.value)
        self._record_review(contract, reviewer, notes)
        contract.client_completed_at = None
        contract.client_completion_data = None
        self.commit()
        self.db.refresh(contract)
        logger.info(
            "contract.rejected",
            extra={"event": "contract.rejected", "contract_id": contract.id, "reviewer": reviewer},
        )
        return contract

    def _require_signable(self, contract: HuntContract) -> None:
        if needs_complete_booking(contract):
            raise ValidationError(
                "Booking must be completed (plan and hunt dates) before the contract can be signed.",
                details={
                    "selected_pricing_item_id": selected_pricing_item_id(contract),
                    "client_selected_start_date": (
                        contract.client_selected_start_date.isoformat() if contract.client_selected_start_date else None
                    ),
                    "client_selected_end_date": (
                        contract.client_selected_end_date.isoformat() if contract.client_selected_end_date else None
                    ),
                },
            )

    def send_to_signature(
        self,
        contract_id: int,
        envelope_id: str | None = None,
        outfitter_id: int | None = None,
    ) -> HuntContract:
        """Signature handoff: ``ready_for_signature -> sent_to_docusign``."""
        contract = self.require_contract(contract_id, outfitter_id)
        if contract.status != ContractStatus.READY_FOR_SIGNATURE.value:
            raise ConflictError(
                f"Contract must be approved before it is sent for signature. Current status: {contract.status}",
                details={"current_status": contract.status},
            )
        self._require_signable(contract)
        self.transition(contract, ContractStatus.SENT_TO_DOCUSIGN.value)
        contract.docusign_envelope_id = envelope_id or f"env-{uuid.uuid4().hex}"
        contract.docusign_status = DocuSignStatus.SENT.value
        contract.docusign_sent_at = self._utcnow()
        self.commit()
        self.db.refresh(contract)
        return contract

    def apply_signatures(
        self,
        contract: HuntContract,
        client_signed_at: datetime | None = None,
        admin_signed_at: datetime | None = None,
    ) -> bool:
        """Record signature timestamps and derive the status from the pair.

        Returns True when this call made the contract fully executed. The
        caller owns the commit.
        """
        was_executed = is_fully_executed(contract)
        if client_signed_at is not None and contract.client_signed_at is None:
            contract.client_signed_at = client_signed_at
        if admin_signed_at is not None and contract.admin_signed_at is None:
            contract.admin_signed_at = admin_signed_at

        target = signature_status_for(contract)
        if target is not None and target != contract.status:
            self.transition(contract, target)

        became_executed = is_fully_executed(contract) and not was_executed
        if became_executed:
            GuideFeeBillingService(db=self.db).create_for_contract(contract)
            logger.info(
                "contract.fully_executed",
                extra={"event": "contract.fully_executed", "contract_id": contract.id},
            )
        return became_executed

    def sign(
        self,
        contract_id: int,
        signer_role: str,
        signer_email: str | None = None,
        outfitter_id: int | None = None,
    ) -> HuntContract:
        """In-app signing by the client or the outfitter."""
        role = (signer_role or "").strip().lower()
        if role not in {UserRole.CLIENT.value, UserRole.ADMIN.value}:
            raise ValidationError("signer_role must be 'client' or 'admin'.", details={"signer_role": signer_role})

        contract = self.require_contract(contract_id, outfitter_id)
        if role == UserRole.CLIENT.value:
            assert_owned_by(contract, signer_email)
        if contract.status not in SIGNABLE_STATUSES:
            raise ConflictError(
                f"Contract is not ready for signature. Current status: {contract.status}",
                details={"current_status": contract.status},
            )
        self._require_signable(contract)

        already = contract.client_signed_at if role == UserRole.CLIENT.value else contract.admin_signed_at
        if already is not None:
            raise ConflictError(
                f"Contract has already been signed by the {role}.",
                details={"current_status": contract.status, "signer_role": role},
            )

        now = self._utcnow()
        if role == UserRole.CLIENT.value:
            self.apply_signatures(contract, client_signed_at=now)
        else:
            self.apply_signatures(contract, admin_signed_at=now)
        self.commit()
        self.db.refresh(contract)
        logger.info(
            "contract.signed",
            extra={"event": "contract.signed", "contract_id": contract.id, "signer_role": role, "status": contract.status},
        )
        return contract

    def cancel(self, contract_id: int, reason: str | None = None, outfitter_id: int | None = None) -> HuntContract:
        contract = self.require_contract(contract_id, outfitter_id)
        self.transition(contract, ContractStatus.CANCELLED.value)
        if reason:
            contract.admin_review_notes = sanitize_text(reason, max_len=5000)
        self.commit()
        self.db.refresh(contract)
        logger.info("contract.cancelled", extra={"event": "contract.cancelled", "contract_id": contract.id})
        return contract

    def repair_bills(self, contract_ids: list[int] | None = None, outfitter_id: int | None = None) -> RepairReport:
        """Re-materialize the given contracts, or every contract of the outfitter."""
        materializer = ContractMaterializer(db=self.db)
        if contract_ids is None:
            return materializer.repair_outfitter(outfitter_id)
        if outfitter_id is not None:
            owned = (
                self.db.query(HuntContract.id)
                .filter(HuntContract.id.in_(contract_ids), HuntContract.outfitter_id == outfitter_id)
                .all()
            )
            owned_ids = {row.id for row in owned}
            contract_ids = [contract_id for contract_id in contract_ids if contract_id in owned_ids]
        return materializer.repair_many(contract_ids)

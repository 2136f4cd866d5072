"""Hunt tag workflow: tag status changes, private-land tag purchases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy.orm import Session

from outfitter.core.exceptions import NotFoundError, ValidationError
from outfitter.models import ContractStatus, Hunt, HuntContract, HuntType, TagStatus
from outfitter.services.base_service import BaseService
from outfitter.services.contract_service import CONTRACT_TRIGGER_TAG_STATUSES, ContractService
from outfitter.services.season_window_service import SeasonWindowLookup, get_season_lookup
from outfitter.utils.validators import end_of_day_utc, normalize_email, parse_date, sanitize_text, start_of_day_utc

logger = logging.getLogger(__name__)

VALID_TAG_STATUSES = frozenset(status.value for status in TagStatus)

# Default booking placeholder when neither client dates nor a season window are known.
_PLACEHOLDER_LEAD_DAYS = 30
_PLACEHOLDER_LENGTH_DAYS = 5


def weapon_from_hunt_code(hunt_code: str | None) -> str | None:
    """Second hunt-code segment encodes the weapon: 2 archery, 3 muzzleloader, else rifle."""
    parts = (hunt_code or "").strip().split("-")
    if len(parts) < 2 or not parts[1]:
        return None
    if parts[1] == "2":
        return "Bow"
    if parts[1] == "3":
        return "Muzzleloader"
    return "Rifle"


@dataclass(frozen=True)
class WorkflowState:
    step: int | None
    label: str
    description: str
    next_action: str | None

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "label": self.label,
            "description": self.description,
            "next_action": self.next_action,
        }


def workflow_state(hunt: Hunt, contract: HuntContract | None) -> WorkflowState:
    """Admin-facing summary of where a hunt sits in the tag-to-contract workflow."""
    if not hunt.client_email:
        return WorkflowState(0, "No Client", "Assign a client to this hunt to proceed", "assign_client")

    if hunt.tag_status in (TagStatus.PENDING.value, TagStatus.APPLIED.value):
        is_draw = hunt.hunt_type == HuntType.DRAW.value
        return WorkflowState(
            1,
            "Awaiting Tag",
            "Waiting for draw results" if is_draw else "Waiting for private land tag confirmation",
            "mark_drawn" if is_draw else "mark_confirmed",
        )

    if hunt.tag_status == TagStatus.UNSUCCESSFUL.value:
        return WorkflowState(-1, "Unsuccessful Draw", "Client did not draw a tag", None)

    if contract is None:
        return WorkflowState(2, "Generate contract", "Tag confirmed but no contract exists yet", "generate_contract")

    status = contract.status
    if status == ContractStatus.PENDING_CLIENT_COMPLETION.value:
        return WorkflowState(3, "Awaiting Client", "Contract sent to client for completion", "wait_for_client")
    if status == ContractStatus.PENDING_ADMIN_REVIEW.value:
        return WorkflowState(3, "Awaiting Review", "Client submitted the contract for review", "review_contract")
    if status == ContractStatus.READY_FOR_SIGNATURE.value:
        return WorkflowState(4, "Ready for Signature", "Contract approved, ready to send for signatures", "send_for_signature")
    if status in (
        ContractStatus.SENT_TO_DOCUSIGN.value,
        ContractStatus.CLIENT_SIGNED.value,
        ContractStatus.ADMIN_SIGNED.value,
    ):
        return WorkflowState(5, "Awaiting Signatures", f"Signature status: {contract.docusign_status}", "wait_for_signatures")
    if status == ContractStatus.FULLY_EXECUTED.value:
        return WorkflowState(6, "Complete", "Contract fully executed", None)
    return WorkflowState(None, status, "Contract is not active", None)


class HuntService(BaseService):
    """Tag status updates and purchases that feed contract auto-creation."""

    def __init__(self, db: Session | None = None, season_lookup: SeasonWindowLookup | None = None) -> None:
        super().__init__(db=db)
        self.season_lookup = season_lookup if season_lookup is not None else get_season_lookup()
        self.contracts = ContractService(db=self.db, season_lookup=self.season_lookup)

    def require_hunt(self, hunt_id: int, outfitter_id: int | None = None) -> Hunt:
        hunt = self.db.get(Hunt, hunt_id)
        if hunt is None or (outfitter_id is not None and hunt.outfitter_id != outfitter_id):
            raise NotFoundError("Hunt not found.", details={"hunt_id": hunt_id})
        return hunt

    def get_workflow(self, hunt_id: int, outfitter_id: int | None = None) -> tuple[Hunt, HuntContract | None, WorkflowState]:
        hunt = self.require_hunt(hunt_id, outfitter_id)
        contract = self.contracts.get_for_hunt(hunt.id)
        return hunt, contract, workflow_state(hunt, contract)

    def update_tag_status(
        self,
        hunt_id: int,
        tag_status: str,
        outfitter_id: int | None = None,
    ) -> tuple[Hunt, HuntContract | None, bool]:
        """Persist the tag status; drawn/confirmed tags get a contract.

        Returns ``(hunt, contract, contract_created)``.
        """
        status = (tag_status or "").strip().lower()
        if status not in VALID_TAG_STATUSES:
            raise ValidationError(
                f"Invalid tag_status. Must be one of: {', '.join(sorted(VALID_TAG_STATUSES))}",
                details={"tag_status": tag_status},
            )
        hunt = self.require_hunt(hunt_id, outfitter_id)
        if status in CONTRACT_TRIGGER_TAG_STATUSES and not normalize_email(hunt.client_email):
            raise ValidationError(
                "Cannot mark tag as drawn or confirmed without a client assigned to the hunt.",
                details={"hunt_id": hunt.id, "tag_status": status},
            )

        hunt.tag_status = status
        self.commit()
        logger.info(
            "hunt.tag_status.updated",
            extra={"event": "hunt.tag_status.updated", "hunt_id": hunt.id, "tag_status": status},
        )

        contract, created = None, False
        if status in CONTRACT_TRIGGER_TAG_STATUSES:
            contract, created = self.contracts.ensure_contract_for_hunt(hunt.id)
        else:
            contract = self.contracts.get_for_hunt(hunt.id)
        self.db.refresh(hunt)
        return hunt, contract, created

    def record_tag_purchase(
        self,
        outfitter_id: int,
        client_email: str,
        species: str,
        unit: str | None = None,
        hunt_code: str | None = None,
        private_land_tag_id: int | None = None,
        client_start_date: date | str | None = None,
        client_end_date: date | str | None = None,
        client_name: str | None = None,
    ) -> tuple[Hunt, HuntContract]:
        """Create the confirmed private-land hunt for a purchased tag and its contract."""
        email = normalize_email(client_email)
        if not email:
            raise ValidationError("Client email is required to purchase a tag.")
        species = sanitize_text(species, max_len=120)
        if not species:
            raise ValidationError("species is required.")

        code = (hunt_code or "").strip() or None
        window = self.season_lookup.lookup(code) if code else None
        start, end = parse_date(client_start_date), parse_date(client_end_date)
        if start is not None and end is not None:
            start_time, end_time = start_of_day_utc(start), end_of_day_utc(end)
        elif window is not None:
            start_time, end_time = start_of_day_utc(window.start), end_of_day_utc(window.end)
        else:
            placeholder = self._utcnow().date() + timedelta(days=_PLACEHOLDER_LEAD_DAYS)
            start_time = start_of_day_utc(placeholder)
            end_time = end_of_day_utc(placeholder + timedelta(days=_PLACEHOLDER_LENGTH_DAYS))

        weapon = weapon_from_hunt_code(code)
        weapon_label = "Archery" if weapon == "Bow" else weapon
        hunt = Hunt(
            outfitter_id=outfitter_id,
            title=f"{species} Hunt - {weapon_label or (client_name or email)}",
            species=species,
            unit=sanitize_text(unit, max_len=120) or None,
            weapon=weapon,
            start_time=start_time,
            end_time=end_time,
            hunt_code=code,
            hunt_window_start=window.start if window else None,
            hunt_window_end=window.end if window else None,
            private_land_tag_id=private_land_tag_id,
            client_email=email,
            hunt_type=HuntType.PRIVATE_LAND.value,
            tag_status=TagStatus.CONFIRMED.value,
        )
        self.db.add(hunt)
        self.commit()
        self.db.refresh(hunt)
        logger.info(
            "hunt.tag_purchased",
            extra={"event": "hunt.tag_purchased", "hunt_id": hunt.id, "hunt_code": code},
        )

        contract, _ = self.contracts.ensure_contract_for_hunt(hunt.id, client_name=client_name)
        return hunt, contract

"""Client booking completion: guide-fee plan, hunt dates and add-ons."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy.orm import Session

from outfitter.core.exceptions import ConflictError, NotFoundError, OwnershipError, ValidationError
from outfitter.models import Hunt, HuntContract, PricingItem
from outfitter.services.base_service import BaseService
from outfitter.services.bill_calculator import AddonQuantities
from outfitter.services.contract_materializer import ContractMaterializer
from outfitter.services.contract_service import (
    ContractService,
    is_locked,
    validate_dates_in_window,
)
from outfitter.services.pricing_catalog import (
    AddonRates,
    PricingCatalogService,
    inclusive_day_count,
)
from outfitter.services.season_window_service import (
    SeasonWindow,
    SeasonWindowLookup,
    get_season_lookup,
    resolve_hunt_window,
)
from outfitter.utils.validators import emails_match, end_of_day_utc, parse_date, start_of_day_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingResult:
    hunt: Hunt
    contract: HuntContract
    contract_created: bool


@dataclass(frozen=True)
class BookingOptions:
    hunt: Hunt
    window: SeasonWindow | None
    plans: list[PricingItem]
    addon_items: list[PricingItem]
    addon_rates: AddonRates
    contract: HuntContract | None


def required_day_count(plan: PricingItem, extra_days: int) -> int | None:
    if plan.included_days is None:
        return None
    return plan.included_days + extra_days


class BookingService(BaseService):
    """Validate and record a client's booking, then refresh the contract bill."""

    def __init__(self, db: Session | None = None, season_lookup: SeasonWindowLookup | None = None) -> None:
        super().__init__(db=db)
        self.season_lookup = season_lookup if season_lookup is not None else get_season_lookup()

    def _require_owned_hunt(self, hunt_id: int, client_email: str) -> Hunt:
        hunt = self.db.get(Hunt, hunt_id)
        if hunt is None:
            raise NotFoundError("Hunt not found.", details={"hunt_id": hunt_id})
        if not emails_match(hunt.client_email, client_email):
            raise OwnershipError("This hunt is not assigned to you.", details={"hunt_id": hunt_id})
        return hunt

    def booking_options(self, client_email: str, hunt_id: int) -> BookingOptions:
        hunt = self._require_owned_hunt(hunt_id, client_email)
        catalog = PricingCatalogService(db=self.db)
        return BookingOptions(
            hunt=hunt,
            window=resolve_hunt_window(hunt, self.season_lookup),
            plans=catalog.plans_for_hunt(hunt),
            addon_items=catalog.addon_items(hunt.outfitter_id),
            addon_rates=catalog.addon_rates(hunt.outfitter_id),
            contract=ContractService(db=self.db, season_lookup=self.season_lookup).get_for_hunt(hunt.id),
        )

    def complete_booking(
        self,
        client_email: str,
        hunt_id: int,
        pricing_item_id: int,
        client_start_date: date | str | None,
        client_end_date: date | str | None,
        addon_quantities: AddonQuantities | Mapping[str, Any] | None = None,
    ) -> BookingResult:
        hunt = self._require_owned_hunt(hunt_id, client_email)

        start, end = parse_date(client_start_date), parse_date(client_end_date)
        if start is None or end is None:
            raise ValidationError(
                "client_start_date and client_end_date are required (YYYY-MM-DD).",
                details={"client_start_date": client_start_date, "client_end_date": client_end_date},
            )
        if start > end:
            raise ValidationError(
                "End date must be on or after start date.",
                details={"start_date": start.isoformat(), "end_date": end.isoformat()},
            )

        if not isinstance(addon_quantities, AddonQuantities):
            addon_quantities = AddonQuantities.from_payload(addon_quantities)

        plan = PricingCatalogService(db=self.db).require_plan(hunt.outfitter_id, pricing_item_id)
        actual_days = inclusive_day_count(start, end)
        required_days = required_day_count(plan, addon_quantities.extra_days)
        if required_days is not None and actual_days != required_days:
            extra = addon_quantities.extra_days
            extra_text = f" plus {extra} extra day(s)" if extra > 0 else ""
            raise ValidationError(
                f"Your plan includes {plan.included_days} days{extra_text}, for a total of "
                f"{required_days} days. Please choose dates that span {required_days} days "
                f"(selected range spans {actual_days} days).",
                details={
                    "included_days": plan.included_days,
                    "extra_days": extra,
                    "required_days": required_days,
                    "actual_days": actual_days,
                },
            )

        validate_dates_in_window(start, end, resolve_hunt_window(hunt, self.season_lookup))

        contracts = ContractService(db=self.db, season_lookup=self.season_lookup)
        existing = contracts.get_for_hunt(hunt.id)
        if existing is not None and is_locked(existing):
            raise ConflictError(
                "This contract is locked and cannot be modified. "
                f"Current status: {existing.status}",
                details={"current_status": existing.status, "contract_id": existing.id},
            )

        hunt.start_time = start_of_day_utc(start)
        hunt.end_time = end_of_day_utc(end)
        hunt.selected_pricing_item_id = plan.id
        hunt.client_addon_data = addon_quantities.as_payload() or None

        if existing is None:
            self.db.flush()
            contract, created = contracts.ensure_contract_for_hunt(hunt.id)
        else:
            contract, created = existing, False

        completion: dict[str, Any] = dict(contract.client_completion_data or {})
        for key in ("extra_days", "extra_non_hunters", "extra_spotters", "rifle_rental", "additional_days", "non_hunters"):
            completion.pop(key, None)
        completion.update(addon_quantities.as_payload())
        completion["selected_pricing_item_id"] = plan.id

        contract.client_completion_data = completion
        contract.selected_pricing_item_id = plan.id
        contract.client_selected_start_date = start
        contract.client_selected_end_date = end
        ContractMaterializer(db=self.db).materialize(contract)
        self.commit()
        self.db.refresh(hunt)
        self.db.refresh(contract)

        logger.info(
            "booking.completed",
            extra={
                "event": "booking.completed",
                "hunt_id": hunt.id,
                "contract_id": contract.id,
                "contract_created": created,
                "days": actual_days,
                "total_cents": contract.contract_total_cents,
            },
        )
        return BookingResult(hunt=hunt, contract=contract, contract_created=created)

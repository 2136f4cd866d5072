"""Keep a contract's stored BILL text and totals in sync with its inputs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from outfitter.models import HuntContract, PricingItem
from outfitter.services.base_service import BaseService
from outfitter.services.bill_calculator import AddonQuantities, Bill, compute_bill
from outfitter.services.contract_document import document_for
from outfitter.services.pricing_catalog import PricingCatalogService, resolve_addon_rates, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterializeResult:
    contract: HuntContract
    bill: Bill
    changed: bool


@dataclass(frozen=True)
class RepairFailure:
    contract_id: int
    error: str


@dataclass
class RepairReport:
    repaired: list[int] = field(default_factory=list)
    unchanged: list[int] = field(default_factory=list)
    failed: list[RepairFailure] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.repaired) + len(self.unchanged) + len(self.failed)

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "repaired": list(self.repaired),
            "unchanged": list(self.unchanged),
            "failed": [{"contract_id": f.contract_id, "error": f.error} for f in self.failed],
        }


def selected_pricing_item_id(contract: HuntContract) -> int | None:
    if contract.selected_pricing_item_id:
        return contract.selected_pricing_item_id
    raw = (contract.client_completion_data or {}).get("selected_pricing_item_id")
    try:
        return int(raw) if raw not in (None, "") else None
    except (TypeError, ValueError):
        return None


def has_billable_inputs(contract: HuntContract) -> bool:
    return (
        selected_pricing_item_id(contract) is not None
        or contract.calculated_guide_fee_cents is not None
        or bool(AddonQuantities.from_payload(contract.client_completion_data).as_payload())
    )


class ContractMaterializer(BaseService):
    """Recompute a contract's bill from its completion payload and the current catalog."""

    def _guide_fee(self, contract: HuntContract, plan: PricingItem | None) -> tuple[Decimal, str | None]:
        if plan is not None:
            return to_decimal(plan.amount_usd), plan.title
        if contract.calculated_guide_fee_cents is not None:
            return Decimal(contract.calculated_guide_fee_cents) / 100, None
        return Decimal("0"), None

    def compute_for(self, contract: HuntContract) -> Bill:
        catalog = PricingCatalogService(db=self.db)
        items = catalog.list_items(contract.outfitter_id)
        plan_id = selected_pricing_item_id(contract)
        plan = next((item for item in items if item.id == plan_id), None) if plan_id else None
        base, title = self._guide_fee(contract, plan)
        return compute_bill(
            base_guide_fee=base,
            base_guide_fee_title=title,
            addon_rates=resolve_addon_rates(items),
            quantities=AddonQuantities.from_payload(contract.client_completion_data),
        )

    def materialize(self, contract: HuntContract) -> MaterializeResult:
        """Rewrite content and totals in place; caller owns the commit.

        Contracts with nothing to bill yet (no plan, no stored guide fee, no
        add-on quantities) are left untouched.
        """
        bill = self.compute_for(contract)
        if not has_billable_inputs(contract):
            return MaterializeResult(contract=contract, bill=bill, changed=False)

        document = document_for(contract.content, contract.content_preamble).with_bill(bill.bill_text)
        content = document.render()

        changed = (
            contract.content != content
            or contract.content_preamble != document.preamble
            or contract.calculated_guide_fee_cents != bill.guide_fee_cents
            or contract.calculated_addons_cents != bill.addons_cents
            or contract.contract_total_cents != bill.total_cents
        )
        if changed:
            contract.content = content
            contract.content_preamble = document.preamble
            contract.calculated_guide_fee_cents = bill.guide_fee_cents
            contract.calculated_addons_cents = bill.addons_cents
            contract.contract_total_cents = bill.total_cents
        return MaterializeResult(contract=contract, bill=bill, changed=changed)

    def repair_many(self, contract_ids: list[int]) -> RepairReport:
        """Materialize each contract in its own transaction; failures are logged and reported."""
        report = RepairReport()
        for contract_id in contract_ids:
            try:
                contract = self.db.get(HuntContract, contract_id)
                if contract is None:
                    raise LookupError(f"Contract {contract_id} not found")
                result = self.materialize(contract)
                self.commit()
            except Exception as exc:
                self.rollback()
                logger.warning(
                    "contract.repair.failed",
                    extra={"event": "contract.repair.failed", "contract_id": contract_id, "error": str(exc)},
                )
                report.failed.append(RepairFailure(contract_id=contract_id, error=str(exc)))
                continue
            (report.repaired if result.changed else report.unchanged).append(contract_id)

        logger.info(
            "contract.repair.finished",
            extra={
                "event": "contract.repair.finished",
                "repaired": len(report.repaired),
                "unchanged": len(report.unchanged),
                "failed": len(report.failed),
            },
        )
        return report

    def repair_outfitter(self, outfitter_id: int | None = None) -> RepairReport:
        query = self.db.query(HuntContract.id)
        if outfitter_id is not None:
            query = query.filter(HuntContract.outfitter_id == outfitter_id)
        return self.repair_many([row.id for row in query.order_by(HuntContract.id).all()])

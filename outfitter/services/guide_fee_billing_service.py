"""Final guide-fee billing once a contract is fully executed."""

from __future__ import annotations

import logging
import math

from outfitter.core.config import get_config
from outfitter.models import HuntContract, PaymentItem, PaymentItemType, PaymentStatus
from outfitter.services.base_service import BaseService
from outfitter.services.contract_materializer import ContractMaterializer

logger = logging.getLogger(__name__)


def platform_fee_cents(subtotal_cents: int, percent: float, minimum_cents: int) -> int:
    if subtotal_cents <= 0:
        return 0
    return max(minimum_cents, math.ceil(subtotal_cents * percent / 100))


class GuideFeeBillingService(BaseService):
    """Create the single guide-fee payment item for an executed contract."""

    def get_existing(self, contract_id: int) -> PaymentItem | None:
        return (
            self.db.query(PaymentItem)
            .filter(
                PaymentItem.contract_id == contract_id,
                PaymentItem.item_type == PaymentItemType.GUIDE_FEE.value,
            )
            .first()
        )

    def create_for_contract(self, contract: HuntContract) -> PaymentItem | None:
        """Idempotent; returns the existing item when one was already created.

        Returns None when the bill total is zero. The caller owns the commit.
        """
        existing = self.get_existing(contract.id)
        if existing is not None:
            return existing

        bill = ContractMaterializer(db=self.db).compute_for(contract)
        subtotal = bill.total_cents
        if subtotal <= 0:
            logger.info(
                "guide_fee.skipped_zero_total",
                extra={"event": "guide_fee.skipped_zero_total", "contract_id": contract.id},
            )
            return None

        cfg = get_config()
        fee = platform_fee_cents(subtotal, cfg.PLATFORM_FEE_PERCENT, cfg.PLATFORM_FEE_MIN_CENTS)
        item = PaymentItem(
            outfitter_id=contract.outfitter_id,
            contract_id=contract.id,
            hunt_id=contract.hunt_id,
            client_email=contract.client_email,
            item_type=PaymentItemType.GUIDE_FEE.value,
            description="; ".join(line.text for line in bill.line_items),
            subtotal_cents=subtotal,
            platform_fee_cents=fee,
            total_cents=subtotal + fee,
            status=PaymentStatus.PENDING.value,
        )
        self.db.add(item)
        self.db.flush()
        logger.info(
            "guide_fee.payment_item_created",
            extra={
                "event": "guide_fee.payment_item_created",
                "contract_id": contract.id,
                "subtotal_cents": subtotal,
                "platform_fee_cents": fee,
            },
        )
        return item

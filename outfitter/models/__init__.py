"""SQLAlchemy model package for the outfitter schema."""

from outfitter.models.base import Base
from outfitter.models.contract_template import ContractTemplate
from outfitter.models.enums import (
    AddonType,
    ContractStatus,
    DocuSignStatus,
    HuntType,
    PaymentItemType,
    PaymentStatus,
    TagStatus,
    UserRole,
)
from outfitter.models.hunt import Hunt
from outfitter.models.hunt_contract import HuntContract
from outfitter.models.payment_item import PaymentItem
from outfitter.models.pricing_item import PricingItem

__all__ = [
    "AddonType",
    "Base",
    "ContractStatus",
    "ContractTemplate",
    "DocuSignStatus",
    "Hunt",
    "HuntContract",
    "HuntType",
    "PaymentItem",
    "PaymentItemType",
    "PaymentStatus",
    "PricingItem",
    "TagStatus",
    "UserRole",
]

"""Canonical enum values for the outfitter schema."""

from __future__ import annotations

import enum


class UserRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    CLIENT = "client"


class HuntType(str, enum.Enum):
    DRAW = "draw"
    PRIVATE_LAND = "private_land"


class TagStatus(str, enum.Enum):
    PENDING = "pending"
    APPLIED = "applied"
    DRAWN = "drawn"
    UNSUCCESSFUL = "unsuccessful"
    CONFIRMED = "confirmed"


class ContractStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_CLIENT_COMPLETION = "pending_client_completion"
    PENDING_ADMIN_REVIEW = "pending_admin_review"
    READY_FOR_SIGNATURE = "ready_for_signature"
    SENT_TO_DOCUSIGN = "sent_to_docusign"
    CLIENT_SIGNED = "client_signed"
    ADMIN_SIGNED = "admin_signed"
    FULLY_EXECUTED = "fully_executed"
    CANCELLED = "cancelled"


class DocuSignStatus(str, enum.Enum):
    NOT_SENT = "not_sent"
    SENT = "sent"
    DELIVERED = "delivered"
    SIGNED = "signed"
    COMPLETED = "completed"
    DECLINED = "declined"
    VOIDED = "voided"


class AddonType(str, enum.Enum):
    EXTRA_DAYS = "extra_days"
    NON_HUNTER = "non_hunter"
    SPOTTER = "spotter"
    RIFLE_RENTAL = "rifle_rental"


class PaymentItemType(str, enum.Enum):
    GUIDE_FEE = "guide_fee"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"

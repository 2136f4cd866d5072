"""Payment item model module."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from outfitter.models.base import AuditMixin, Base, OutfitterScopedMixin
from outfitter.models.enums import PaymentItemType, PaymentStatus


class PaymentItem(Base, AuditMixin, OutfitterScopedMixin):
    __tablename__ = "payment_items"
    __table_args__ = (
        Index("idx_payment_items_contract_type", "contract_id", "item_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contract_id: Mapped[int] = mapped_column(ForeignKey("hunt_contracts.id", ondelete="RESTRICT"), nullable=False)
    hunt_id: Mapped[int | None] = mapped_column(ForeignKey("hunts.id", ondelete="SET NULL"))
    client_email: Mapped[str] = mapped_column(String(255), nullable=False)
    item_type: Mapped[str] = mapped_column(String(40), default=PaymentItemType.GUIDE_FEE.value, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    subtotal_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    platform_fee_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(40), default=PaymentStatus.PENDING.value, nullable=False)

    contract = relationship("HuntContract")

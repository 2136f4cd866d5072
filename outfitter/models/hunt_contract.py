"""Hunt contract model module."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from outfitter.models.base import AuditMixin, Base, OutfitterScopedMixin
from outfitter.models.enums import ContractStatus, DocuSignStatus


class HuntContract(Base, AuditMixin, OutfitterScopedMixin):
    __tablename__ = "hunt_contracts"
    # hunt_id is indexed, not unique; one-contract-per-hunt relies on the
    # existence check before insert.
    __table_args__ = (
        Index("idx_hunt_contracts_hunt", "hunt_id"),
        Index("idx_hunt_contracts_outfitter_status", "outfitter_id", "status"),
        Index("idx_hunt_contracts_client_email", "client_email"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    hunt_id: Mapped[int | None] = mapped_column(ForeignKey("hunts.id", ondelete="SET NULL"))
    template_id: Mapped[int | None] = mapped_column(ForeignKey("contract_templates.id", ondelete="SET NULL"))
    client_email: Mapped[str] = mapped_column(String(255), nullable=False)
    client_name: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(40), default=ContractStatus.DRAFT.value, nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    content_preamble: Mapped[str | None] = mapped_column(Text)

    selected_pricing_item_id: Mapped[int | None] = mapped_column(ForeignKey("pricing_items.id", ondelete="SET NULL"))
    client_selected_start_date: Mapped[date | None] = mapped_column(Date)
    client_selected_end_date: Mapped[date | None] = mapped_column(Date)
    calculated_guide_fee_cents: Mapped[int | None] = mapped_column(Integer)
    calculated_addons_cents: Mapped[int | None] = mapped_column(Integer)
    contract_total_cents: Mapped[int | None] = mapped_column(Integer)

    client_completion_data: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    client_completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    admin_reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    admin_reviewed_by: Mapped[str | None] = mapped_column(String(255))
    admin_review_notes: Mapped[str | None] = mapped_column(Text)

    docusign_envelope_id: Mapped[str | None] = mapped_column(String(120), index=True)
    docusign_status: Mapped[str] = mapped_column(String(40), default=DocuSignStatus.NOT_SENT.value, nullable=False)
    docusign_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    client_signed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    admin_signed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    hunt = relationship("Hunt")
    selected_pricing_item = relationship("PricingItem")
    template = relationship("ContractTemplate")

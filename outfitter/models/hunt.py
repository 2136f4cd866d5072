"""Hunt (calendar event) model module."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from outfitter.models.base import AuditMixin, Base, OutfitterScopedMixin
from outfitter.models.enums import HuntType, TagStatus


class Hunt(Base, AuditMixin, OutfitterScopedMixin):
    __tablename__ = "hunts"
    __table_args__ = (
        Index("idx_hunts_outfitter_client", "outfitter_id", "client_email"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    species: Mapped[str | None] = mapped_column(String(120))
    unit: Mapped[str | None] = mapped_column(String(120))
    weapon: Mapped[str | None] = mapped_column(String(60))
    camp_name: Mapped[str | None] = mapped_column(String(255))
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    hunt_code: Mapped[str | None] = mapped_column(String(60))
    hunt_window_start: Mapped[date | None] = mapped_column(Date)
    hunt_window_end: Mapped[date | None] = mapped_column(Date)
    private_land_tag_id: Mapped[int | None] = mapped_column(Integer)
    client_email: Mapped[str | None] = mapped_column(String(255))
    hunt_type: Mapped[str] = mapped_column(String(40), default=HuntType.DRAW.value, nullable=False)
    tag_status: Mapped[str] = mapped_column(String(40), default=TagStatus.PENDING.value, nullable=False)
    selected_pricing_item_id: Mapped[int | None] = mapped_column(ForeignKey("pricing_items.id", ondelete="SET NULL"))
    client_addon_data: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    contract_generated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    selected_pricing_item = relationship("PricingItem")

"""Pricing catalog item model module."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from outfitter.models.base import AuditMixin, Base, OutfitterScopedMixin


class PricingItem(Base, AuditMixin, OutfitterScopedMixin):
    __tablename__ = "pricing_items"
    __table_args__ = (
        Index("idx_pricing_items_outfitter_category", "outfitter_id", "category"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(String(120))
    addon_type: Mapped[str | None] = mapped_column(String(40))
    amount_usd: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    included_days: Mapped[int | None] = mapped_column(Integer)
    species: Mapped[str | None] = mapped_column(String(255))
    weapons: Mapped[str | None] = mapped_column(String(255))

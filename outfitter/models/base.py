"""Shared SQLAlchemy base and common mixins for domain models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp helper."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base class for the outfitter schema."""


class AuditMixin:
    """Standard audit fields for all domain models."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class OutfitterScopedMixin:
    """Mixin enforcing outfitter ownership of business rows."""

    outfitter_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

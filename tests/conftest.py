from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from outfitter.models import Base, Hunt, HuntType, PricingItem, TagStatus

OUTFITTER_ID = 1
CLIENT_EMAIL = "hunter@example.com"


class StaticSeasonLookup:
    """In-memory hunt-code lookup; records every code it was asked for."""

    def __init__(self, windows=None) -> None:
        self.windows = {code.upper(): window for code, window in (windows or {}).items()}
        self.calls: list[str] = []

    def lookup(self, hunt_code):
        self.calls.append(hunt_code)
        return self.windows.get((hunt_code or "").upper())


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def season_lookup():
    return StaticSeasonLookup()


@pytest.fixture
def make_hunt(session):
    def _make(**overrides) -> Hunt:
        values = {
            "outfitter_id": OUTFITTER_ID,
            "title": "Elk Hunt - Rifle",
            "species": "Elk",
            "unit": "61",
            "weapon": "Rifle",
            "hunt_code": "EE-1-061-O1-R",
            "client_email": CLIENT_EMAIL,
            "hunt_type": HuntType.DRAW.value,
            "tag_status": TagStatus.DRAWN.value,
        }
        values.update(overrides)
        hunt = Hunt(**values)
        session.add(hunt)
        session.commit()
        session.refresh(hunt)
        return hunt

    return _make


@pytest.fixture
def make_pricing_item(session):
    def _make(title: str, amount: str, category: str = "Guide Fees", **overrides) -> PricingItem:
        item = PricingItem(
            outfitter_id=overrides.pop("outfitter_id", OUTFITTER_ID),
            title=title,
            amount_usd=Decimal(amount),
            category=category,
            **overrides,
        )
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    return _make


@pytest.fixture
def elk_plan(make_pricing_item):
    return make_pricing_item(
        "5-Day Elk Rifle Hunt",
        "4500.00",
        included_days=5,
        species="Elk",
        weapons="Rifle",
    )

"""Pricing catalog resolution: add-on rates and guide-fee plan matching.

Every rule that maps an outfitter's catalog rows to an add-on rate lives in
this module. Precedence, applied identically for each add-on type:

1. an item explicitly tagged with the add-on type (``addon_type``);
2. otherwise an item in the add-ons category whose title matches the
   case-insensitive substring rule for that type;
3. otherwise the documented default rate.

A matched item with an empty or zero amount also falls back to the default,
so a bill is never computed with a missing rate.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from outfitter.core.exceptions import NotFoundError, ValidationError
from outfitter.models import AddonType, Hunt, PricingItem
from outfitter.services.base_service import BaseService

ADDONS_CATEGORY = "add-ons"

DEFAULT_ADDON_RATES: dict[AddonType, Decimal] = {
    AddonType.EXTRA_DAYS: Decimal("100"),
    AddonType.NON_HUNTER: Decimal("75"),
    AddonType.SPOTTER: Decimal("50"),
    AddonType.RIFLE_RENTAL: Decimal("500"),
}


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def to_decimal(value: Any) -> Decimal:
    """Coerce catalog amounts (Decimal, float, int or str) to Decimal; junk becomes 0."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def is_addon_item(item: PricingItem) -> bool:
    return _normalize(item.category) == ADDONS_CATEGORY


def is_guide_fee_item(item: PricingItem) -> bool:
    """Guide-fee plans are any catalog rows that are not add-ons."""
    return not is_addon_item(item) and not item.addon_type


def _title_matches(addon_type: AddonType, title: str | None) -> bool:
    t = _normalize(title)
    if addon_type is AddonType.EXTRA_DAYS:
        if "non" in t:
            return False
        return "additional day" in t or "extra day" in t or "day" in t
    if addon_type is AddonType.NON_HUNTER:
        return "non-hunter" in t or "non hunter" in t or ("non" in t and "hunter" in t)
    if addon_type is AddonType.SPOTTER:
        return "spotter" in t
    if addon_type is AddonType.RIFLE_RENTAL:
        return "rifle" in t and ("rental" in t or "rent" in t)
    return False


def find_addon_item(items: Iterable[PricingItem], addon_type: AddonType | str) -> PricingItem | None:
    """Return the catalog item that prices ``addon_type``, or None."""
    addon_type = AddonType(addon_type)
    items = list(items)
    for item in items:
        if _normalize(item.addon_type) == addon_type.value:
            return item
    for item in items:
        if is_addon_item(item) and _title_matches(addon_type, item.title):
            return item
    return None


def resolve_addon_rate(items: Iterable[PricingItem], addon_type: AddonType | str) -> Decimal:
    addon_type = AddonType(addon_type)
    item = find_addon_item(items, addon_type)
    if item is not None:
        amount = to_decimal(item.amount_usd)
        if amount > 0:
            return amount
    return DEFAULT_ADDON_RATES[addon_type]


@dataclass(frozen=True)
class AddonRates:
    """Per-unit add-on rates in whole currency units."""

    extra_day: Decimal = DEFAULT_ADDON_RATES[AddonType.EXTRA_DAYS]
    non_hunter: Decimal = DEFAULT_ADDON_RATES[AddonType.NON_HUNTER]
    spotter: Decimal = DEFAULT_ADDON_RATES[AddonType.SPOTTER]
    rifle_rental: Decimal = DEFAULT_ADDON_RATES[AddonType.RIFLE_RENTAL]

    def as_dict(self) -> dict[str, float]:
        return {
            "extra_days": float(self.extra_day),
            "non_hunter": float(self.non_hunter),
            "spotter": float(self.spotter),
            "rifle_rental": float(self.rifle_rental),
        }


def resolve_addon_rates(items: Iterable[PricingItem]) -> AddonRates:
    """Resolve all four add-on rates from one outfitter's catalog."""
    items = list(items)
    return AddonRates(
        extra_day=resolve_addon_rate(items, AddonType.EXTRA_DAYS),
        non_hunter=resolve_addon_rate(items, AddonType.NON_HUNTER),
        spotter=resolve_addon_rate(items, AddonType.SPOTTER),
        rifle_rental=resolve_addon_rate(items, AddonType.RIFLE_RENTAL),
    )


def normalize_weapon_for_pricing(weapon: str | None) -> str | None:
    """Map calendar weapon labels onto catalog labels (``Bow`` is ``Archery``)."""
    if not weapon or not weapon.strip():
        return None
    w = weapon.strip()
    if w == "Bow":
        return "Archery"
    return w


def inclusive_day_count(start: date | datetime | None, end: date | datetime | None) -> int | None:
    """Inclusive calendar-day span; None when either bound is missing or end precedes start."""
    if start is None or end is None:
        return None
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(end, datetime):
        end = end.date()
    days = (end - start).days + 1
    return days if days >= 1 else None


def _split_list(value: str | None) -> list[str]:
    return [part.strip().lower() for part in (value or "").split(",") if part.strip()]


def pricing_item_matches_hunt(
    item: PricingItem,
    hunt_species: str | None,
    hunt_weapon: str | None,
    hunt_days: int | None,
) -> bool:
    """Empty species/weapons on the item mean it applies to every hunt."""
    species = _split_list(item.species)
    if species and hunt_species and hunt_species.strip().lower() not in species:
        return False

    weapons = _split_list(item.weapons)
    if weapons and hunt_weapon:
        weapon = normalize_weapon_for_pricing(hunt_weapon)
        if not weapon or weapon.lower() not in weapons:
            return False

    if item.included_days is not None and hunt_days is not None and item.included_days != hunt_days:
        return False
    return True


def match_plans_for_hunt(
    items: Sequence[PricingItem],
    hunt_species: str | None,
    hunt_weapon: str | None,
    hunt_days: int | None = None,
) -> list[PricingItem]:
    """Guide-fee plans applicable to a hunt, sorted by category then title."""
    matched = [
        item
        for item in items
        if is_guide_fee_item(item) and pricing_item_matches_hunt(item, hunt_species, hunt_weapon, hunt_days)
    ]
    return sorted(matched, key=lambda item: ((item.category or "").lower(), (item.title or "").lower()))


class PricingCatalogService(BaseService):
    """Session-backed access to one outfitter's pricing catalog."""

    def list_items(self, outfitter_id: int) -> list[PricingItem]:
        return (
            self.db.query(PricingItem)
            .filter(PricingItem.outfitter_id == outfitter_id)
            .order_by(PricingItem.id)
            .all()
        )

    def get_item(self, outfitter_id: int, item_id: int) -> PricingItem | None:
        return (
            self.db.query(PricingItem)
            .filter(PricingItem.id == item_id, PricingItem.outfitter_id == outfitter_id)
            .first()
        )

    def addon_rates(self, outfitter_id: int) -> AddonRates:
        return resolve_addon_rates(self.list_items(outfitter_id))

    def require_plan(self, outfitter_id: int, item_id: int) -> PricingItem:
        """The outfitter's catalog item, which must be a guide-fee plan rather than an add-on."""
        item = self.get_item(outfitter_id, item_id)
        if item is None:
            raise NotFoundError("Pricing item not found.", details={"pricing_item_id": item_id})
        if not is_guide_fee_item(item):
            raise ValidationError(
                "Selected pricing item is an add-on, not a guide-fee plan.",
                details={"pricing_item_id": item_id, "category": item.category},
            )
        return item

    def addon_items(self, outfitter_id: int) -> list[PricingItem]:
        return [item for item in self.list_items(outfitter_id) if not is_guide_fee_item(item)]

    def plans_for_hunt(self, hunt: Hunt, hunt_days: int | None = None) -> list[PricingItem]:
        return match_plans_for_hunt(
            self.list_items(hunt.outfitter_id),
            hunt_species=hunt.species,
            hunt_weapon=hunt.weapon,
            hunt_days=hunt_days,
        )

"""Pure bill computation for hunt contracts.

``compute_bill`` has no side effects and depends only on its arguments, so the
submission path and the repair pass produce byte-identical bill text for the
same catalog and completion payload.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from outfitter.services.pricing_catalog import AddonRates, to_decimal

DEFAULT_GUIDE_FEE_TITLE = "Guide fee"
BILL_SEPARATOR = "---"
BILL_HEADING = "BILL"

_CENT = Decimal("0.01")

# Completion payload keys written by older clients.
QUANTITY_ALIASES: dict[str, str] = {
    "additional_days": "extra_days",
    "non_hunters": "extra_non_hunters",
}


def coerce_quantity(value: Any) -> int:
    """Clamp arbitrary input to a non-negative integer; never raises."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return max(0, int(number))


def quantize_money(amount: Decimal) -> Decimal:
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal | int | float) -> str:
    return f"${quantize_money(to_decimal(amount)):.2f}"


def to_cents(amount: Decimal | int | float) -> int:
    return int((quantize_money(to_decimal(amount)) * 100).to_integral_value(rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class AddonQuantities:
    extra_days: int = 0
    extra_non_hunters: int = 0
    extra_spotters: int = 0
    rifle_rental: int = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> "AddonQuantities":
        """Read quantities from a completion payload, honouring legacy aliases."""
        data = dict(payload or {})
        for alias, canonical in QUANTITY_ALIASES.items():
            if data.get(canonical) in (None, "") and alias in data:
                data[canonical] = data[alias]
        return cls(
            extra_days=coerce_quantity(data.get("extra_days")),
            extra_non_hunters=coerce_quantity(data.get("extra_non_hunters")),
            extra_spotters=coerce_quantity(data.get("extra_spotters")),
            rifle_rental=coerce_quantity(data.get("rifle_rental")),
        )

    def as_payload(self) -> dict[str, int]:
        """Non-zero quantities only, keyed by canonical payload names."""
        values = {
            "extra_days": self.extra_days,
            "extra_non_hunters": self.extra_non_hunters,
            "extra_spotters": self.extra_spotters,
            "rifle_rental": self.rifle_rental,
        }
        return {key: qty for key, qty in values.items() if qty > 0}


@dataclass(frozen=True)
class LineItem:
    key: str
    text: str
    amount: Decimal
    quantity: int | None = None
    unit_rate: Decimal | None = None


@dataclass(frozen=True)
class Bill:
    line_items: tuple[LineItem, ...]
    total: Decimal
    bill_text: str

    @property
    def guide_fee(self) -> Decimal:
        return self.line_items[0].amount

    @property
    def addons_total(self) -> Decimal:
        return sum((item.amount for item in self.line_items[1:]), Decimal("0"))

    @property
    def guide_fee_cents(self) -> int:
        return to_cents(self.guide_fee)

    @property
    def addons_cents(self) -> int:
        return to_cents(self.addons_total)

    @property
    def total_cents(self) -> int:
        return to_cents(self.total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "line_items": [
                {
                    "key": item.key,
                    "text": item.text,
                    "amount": float(item.amount),
                    "quantity": item.quantity,
                    "unit_rate": float(item.unit_rate) if item.unit_rate is not None else None,
                }
                for item in self.line_items
            ],
            "total": float(self.total),
            "bill_text": self.bill_text,
        }


# key, label, unit, rate attribute on AddonRates; order is the bill order.
_ADDON_LINES: tuple[tuple[str, str, str, str], ...] = (
    ("extra_days", "Extra days", "day", "extra_day"),
    ("extra_non_hunters", "Non-hunters", "person", "non_hunter"),
    ("extra_spotters", "Spotter(s)", "person", "spotter"),
    ("rifle_rental", "Rifle Rental", "rental", "rifle_rental"),
)


def _addon_line(key: str, label: str, unit: str, quantity: int, rate: Decimal) -> LineItem:
    amount = quantize_money(rate * quantity)
    text = f"{label} ({quantity} × {format_money(rate)}/{unit}): {format_money(amount)}"
    return LineItem(key=key, text=text, amount=amount, quantity=quantity, unit_rate=quantize_money(rate))


def render_bill_text(line_items: tuple[LineItem, ...], total: Decimal) -> str:
    lines = [BILL_SEPARATOR, "", BILL_HEADING, ""]
    lines.extend(item.text for item in line_items)
    lines.extend(["", f"Total: {format_money(total)}"])
    return "\n".join(lines)


def compute_bill(
    base_guide_fee: Decimal | int | float | None,
    base_guide_fee_title: str | None,
    addon_rates: AddonRates,
    quantities: AddonQuantities | Mapping[str, Any] | None,
) -> Bill:
    """Compute itemized amounts, total and canonical bill text."""
    if not isinstance(quantities, AddonQuantities):
        quantities = AddonQuantities.from_payload(quantities)

    guide_fee = quantize_money(to_decimal(base_guide_fee))
    title = (base_guide_fee_title or "").strip() or DEFAULT_GUIDE_FEE_TITLE
    items: list[LineItem] = [
        LineItem(key="guide_fee", text=f"{title}: {format_money(guide_fee)}", amount=guide_fee)
    ]

    for key, label, unit, rate_attr in _ADDON_LINES:
        quantity = getattr(quantities, key)
        if quantity > 0:
            items.append(_addon_line(key, label, unit, quantity, getattr(addon_rates, rate_attr)))

    line_items = tuple(items)
    total = quantize_money(sum((item.amount for item in line_items), Decimal("0")))
    return Bill(line_items=line_items, total=total, bill_text=render_bill_text(line_items, total))

from __future__ import annotations

from decimal import Decimal

from outfitter.services.bill_calculator import AddonQuantities, coerce_quantity, compute_bill
from outfitter.services.pricing_catalog import AddonRates


def test_bill_with_default_addon_rates():
    bill = compute_bill(
        base_guide_fee=Decimal("4500"),
        base_guide_fee_title="5-Day Elk Rifle Hunt",
        addon_rates=AddonRates(),
        quantities={"extra_days": 2, "extra_non_hunters": 1},
    )

    assert bill.bill_text == (
        "---\n"
        "\n"
        "BILL\n"
        "\n"
        "5-Day Elk Rifle Hunt: $4500.00\n"
        "Extra days (2 × $100.00/day): $200.00\n"
        "Non-hunters (1 × $75.00/person): $75.00\n"
        "\n"
        "Total: $4775.00"
    )
    assert bill.guide_fee_cents == 450000
    assert bill.addons_cents == 27500
    assert bill.total_cents == 477500


def test_bill_lists_addons_in_fixed_order_with_custom_rates():
    rates = AddonRates(
        extra_day=Decimal("150"),
        non_hunter=Decimal("80"),
        spotter=Decimal("60.5"),
        rifle_rental=Decimal("400"),
    )
    bill = compute_bill(
        Decimal("1000"),
        "Plan",
        rates,
        {"rifle_rental": 1, "extra_spotters": 2, "extra_days": 1, "extra_non_hunters": 3},
    )

    keys = [item.key for item in bill.line_items]
    assert keys == ["guide_fee", "extra_days", "extra_non_hunters", "extra_spotters", "rifle_rental"]
    assert "Spotter(s) (2 × $60.50/person): $121.00" in bill.bill_text
    assert "Rifle Rental (1 × $400.00/rental): $400.00" in bill.bill_text
    assert bill.total == Decimal("1911.00")


def test_missing_guide_fee_uses_default_title_and_zero():
    bill = compute_bill(None, None, AddonRates(), None)

    assert [item.text for item in bill.line_items] == ["Guide fee: $0.00"]
    assert bill.total_cents == 0
    assert bill.bill_text.endswith("Total: $0.00")


def test_compute_bill_is_deterministic():
    args = (Decimal("2500"), "Deer Plan", AddonRates(), {"extra_spotters": 1})
    assert compute_bill(*args) == compute_bill(*args)


def test_quantities_are_coerced_to_non_negative_integers():
    quantities = AddonQuantities.from_payload(
        {"extra_days": "3", "extra_spotters": -2, "rifle_rental": "abc", "non_hunters": 1.9}
    )

    assert quantities == AddonQuantities(extra_days=3, extra_non_hunters=1, extra_spotters=0, rifle_rental=0)
    assert quantities.as_payload() == {"extra_days": 3, "extra_non_hunters": 1}


def test_canonical_quantity_key_wins_over_legacy_alias():
    assert AddonQuantities.from_payload({"extra_days": 2, "additional_days": 5}).extra_days == 2
    assert AddonQuantities.from_payload({"additional_days": 4}).extra_days == 4


def test_coerce_quantity_rejects_junk():
    assert coerce_quantity(True) == 0
    assert coerce_quantity(float("nan")) == 0
    assert coerce_quantity(float("inf")) == 0
    assert coerce_quantity(None) == 0
    assert coerce_quantity("2.7") == 2

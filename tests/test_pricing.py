"""
Tests for money helpers and the storefront price range.
"""
from decimal import Decimal

import pytest

from cardapio.core.menu.models import VariationGroup, VariationOption
from cardapio.core.pricing import (
    NO_RANGE, brl, compute_price_range, format_product_price, line_total, money,
)


def group(gid, adjustments, available=None):
    available = available or [True] * len(adjustments)
    return VariationGroup(
        id=gid, name=gid,
        options=[
            VariationOption(id=f"{gid}{i}", group_id=gid, name=f"op{i}",
                            price_adjustment=Decimal(str(a)), is_available=ok)
            for i, (a, ok) in enumerate(zip(adjustments, available))
        ],
    )


class TestMoney:

    @pytest.mark.parametrize("raw,expected", [
        (None, "0.00"), (10, "10.00"), (2.675, "2.68"), ("3.5", "3.50"), (Decimal("1.005"), "1.01"),
    ])
    def test_money_rounds_half_up(self, raw, expected):
        assert money(raw) == Decimal(expected)

    def test_brl(self):
        assert brl(Decimal("72.8")) == "R$ 72.80"

    def test_line_total(self):
        assert line_total("20", ["5"], ["3"], 2) == Decimal("56.00")


class TestPriceRange:

    def test_single_group_bounds(self):
        rng = compute_price_range(Decimal("30"), [group("t", [-2, 0, 5])])
        assert rng.min == Decimal("28.00")
        assert rng.max == Decimal("35.00")
        assert rng.has_variations is True

    def test_no_groups(self):
        assert compute_price_range(Decimal("30"), []) == NO_RANGE

    def test_only_unavailable_options(self):
        rng = compute_price_range(Decimal("30"), [group("t", [4], available=[False])])
        assert rng.has_variations is False
        assert rng.min is None and rng.max is None

    def test_adjustments_pooled_across_groups(self):
        # não é combinatório: 40 + max(0, 4, 3, 6), não 40 + 4 + 6
        rng = compute_price_range(Decimal("40"), [group("a", [0, 4]), group("b", [0, 3]), group("c", [5, 6])])
        assert (rng.min, rng.max) == (Decimal("40.00"), Decimal("46.00"))

    def test_unavailable_options_ignored(self):
        rng = compute_price_range(Decimal("10"), [group("a", [1, 9], available=[True, False])])
        assert rng.max == Decimal("11.00")


class TestFormat:

    def test_equal_bounds_format_as_single_price(self, product):
        rng = compute_price_range(Decimal("30"), [group("t", [0, 0])])
        product.price_display_min, product.price_display_max = rng.min, rng.max
        product.has_variations = rng.has_variations
        assert format_product_price(product) == "R$ 30.00"

    def test_range(self, product):
        product.price_display_min = Decimal("28")
        product.price_display_max = Decimal("35")
        product.has_variations = True
        assert format_product_price(product) == "R$ 28.00 – R$ 35.00"

    def test_without_variations_shows_base_price(self, product):
        assert format_product_price(product) == "R$ 24.90"

"""Unit tests for option selection and line item pricing

Tests cover:
- Selection validation against stored option groups
- Totals, quantization and titles
- Legacy variantName/price translation
"""

from decimal import Decimal

import pytest

from orderlink.custom_orders.pricing import (
    build_line_item,
    parse_price,
    select_options,
    selection_from_legacy_variant,
    total_price,
)
from orderlink.errors import InvalidRequestError

GROUPS = [
    {"name": "Size", "values": [
        {"id": "s", "label": "Small", "price": "10"},
        {"id": "l", "label": "Large", "price": "15.505"},
    ]},
    {"name": "Color", "values": [
        {"id": "r", "label": "Red", "price": "0"},
        {"id": "g", "label": "Gold", "price": "4.25"},
    ]},
    {"name": "Engraving", "values": []},
]


class TestSelectOptions:

    def test_selects_in_group_order(self):
        selected = select_options(GROUPS, {"Color": "g", "Size": "s"})
        assert [(o.group, o.label) for o in selected] == [("Size", "Small"), ("Color", "Gold")]

    def test_groups_without_values_are_skipped(self):
        selected = select_options(GROUPS, {"Size": "s", "Color": "r"})
        assert "Engraving" not in [o.group for o in selected]

    def test_missing_selection_rejected(self):
        with pytest.raises(InvalidRequestError, match="No option selected for Color"):
            select_options(GROUPS, {"Size": "s"})

    def test_unknown_group_rejected(self):
        with pytest.raises(InvalidRequestError, match="Unknown option group: Finish"):
            select_options(GROUPS, {"Size": "s", "Color": "r", "Finish": "matte"})

    def test_unknown_value_rejected(self):
        with pytest.raises(InvalidRequestError, match="Unknown option xl for Size"):
            select_options(GROUPS, {"Size": "xl", "Color": "r"})

    def test_integer_value_ids_match(self):
        groups = [{"name": "Qty", "values": [{"id": "2", "label": "Two", "price": "3"}]}]
        assert select_options(groups, {"Qty": 2})[0].value_id == "2"

    def test_no_groups_no_selection(self):
        assert select_options([], None) == []


class TestLineItem:

    def test_total_is_sum_quantized(self):
        selected = select_options(GROUPS, {"Size": "l", "Color": "g"})
        assert total_price(selected) == Decimal("19.76")

    def test_line_item(self):
        selected = select_options(GROUPS, {"Size": "s", "Color": "g"})

        line_item = build_line_item("Mug", selected)

        assert line_item == {
            "title": "Mug - Small / Gold",
            "price": "14.25",
            "quantity": 1,
            "custom": True,
            "properties": [{"name": "Size", "value": "Small"}, {"name": "Color", "value": "Gold"}],
        }

    def test_title_without_selection(self):
        line_item = build_line_item("Mug", [])
        assert line_item["title"] == "Mug"
        assert line_item["price"] == "0.00"

    def test_negative_total_rejected(self):
        groups = [{"name": "Discount", "values": [{"id": "d", "label": "Promo", "price": "-5"}]}]
        with pytest.raises(InvalidRequestError):
            build_line_item("Mug", select_options(groups, {"Discount": "d"}))

    def test_parse_price(self):
        assert parse_price(None) == Decimal("0")
        assert parse_price(" ") == Decimal("0")
        assert parse_price(12) == Decimal("12")
        with pytest.raises(InvalidRequestError):
            parse_price("abc")
        with pytest.raises(InvalidRequestError):
            parse_price("NaN")


class TestLegacyVariant:

    LEGACY = [{"name": "Option", "values": [
        {"id": "1", "label": "Red", "price": "5"},
        {"id": "2", "label": "Blue", "price": "6.00"},
    ]}]

    def test_matching_pair_becomes_selection(self):
        assert selection_from_legacy_variant(self.LEGACY, "Blue", "6") == {"Option": "2"}

    def test_price_mismatch_rejected(self):
        with pytest.raises(InvalidRequestError):
            selection_from_legacy_variant(self.LEGACY, "Blue", "0.01")

    def test_multi_group_orders_need_selections(self):
        with pytest.raises(InvalidRequestError, match="Option selections are required"):
            selection_from_legacy_variant(GROUPS, "Small", "10")

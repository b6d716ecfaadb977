import math

import pytest

from crm_estimator.estimating.defaults import (
    default_line_item,
    normalize_line_item,
    to_number,
)
from crm_estimator.estimating.line_items import (
    extend_line_item,
    find_negative_inputs,
    summarize_items,
)


@pytest.mark.parametrize("raw, expected", [
    (None, 0.0),
    ("", 0.0),
    ("  ", 0.0),
    ("abc", 0.0),
    (True, 0.0),
    (float("nan"), 0.0),
    (float("inf"), 0.0),
    ("1,234.5", 1234.5),
    ("7", 7.0),
    (3, 3.0),
    (-2.5, -2.5),
])
def test_to_number_coerces_unusable_values_to_zero(raw, expected):
    assert to_number(raw) == expected


def test_extend_line_item():
    item = {"quantity": 3, "materialPrice": 10, "expensePrice": 2, "laborMen": 2, "laborHours": 1.5}
    assert extend_line_item(item) == {
        "materialExtension": 30.0,
        "expenseExtension": 6.0,
        "laborUnit": 3.0,
        "laborTotal": 9.0,
    }


def test_extend_line_item_with_missing_and_text_values():
    result = extend_line_item({"quantity": "2", "materialPrice": "n/a"})
    assert result == {
        "materialExtension": 0.0,
        "expenseExtension": 0.0,
        "laborUnit": 0.0,
        "laborTotal": 0.0,
    }


def test_summarize_items(make_line):
    items = [
        make_line("Breakers", quantity=4, material=25, expense=5, men=2, hours=1),
        make_line("Relays", quantity=2, material=10, expense=0, men=1, hours=3),
    ]
    totals = summarize_items(items)
    assert totals["material"] == 120.0
    assert totals["expense"] == 20.0
    assert totals["labor"] == 14.0
    assert totals["laborHours"] == 14.0


def test_summarize_items_empty():
    assert summarize_items([]) == {"material": 0.0, "expense": 0.0, "labor": 0.0, "laborHours": 0.0}
    assert summarize_items(None)["material"] == 0.0


def test_negative_values_compute_and_are_reported(make_line):
    item = make_line("Credit", quantity=1, material=-50)
    assert extend_line_item(item)["materialExtension"] == -50.0

    warnings = find_negative_inputs({"sovItems": [item], "nonSovItems": []})
    assert len(warnings) == 1
    assert warnings[0]["section"] == "sovItems"
    assert warnings[0]["index"] == 0
    assert warnings[0]["field"] == "materialPrice"
    assert warnings[0]["value"] == -50.0


def test_normalize_line_item_keeps_unknown_keys():
    item = normalize_line_item({"item": None, "quantity": "5", "vendor": "ABB"})
    assert item["item"] == ""
    assert item["quantity"] == 5.0
    assert item["laborHours"] == 0.0
    assert item["vendor"] == "ABB"


def test_default_line_item_overrides():
    item = default_line_item(item="Reports", quantity=1)
    assert item["item"] == "Reports"
    assert item["quantity"] == 1.0
    assert not math.isnan(item["materialPrice"])

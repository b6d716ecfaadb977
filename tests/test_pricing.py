import pytest

from crm_estimator.estimating.pricing import (
    compute_subtotal,
    final_price,
    format_currency,
    format_number,
    mobilization_factor,
    mobilization_fee,
    net_term_prices,
    price_rollup,
    sov_item_price,
)


def test_subtotal_applies_markups_and_labor_rates():
    subtotal = compute_subtotal(100, 50, 10, 8, 2, 1, travel_cost=500)
    expected = 100 * 1.09 * 1.3 + 50 * 1.09 + 10 + 8 * 240 + 2 * 360 + 1 * 480 + 500
    assert subtotal == pytest.approx(expected)


def test_final_price_rounds_up_after_margin_divisor():
    assert final_price(2126.2) == 2215
    assert final_price(96) == 100
    assert final_price(0) == 0


@pytest.mark.parametrize("final, factor", [
    (50_000, 0.0),
    (100_000, 0.0),
    (100_001, 0.10),
    (500_000, 0.10),
    (500_001, 0.05),
    (1_000_001, 0.05),
])
def test_mobilization_tiers(final, factor):
    assert mobilization_factor(final) == factor


def test_mobilization_fee_rounds_up():
    assert mobilization_fee(200_000) == 20_000
    assert mobilization_fee(100_003) == 10_001
    assert mobilization_fee(9_000) == 0


def test_net_terms():
    assert net_term_prices(1000) == {"NET30": 1000, "NET60": 1060, "NET90": 1090}


def test_sov_item_price_shares_final_by_labor_units():
    assert sov_item_price(1000, 10, 2) == 200
    assert sov_item_price(1000, 0, 2) == 0


def test_price_rollup_reads_document_totals():
    document = {
        "calculatedValues": {"totalMaterial": 0, "totalExpense": 0, "nonSovExpense": 0},
        "hoursSummary": {"straightTimeHours": 16, "overtimeHours": 0, "doubleTimeHours": 0},
    }
    rollup = price_rollup(document, travel_cost=0)
    assert rollup["laborCost"] == 3840
    assert rollup["subtotal"] == 3840
    assert rollup["final"] == 4000
    assert rollup["mobilizationFee"] == 0
    assert rollup["netTerms"]["NET90"] == 4360


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(-5) == "-$5.00"
    assert format_currency(None) == "$0.00"
    assert format_number("1234") == "1,234.00"

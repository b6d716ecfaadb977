import pytest

from crm_estimator.estimating.defaults import default_document, default_travel_data
from crm_estimator.estimating.sheet import recalculate, summarize_estimate
from crm_estimator.estimating.travel import apply_travel_change


@pytest.fixture
def document(make_line):
    doc = default_document(client="Acme")
    doc["sovItems"][0] = make_line("Transformer testing", quantity=2, material=100, expense=10, men=2, hours=4)
    return doc


def test_recalculate_rolls_up_line_items(document):
    doc = recalculate(document)
    cv = doc["calculatedValues"]
    assert cv["totalMaterial"] == 200
    assert cv["totalExpense"] == 20
    assert cv["sovLaborHours"] == 16
    assert cv["nonSovLaborHours"] == 0
    assert cv["totalLaborHours"] == 16
    assert cv["grandTotal"] == 236

    item = doc["sovItems"][0]
    assert item["materialExtension"] == 200
    assert item["laborUnit"] == 8


def test_recalculate_hours_summary(document):
    hs = recalculate(document)["hoursSummary"]
    assert hs["men"] == 2
    assert hs["hoursPerDay"] == 8
    assert hs["daysOnsite"] == 1
    assert hs["workHours"] == 16
    assert hs["travelHours"] == 0
    assert hs["totalHours"] == 16
    assert hs["straightTimeHours"] == 16
    assert hs["overtimeHours"] == 0


def test_recalculate_does_not_mutate_and_ignores_stale_derived_values(document):
    document["calculatedValues"]["totalMaterial"] = 99999
    doc = recalculate(document)
    assert doc["calculatedValues"]["totalMaterial"] == 200
    assert document["calculatedValues"]["totalMaterial"] == 99999


def test_longer_days_move_hours_into_overtime(document):
    document["hoursSummary"]["hoursPerDay"] = "10"
    hs = recalculate(document)["hoursSummary"]
    assert hs["hoursPerDay"] == 10.0
    # 10h + 6h
    assert hs["straightTimeHours"] == 14
    assert hs["overtimeHours"] == 2


def test_summarize_estimate_prices_the_sheet(document):
    summary = summarize_estimate(document)
    assert summary["travelData"] is None
    assert summary["travelCost"] == 0
    assert summary["pricing"]["final"] == 4318
    assert summary["sovItemPrices"][0] == pytest.approx(2159)
    assert summary["sovItemPrices"][1] == 0
    assert summary["warnings"] == []


def test_summarize_estimate_with_travel(document):
    travel = apply_travel_change(default_travel_data(), "travelExpense", "oneWayMiles", 100)
    summary = summarize_estimate(document, travel)
    assert summary["travelCost"] == 2520
    assert summary["document"]["hoursSummary"]["travelHours"] == 8
    assert summary["document"]["hoursSummary"]["totalHours"] == 24
    # travel hours are billed through the travel ledgers, not the labor tiers
    assert summary["document"]["hoursSummary"]["straightTimeHours"] == 16
    assert summary["pricing"]["final"] == 6943


def test_summarize_estimate_reports_negative_inputs(document, make_line):
    document["nonSovItems"][0] = make_line("Reports", quantity=1, expense=-40)
    summary = summarize_estimate(document)
    assert summary["warnings"][0]["section"] == "nonSovItems"
    assert summary["document"]["calculatedValues"]["nonSovExpense"] == -40

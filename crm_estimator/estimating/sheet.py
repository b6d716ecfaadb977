"""
Whole-sheet recompute: line items + hours inputs (+ travel) -> derived totals.

calculatedValues and the derived half of hoursSummary are always rebuilt from
scratch; only hoursSummary.men and hoursSummary.hoursPerDay are user inputs.
"""
import copy

from crm_estimator.estimating.defaults import (
    default_calculated_values,
    default_hours_summary,
    to_number,
)
from crm_estimator.estimating.labor import allocate_labor_tiers, days_onsite
from crm_estimator.estimating.line_items import (
    extend_line_item,
    find_negative_inputs,
    labor_unit,
    summarize_items,
)
from crm_estimator.estimating.pricing import price_rollup, sov_item_price
from crm_estimator.estimating.travel import (
    recalculate_travel,
    total_travel_cost,
    total_travel_hours,
)


def recalculate(document, travel_data=None):
    """Return a copy of ``document`` with every derived field recomputed."""
    doc = copy.deepcopy(document)
    for section in ("sovItems", "nonSovItems"):
        for item in doc.get(section) or []:
            item.update(extend_line_item(item))

    sov = summarize_items(doc.get("sovItems"))
    non_sov = summarize_items(doc.get("nonSovItems"))

    calculated = default_calculated_values()
    calculated.update(doc.get("calculatedValues") or {})
    calculated["subtotalMaterial"] = sov["material"] + non_sov["material"]
    calculated["subtotalExpense"] = sov["expense"] + non_sov["expense"]
    calculated["subtotalLabor"] = sov["labor"] + non_sov["labor"]
    calculated["nonSovMaterial"] = non_sov["material"]
    calculated["nonSovExpense"] = non_sov["expense"]
    calculated["nonSovLabor"] = non_sov["labor"]
    calculated["sovLaborHours"] = sov["laborHours"]
    calculated["nonSovLaborHours"] = non_sov["laborHours"]
    calculated["totalLaborHours"] = sov["laborHours"] + non_sov["laborHours"]
    calculated["totalMaterial"] = calculated["subtotalMaterial"]
    calculated["totalExpense"] = calculated["subtotalExpense"]
    calculated["totalLabor"] = calculated["subtotalLabor"]
    calculated["grandTotal"] = (
        calculated["totalMaterial"] + calculated["totalExpense"] + calculated["totalLabor"]
    )

    hours = default_hours_summary()
    hours.update(doc.get("hoursSummary") or {})
    men = to_number(hours.get("men"))
    hours_per_day = to_number(hours.get("hoursPerDay"))
    total_work_hours = calculated["totalLaborHours"]
    travel_hours = total_travel_hours(travel_data) if travel_data else 0

    hours["men"] = men
    hours["hoursPerDay"] = hours_per_day
    hours["daysOnsite"] = days_onsite(total_work_hours, men, hours_per_day)
    hours["workHours"] = sov["laborHours"]
    hours["nonSovHours"] = non_sov["laborHours"]
    hours["travelHours"] = travel_hours
    hours["totalHours"] = total_work_hours + travel_hours
    hours.update(allocate_labor_tiers(total_work_hours, hours_per_day))

    doc["calculatedValues"] = calculated
    doc["hoursSummary"] = hours
    return doc


def sov_item_prices(document, final):
    work_hours = to_number((document.get("hoursSummary") or {}).get("workHours"))
    return [
        sov_item_price(final, work_hours, labor_unit(item))
        for item in document.get("sovItems") or []
    ]


def summarize_estimate(document, travel_data=None):
    """Recompute a sheet and attach its pricing; nothing is persisted."""
    travel = recalculate_travel(travel_data) if travel_data else None
    doc = recalculate(document, travel)
    travel_cost = total_travel_cost(travel)
    pricing = price_rollup(doc, travel_cost)
    return {
        "document": doc,
        "travelData": travel,
        "travelCost": travel_cost,
        "pricing": pricing,
        "sovItemPrices": sov_item_prices(doc, pricing["final"]),
        "warnings": find_negative_inputs(doc),
    }

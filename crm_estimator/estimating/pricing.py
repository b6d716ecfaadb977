"""
Pricing rollup: subtotal -> final -> mobilization fee and payment-term options.

The factors below are the company's published rates and must not be changed
without a pricing decision.
"""
import math

from crm_estimator.estimating.defaults import to_number

MATERIAL_MARKUP = 1.09
MATERIAL_HANDLING_FACTOR = 1.3
EXPENSE_MARKUP = 1.09
NON_SOV_EXPENSE_FACTOR = 1.00

STRAIGHT_TIME_RATE = 240
OVERTIME_RATE = 360
DOUBLE_TIME_RATE = 480

FINAL_DIVISOR = 0.96

# (threshold, factor), checked top-down against ``final > threshold``.
# The two top tiers share 0.05 as the rate sheet has it.
MOBILIZATION_TIERS = (
    (1_000_000, 0.05),
    (500_000, 0.05),
    (100_000, 0.10),
)

NET_TERM_MULTIPLIERS = {
    "NET30": 1.0,
    "NET60": 1.06,
    "NET90": 1.09,
}


def compute_subtotal(total_material, total_expense, non_sov_expense,
                     straight_time_hours, overtime_hours, double_time_hours,
                     travel_cost=0.0):
    return (
        to_number(total_material) * MATERIAL_MARKUP * MATERIAL_HANDLING_FACTOR
        + to_number(total_expense) * EXPENSE_MARKUP
        + to_number(non_sov_expense) * NON_SOV_EXPENSE_FACTOR
        + to_number(straight_time_hours) * STRAIGHT_TIME_RATE
        + to_number(overtime_hours) * OVERTIME_RATE
        + to_number(double_time_hours) * DOUBLE_TIME_RATE
        + to_number(travel_cost)
    )


def final_price(subtotal):
    return math.ceil(subtotal / FINAL_DIVISOR)


def mobilization_factor(final):
    for threshold, factor in MOBILIZATION_TIERS:
        if final > threshold:
            return factor
    return 0.0


def mobilization_fee(final):
    return math.ceil(final * mobilization_factor(final))


def net_term_prices(final):
    return {term: math.ceil(final * multiplier) for term, multiplier in NET_TERM_MULTIPLIERS.items()}


def sov_item_price(final, work_sov_hours, labor_unit):
    """Share of the final price carried by one SOV line, by its labor units."""
    if not work_sov_hours:
        return 0.0
    return (final / work_sov_hours) * labor_unit


def price_rollup(document, travel_cost=0.0):
    calculated = document.get("calculatedValues") or {}
    hours = document.get("hoursSummary") or {}

    subtotal = compute_subtotal(
        calculated.get("totalMaterial"),
        calculated.get("totalExpense"),
        calculated.get("nonSovExpense"),
        hours.get("straightTimeHours"),
        hours.get("overtimeHours"),
        hours.get("doubleTimeHours"),
        travel_cost,
    )
    final = final_price(subtotal)
    labor_cost = (
        to_number(hours.get("straightTimeHours")) * STRAIGHT_TIME_RATE
        + to_number(hours.get("overtimeHours")) * OVERTIME_RATE
        + to_number(hours.get("doubleTimeHours")) * DOUBLE_TIME_RATE
    )
    return {
        "laborCost": labor_cost,
        "travelCost": to_number(travel_cost),
        "subtotal": subtotal,
        "final": final,
        "mobilizationFactor": mobilization_factor(final),
        "mobilizationFee": mobilization_fee(final),
        "netTerms": net_term_prices(final),
    }


def format_currency(amount):
    amount = to_number(amount)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_number(amount):
    return f"{to_number(amount):,.2f}"

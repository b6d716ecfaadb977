from crm_estimator.estimating.defaults import default_document, default_travel_data, to_number
from crm_estimator.estimating.labor import allocate_labor_tiers
from crm_estimator.estimating.line_items import extend_line_item, summarize_items
from crm_estimator.estimating.pricing import format_currency, price_rollup
from crm_estimator.estimating.sheet import recalculate, summarize_estimate
from crm_estimator.estimating.travel import apply_travel_change, total_travel_cost

__all__ = [
    "default_document",
    "default_travel_data",
    "to_number",
    "allocate_labor_tiers",
    "extend_line_item",
    "summarize_items",
    "format_currency",
    "price_rollup",
    "recalculate",
    "summarize_estimate",
    "apply_travel_change",
    "total_travel_cost",
]

from crm_estimator.estimating.defaults import LINE_ITEM_NUMERIC_FIELDS, to_number


def material_extension(item):
    return to_number(item.get("quantity")) * to_number(item.get("materialPrice"))


def expense_extension(item):
    return to_number(item.get("quantity")) * to_number(item.get("expensePrice"))


def labor_unit(item):
    return to_number(item.get("laborMen")) * to_number(item.get("laborHours"))


def labor_total(item):
    return to_number(item.get("quantity")) * labor_unit(item)


def extend_line_item(item):
    return {
        "materialExtension": material_extension(item),
        "expenseExtension": expense_extension(item),
        "laborUnit": labor_unit(item),
        "laborTotal": labor_total(item),
    }


def summarize_items(items):
    """
    Sum the extensions of a list of line items.

    laborHours is laborUnit x quantity per line, the same figure as laborTotal;
    both are reported because the hours summary and the money summary read
    them under different names.
    """
    totals = {"material": 0.0, "expense": 0.0, "labor": 0.0, "laborHours": 0.0}
    for item in items or []:
        totals["material"] += material_extension(item)
        totals["expense"] += expense_extension(item)
        totals["labor"] += labor_total(item)
        totals["laborHours"] += labor_unit(item) * to_number(item.get("quantity"))
    return totals


def find_negative_inputs(document):
    """
    List line-item fields holding negative numbers.

    The calculators accept negatives (they just flip the sign of the
    extension); callers decide whether a credit line is legitimate.
    """
    warnings = []
    for section in ("sovItems", "nonSovItems"):
        for index, item in enumerate(document.get(section) or []):
            for field in LINE_ITEM_NUMERIC_FIELDS:
                if to_number(item.get(field)) < 0:
                    warnings.append({
                        "section": section,
                        "index": index,
                        "field": field,
                        "value": to_number(item.get(field)),
                        "message": f"{section}[{index}].{field} is negative",
                    })
    return warnings

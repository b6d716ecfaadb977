"""
Default construction of estimate documents, line items and travel ledgers.

Every numeric field starts at 0 (or the ledger's standing rate) here, so the
calculators never have to guess what a missing value means.
"""
import copy
import math

DEFAULT_LINE_COUNT = 5

LINE_ITEM_NUMERIC_FIELDS = (
    "quantity",
    "materialPrice",
    "expensePrice",
    "laborMen",
    "laborHours",
)
LINE_ITEM_TEXT_FIELDS = ("item", "notes")

GENERAL_INFO_FIELDS = (
    "client",
    "jobDescription",
    "dateDue",
    "location",
    "periodOfPerformance",
    "estimatedStartDate",
    "poNumber",
    "notes",
)

DEFAULT_NON_SOV_NAMES = (
    "Reports",
    "Project Management",
    "Shipping/ Postage",
    "Equipment Rental",
    "Equipment Purchase",
)

CALCULATED_VALUE_FIELDS = (
    "subtotalMaterial",
    "subtotalExpense",
    "subtotalLabor",
    "totalMaterial",
    "totalExpense",
    "totalLabor",
    "grandTotal",
    "nonSovMaterial",
    "nonSovExpense",
    "nonSovLabor",
    "sovLaborHours",
    "nonSovLaborHours",
    "totalLaborHours",
)

DEFAULT_MEN = 2
DEFAULT_HOURS_PER_DAY = 8

HOURS_SUMMARY_DEFAULTS = {
    "men": DEFAULT_MEN,
    "hoursPerDay": DEFAULT_HOURS_PER_DAY,
    "daysOnsite": 0,
    "workHours": 0,
    "nonSovHours": 0,
    "travelHours": 0,
    "totalHours": 0,
    "straightTimeHours": 0,
    "overtimeHours": 0,
    "doubleTimeHours": 0,
}

# ledger name -> default entry (inputs and derived outputs)
TRAVEL_LEDGER_DEFAULTS = {
    "travelExpense": {
        "trips": 1,
        "oneWayMiles": 0,
        "roundTripMiles": 0,
        "totalVehicleMiles": 0,
        "numVehicles": 1,
        "totalMiles": 0,
        "rate": 3.00,
        "vehicleTravelCost": 0,
    },
    "travelTime": {
        "trips": 1,
        "oneWayHours": 0,
        "roundTripHours": 0,
        "totalTravelHours": 0,
        "numMen": 2,
        "grandTotalTravelHours": 0,
        "rate": 240.00,
        "totalTravelLabor": 0,
    },
    "perDiem": {
        "numDays": 0,
        "firstDayRate": 65.00,
        "lastDayRate": 65.00,
        "dailyRate": 65.00,
        "additionalDays": -2,
        "totalPerDiemPerMan": 0,
        "numMen": 2,
        "totalPerDiem": 0,
    },
    "lodging": {
        "numNights": 0,
        "numMen": 2,
        "manNights": 0,
        "rate": 210.00,
        "totalAmount": 0,
    },
    "localMiles": {
        "numDays": 0,
        "numVehicles": 1,
        "milesPerDay": 50,
        "totalMiles": 0,
        "rate": 3.00,
        "totalLocalMilesCost": 0,
    },
    "flights": {
        "numFlights": 0,
        "numMen": 2,
        "rate": 600.00,
        "luggageFees": 50.00,
        "totalFlightAmount": 0,
    },
    "airTravelTime": {
        "trips": 0,
        "oneWayHoursInAir": 0,
        "roundTripTerminalTime": 0,
        "totalTravelHours": 0,
        "numMen": 0,
        "grandTotalTravelHours": 0,
        "rate": 240.00,
        "totalTravelLabor": 0,
    },
    "rentalCar": {
        "numCars": 0,
        "rate": 750.00,
        "totalAmount": 0,
    },
}

TRAVEL_LEDGERS = tuple(TRAVEL_LEDGER_DEFAULTS)


def to_number(value):
    """Coerce a user/JSON value to float; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def default_line_item(**fields):
    item = {
        "item": "",
        "quantity": 0,
        "materialPrice": 0,
        "expensePrice": 0,
        "laborMen": 0,
        "laborHours": 0,
        "notes": "",
    }
    item.update(fields)
    return normalize_line_item(item)


def normalize_line_item(item):
    """Fill missing keys and coerce numerics; unknown keys are kept as-is."""
    if not isinstance(item, dict):
        item = {}
    normalized = dict(item)
    for key in LINE_ITEM_TEXT_FIELDS:
        value = normalized.get(key)
        normalized[key] = "" if value is None else str(value)
    for key in LINE_ITEM_NUMERIC_FIELDS:
        normalized[key] = to_number(normalized.get(key))
    return normalized


def default_sov_items():
    return [default_line_item() for _ in range(DEFAULT_LINE_COUNT)]


def default_non_sov_items():
    return [default_line_item(item=name, quantity=1) for name in DEFAULT_NON_SOV_NAMES]


def default_general_info(**fields):
    info = {key: "" for key in GENERAL_INFO_FIELDS}
    for key, value in fields.items():
        if key in info and value is not None:
            info[key] = str(value)
    return info


def default_calculated_values():
    return {key: 0 for key in CALCULATED_VALUE_FIELDS}


def default_hours_summary():
    return dict(HOURS_SUMMARY_DEFAULTS)


def default_document(**general_info):
    return {
        "generalInfo": default_general_info(**general_info),
        "sovItems": default_sov_items(),
        "nonSovItems": default_non_sov_items(),
        "calculatedValues": default_calculated_values(),
        "hoursSummary": default_hours_summary(),
    }


def default_ledger_entry(ledger):
    return copy.deepcopy(TRAVEL_LEDGER_DEFAULTS[ledger])


def default_travel_data():
    return {ledger: [default_ledger_entry(ledger)] for ledger in TRAVEL_LEDGERS}

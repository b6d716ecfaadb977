"""
Travel ledgers: per-ledger recompute rules and the cross-ledger sync cascade.

Ledgers fall into two sync groups that never share ``numMen``:

  ground: travelExpense, travelTime, perDiem, lodging, localMiles
  air:    flights, airTravelTime

rentalCar stands alone.
"""
import copy

from crm_estimator.errors import TravelInputError
from crm_estimator.estimating.defaults import (
    TRAVEL_LEDGER_DEFAULTS,
    TRAVEL_LEDGERS,
    default_ledger_entry,
    to_number,
)

AVERAGE_DRIVING_SPEED_MPH = 50

# ledger -> field holding that ledger's cost
TERMINAL_COST_FIELDS = {
    "travelExpense": "vehicleTravelCost",
    "travelTime": "totalTravelLabor",
    "perDiem": "totalPerDiem",
    "lodging": "totalAmount",
    "localMiles": "totalLocalMilesCost",
    "flights": "totalFlightAmount",
    "airTravelTime": "totalTravelLabor",
    "rentalCar": "totalAmount",
}

TRAVEL_HOUR_LEDGERS = ("travelTime", "airTravelTime")


def _n(entry, key):
    return to_number(entry.get(key))


def recompute_travel_expense(entry):
    entry["roundTripMiles"] = _n(entry, "oneWayMiles") * 2
    entry["totalVehicleMiles"] = _n(entry, "trips") * entry["roundTripMiles"]
    entry["totalMiles"] = entry["totalVehicleMiles"] * _n(entry, "numVehicles")
    entry["vehicleTravelCost"] = entry["totalMiles"] * _n(entry, "rate")
    return entry


def recompute_travel_time(entry):
    entry["roundTripHours"] = _n(entry, "oneWayHours") * 2
    entry["totalTravelHours"] = _n(entry, "trips") * entry["roundTripHours"]
    entry["grandTotalTravelHours"] = entry["totalTravelHours"] * _n(entry, "numMen")
    entry["totalTravelLabor"] = entry["grandTotalTravelHours"] * _n(entry, "rate")
    return entry


def recompute_per_diem(entry):
    entry["totalPerDiemPerMan"] = _n(entry, "numDays") * _n(entry, "dailyRate")
    entry["totalPerDiem"] = entry["totalPerDiemPerMan"] * _n(entry, "numMen")
    return entry


def recompute_lodging(entry):
    entry["manNights"] = _n(entry, "numNights") * _n(entry, "numMen")
    entry["totalAmount"] = entry["manNights"] * _n(entry, "rate")
    return entry


def recompute_local_miles(entry):
    entry["totalMiles"] = _n(entry, "numDays") * _n(entry, "milesPerDay") * _n(entry, "numVehicles")
    entry["totalLocalMilesCost"] = entry["totalMiles"] * _n(entry, "rate")
    return entry


def recompute_flights(entry):
    seats = _n(entry, "numFlights") * _n(entry, "numMen")
    entry["totalFlightAmount"] = seats * _n(entry, "rate") + seats * _n(entry, "luggageFees")
    return entry


def recompute_air_travel_time(entry):
    entry["roundTripTerminalTime"] = _n(entry, "oneWayHoursInAir") * 2
    entry["totalTravelHours"] = _n(entry, "trips") * entry["roundTripTerminalTime"]
    entry["grandTotalTravelHours"] = entry["totalTravelHours"] * _n(entry, "numMen")
    entry["totalTravelLabor"] = entry["grandTotalTravelHours"] * _n(entry, "rate")
    return entry


def recompute_rental_car(entry):
    entry["totalAmount"] = _n(entry, "numCars") * _n(entry, "rate")
    return entry


RECOMPUTE = {
    "travelExpense": recompute_travel_expense,
    "travelTime": recompute_travel_time,
    "perDiem": recompute_per_diem,
    "lodging": recompute_lodging,
    "localMiles": recompute_local_miles,
    "flights": recompute_flights,
    "airTravelTime": recompute_air_travel_time,
    "rentalCar": recompute_rental_car,
}


def _push(travel_data, ledger, index, field, value):
    """Set a field on a sibling ledger entry (if it exists) and recompute it."""
    entries = travel_data.get(ledger) or []
    if index >= len(entries):
        return
    entries[index][field] = value
    RECOMPUTE[ledger](entries[index])


def _sync_ground_crew(travel_data, source, index, num_men):
    # localMiles assumes one vehicle per man
    targets = {
        "travelTime": "numMen",
        "perDiem": "numMen",
        "lodging": "numMen",
        "localMiles": "numVehicles",
    }
    for ledger, field in targets.items():
        if ledger != source:
            _push(travel_data, ledger, index, field, num_men)


def apply_travel_change(travel_data, ledger, field, value, index=0):
    """
    Set ``travel_data[ledger][index][field] = value`` and run every recompute
    the edit triggers. Returns a new tree; the input is not modified.
    """
    if ledger not in TRAVEL_LEDGER_DEFAULTS:
        raise TravelInputError(f"unknown travel ledger: {ledger}")
    if field not in TRAVEL_LEDGER_DEFAULTS[ledger]:
        raise TravelInputError(f"unknown field {field!r} for ledger {ledger}")

    updated = copy.deepcopy(travel_data) if travel_data else {}
    for name in TRAVEL_LEDGERS:
        if not updated.get(name):
            updated[name] = [default_ledger_entry(name)]

    entries = updated[ledger]
    if not isinstance(index, int) or index < 0 or index >= len(entries):
        raise TravelInputError(f"{ledger} has no entry at index {index}")

    item = entries[index]
    item[field] = to_number(value)
    RECOMPUTE[ledger](item)

    if ledger == "travelExpense":
        if field == "oneWayMiles":
            _push(updated, "travelTime", index, "oneWayHours",
                  item["oneWayMiles"] / AVERAGE_DRIVING_SPEED_MPH)
        elif field == "trips":
            _push(updated, "travelTime", index, "trips", item["trips"])

    elif ledger == "travelTime":
        if field == "numMen":
            _sync_ground_crew(updated, ledger, index, item["numMen"])

    elif ledger == "perDiem":
        if field == "numDays":
            _push(updated, "lodging", index, "numNights", item["numDays"])
        elif field == "numMen":
            _sync_ground_crew(updated, ledger, index, item["numMen"])

    elif ledger == "lodging":
        if field == "numMen":
            _sync_ground_crew(updated, ledger, index, item["numMen"])

    elif ledger == "flights":
        if field == "numMen":
            _push(updated, "airTravelTime", index, "numMen", item["numMen"])

    elif ledger == "airTravelTime":
        if field == "numMen":
            _push(updated, "flights", index, "numMen", item["numMen"])

    return updated


def recalculate_travel(travel_data):
    """Recompute every entry of every ledger (no cross-ledger pushes)."""
    updated = copy.deepcopy(travel_data) if travel_data else {}
    for ledger in TRAVEL_LEDGERS:
        for entry in updated.get(ledger) or []:
            RECOMPUTE[ledger](entry)
    return updated


def ledger_cost(travel_data, ledger):
    field = TERMINAL_COST_FIELDS[ledger]
    return sum(to_number(entry.get(field)) for entry in (travel_data or {}).get(ledger) or [])


def total_travel_cost(travel_data):
    if not travel_data:
        return 0.0
    return sum(ledger_cost(travel_data, ledger) for ledger in TRAVEL_LEDGERS)


def total_travel_hours(travel_data):
    if not travel_data:
        return 0.0
    return sum(
        to_number(entry.get("grandTotalTravelHours"))
        for ledger in TRAVEL_HOUR_LEDGERS
        for entry in travel_data.get(ledger) or []
    )

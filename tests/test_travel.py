import pytest

from crm_estimator.errors import TravelInputError
from crm_estimator.estimating.defaults import default_travel_data
from crm_estimator.estimating.travel import (
    apply_travel_change,
    ledger_cost,
    recalculate_travel,
    total_travel_cost,
    total_travel_hours,
)


def test_default_travel_costs_nothing():
    travel = recalculate_travel(default_travel_data())
    assert total_travel_cost(travel) == 0
    assert total_travel_hours(travel) == 0


def test_one_way_miles_drives_vehicle_cost_and_drive_time():
    travel = apply_travel_change(default_travel_data(), "travelExpense", "oneWayMiles", 100)

    expense = travel["travelExpense"][0]
    assert expense["roundTripMiles"] == 200
    assert expense["totalVehicleMiles"] == 200
    assert expense["totalMiles"] == 200
    assert expense["vehicleTravelCost"] == 600

    drive = travel["travelTime"][0]
    assert drive["oneWayHours"] == 2
    assert drive["roundTripHours"] == 4
    assert drive["grandTotalTravelHours"] == 8
    assert drive["totalTravelLabor"] == 1920

    assert total_travel_cost(travel) == 2520
    assert total_travel_hours(travel) == 8


def test_change_does_not_mutate_input():
    original = default_travel_data()
    apply_travel_change(original, "travelExpense", "oneWayMiles", 100)
    assert original["travelExpense"][0]["oneWayMiles"] == 0
    assert original["travelTime"][0]["oneWayHours"] == 0


def test_trips_follow_travel_expense_but_manual_drive_time_survives():
    travel = apply_travel_change(default_travel_data(), "travelTime", "oneWayHours", 3)
    travel = apply_travel_change(travel, "travelExpense", "trips", 2)
    drive = travel["travelTime"][0]
    assert drive["trips"] == 2
    assert drive["oneWayHours"] == 3
    assert drive["totalTravelHours"] == 12


def test_crew_size_syncs_across_ground_ledgers():
    travel = apply_travel_change(default_travel_data(), "travelTime", "numMen", 3)
    assert travel["perDiem"][0]["numMen"] == 3
    assert travel["lodging"][0]["numMen"] == 3
    assert travel["localMiles"][0]["numVehicles"] == 3
    # air crew is tracked separately
    assert travel["flights"][0]["numMen"] == 2


def test_per_diem_crew_size_syncs_and_recomputes():
    travel = apply_travel_change(default_travel_data(), "perDiem", "numDays", 3)
    travel = apply_travel_change(travel, "localMiles", "numDays", 2)
    travel = apply_travel_change(travel, "perDiem", "numMen", 4)

    assert travel["travelTime"][0]["numMen"] == 4
    assert travel["lodging"][0]["numMen"] == 4
    assert travel["localMiles"][0]["numVehicles"] == 4

    assert travel["perDiem"][0]["totalPerDiem"] == 3 * 65 * 4
    assert travel["lodging"][0]["manNights"] == 12
    assert travel["lodging"][0]["totalAmount"] == 12 * 210
    assert travel["localMiles"][0]["totalMiles"] == 2 * 50 * 4
    assert travel["localMiles"][0]["totalLocalMilesCost"] == 1200


def test_lodging_crew_size_syncs_to_ground_ledgers():
    travel = apply_travel_change(default_travel_data(), "travelExpense", "oneWayMiles", 100)
    travel = apply_travel_change(travel, "lodging", "numMen", 5)

    assert travel["travelTime"][0]["numMen"] == 5
    assert travel["travelTime"][0]["grandTotalTravelHours"] == 20
    assert travel["travelTime"][0]["totalTravelLabor"] == 20 * 240
    assert travel["perDiem"][0]["numMen"] == 5
    assert travel["localMiles"][0]["numVehicles"] == 5
    assert travel["flights"][0]["numMen"] == 2


def test_total_cost_is_sum_of_all_eight_ledgers():
    travel = default_travel_data()
    travel["travelExpense"][0].update(trips=1, oneWayMiles=100, numVehicles=1, rate=3)
    travel["travelTime"][0].update(trips=1, oneWayHours=2, numMen=2, rate=240)
    travel["perDiem"][0].update(numDays=3, dailyRate=65, numMen=2)
    travel["lodging"][0].update(numNights=3, numMen=2, rate=210)
    travel["localMiles"][0].update(numDays=3, milesPerDay=50, numVehicles=1, rate=3)
    travel["flights"][0].update(numFlights=1, numMen=2, rate=600, luggageFees=50)
    travel["airTravelTime"][0].update(trips=1, oneWayHoursInAir=2, numMen=2, rate=240)
    travel["rentalCar"][0].update(numCars=1, rate=750)
    travel = recalculate_travel(travel)

    assert travel["travelExpense"][0]["vehicleTravelCost"] == 600
    assert travel["travelTime"][0]["totalTravelLabor"] == 1920
    assert travel["perDiem"][0]["totalPerDiem"] == 390
    assert travel["lodging"][0]["totalAmount"] == 1260
    assert travel["localMiles"][0]["totalLocalMilesCost"] == 450
    assert travel["flights"][0]["totalFlightAmount"] == 1300
    assert travel["airTravelTime"][0]["totalTravelLabor"] == 1920
    assert travel["rentalCar"][0]["totalAmount"] == 750
    assert total_travel_cost(travel) == 8590
    assert total_travel_hours(travel) == 16


def test_per_diem_days_set_lodging_nights():
    travel = apply_travel_change(default_travel_data(), "perDiem", "numDays", 5)
    per_diem = travel["perDiem"][0]
    lodging = travel["lodging"][0]
    assert per_diem["totalPerDiemPerMan"] == 325
    assert per_diem["totalPerDiem"] == 650
    assert lodging["numNights"] == 5
    assert lodging["manNights"] == 10
    assert lodging["totalAmount"] == 2100


def test_flight_crew_syncs_with_air_travel_time():
    travel = apply_travel_change(default_travel_data(), "flights", "numMen", 4)
    assert travel["airTravelTime"][0]["numMen"] == 4
    travel = apply_travel_change(travel, "airTravelTime", "numMen", 1)
    assert travel["flights"][0]["numMen"] == 1
    assert travel["perDiem"][0]["numMen"] == 2


def test_flights_and_rental_cars():
    travel = apply_travel_change(default_travel_data(), "flights", "numFlights", 2)
    assert travel["flights"][0]["totalFlightAmount"] == 2 * 2 * 600 + 2 * 2 * 50
    travel = apply_travel_change(travel, "rentalCar", "numCars", 1)
    assert ledger_cost(travel, "rentalCar") == 750


def test_missing_ledgers_are_backfilled():
    travel = apply_travel_change({"rentalCar": [{"numCars": 0, "rate": 750.0}]}, "rentalCar", "numCars", 2)
    assert set(travel) >= {"travelExpense", "travelTime", "perDiem", "lodging",
                           "localMiles", "flights", "airTravelTime", "rentalCar"}
    assert travel["rentalCar"][0]["totalAmount"] == 1500


def test_totals_include_every_entry():
    travel = default_travel_data()
    travel["rentalCar"].append({"numCars": 1, "rate": 500.0, "totalAmount": 0})
    travel = apply_travel_change(travel, "rentalCar", "numCars", 1, index=0)
    travel = recalculate_travel(travel)
    assert ledger_cost(travel, "rentalCar") == 1250


@pytest.mark.parametrize("ledger, field, index", [
    ("boats", "numMen", 0),
    ("perDiem", "hotelStars", 0),
    ("perDiem", "numDays", 3),
    ("perDiem", "numDays", -1),
])
def test_invalid_changes_raise(ledger, field, index):
    with pytest.raises(TravelInputError):
        apply_travel_change(default_travel_data(), ledger, field, 1, index=index)


def test_non_numeric_value_becomes_zero():
    travel = apply_travel_change(default_travel_data(), "lodging", "rate", "call for price")
    assert travel["lodging"][0]["rate"] == 0

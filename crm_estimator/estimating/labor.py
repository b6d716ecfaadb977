# Daily overtime policy: the first 8 hours of a day bill straight time, hours
# 8-12 bill overtime, anything past 12 bills double time.
import math

STRAIGHT_TIME_DAILY_LIMIT = 8
OVERTIME_DAILY_LIMIT = 12


def split_day(hours_this_day):
    """Return (straight, overtime, double) for a single day's hours."""
    if hours_this_day <= STRAIGHT_TIME_DAILY_LIMIT:
        return hours_this_day, 0, 0
    if hours_this_day <= OVERTIME_DAILY_LIMIT:
        return STRAIGHT_TIME_DAILY_LIMIT, hours_this_day - STRAIGHT_TIME_DAILY_LIMIT, 0
    return (
        STRAIGHT_TIME_DAILY_LIMIT,
        OVERTIME_DAILY_LIMIT - STRAIGHT_TIME_DAILY_LIMIT,
        hours_this_day - OVERTIME_DAILY_LIMIT,
    )


def allocate_labor_tiers(total_hours, hours_per_day):
    """
    Split total work hours into straight/overtime/double-time buckets as if
    the job ran one day at a time, each day holding ``hours_per_day`` except
    the last, which holds what is left.

    Every full day splits the same way, so the full days are counted in one
    step and only the partial last day is split separately.
    """
    tiers = {"straightTimeHours": 0, "overtimeHours": 0, "doubleTimeHours": 0}
    if total_hours <= 0 or hours_per_day <= 0:
        return tiers

    full_days = math.floor(total_hours / hours_per_day)
    remainder = max(total_hours - full_days * hours_per_day, 0)
    full_straight, full_overtime, full_double = split_day(hours_per_day)
    last_straight, last_overtime, last_double = split_day(remainder)

    tiers["straightTimeHours"] = full_straight * full_days + last_straight
    tiers["overtimeHours"] = full_overtime * full_days + last_overtime
    tiers["doubleTimeHours"] = full_double * full_days + last_double
    return tiers


def days_onsite(total_hours, men, hours_per_day):
    if men <= 0 or hours_per_day <= 0:
        return 0
    return total_hours / (men * hours_per_day)

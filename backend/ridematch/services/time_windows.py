"""Hour-of-day windows shared by scoring and pricing."""

from datetime import datetime

from ridematch.schemas.profile import TimeBucket

RUSH_HOURS = ((7, 9), (17, 19))  # inclusive hour ranges


def is_rush_hour(hour: int) -> bool:
    return any(start <= hour <= end for start, end in RUSH_HOURS)


def is_late_night(hour: int) -> bool:
    """22:00 through 05:59."""
    return hour >= 22 or hour <= 5


def is_weekend(moment: datetime) -> bool:
    return moment.weekday() >= 5


def time_bucket(hour: int) -> TimeBucket:
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 22:
        return "evening"
    return "night"

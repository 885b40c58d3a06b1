"""Clock and lunar phase computation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

__all__ = ["SystemClock", "FixedClock", "LunarCalculator", "moon_age", "phase_name"]

SYNODIC_MONTH = 29.530588853
# Julian day of the new moon of 2000-01-06 18:14 UTC
REFERENCE_NEW_MOON_JD = 2451550.25972

# The game rolls its calendar day over at midnight US Eastern time
GAME_TIMEZONE = ZoneInfo("America/New_York")


class SystemClock:
    def now(self) -> datetime:
        return datetime.now().astimezone()


@dataclass(frozen=True, slots=True)
class FixedClock:
    moment: datetime

    def now(self) -> datetime:
        return self.moment


def _julian_day(moment: datetime) -> float:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp() / 86400.0 + 2440587.5


def moon_age(moment: datetime) -> float:
    """Fraction of the synodic month elapsed: 0 new, 0.25 first quarter, 0.5 full."""
    return ((_julian_day(moment) - REFERENCE_NEW_MOON_JD) / SYNODIC_MONTH) % 1.0


def phase_name(today: float, tomorrow: float) -> str:
    """Classify the day starting at phase `today` and ending at `tomorrow`.

    A principal phase wins when it is crossed during the day.
    """
    if today <= 0.25 <= tomorrow:
        return "first_quarter"
    if today <= 0.5 <= tomorrow:
        return "full"
    if today <= 0.75 <= tomorrow:
        return "last_quarter"
    if today >= tomorrow:
        return "new"
    if today <= 0.25:
        return "waxing_crescent"
    if today <= 0.5:
        return "waxing_gibbous"
    if today <= 0.75:
        return "waning_gibbous"
    return "waning_crescent"


class LunarCalculator:
    """Mean-motion lunar phase for the calendar day of `moment`.

    The day is taken in `tz`; naive moments are read as UTC.
    """

    def __init__(self, tz: tzinfo = GAME_TIMEZONE):
        self.tz = tz

    def moon_phase(self, moment: datetime) -> str:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        local = moment.astimezone(self.tz)
        midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
        today = moon_age(midnight)
        tomorrow = moon_age(midnight + timedelta(days=1))
        return phase_name(today, tomorrow)

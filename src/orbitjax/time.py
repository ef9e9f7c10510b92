"""Julian date and sidereal time utilities.

Calendar <-> Julian date conversions use the split representation of the
SGP4 reference code: a Julian date ``jd`` at a midnight (``.5``) boundary plus
a separate day fraction ``jd_frac``. Keeping the fraction separate preserves
sub-millisecond precision that a single float64 Julian date cannot hold.

These run at Python time on Python floats; they are used to build element
sets and to convert absolute times into minutes since an element-set epoch.

References:

    1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*,
       2013, Alg. 14 and Alg. 22.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from math import floor, fmod

from .constants import (
    DAYS_PER_JULIAN_CENTURY,
    DEG2RAD,
    JD_J2000,
    JD_SGP4_EPOCH0,
    SECONDS_PER_DAY,
    TWO_PI,
)

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def jday(
    year: int | datetime,
    mon: int = 1,
    day: int = 1,
    hr: int = 0,
    minute: int = 0,
    sec: float = 0.0,
) -> tuple[float, float]:
    """Convert a calendar date to a split Julian date.

    Accepts either calendar components or a single :class:`datetime`. A
    naive ``datetime`` is taken to be UTC; an aware one is converted to UTC
    first. Microseconds are carried into the day fraction.

    Args:
        year: Four-digit year, or a ``datetime``.
        mon: Month (1-12).
        day: Day of month (1-31).
        hr: Hour (0-23).
        minute: Minute (0-59).
        sec: Seconds, including any fractional part.

    Returns:
        tuple[float, float]: ``(jd, jd_frac)`` where ``jd`` falls on a
        midnight boundary and ``jd_frac`` is the fraction of the day.

    Examples:
        ```python
        from orbitjax.time import jday
        jd, fr = jday(1995, 10, 9, 12, 0, 0.0)
        # jd == 2449999.5, fr == 0.5
        ```
    """
    if isinstance(year, datetime):
        dt = year
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc)
        year, mon, day = dt.year, dt.month, dt.day
        hr, minute = dt.hour, dt.minute
        sec = dt.second + dt.microsecond * 1e-6

    jd = (
        367.0 * year
        - floor(7 * (year + floor((mon + 9) / 12.0)) * 0.25)
        + floor(275 * mon / 9.0)
        + day
        + 1721013.5
    )
    jd_frac = (sec + minute * 60.0 + hr * 3600.0) / SECONDS_PER_DAY

    # Fold whole days out of the fraction
    if abs(jd_frac) > 1.0:
        dtt = floor(jd_frac)
        jd = jd + dtt
        jd_frac = jd_frac - dtt

    return jd, jd_frac


def days2mdhms(year: int, days: float) -> tuple[int, int, int, int, float]:
    """Convert a day-of-year to month, day, hour, minute and second.

    Args:
        year: Four-digit year (selects the February length).
        days: Day of year with fraction, where ``1.0`` is January 1 00:00.

    Returns:
        tuple: ``(mon, day, hr, minute, sec)``.
    """
    lmonth = list(_DAYS_IN_MONTH)
    if year % 4 == 0:
        lmonth[1] = 29

    dayofyr = int(floor(days))

    i = 1
    inttemp = 0
    while dayofyr > inttemp + lmonth[i - 1] and i < 12:
        inttemp = inttemp + lmonth[i - 1]
        i += 1

    mon = i
    day = dayofyr - inttemp

    temp = (days - dayofyr) * 24.0
    hr = int(floor(temp))
    temp = (temp - hr) * 60.0
    minute = int(floor(temp))
    sec = (temp - minute) * 60.0

    return mon, day, hr, minute, sec


def invjday(jd: float, jd_frac: float = 0.0) -> tuple[int, int, int, int, int, float]:
    """Convert a split Julian date back to calendar components.

    Whole days in ``jd_frac`` and any non-midnight part of ``jd`` are
    normalized before conversion, so ``invjday(jd + fr, 0.0)`` and
    ``invjday(jd, fr)`` describe the same instant.

    Args:
        jd: Julian date.
        jd_frac: Fraction of a day to add to ``jd``.

    Returns:
        tuple: ``(year, mon, day, hr, minute, sec)``.

    Examples:
        ```python
        from orbitjax.time import invjday
        invjday(2450000.0, 0.0)
        # (1995, 10, 9, 12, 0, 0.0)
        ```
    """
    if abs(jd_frac) >= 1.0:
        jd = jd + floor(jd_frac)
        jd_frac = jd_frac - floor(jd_frac)

    dt = jd - floor(jd) - 0.5
    if abs(dt) > 0.00000001:
        jd = jd - dt
        jd_frac = jd_frac + dt

    temp = jd - 2415019.5
    tu = temp / 365.25
    year = 1900 + int(floor(tu))
    leapyrs = floor((year - 1901) * 0.25)
    days = floor(temp - ((year - 1900) * 365.0 + leapyrs))

    # Beginning of a year
    if days + jd_frac < 1.0:
        year = year - 1
        leapyrs = floor((year - 1901) * 0.25)
        days = floor(temp - ((year - 1900) * 365.0 + leapyrs))

    mon, day, hr, minute, sec = days2mdhms(year, days + jd_frac)
    return year, mon, day, hr, minute, sec


def jd_to_datetime(jd: float, jd_frac: float = 0.0) -> datetime:
    """Convert a split Julian date to a UTC-aware ``datetime``.

    Args:
        jd: Julian date.
        jd_frac: Fraction of a day to add to ``jd``.

    Returns:
        datetime: The corresponding instant, rounded to the microsecond.
    """
    year, mon, day, hr, minute, sec = invjday(jd, jd_frac)
    base = datetime(year, mon, day, hr, minute, tzinfo=timezone.utc)
    return base + timedelta(microseconds=round(sec * 1e6))


def gstime(jdut1: float) -> float:
    """Greenwich mean sidereal time from a UT1 Julian date (IAU-82).

    Args:
        jdut1: Julian date in UT1.

    Returns:
        float: Greenwich mean sidereal time in ``[0, 2pi)`` [rad].

    References:

        1. D. Vallado, *Fundamentals of Astrodynamics and Applications*, 2013, Eq. 3-45.
    """
    tut1 = (jdut1 - JD_J2000) / DAYS_PER_JULIAN_CENTURY
    temp = (
        -6.2e-6 * tut1 * tut1 * tut1
        + 0.093104 * tut1 * tut1
        + (876600.0 * 3600 + 8640184.812866) * tut1
        + 67310.54841
    )
    # 360/86400 = 1/240, seconds of time to radians
    temp = fmod(temp * DEG2RAD / 240.0, TWO_PI)
    if temp < 0.0:
        temp += TWO_PI
    return temp


def gstime_afspc(epoch: float) -> float:
    """Greenwich sidereal time using the legacy AFSPC 1970-based formula.

    Args:
        epoch: Days since 1949 December 31 00:00 UT.

    Returns:
        float: Greenwich sidereal time in ``[0, 2pi)`` [rad].
    """
    ts70 = epoch - 7305.0
    ds70 = floor(ts70 + 1.0e-8)
    tfrac = ts70 - ds70
    c1 = 1.72027916940703639e-2
    thgr70 = 1.7321343856509374
    fk5r = 5.07551419432269442e-15
    c1p2p = c1 + TWO_PI
    gsto = fmod(thgr70 + c1 * ds70 + c1p2p * tfrac + ts70 * ts70 * fk5r, TWO_PI)
    if gsto < 0.0:
        gsto = gsto + TWO_PI
    return gsto


def sgp4_epoch(jd: float, jd_frac: float = 0.0) -> float:
    """Days since 1949 December 31 00:00 UT, the SGP4 epoch day count.

    Args:
        jd: Julian date.
        jd_frac: Fraction of a day to add to ``jd``.

    Returns:
        float: Days since the SGP4 epoch origin.
    """
    return jd + jd_frac - JD_SGP4_EPOCH0

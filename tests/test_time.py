from datetime import datetime, timedelta, timezone
from math import pi

import pytest
from sgp4.api import jday as sgp4_jday

from orbitjax.time import (
    days2mdhms,
    gstime,
    gstime_afspc,
    invjday,
    jd_to_datetime,
    jday,
    sgp4_epoch,
)


def test_jday_reference_date():
    assert jday(1995, 10, 9, 12, 0, 0) == (2449999.5, 0.5)


def test_jday_j2000():
    jd, fr = jday(2000, 1, 1, 12, 0, 0.0)
    assert jd + fr == 2451545.0


def test_jday_matches_sgp4():
    expected = sgp4_jday(2022, 8, 25, 4, 0, 0.0)
    assert jday(2022, 8, 25, 4, 0, 0.0) == pytest.approx(expected, abs=1e-12)


def test_jday_from_datetime():
    dt = datetime(2022, 8, 25, 4, 0, 0, 500000, tzinfo=timezone.utc)
    jd, fr = jday(dt)
    assert jd == 2459816.5
    assert fr == pytest.approx((4 * 3600 + 0.5) / 86400.0, abs=1e-15)


def test_jday_naive_datetime_is_utc():
    naive = datetime(2022, 8, 25, 4, 0, 0)
    aware = datetime(2022, 8, 25, 4, 0, 0, tzinfo=timezone.utc)
    assert jday(naive) == jday(aware)


def test_jday_converts_timezone():
    local = datetime(2022, 8, 25, 6, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert jday(local) == jday(2022, 8, 25, 4, 0, 0.0)


def test_invjday_reference_date():
    year, mon, day, hr, minute, sec = invjday(2450000.0, 0.0)
    assert (year, mon, day, hr, minute) == (1995, 10, 9, 12, 0)
    assert sec == pytest.approx(0.0, abs=1e-6)


def test_invjday_split_and_combined_agree():
    split = invjday(2459816.5, 0.25)
    combined = invjday(2459816.75, 0.0)
    assert split[:5] == combined[:5] == (2022, 8, 25, 6, 0)
    assert split[5] == pytest.approx(combined[5], abs=1e-3)


def test_invjday_whole_days_in_fraction():
    year, mon, day, hr, minute, _ = invjday(2459815.5, 1.25)
    assert (year, mon, day, hr, minute) == (2022, 8, 25, 6, 0)


@pytest.mark.parametrize(
    "date",
    [
        (2000, 1, 1, 0, 0, 0.0),
        (2000, 2, 29, 23, 59, 59.999),
        (2008, 9, 20, 12, 25, 40.104),
        (2022, 12, 31, 18, 30, 15.25),
        (1957, 10, 4, 19, 28, 34.0),
    ],
)
def test_round_trip_millisecond(date):
    year, mon, day, hr, minute, sec = invjday(*jday(*date))
    assert (year, mon, day, hr, minute) == date[:5]
    assert sec == pytest.approx(date[5], abs=1e-3)


def test_days2mdhms_leap_year():
    mon, day, hr, minute, sec = days2mdhms(2008, 264.51782528)
    assert (mon, day, hr, minute) == (9, 20, 12, 25)
    assert sec == pytest.approx(40.104192, abs=1e-3)


def test_days2mdhms_non_leap_year():
    assert days2mdhms(2022, 60.0)[:2] == (3, 1)
    assert days2mdhms(2024, 60.0)[:2] == (2, 29)


def test_jd_to_datetime():
    dt = jd_to_datetime(2449999.5, 0.5)
    assert dt == datetime(1995, 10, 9, 12, 0, 0, tzinfo=timezone.utc)


def test_gstime_range():
    for jd in (2451545.0, 2454730.017, 2459783.969):
        theta = gstime(jd)
        assert 0.0 <= theta < 2.0 * pi


def test_gstime_vallado_example():
    # Vallado Example 3-5: 1992 Aug 20 12:14 UT1 -> 152.578788 deg
    jd, fr = jday(1992, 8, 20, 12, 14, 0.0)
    assert gstime(jd + fr) * 180.0 / pi == pytest.approx(152.578788, abs=1e-5)


def test_gstime_afspc_close_to_iau82():
    jd, fr = jday(2006, 6, 25, 7, 58, 18.6)
    assert gstime_afspc(sgp4_epoch(jd, fr)) == pytest.approx(gstime(jd + fr), abs=1e-5)


def test_sgp4_epoch_origin():
    assert sgp4_epoch(2433281.5, 0.0) == 0.0
    assert sgp4_epoch(2433281.5, 0.25) == 0.25

"""Tests for TLE reading, checksums and gravity constants."""

from math import pi, sqrt

import pytest
from sgp4.api import WGS72 as SGP4_WGS72
from sgp4.api import Satrec

from orbitjax.sgp4 import (
    GRAVITY_MODELS,
    WGS72,
    WGS72OLD,
    WGS84,
    SGP4Elements,
    compute_checksum,
    parse_tle,
    validate_tle_line,
)
from orbitjax.sgp4._constants import resolve_gravity
from orbitjax.sgp4._tle import _epoch_to_jd, _implied_decimal

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

POLAR_LINE1 = "1     1U          20  1.00000000  .00000000  00000-0  00000-0 0    07"
POLAR_LINE2 = "2     1  90.0000   0.0000 0010000   0.0000   0.0000 15.21936719    07"

MOLNIYA_L1 = "1 08195U 75081A   06176.33215444  .00000099  00000-0  11873-3 0   813"
MOLNIYA_L2 = "2 08195  64.1586 279.0717 6877146 264.7651  20.2257  2.00491383225656"


def _with_checksum(line: str) -> str:
    """Replace the checksum column of a 69-character line."""
    return line[:68] + str(compute_checksum(line))


class TestEarthGravityConstants:
    """Gravity constant sets match the reference sgp4 library."""

    def test_wgs72old_values(self) -> None:
        assert WGS72OLD.mu == 398600.79964
        assert WGS72OLD.radiusearthkm == 6378.135
        assert WGS72OLD.xke == 0.0743669161
        assert WGS72OLD.j2 == 0.001082616

    def test_wgs72_values(self) -> None:
        assert WGS72.mu == 398600.8
        assert WGS72.radiusearthkm == 6378.135
        assert WGS72.xke == pytest.approx(60.0 / sqrt(6378.135**3 / 398600.8), rel=1e-14)
        assert WGS72.j4 == -0.00000165597

    def test_wgs84_values(self) -> None:
        assert WGS84.mu == 398600.5
        assert WGS84.radiusearthkm == 6378.137
        assert WGS84.j2 == 0.00108262998905
        assert WGS84.j3 == -0.00000253215306

    @pytest.mark.parametrize("gravity", [WGS72OLD, WGS72, WGS84])
    def test_derived_quantities(self, gravity) -> None:
        assert gravity.tumin == pytest.approx(1.0 / gravity.xke, rel=1e-14)
        assert gravity.j3oj2 == pytest.approx(gravity.j3 / gravity.j2, rel=1e-14)

    def test_resolve_by_name(self) -> None:
        assert resolve_gravity("wgs72") is WGS72
        assert resolve_gravity("WGS84") is WGS84
        assert resolve_gravity(WGS72OLD) is WGS72OLD
        assert set(GRAVITY_MODELS) == {"wgs72old", "wgs72", "wgs84"}

    def test_resolve_unknown_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown gravity model"):
            resolve_gravity("grs80")


class TestChecksum:
    """Test TLE checksum computation."""

    @pytest.mark.parametrize(
        "line", [ISS_LINE1, ISS_LINE2, POLAR_LINE1, POLAR_LINE2, MOLNIYA_L1, MOLNIYA_L2]
    )
    def test_checksum_matches_last_column(self, line) -> None:
        assert compute_checksum(line) == int(line[68])

    def test_minus_counts_one_and_plus_zero(self) -> None:
        assert compute_checksum("-" * 68) == 68 % 10
        assert compute_checksum("+" * 68) == 0

    def test_letters_and_spaces_ignored(self) -> None:
        assert compute_checksum("1 ABC" + " " * 63) == 1


class TestValidateTleLine:
    """Test line-level validation."""

    def test_valid_lines(self) -> None:
        validate_tle_line(ISS_LINE1, 1)
        validate_tle_line(ISS_LINE2, 2)

    def test_trailing_whitespace_allowed(self) -> None:
        validate_tle_line(ISS_LINE1 + "  \n", 1)

    def test_too_short_raises(self) -> None:
        with pytest.raises(ValueError, match="too short"):
            validate_tle_line(ISS_LINE1[:60], 1)

    def test_wrong_line_number_raises(self) -> None:
        with pytest.raises(ValueError, match="does not start with"):
            validate_tle_line(ISS_LINE2, 1)

    def test_non_digit_checksum_raises(self) -> None:
        with pytest.raises(ValueError, match="non-digit checksum"):
            validate_tle_line(ISS_LINE1[:68] + "X", 1)

    def test_bad_checksum_raises(self) -> None:
        bad = ISS_LINE1[:68] + str((int(ISS_LINE1[68]) + 1) % 10)
        with pytest.raises(ValueError, match="checksum mismatch"):
            validate_tle_line(bad, 1)


class TestImpliedDecimal:
    """Test the ``+12345-6`` TLE exponent fields."""

    @pytest.mark.parametrize(
        "field, expected",
        [
            ("-11606-4", -0.11606e-4),
            (" 11873-3", 0.11873e-3),
            (" 00000-0", 0.0),
            (" 00000+0", 0.0),
            (" 00098-0", 0.00098),
            (" 00098-5", 9.8e-9),
            ("-00098-5", -9.8e-9),
            (" 23000-3", 0.00023),
            ("+61583-4", 0.61583e-4),
            ("        ", 0.0),
        ],
    )
    def test_values(self, field, expected) -> None:
        assert _implied_decimal(field) == pytest.approx(expected, rel=1e-12, abs=1e-30)


class TestEpoch:
    """Test the two-digit-year epoch conversion."""

    def test_iss_epoch_matches_reference(self) -> None:
        ref = Satrec.twoline2rv(ISS_LINE1, ISS_LINE2, SGP4_WGS72)
        jd, fr = _epoch_to_jd(8, 264.51782528)
        assert jd == ref.jdsatepoch
        assert fr == pytest.approx(ref.jdsatepochF, abs=1e-12)

    def test_year_pivot(self) -> None:
        jd_1957, _ = _epoch_to_jd(57, 1.0)
        jd_2056, _ = _epoch_to_jd(56, 1.0)
        assert jd_1957 == 2435839.5
        assert jd_2056 == 2471998.5

    def test_fraction_rounded_to_tle_precision(self) -> None:
        _, fr = _epoch_to_jd(22, 203.46960946)
        assert fr == round(fr, 8)


class TestParseTle:
    """Test TLE parsing into SGP4 mean elements."""

    def test_iss_matches_reference_sgp4(self) -> None:
        """Every parsed element matches the python-sgp4 library."""
        ref = Satrec.twoline2rv(ISS_LINE1, ISS_LINE2, SGP4_WGS72)
        elem = parse_tle(ISS_LINE1, ISS_LINE2)

        assert elem.classification == ref.classification
        assert elem.intldesg == ref.intldesg
        assert elem.epochyr == ref.epochyr
        assert elem.epochdays == pytest.approx(ref.epochdays, rel=1e-12)
        assert elem.bstar == pytest.approx(ref.bstar, rel=1e-10)
        assert elem.ndot == pytest.approx(ref.ndot, rel=1e-10)
        assert elem.nddot == pytest.approx(ref.nddot, abs=1e-20)
        assert elem.inclo == pytest.approx(ref.inclo, rel=1e-10)
        assert elem.nodeo == pytest.approx(ref.nodeo, rel=1e-10)
        assert elem.ecco == pytest.approx(ref.ecco, rel=1e-10)
        assert elem.argpo == pytest.approx(ref.argpo, rel=1e-10)
        assert elem.mo == pytest.approx(ref.mo, rel=1e-10)
        assert elem.no_kozai == pytest.approx(ref.no_kozai, rel=1e-10)
        assert elem.jdsatepoch == ref.jdsatepoch
        assert elem.jdsatepochF == pytest.approx(ref.jdsatepochF, abs=1e-12)

    def test_iss_catalog_fields(self) -> None:
        elem = parse_tle(ISS_LINE1, ISS_LINE2)
        assert elem.satnum_str == "25544"
        assert elem.classification == "U"
        assert elem.intldesg == "98067A"
        assert elem.epochyr == 8
        assert elem.elnum == 292
        assert elem.revnum == 56353
        assert elem.ephtype == 0

    def test_iss_units(self) -> None:
        elem = parse_tle(ISS_LINE1, ISS_LINE2)
        assert elem.inclo == pytest.approx(51.6416 * pi / 180.0, rel=1e-12)
        assert elem.no_kozai == pytest.approx(15.72125391 * 2.0 * pi / 1440.0, rel=1e-12)
        assert elem.bstar == pytest.approx(-0.11606e-4, rel=1e-12)

    def test_deep_space_elements(self) -> None:
        elem = parse_tle(MOLNIYA_L1, MOLNIYA_L2)
        assert elem.ecco == pytest.approx(0.6877146, rel=1e-12)
        assert elem.bstar == pytest.approx(0.11873e-3, rel=1e-12)
        assert elem.epochyr == 6

    def test_polar_orbit_blank_fields(self) -> None:
        elem = parse_tle(POLAR_LINE1, POLAR_LINE2)
        assert elem.satnum_str == "    1"
        assert elem.intldesg == ""
        assert elem.inclo == pytest.approx(0.5 * pi, rel=1e-12)
        assert elem.ecco == pytest.approx(0.001, rel=1e-12)
        assert elem.bstar == 0.0

    def test_year_1900s(self) -> None:
        modified = _with_checksum(ISS_LINE1[:18] + "99" + ISS_LINE1[20:])
        elem = parse_tle(modified, ISS_LINE2)
        assert elem.epochyr == 99
        assert elem.jdsatepoch < 2451544.5

    def test_mismatched_satnum_raises(self) -> None:
        bad_line2 = _with_checksum("2 99999" + ISS_LINE2[7:])
        with pytest.raises(ValueError, match="do not match"):
            parse_tle(ISS_LINE1, bad_line2)

    def test_malformed_field_raises(self) -> None:
        bad_line2 = _with_checksum(ISS_LINE2[:8] + " 51.6X16" + ISS_LINE2[16:])
        with pytest.raises(ValueError, match="Malformed TLE field"):
            parse_tle(ISS_LINE1, bad_line2)

    def test_swapped_lines_raise(self) -> None:
        with pytest.raises(ValueError):
            parse_tle(ISS_LINE2, ISS_LINE1)


class TestSGP4ElementsType:
    """Test the SGP4Elements dataclass."""

    def test_frozen_dataclass(self) -> None:
        elem = parse_tle(ISS_LINE1, ISS_LINE2)
        with pytest.raises(AttributeError):
            elem.ecco = 0.5

    def test_from_degrees_matches_tle(self) -> None:
        parsed = parse_tle(ISS_LINE1, ISS_LINE2)
        built = SGP4Elements.from_degrees(
            0.0006703,
            51.6416,
            247.4627,
            130.5360,
            325.0288,
            15.72125391,
            parsed.jdsatepoch,
            parsed.jdsatepochF,
            bstar=-0.11606e-4,
            ndot=-0.00002182,
        )
        for name in ("ecco", "inclo", "nodeo", "argpo", "mo", "no_kozai", "bstar", "ndot"):
            assert getattr(built, name) == pytest.approx(getattr(parsed, name), rel=1e-12)

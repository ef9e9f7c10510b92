"""
Minimal fixed-column Two-Line Element reader.

Converts a TLE pair into :class:`SGP4Elements` in SGP4 internal units
(radians, rad/min). Only reading is supported; TLEs are not formatted.
"""

from __future__ import annotations

from orbitjax.constants import DEG2RAD, MINUTES_PER_DAY, XPDOTP
from orbitjax.sgp4._types import SGP4Elements

_TLE_LINE_LENGTH = 69


def compute_checksum(line: str) -> int:
    """Compute the TLE checksum for a line.

    The checksum is the sum of all digit characters plus 1 for each
    minus sign, modulo 10, computed over the first 68 characters.

    Args:
        line: A TLE line string (at least 68 characters).

    Returns:
        The checksum digit (0-9).
    """
    return sum((int(c) if c.isdigit() else c == "-") for c in line[:68]) % 10


def validate_tle_line(line: str, line_number: int) -> None:
    """Validate a TLE line's length, line number and checksum.

    Args:
        line: A TLE line string.
        line_number: Expected line number (1 or 2).

    Raises:
        ValueError: If the line fails validation.
    """
    line = line.rstrip()

    if len(line) < _TLE_LINE_LENGTH:
        raise ValueError(
            f"TLE line {line_number} is too short "
            f"({len(line)} chars, expected {_TLE_LINE_LENGTH}): {line!r}"
        )
    if line[0] != str(line_number):
        raise ValueError(f"TLE line {line_number} does not start with '{line_number}': {line!r}")

    checksum_char = line[68]
    if not checksum_char.isdigit():
        raise ValueError(f"TLE line {line_number} has non-digit checksum: {line!r}")

    expected = compute_checksum(line)
    if expected != int(checksum_char):
        raise ValueError(
            f"TLE line {line_number} checksum mismatch: computed {expected}, "
            f"found {checksum_char}: {line!r}"
        )


def _implied_decimal(field: str) -> float:
    """Parse a TLE ``+12345-6`` field (implied leading decimal and exponent)."""
    field = field.strip()
    if not field:
        return 0.0
    sign = -1.0 if field[0] == "-" else 1.0
    body = field.lstrip("+-")
    mantissa = float("0." + body[:-2].strip())
    exponent = int(body[-2:])
    return sign * mantissa * 10.0**exponent


def _epoch_to_jd(two_digit_year: int, epochdays: float) -> tuple[float, float]:
    """Split Julian date of a TLE epoch.

    Years 57-99 are 1957-1999 and 00-56 are 2000-2056.
    """
    year = two_digit_year + (2000 if two_digit_year < 57 else 1900)
    days_int, fraction = divmod(epochdays, 1.0)
    jd = year * 365 + (year - 1) // 4 + int(days_int) + 1721044.5
    return jd, round(fraction, 8)


def parse_tle(line1: str, line2: str) -> SGP4Elements:
    """Parse a Two-Line Element set into SGP4 mean elements.

    Angles are converted to radians and mean motion and its derivatives
    to rad/min, rad/min^2 and rad/min^3.

    Args:
        line1: First TLE line (69 characters including checksum).
        line2: Second TLE line (69 characters including checksum).

    Returns:
        SGP4Elements: Mean elements ready for ``sgp4_init``.

    Raises:
        ValueError: If either line fails validation, a field cannot be
            parsed, or the catalog numbers of the two lines differ.

    Examples:
        ```python
        from orbitjax.sgp4 import parse_tle
        el = parse_tle(
            "1 25544U 98067A   22203.46960946  .00004216  00000+0  81353-4 0  9990",
            "2 25544  51.6415 161.8339 0005168  35.9781  54.7009 15.50067047350657",
        )
        ```
    """
    validate_tle_line(line1, 1)
    validate_tle_line(line2, 2)
    l1 = line1.rstrip()
    l2 = line2.rstrip()

    satnum_str = l1[2:7]
    if satnum_str != l2[2:7]:
        raise ValueError(
            f"Catalog numbers of TLE lines do not match: {satnum_str!r} != {l2[2:7]!r}"
        )

    try:
        two_digit_year = int(l1[18:20])
        epochdays = float(l1[20:32])
        ndot_revs = float(l1[33:43])
        nddot_revs = _implied_decimal(l1[44:52])
        bstar = _implied_decimal(l1[53:61])
        ephtype = int(l1[62].strip() or "0")
        elnum = int(l1[64:68])

        incl_deg = float(l2[8:16])
        raan_deg = float(l2[17:25])
        ecco = float("0." + l2[26:33].replace(" ", "0"))
        argp_deg = float(l2[34:42])
        mean_anomaly_deg = float(l2[43:51])
        mean_motion_revs = float(l2[52:63])
        revnum = int(l2[63:68].strip() or "0")
    except ValueError as exc:
        raise ValueError(f"Malformed TLE field in satellite {satnum_str!r}: {exc}") from exc

    jd, jd_frac = _epoch_to_jd(two_digit_year, epochdays)

    return SGP4Elements(
        ecco=ecco,
        inclo=incl_deg * DEG2RAD,
        nodeo=raan_deg * DEG2RAD,
        argpo=argp_deg * DEG2RAD,
        mo=mean_anomaly_deg * DEG2RAD,
        no_kozai=mean_motion_revs / XPDOTP,
        jdsatepoch=jd,
        jdsatepochF=jd_frac,
        bstar=bstar,
        ndot=ndot_revs / (XPDOTP * MINUTES_PER_DAY),
        nddot=nddot_revs / (XPDOTP * MINUTES_PER_DAY * MINUTES_PER_DAY),
        satnum_str=satnum_str,
        classification=l1[7].strip() or "U",
        intldesg=l1[9:17].rstrip(),
        epochyr=two_digit_year,
        epochdays=epochdays,
        ephtype=ephtype,
        elnum=elnum,
        revnum=revnum,
    )

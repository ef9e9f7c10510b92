"""
Data types for the SGP4/SDP4 propagator.

- :class:`SGP4Elements`: mean elements of one element set, in SGP4
  internal units (plain frozen dataclass, not a pytree).
- :class:`OpsMode`, :class:`Regime`, :class:`Resonance`: classifications
  fixed at initialization.
- :class:`SGP4ErrorCode` and :class:`SGP4Error`: the six propagation
  failure conditions.
- :class:`ResonanceState`, :class:`PropagationResult`, :class:`SGP4Init`:
  values produced by initialization and propagation.

``ResonanceState`` and ``PropagationResult`` are :class:`~typing.NamedTuple`
instances, which JAX treats as pytrees automatically, so they pass through
``jax.jit``, ``jax.vmap`` and ``jax.lax`` control flow unchanged.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from orbitjax.constants import DEG2RAD, MINUTES_PER_DAY, XPDOTP


@dataclass(frozen=True)
class SGP4Elements:
    """Mean orbital elements of one element set.

    A plain Python dataclass (not a JAX pytree). Angles are in radians and
    mean motion in rad/min, the units SGP4 works in; build from degrees
    and rev/day with :meth:`from_degrees`, or from TLE text with
    :func:`~orbitjax.sgp4.parse_tle`.

    Attributes:
        ecco: Eccentricity [dimensionless].
        inclo: Inclination [rad].
        nodeo: Right ascension of ascending node [rad].
        argpo: Argument of perigee [rad].
        mo: Mean anomaly [rad].
        no_kozai: Mean motion (Kozai) [rad/min].
        jdsatepoch: Julian date of epoch (whole days, at a ``.5`` boundary).
        jdsatepochF: Julian date of epoch (fractional day).
        bstar: B* drag coefficient [1/earth_radii].
        ndot: First derivative of mean motion divided by 2 [rad/min^2].
        nddot: Second derivative of mean motion divided by 6 [rad/min^3].
        satnum_str: Satellite catalog number as a string (e.g. ``'25544'``).
        classification: Classification character (``'U'``, ``'C'``, or ``'S'``).
        intldesg: International designator (e.g. ``'98067A'``).
        epochyr: Two-digit epoch year (0-99).
        epochdays: Day of year with fractional day.
        ephtype: Ephemeris type (typically 0).
        elnum: Element set number.
        revnum: Revolution number at epoch.
    """

    ecco: float
    inclo: float
    nodeo: float
    argpo: float
    mo: float
    no_kozai: float
    jdsatepoch: float
    jdsatepochF: float = 0.0
    bstar: float = 0.0
    ndot: float = 0.0
    nddot: float = 0.0
    satnum_str: str = ""
    classification: str = "U"
    intldesg: str = ""
    epochyr: int = 0
    epochdays: float = 0.0
    ephtype: int = 0
    elnum: int = 0
    revnum: int = 0

    @classmethod
    def from_degrees(
        cls,
        ecc: float,
        incl: float,
        raan: float,
        argp: float,
        mean_anomaly: float,
        mean_motion: float,
        jd: float,
        jd_frac: float = 0.0,
        bstar: float = 0.0,
        ndot: float = 0.0,
        nddot: float = 0.0,
        **metadata,
    ) -> SGP4Elements:
        """Build elements from user units.

        Args:
            ecc: Eccentricity.
            incl: Inclination [deg].
            raan: Right ascension of ascending node [deg].
            argp: Argument of perigee [deg].
            mean_anomaly: Mean anomaly [deg].
            mean_motion: Mean motion (Kozai) [rev/day].
            jd: Julian date of epoch.
            jd_frac: Fraction of a day to add to ``jd``.
            bstar: B* drag coefficient [1/earth_radii].
            ndot: First derivative of mean motion divided by 2 [rev/day^2].
            nddot: Second derivative of mean motion divided by 6 [rev/day^3].
            **metadata: Catalog fields (``satnum_str``, ``intldesg``, ...).

        Returns:
            SGP4Elements: Elements in SGP4 internal units.

        Examples:
            ```python
            from orbitjax.sgp4 import SGP4Elements
            from orbitjax.time import jday
            jd, fr = jday(2022, 7, 22, 11, 16, 14.257)
            el = SGP4Elements.from_degrees(0.0005168, 51.6415, 161.8339,
                                           35.9781, 54.7009, 15.50067047,
                                           jd, fr, bstar=6.1583e-5)
            ```
        """
        return cls(
            ecco=ecc,
            inclo=incl * DEG2RAD,
            nodeo=raan * DEG2RAD,
            argpo=argp * DEG2RAD,
            mo=mean_anomaly * DEG2RAD,
            no_kozai=mean_motion / XPDOTP,
            jdsatepoch=jd,
            jdsatepochF=jd_frac,
            bstar=bstar,
            ndot=ndot / (XPDOTP * MINUTES_PER_DAY),
            nddot=nddot / (XPDOTP * MINUTES_PER_DAY * MINUTES_PER_DAY),
            **metadata,
        )


class OpsMode(str, enum.Enum):
    """Operational mode of the propagator.

    ``IMPROVED`` computes sidereal time at epoch with the IAU-82 formula.
    ``AFSPC`` reproduces the legacy AFSPC code: the 1970-based sidereal
    time and non-negative node angles in the Lyddane periodics.
    """

    AFSPC = "a"
    IMPROVED = "i"

    def __str__(self) -> str:
        return _OPSMODE_DISPLAY[self]

    def __repr__(self) -> str:
        return f"OpsMode.{_OPSMODE_DISPLAY[self]}"


_OPSMODE_DISPLAY = {
    OpsMode.AFSPC: "AFSPC",
    OpsMode.IMPROVED: "Improved",
}


class Regime(enum.IntEnum):
    """Propagation regime, fixed at initialization.

    Attributes:
        NEAR_EARTH: Un-Kozai'd period below 225 minutes (SGP4).
        DEEP_SPACE: Period of 225 minutes or more (SDP4 lunar/solar terms).
    """

    NEAR_EARTH = 0
    DEEP_SPACE = 1


class Resonance(enum.IntEnum):
    """Deep-space resonance class, fixed at initialization.

    Values match the ``irez`` flag of the reference implementation.

    Attributes:
        NONE: No resonance integration.
        SYNCHRONOUS: ~24 h geosynchronous resonance.
        HALF_DAY: ~12 h resonance of eccentric orbits.
    """

    NONE = 0
    SYNCHRONOUS = 1
    HALF_DAY = 2


class SGP4ErrorCode(enum.IntEnum):
    """Error code of an SGP4 initialization or propagation.

    Codes 1, 2 and 5 detected at initialization are permanent for the
    satellite. Codes 3, 4, 6 and the propagation-time form of 2 depend on
    the requested time.
    """

    NONE = 0
    MEAN_ELEMENTS_INVALID = 1
    MEAN_MOTION_NOT_POSITIVE = 2
    PERTURBED_ELEMENTS_INVALID = 3
    SEMI_LATUS_RECTUM_NEGATIVE = 4
    EPOCH_ELEMENTS_SUBORBITAL = 5
    SATELLITE_DECAYED = 6

    @property
    def message(self) -> str:
        """Human-readable description of the condition."""
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES = {
    SGP4ErrorCode.NONE: "no error",
    SGP4ErrorCode.MEAN_ELEMENTS_INVALID: "mean eccentricity is outside the range 0 <= e < 1",
    SGP4ErrorCode.MEAN_MOTION_NOT_POSITIVE: "mean motion has fallen to zero or below",
    SGP4ErrorCode.PERTURBED_ELEMENTS_INVALID: "perturbed eccentricity is outside the range 0 <= e <= 1",
    SGP4ErrorCode.SEMI_LATUS_RECTUM_NEGATIVE: "semi-latus rectum is below zero",
    SGP4ErrorCode.EPOCH_ELEMENTS_SUBORBITAL: "mean motion at epoch is not positive after un-Kozai",
    SGP4ErrorCode.SATELLITE_DECAYED: "satellite has decayed below the Earth's surface",
}


class SGP4Error(ValueError):
    """Raised by :meth:`PropagationResult.raise_for_error` for a failed result.

    Attributes:
        code: The :class:`SGP4ErrorCode` of the failure.
    """

    def __init__(self, code: int) -> None:
        self.code = SGP4ErrorCode(int(code))
        super().__init__(f"SGP4 error {int(self.code)}: {self.code.message}")


class ResonanceState(NamedTuple):
    """Deep-space resonance integration cursor.

    The resonance integrator advances from epoch in fixed 720-minute steps;
    the cursor records the last step reached so later calls can continue
    from it. ``atime == 0`` means "at epoch".

    Attributes:
        atime: Time of the cursor [min since epoch].
        xni: Integrated mean motion at ``atime`` [rad/min].
        xli: Integrated resonance longitude at ``atime`` [rad].
    """

    atime: Array
    xni: Array
    xli: Array


class PropagationResult(NamedTuple):
    """Position and velocity in TEME, with the error code of the call.

    When ``error != 0`` both vectors are ``nan``.

    Attributes:
        r: Position [km].
        v: Velocity [km/s].
        error: Integer :class:`SGP4ErrorCode` value.
    """

    r: Array
    v: Array
    error: Array

    @property
    def ok(self) -> Array:
        """``True`` where the propagation succeeded."""
        return self.error == 0

    def raise_for_error(self) -> PropagationResult:
        """Raise :class:`SGP4Error` if this (scalar) result failed.

        Returns:
            PropagationResult: ``self``, for chaining.

        Raises:
            SGP4Error: If ``error`` is non-zero.
        """
        code = int(jnp.max(jnp.asarray(self.error)))
        if code != 0:
            raise SGP4Error(code)
        return self


class SGP4Init(NamedTuple):
    """Result of :func:`~orbitjax.sgp4.sgp4_init`.

    Attributes:
        params: Flat parameter array of derived coefficients.
        regime: Near-earth or deep-space.
        resonance: Deep-space resonance class.
        error: Error code of the initial propagation at ``t = 0``.
            Codes 1, 2 and 5 are permanent.
        state: Resonance cursor at epoch.
    """

    params: Array
    regime: Regime
    resonance: Resonance
    error: SGP4ErrorCode
    state: ResonanceState

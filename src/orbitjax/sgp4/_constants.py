"""
Earth gravity constant sets and fixed numeric constants of SGP4/SDP4.

Provides three standard gravity models: WGS72OLD, WGS72 (standard), and WGS84.
Values match the reference ``sgp4`` Python library exactly. The remaining
constants are the fixed numbers of the theory (deep-space thresholds,
resonance integrator steps, lunar/solar mean-element constants) shared by
the initializer and the propagation kernels.
"""

from __future__ import annotations

from math import pi, sqrt
from typing import NamedTuple


class EarthGravity(NamedTuple):
    """Earth gravity model constants for SGP4 propagation.

    Attributes:
        tumin: Time units per minute (1/xke).
        mu: Gravitational parameter [km^3/s^2].
        radiusearthkm: Earth equatorial radius [km].
        xke: Reciprocal of tumin (sqrt(GM) in SGP4 time units).
        j2: Second zonal harmonic.
        j3: Third zonal harmonic.
        j4: Fourth zonal harmonic.
        j3oj2: Ratio j3/j2.
    """

    tumin: float
    mu: float
    radiusearthkm: float
    xke: float
    j2: float
    j3: float
    j4: float
    j3oj2: float


def _gravity(mu: float, re: float, xke: float, j2: float, j3: float, j4: float) -> EarthGravity:
    return EarthGravity(
        tumin=1.0 / xke,
        mu=mu,
        radiusearthkm=re,
        xke=xke,
        j2=j2,
        j3=j3,
        j4=j4,
        j3oj2=j3 / j2,
    )


WGS72OLD = _gravity(
    mu=398600.79964,
    re=6378.135,
    xke=0.0743669161,
    j2=0.001082616,
    j3=-0.00000253881,
    j4=-0.00000165597,
)
"""WGS 72 Old gravity model (legacy, truncated ``xke``)."""

WGS72 = _gravity(
    mu=398600.8,
    re=6378.135,
    xke=60.0 / sqrt(6378.135**3 / 398600.8),
    j2=0.001082616,
    j3=-0.00000253881,
    j4=-0.00000165597,
)
"""WGS 72 gravity model (standard for SGP4)."""

WGS84 = _gravity(
    mu=398600.5,
    re=6378.137,
    xke=60.0 / sqrt(6378.137**3 / 398600.5),
    j2=0.00108262998905,
    j3=-0.00000253215306,
    j4=-0.00000161098761,
)
"""WGS 84 gravity model."""

GRAVITY_MODELS = {
    "wgs72old": WGS72OLD,
    "wgs72": WGS72,
    "wgs84": WGS84,
}
"""Mapping of gravity model names to ``EarthGravity`` instances."""


def resolve_gravity(gravity: str | EarthGravity) -> EarthGravity:
    """Return the ``EarthGravity`` for a model name or instance.

    Args:
        gravity: Gravity model name (``'wgs72old'``, ``'wgs72'``,
            ``'wgs84'``, case-insensitive) or an ``EarthGravity`` instance.

    Returns:
        EarthGravity: The selected constant set.

    Raises:
        ValueError: If ``gravity`` is an unknown model name.
    """
    if isinstance(gravity, EarthGravity):
        return gravity
    try:
        return GRAVITY_MODELS[gravity.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown gravity model {gravity!r}. Must be one of: "
            f"{', '.join(GRAVITY_MODELS)}"
        ) from None


# Theory constants

TWO_PI = 2.0 * pi
X2O3 = 2.0 / 3.0

TEMP4 = 1.5e-12
"""Divisor replacing ``1 + cos(i)`` for inclinations within 1.5e-12 of 180 deg."""

DEEP_SPACE_PERIOD = 225.0
"""Un-Kozai'd orbital period [min] at or above which an orbit is deep-space."""

SIMPLE_DRAG_PERIGEE = 220.0
"""Perigee altitude [km] below which the simplified drag model is used."""

LOW_PERIGEE = 156.0
"""Perigee altitude [km] below which ``s`` and ``qoms2t`` are adjusted."""

VERY_LOW_PERIGEE = 98.0
"""Perigee altitude [km] below which ``s`` is fixed at 20 km."""

ECC_SMALL = 1.0e-4
"""Eccentricity at or below which ``cc3`` and ``xmcof`` are zero."""

ECC_FLOOR = 1.0e-6
"""Lower bound applied to the secularly perturbed eccentricity."""

ECC_TOLERANCE = -0.001
"""Most negative secularly perturbed eccentricity accepted."""

LYDDANE_INCLINATION = 0.2
"""Inclination [rad] below which lunar/solar periodics use the Lyddane form."""

SHALLOW_INCLINATION = 5.2359877e-2
"""Inclination [rad] (3 deg) below which lunar/solar node terms are zeroed."""

KEPLER_MAX_ITER = 10
KEPLER_TOL = 1.0e-12
KEPLER_MAX_STEP = 0.95

# Resonance bands on the un-Kozai'd mean motion [rad/min]
SYNC_NM_LOW = 0.0034906585
SYNC_NM_HIGH = 0.0052359877
HALF_DAY_NM_LOW = 8.26e-3
HALF_DAY_NM_HIGH = 9.24e-3
HALF_DAY_ECC_MIN = 0.5

STEPP = 720.0
"""Resonance integrator step [min]."""

STEP2 = 259200.0
"""Half the squared integrator step, ``STEPP**2 / 2`` [min^2]."""

RPTIM = 4.37526908801129966e-3
"""Earth rotation rate [rad/min]."""

# Solar and lunar mean-element constants
ZES = 0.01675
ZEL = 0.05490
ZNS = 1.19459e-5
ZNL = 1.5835218e-4
C1SS = 2.9864797e-6
C1L = 4.7968065e-7
ZSINIS = 0.39785416
ZCOSIS = 0.91744867
ZCOSGS = 0.1945905
ZSINGS = -0.98088458

# Resonance coefficients
Q22 = 1.7891679e-6
Q31 = 2.1460748e-6
Q33 = 2.2123015e-7
ROOT22 = 1.7891679e-6
ROOT32 = 3.7393792e-7
ROOT44 = 7.3636953e-9
ROOT52 = 1.1428639e-7
ROOT54 = 2.1765803e-9

FASX2 = 0.13130908
FASX4 = 2.8843198
FASX6 = 0.37448087
G22 = 5.7686396
G32 = 0.95240898
G44 = 1.8014998
G52 = 1.0508330
G54 = 4.4108898

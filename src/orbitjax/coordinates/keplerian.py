"""Keplerian orbital elements <-> inertial Cartesian state conversions.

Converts between position/velocity vectors and the classical element set
``(p, a, e, i, RAAN, omega, nu, M)`` including the alternate angles used
when an angle is undefined:

| Orbit type              | Undefined          | Alternate angle                 |
|-------------------------|--------------------|---------------------------------|
| elliptical inclined     | -                  | -                               |
| circular inclined       | omega, nu          | ``arglat`` argument of latitude |
| elliptical equatorial   | RAAN, omega        | ``lonper`` longitude of perigee |
| circular equatorial     | RAAN, omega, nu    | ``truelon`` true longitude      |

Undefined angles are returned as ``nan``. The conversions run at Python
time on Python floats and accept any unit system consistent with ``gm``
(SI with :data:`~orbitjax.constants.GM_EARTH` by default, km and km^3/s^2 for
SGP4 work).

References:
    1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*,
       2013, Alg. 9 (RV2COE) and Alg. 10 (COE2RV).
"""

from __future__ import annotations

from math import acos, asinh, atan2, cos, fmod, isnan, nan, pi, sin, sinh, sqrt, tan
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitjax.config import get_dtype
from orbitjax.constants import GM_EARTH
from orbitjax.rotations import perifocal_to_inertial

_SMALL = 1e-8
_TWO_PI = 2.0 * pi


class ClassicalElements(NamedTuple):
    """Classical orbital elements of a two-body orbit.

    Attributes:
        p: Semi-latus rectum [length].
        a: Semi-major axis [length]; ``inf`` for a parabola.
        ecc: Eccentricity [dimensionless].
        incl: Inclination [rad].
        raan: Right ascension of the ascending node [rad].
        argp: Argument of perigee [rad].
        nu: True anomaly [rad].
        m: Mean anomaly [rad] (or the alternate angle for circular orbits).
        arglat: Argument of latitude [rad], circular inclined orbits only.
        truelon: True longitude [rad], circular equatorial orbits only.
        lonper: Longitude of perigee [rad], elliptical equatorial orbits only.
    """

    p: float
    a: float
    ecc: float
    incl: float
    raan: float
    argp: float
    nu: float
    m: float
    arglat: float = nan
    truelon: float = nan
    lonper: float = nan


def _norm(x: list[float]) -> float:
    return sqrt(x[0] * x[0] + x[1] * x[1] + x[2] * x[2])


def _dot(x: list[float], y: list[float]) -> float:
    return x[0] * y[0] + x[1] * y[1] + x[2] * y[2]


def _cross(x: list[float], y: list[float]) -> list[float]:
    return [
        x[1] * y[2] - x[2] * y[1],
        x[2] * y[0] - x[0] * y[2],
        x[0] * y[1] - x[1] * y[0],
    ]


def _clamped_acos(c: float) -> float:
    return acos(max(-1.0, min(1.0, c)))


def _angle(x: list[float], y: list[float]) -> float:
    """Angle between two vectors, ``nan`` if either is degenerate."""
    mags = _norm(x) * _norm(y)
    if mags > _SMALL * _SMALL:
        return _clamped_acos(_dot(x, y) / mags)
    return nan


def anomaly_true_to_mean(nu: float, ecc: float) -> float:
    """Mean (or hyperbolic/parabolic) anomaly from true anomaly.

    Args:
        nu: True anomaly [rad].
        ecc: Eccentricity.

    Returns:
        float: Mean anomaly [rad], wrapped to ``[0, 2pi)`` for closed
        orbits. ``nan`` if ``nu`` is outside the asymptotes of a
        hyperbola or too close to 180 deg for a parabola.
    """
    m = nan
    if abs(ecc) < _SMALL:
        m = nu
    elif ecc < 1.0 - _SMALL:
        sine = sqrt(1.0 - ecc * ecc) * sin(nu) / (1.0 + ecc * cos(nu))
        cose = (ecc + cos(nu)) / (1.0 + ecc * cos(nu))
        e0 = atan2(sine, cose)
        m = e0 - ecc * sin(e0)
    elif ecc > 1.0 + _SMALL:
        if abs(nu) + 0.00001 < pi - acos(1.0 / ecc):
            sine = sqrt(ecc * ecc - 1.0) * sin(nu) / (1.0 + ecc * cos(nu))
            e0 = asinh(sine)
            m = ecc * sinh(e0) - e0
    elif abs(nu) < 168.0 * pi / 180.0:
        e0 = tan(nu * 0.5)
        m = e0 + e0 * e0 * e0 / 3.0

    if ecc < 1.0 and not isnan(m):
        m = fmod(m, _TWO_PI)
        if m < 0.0:
            m += _TWO_PI
    return m


def state_to_classical(
    r: ArrayLike,
    v: ArrayLike,
    gm: float = GM_EARTH,
) -> ClassicalElements:
    """Convert an inertial position/velocity to classical orbital elements.

    Args:
        r: Position vector ``[x, y, z]``.
        v: Velocity vector ``[vx, vy, vz]``.
        gm: Gravitational parameter in units consistent with ``r`` and ``v``.

    Returns:
        ClassicalElements: The osculating elements. Every field is ``nan``
        when the angular momentum vanishes (rectilinear motion).

    Examples:
        ```python
        from orbitjax.coordinates import state_to_classical
        coe = state_to_classical(
            [6524.834, 6862.875, 6448.296],
            [4.901327, 5.533756, -1.976341],
            gm=398600.4418,
        )
        # coe.ecc ~ 0.83285, coe.incl ~ 1.5336 rad
        ```
    """
    r = [float(x) for x in r]
    v = [float(x) for x in v]

    magr = _norm(r)
    magv = _norm(v)

    hbar = _cross(r, v)
    magh = _norm(hbar)
    if magh <= _SMALL:
        return ClassicalElements(nan, nan, nan, nan, nan, nan, nan, nan)

    nbar = [-hbar[1], hbar[0], 0.0]
    magn = _norm(nbar)
    c1 = magv * magv - gm / magr
    rdotv = _dot(r, v)
    ebar = [(c1 * r[i] - rdotv * v[i]) / gm for i in range(3)]
    ecc = _norm(ebar)

    sme = magv * magv * 0.5 - gm / magr
    a = -gm / (2.0 * sme) if abs(sme) > _SMALL else float("inf")
    p = magh * magh / gm

    incl = _clamped_acos(hbar[2] / magh)

    equatorial = incl < _SMALL or abs(incl - pi) < _SMALL
    circular = ecc < _SMALL

    raan = nan
    if magn > _SMALL:
        raan = _clamped_acos(nbar[0] / magn)
        if nbar[1] < 0.0:
            raan = _TWO_PI - raan

    argp = nan
    if not circular and not equatorial:
        argp = _angle(nbar, ebar)
        if ebar[2] < 0.0:
            argp = _TWO_PI - argp

    nu = nan
    if not circular:
        nu = _angle(ebar, r)
        if rdotv < 0.0:
            nu = _TWO_PI - nu

    m = nan
    arglat = nan
    if circular and not equatorial:
        arglat = _angle(nbar, r)
        if r[2] < 0.0:
            arglat = _TWO_PI - arglat
        m = arglat

    lonper = nan
    if not circular and equatorial:
        lonper = _clamped_acos(ebar[0] / ecc)
        if ebar[1] < 0.0:
            lonper = _TWO_PI - lonper
        if incl > 0.5 * pi:
            lonper = _TWO_PI - lonper

    truelon = nan
    if circular and equatorial and magr > _SMALL:
        truelon = _clamped_acos(r[0] / magr)
        if r[1] < 0.0:
            truelon = _TWO_PI - truelon
        if incl > 0.5 * pi:
            truelon = _TWO_PI - truelon
        m = truelon

    if not circular:
        m = anomaly_true_to_mean(nu, ecc)

    return ClassicalElements(
        p=p,
        a=a,
        ecc=ecc,
        incl=incl,
        raan=raan,
        argp=argp,
        nu=nu,
        m=m,
        arglat=arglat,
        truelon=truelon,
        lonper=lonper,
    )


def classical_to_state(
    coe: ClassicalElements,
    gm: float = GM_EARTH,
) -> tuple[Array, Array]:
    """Convert classical orbital elements to an inertial position/velocity.

    For circular or equatorial orbits the undefined angles are replaced by
    the alternate angle carried in ``coe`` (``arglat``, ``lonper`` or
    ``truelon``), so ``classical_to_state(state_to_classical(r, v))``
    reproduces ``(r, v)`` for every orbit type.

    Args:
        coe: Classical elements. Only ``p``, ``ecc``, ``incl``, ``raan``,
            ``argp``, ``nu`` and the relevant alternate angle are used.
        gm: Gravitational parameter in units consistent with ``p``.

    Returns:
        tuple[Array, Array]: Position and velocity vectors.
    """
    p = coe.p
    ecc = coe.ecc
    incl = coe.incl
    raan = coe.raan
    argp = coe.argp
    nu = coe.nu

    equatorial = incl < _SMALL or abs(incl - pi) < _SMALL
    if ecc < _SMALL:
        argp = 0.0
        if equatorial:
            raan = 0.0
            nu = coe.truelon
        else:
            nu = coe.arglat
    elif equatorial:
        raan = 0.0
        argp = coe.lonper

    cosnu = cos(nu)
    sinnu = sin(nu)
    temp = p / (1.0 + ecc * cosnu)
    r_pqw = jnp.array([temp * cosnu, temp * sinnu, 0.0], dtype=get_dtype())

    # Guard the velocity scale for rectilinear orbits
    if abs(p) < 0.0001:
        p = 0.0001
    scale = sqrt(gm / p)
    v_pqw = jnp.array([-sinnu * scale, (ecc + cosnu) * scale, 0.0], dtype=get_dtype())

    rot = perifocal_to_inertial(raan, incl, argp)
    return rot @ r_pqw, rot @ v_pqw


def anomaly_mean_to_true(m: float, ecc: float) -> float:
    """True anomaly from mean anomaly for a closed orbit.

    Newton-Raphson on Kepler's equation seeded at ``E0 = M`` (``E0 = pi``
    for ``e > 0.8``).

    Args:
        m: Mean anomaly [rad].
        ecc: Eccentricity, ``0 <= e < 1``.

    Returns:
        float: True anomaly [rad].
    """
    e0 = pi if ecc > 0.8 else m
    for _ in range(50):
        de = (e0 - ecc * sin(e0) - m) / (1.0 - ecc * cos(e0))
        e0 -= de
        if abs(de) < 1e-14:
            break
    return 2.0 * atan2(sqrt(1.0 + ecc) * sin(0.5 * e0), sqrt(1.0 - ecc) * cos(0.5 * e0))


def state_koe_to_eci(
    x_oe: ArrayLike,
    gm: float = GM_EARTH,
    use_degrees: bool = False,
) -> Array:
    """Convert Keplerian orbital elements to an inertial Cartesian state.

    Circular and equatorial orbits use the same convention as
    :func:`state_eci_to_koe`: for ``e < 1e-8`` the mean anomaly slot holds
    the argument of latitude (circular inclined) or the true longitude
    (circular equatorial), and for equatorial orbits the argument of
    perigee slot holds the longitude of perigee.

    Args:
        x_oe: Orbital elements ``[a, e, i, RAAN, omega, M]``. Semi-major
            axis in units consistent with ``gm``, angles in *rad* (or *deg*
            if ``use_degrees=True``). Closed orbits only.
        gm: Gravitational parameter.
        use_degrees: If ``True``, interpret angular elements as degrees.

    Returns:
        Array: State ``[x, y, z, vx, vy, vz]``.

    Examples:
        ```python
        from orbitjax.coordinates import state_koe_to_eci
        x = state_koe_to_eci([7000.0, 0.001, 51.6, 10.0, 20.0, 30.0],
                             gm=398600.8, use_degrees=True)
        ```
    """
    a, ecc, incl, raan, argp, m = (float(x) for x in x_oe)
    if use_degrees:
        incl, raan, argp, m = (x * pi / 180.0 for x in (incl, raan, argp, m))

    coe = ClassicalElements(
        p=a * (1.0 - ecc * ecc),
        a=a,
        ecc=ecc,
        incl=incl,
        raan=raan,
        argp=argp,
        nu=anomaly_mean_to_true(m, ecc),
        m=m,
        arglat=m,
        truelon=m,
        lonper=argp,
    )
    r, v = classical_to_state(coe, gm)
    return jnp.concatenate([r, v])


def state_eci_to_koe(
    x_cart: ArrayLike,
    gm: float = GM_EARTH,
    use_degrees: bool = False,
) -> Array:
    """Convert an inertial Cartesian state to Keplerian orbital elements.

    Angles that are undefined for the orbit type are set to zero and the
    alternate angle takes their place (see :func:`state_koe_to_eci`), so the
    returned array never contains ``nan`` for a closed, non-rectilinear
    orbit.

    Args:
        x_cart: State ``[x, y, z, vx, vy, vz]`` in units consistent with
            ``gm``.
        gm: Gravitational parameter.
        use_degrees: If ``True``, return angular elements in degrees.

    Returns:
        Array: Orbital elements ``[a, e, i, RAAN, omega, M]``.
    """
    x_cart = [float(x) for x in x_cart]
    coe = state_to_classical(x_cart[:3], x_cart[3:6], gm)

    raan = coe.raan
    argp = coe.argp
    if coe.incl < _SMALL or abs(coe.incl - pi) < _SMALL:
        raan = 0.0
        argp = coe.lonper
    if coe.ecc < _SMALL:
        argp = 0.0

    angles = [coe.incl, raan, argp, coe.m]
    if use_degrees:
        angles = [x * 180.0 / pi for x in angles]

    return jnp.array([coe.a, coe.ecc, *angles], dtype=get_dtype())

"""
Mean elements from a Cartesian TEME state.

The osculating elements of the state are taken as SGP4 mean elements.
This is a starting point for element fitting, not a fit: propagating the
result reproduces the input state only to within the short-period
perturbations (typically a few km in LEO).
"""

from __future__ import annotations

from math import isfinite, pi

from jax.typing import ArrayLike

from orbitjax.coordinates import state_eci_to_koe
from orbitjax.sgp4._constants import WGS72, EarthGravity, resolve_gravity
from orbitjax.sgp4._initialize import _un_kozai
from orbitjax.sgp4._types import SGP4Elements

_KOZAI_MAX_ITER = 20
_KOZAI_TOL = 1e-14


def _kozai_from_brouwer(xke: float, j2: float, ecco: float, inclo: float, no_unkozai: float) -> float:
    """Invert the un-Kozai step of initialization by fixed-point iteration."""
    no_kozai = no_unkozai
    for _ in range(_KOZAI_MAX_ITER):
        recovered = _un_kozai(xke, j2, ecco, inclo, no_kozai)
        if recovered <= 0.0:
            raise ValueError("Mean motion cannot be converted to a Kozai mean motion")
        update = no_kozai * no_unkozai / recovered
        converged = abs(update - no_kozai) <= _KOZAI_TOL * no_kozai
        no_kozai = update
        if converged:
            break
    return no_kozai


def elements_from_state(
    r: ArrayLike,
    v: ArrayLike,
    jd: float,
    jd_frac: float = 0.0,
    bstar: float = 0.0,
    gravity: str | EarthGravity = WGS72,
    **metadata,
) -> SGP4Elements:
    """Build a mean-element record from a TEME position and velocity.

    Args:
        r: Position [km].
        v: Velocity [km/s].
        jd: Julian date of the state.
        jd_frac: Fraction of a day to add to ``jd``.
        bstar: B* drag coefficient [1/earth_radii].
        gravity: Gravity model whose ``mu`` and ``xke`` define the
            conversion.
        **metadata: Catalog fields passed to :class:`SGP4Elements`.

    Returns:
        SGP4Elements: Elements with the Kozai mean motion that
        ``sgp4_init`` converts back to the osculating mean motion.

    Raises:
        ValueError: If the state is not a closed orbit.
    """
    gravity = resolve_gravity(gravity)
    x = [float(c) for c in r] + [float(c) for c in v]
    a, ecc, incl, raan, argp, mean_anomaly = (
        float(c) for c in state_eci_to_koe(x, gm=gravity.mu)
    )
    if not (isfinite(a) and a > 0.0 and ecc < 1.0):
        raise ValueError(f"State is not a closed orbit (a={a} km, e={ecc})")

    no_unkozai = gravity.xke * (a / gravity.radiusearthkm) ** -1.5
    no_kozai = _kozai_from_brouwer(gravity.xke, gravity.j2, ecc, incl, no_unkozai)

    return SGP4Elements(
        ecco=ecc,
        inclo=incl,
        nodeo=raan,
        argpo=argp,
        mo=mean_anomaly % (2.0 * pi),
        no_kozai=no_kozai,
        jdsatepoch=jd,
        jdsatepochF=jd_frac,
        bstar=bstar,
        **metadata,
    )

"""
Conversion of the corrected orbital quantities to TEME position and velocity.
"""

from __future__ import annotations

from jax import Array
from jax.typing import ArrayLike

from orbitjax.rotations import perifocal_to_inertial


def synthesize_state(
    mrt: ArrayLike,
    mvt: ArrayLike,
    rvdot: ArrayLike,
    su: ArrayLike,
    xnode: ArrayLike,
    xinc: ArrayLike,
    radiusearthkm: ArrayLike,
    xke: ArrayLike,
) -> tuple[Array, Array]:
    """Build position and velocity from radius, rates and orientation angles.

    The radial and transverse unit vectors are the first two columns of
    ``Rz(-node) @ Rx(-incl) @ Rz(-u)``.

    Args:
        mrt: Radius [earth radii].
        mvt: Radial velocity [earth radii / time unit].
        rvdot: Transverse velocity [earth radii / time unit].
        su: Argument of latitude [rad].
        xnode: Right ascension of ascending node [rad].
        xinc: Inclination [rad].
        radiusearthkm: Earth radius of the gravity model [km].
        xke: Gravity constant of the gravity model.

    Returns:
        tuple: ``(r, v)`` in km and km/s.
    """
    rot = perifocal_to_inertial(xnode, xinc, su)
    radial = rot[:, 0]
    transverse = rot[:, 1]
    vkmpersec = radiusearthkm * xke / 60.0
    r = mrt * radiusearthkm * radial
    v = (mvt * radial + rvdot * transverse) * vkmpersec
    return r, v

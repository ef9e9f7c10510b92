"""Elementary rotation matrices.

Passive (frame) rotations about the coordinate axes, following the
Montenbruck & Gill convention (*Satellite Orbits*, 2012, p.27). SGP4 output
and the classical-element conversions compose them to carry the
orbital-plane basis into the inertial frame.
"""

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike


def Rx(angle: ArrayLike) -> Array:
    """Frame rotation about the x-axis by ``angle`` [rad]."""
    c = jnp.cos(angle)
    s = jnp.sin(angle)
    return jnp.array([[1.0, 0.0, 0.0],
                      [0.0, c, s],
                      [0.0, -s, c]])


def Rz(angle: ArrayLike) -> Array:
    """Frame rotation about the z-axis by ``angle`` [rad]."""
    c = jnp.cos(angle)
    s = jnp.sin(angle)
    return jnp.array([[c, s, 0.0],
                      [-s, c, 0.0],
                      [0.0, 0.0, 1.0]])


def perifocal_to_inertial(raan: ArrayLike, incl: ArrayLike, arglat: ArrayLike) -> Array:
    """Rotation from the orbital radial/transverse basis to the inertial frame.

    Equal to ``Rz(-raan) @ Rx(-incl) @ Rz(-arglat)``. The first column is the
    radial unit vector and the second the in-plane transverse unit vector.
    Passing the argument of perigee as ``arglat`` gives the perifocal (PQW)
    to inertial rotation.

    Args:
        raan: Right ascension of the ascending node [rad].
        incl: Inclination [rad].
        arglat: Argument of latitude [rad].

    Returns:
        Array: 3x3 rotation matrix.
    """
    return Rz(-raan) @ Rx(-incl) @ Rz(-arglat)

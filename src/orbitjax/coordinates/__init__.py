"""Coordinate transformations.

This sub-module provides conversions between osculating Keplerian
orbital elements and inertial Cartesian state vectors, with explicit
handling of circular and equatorial orbits:

- **Array form**: ``[a, e, i, Ω, ω, M]`` ↔ ``[x, y, z, vx, vy, vz]``
- **Record form**: :class:`ClassicalElements` carrying every classical
  angle, including the alternate angles of degenerate orbits
"""

from .keplerian import (
    ClassicalElements,
    anomaly_mean_to_true,
    anomaly_true_to_mean,
    classical_to_state,
    state_eci_to_koe,
    state_koe_to_eci,
    state_to_classical,
)

__all__ = [
    "ClassicalElements",
    "anomaly_mean_to_true",
    "anomaly_true_to_mean",
    "classical_to_state",
    "state_eci_to_koe",
    "state_koe_to_eci",
    "state_to_classical",
]

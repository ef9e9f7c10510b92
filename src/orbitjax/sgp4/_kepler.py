"""
Newton-Raphson solution of Kepler's equation in SGP4's long-period form.

SGP4 solves ``u = E - axnl*sin(E) + aynl*cos(E)`` for the eccentric
longitude ``E``, where ``(axnl, aynl)`` are the long-period-corrected
eccentricity vector components. The iteration is fixed-trip
(``jax.lax.fori_loop``) with a convergence mask, so it is differentiable
in reverse mode and has a bounded cost.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitjax.sgp4._constants import KEPLER_MAX_ITER, KEPLER_MAX_STEP, KEPLER_TOL


def solve_kepler_sgp4(
    u: ArrayLike, axnl: ArrayLike, aynl: ArrayLike
) -> tuple[Array, Array, Array]:
    """Solve ``u = E - axnl*sin(E) + aynl*cos(E)`` for ``E``.

    Seeded at ``E0 = u``. Each correction is clamped to +/-0.95 rad and
    iteration stops after the first correction smaller than 1e-12 rad, or
    after 10 iterations.

    Args:
        u: Mean longitude minus node [rad].
        axnl: ``e*cos(argp)`` component of the eccentricity vector.
        aynl: ``e*sin(argp)`` component, including the long-period term.

    Returns:
        tuple: ``(E, sin(E_prev), cos(E_prev))`` where the sine and cosine
        are those evaluated at the start of the last applied step, the
        values the short-period corrections are built on.
    """
    u = jnp.asarray(u)

    def _step(_, carry):
        eo1, sineo1, coseo1, done = carry
        s = jnp.sin(eo1)
        c = jnp.cos(eo1)
        tem5 = (u - aynl * c + axnl * s - eo1) / (1.0 - c * axnl - s * aynl)
        tem5 = jnp.clip(tem5, -KEPLER_MAX_STEP, KEPLER_MAX_STEP)
        eo1 = jnp.where(done, eo1, eo1 + tem5)
        sineo1 = jnp.where(done, sineo1, s)
        coseo1 = jnp.where(done, coseo1, c)
        done = done | (jnp.abs(tem5) < KEPLER_TOL)
        return eo1, sineo1, coseo1, done

    init = (u, jnp.sin(u), jnp.cos(u), jnp.zeros(u.shape, dtype=bool))
    eo1, sineo1, coseo1, _ = jax.lax.fori_loop(0, KEPLER_MAX_ITER, _step, init)
    return eo1, sineo1, coseo1


def solve_kepler(M: ArrayLike, e: ArrayLike) -> Array:
    """Solve Kepler's equation ``M = E - e*sin(E)`` for the eccentric anomaly.

    Args:
        M: Mean anomaly [rad].
        e: Eccentricity, ``0 <= e < 1``.

    Returns:
        Eccentric anomaly [rad].

    Examples:
        ```python
        from orbitjax.sgp4 import solve_kepler
        E = solve_kepler(1.0, 0.1)
        ```
    """
    M = jnp.asarray(M)
    return solve_kepler_sgp4(M, e, jnp.zeros_like(M))[0]

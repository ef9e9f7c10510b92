"""
Combination of per-stage validity checks into one SGP4 error code.

Each propagation stage contributes an ``(ok, code)`` pair. Codes are merged
with ``jnp.where`` from the last stage backwards so the earliest failing
stage wins, which reproduces the early returns of the reference code
without data-dependent control flow. ``ok`` predicates are written so that
``nan`` counts as a failure.
"""

from __future__ import annotations

from collections.abc import Sequence

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitjax.sgp4._types import SGP4ErrorCode

ERROR_DTYPE = jnp.int32


def combine_errors(
    init_error: ArrayLike, checks: Sequence[tuple[ArrayLike, SGP4ErrorCode]]
) -> Array:
    """Return the error code of the first failing stage.

    Args:
        init_error: Permanent initialization code stored in the params
            array (float).
        checks: ``(ok, code)`` pairs in pipeline order.

    Returns:
        Integer error code, ``0`` when every check passed.
    """
    error = jnp.zeros(jnp.shape(init_error), dtype=ERROR_DTYPE)
    for ok, code in reversed(checks):
        error = jnp.where(ok, error, jnp.asarray(int(code), dtype=ERROR_DTYPE))
    init_code = jnp.asarray(init_error).astype(ERROR_DTYPE)
    return jnp.where(init_code != 0, init_code, error)


def mask_state(r: Array, v: Array, error: Array) -> tuple[Array, Array]:
    """Replace position and velocity with ``nan`` where ``error != 0``."""
    failed = error != 0
    r = jnp.where(failed, jnp.nan, r)
    v = jnp.where(failed, jnp.nan, v)
    return r, v

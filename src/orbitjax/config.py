"""Floating-point precision used by orbitjax.

SGP4 initialization packs its coefficients into an array of the dtype
returned by :func:`get_dtype`, and every propagation inherits that dtype.
The default is ``jnp.float64``. SGP4 is defined in double precision and
single precision already costs metres after a day in LEO, so importing this
module turns on ``jax_enable_x64``.

Change the dtype before anything is traced: values read by ``get_dtype``
while tracing are compiled into the program. A parameter array built under
a different dtype is a different input, and JAX retraces for it.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

_dtype = jnp.float64


def set_dtype(dtype) -> None:
    """Select the float dtype for parameter arrays and outputs.

    Selecting ``jnp.float64`` also enables JAX's 64-bit mode.

    Args:
        dtype: ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32`` or
            ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not one of the above.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the active float dtype (``jnp.float64`` unless changed)."""
    return _dtype


set_dtype(_dtype)

"""
Functional propagator factories.

Each factory runs ``sgp4_init`` once and returns the parameter array with a
closure ``propagate_fn(tsince) -> PropagationResult``. The regime is
captured at Python time, so the closure has no branching on it and is
ready for ``jax.jit`` and ``jax.vmap``. The closure always integrates the
resonance terms from epoch and carries no cursor between calls.
"""

from __future__ import annotations

from collections.abc import Callable

from jax import Array
from jax.typing import ArrayLike

from orbitjax.sgp4._constants import WGS72, EarthGravity
from orbitjax.sgp4._initialize import sgp4_init
from orbitjax.sgp4._propagation import sgp4_propagate
from orbitjax.sgp4._tle import parse_tle
from orbitjax.sgp4._types import OpsMode, PropagationResult, SGP4Elements


def create_sgp4_propagator_from_elements(
    elements: SGP4Elements,
    gravity: str | EarthGravity = WGS72,
    opsmode: str | OpsMode = "i",
) -> tuple[Array, Callable[[ArrayLike], PropagationResult]]:
    """Create a JIT-compatible SGP4 propagator from mean elements.

    Args:
        elements: Mean elements from ``parse_tle`` or
            ``SGP4Elements.from_degrees``.
        gravity: Gravity model name (``'wgs72'``, ``'wgs84'``, ``'wgs72old'``)
            or an ``EarthGravity`` instance.
        opsmode: Operation mode (``'i'`` or ``'a'``).

    Returns:
        Tuple of ``(params, propagate_fn)`` where:
            - ``params`` is a flat ``jnp.array`` of satellite parameters
            - ``propagate_fn(tsince)`` takes time since epoch in minutes
              and returns a :class:`PropagationResult` in the TEME frame

    Examples:
        ```python
        import jax
        import jax.numpy as jnp
        params, prop = create_sgp4_propagator_from_elements(elements)
        results = jax.vmap(jax.jit(prop))(jnp.linspace(0.0, 1440.0, 97))
        ```
    """
    init = sgp4_init(elements, gravity, opsmode)
    params = init.params
    regime = init.regime

    def propagate_fn(tsince: ArrayLike) -> PropagationResult:
        result, _ = sgp4_propagate(params, tsince, regime)
        return result

    return params, propagate_fn


def create_sgp4_propagator(
    line1: str,
    line2: str,
    gravity: str | EarthGravity = WGS72,
    opsmode: str | OpsMode = "i",
) -> tuple[Array, Callable[[ArrayLike], PropagationResult]]:
    """Create a JIT-compatible SGP4 propagator from TLE lines.

    Args:
        line1: First TLE line.
        line2: Second TLE line.
        gravity: Gravity model name or an ``EarthGravity`` instance.
        opsmode: Operation mode (``'i'`` or ``'a'``).

    Returns:
        Tuple of ``(params, propagate_fn)``, see
        :func:`create_sgp4_propagator_from_elements`.

    Raises:
        ValueError: If the TLE lines are malformed.
    """
    return create_sgp4_propagator_from_elements(parse_tle(line1, line2), gravity, opsmode)

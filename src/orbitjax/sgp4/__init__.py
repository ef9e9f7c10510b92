"""
SGP4/SDP4 orbit propagator implemented in JAX.

This module provides a JAX-native implementation of the SGP4 (Simplified General
Perturbations 4) and SDP4 (Simplified Deep-space Perturbations 4) orbit propagators
for mean-element sets such as Two-Line Elements (TLEs). Initialization runs once
at Python time; propagation supports JIT compilation and ``vmap`` over times and
satellites, and reports failures as error codes rather than exceptions.
"""

from orbitjax.sgp4._constants import GRAVITY_MODELS, WGS72, WGS72OLD, WGS84, EarthGravity
from orbitjax.sgp4._elements import elements_from_state
from orbitjax.sgp4._factory import (
    create_sgp4_propagator,
    create_sgp4_propagator_from_elements,
)
from orbitjax.sgp4._initialize import sgp4_init
from orbitjax.sgp4._kepler import solve_kepler, solve_kepler_sgp4
from orbitjax.sgp4._propagation import sgp4_propagate, sgp4_propagate_unified
from orbitjax.sgp4._satellite import Satellite
from orbitjax.sgp4._tle import compute_checksum, parse_tle, validate_tle_line
from orbitjax.sgp4._types import (
    OpsMode,
    PropagationResult,
    Regime,
    Resonance,
    ResonanceState,
    SGP4Elements,
    SGP4Error,
    SGP4ErrorCode,
    SGP4Init,
)

__all__ = [
    # Types
    "SGP4Elements",
    "EarthGravity",
    "OpsMode",
    "Regime",
    "Resonance",
    "ResonanceState",
    "PropagationResult",
    "SGP4Init",
    "SGP4ErrorCode",
    "SGP4Error",
    "Satellite",
    # Constants
    "WGS72OLD",
    "WGS72",
    "WGS84",
    "GRAVITY_MODELS",
    # TLE parsing
    "parse_tle",
    "compute_checksum",
    "validate_tle_line",
    "elements_from_state",
    # Initialization and propagation
    "sgp4_init",
    "sgp4_propagate",
    "sgp4_propagate_unified",
    "create_sgp4_propagator",
    "create_sgp4_propagator_from_elements",
    # Kepler's equation
    "solve_kepler",
    "solve_kepler_sgp4",
]

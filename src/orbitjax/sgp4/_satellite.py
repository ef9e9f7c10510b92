"""High-level satellite record for SGP4/SDP4 propagation.

Provides :class:`Satellite`, which owns one initialized element set: the
immutable mean elements and derived coefficients, plus the two pieces of
mutable state SGP4 keeps between calls, the deep-space resonance cursor and
the error code of the most recent propagation.
"""

from __future__ import annotations

import logging
from datetime import datetime
from math import pi as _py_pi

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitjax.constants import MINUTES_PER_DAY, RAD2DEG, XPDOTP
from orbitjax.sgp4._constants import WGS72, EarthGravity, resolve_gravity
from orbitjax.sgp4._deep_space import resonance_state_at_epoch
from orbitjax.sgp4._elements import elements_from_state
from orbitjax.sgp4._initialize import sgp4_init
from orbitjax.sgp4._params import _IDX
from orbitjax.sgp4._propagation import sgp4_propagate
from orbitjax.sgp4._tle import parse_tle
from orbitjax.sgp4._types import (
    OpsMode,
    PropagationResult,
    Regime,
    Resonance,
    ResonanceState,
    SGP4Elements,
    SGP4ErrorCode,
)
from orbitjax.time import jd_to_datetime, jday

logger = logging.getLogger(__name__)

_propagate_jit = jax.jit(sgp4_propagate, static_argnames=("regime",))


class Satellite:
    """An initialized element set with SGP4/SDP4 propagation.

    Propagation of a resonant deep-space orbit advances the resonance
    cursor held by the record, so successive calls continue integration
    where the previous one stopped. Results do not depend on call order.
    A record is not safe for concurrent ``propagate`` calls.

    Examples:
        ```python
        from orbitjax.sgp4 import Satellite

        sat = Satellite.from_tle(line1, line2)
        sat.period          # minutes
        result = sat.propagate(60.0)
        result.r, result.v  # km, km/s in TEME
        ```

    Args:
        elements: Mean elements.
        gravity: Gravity model name or :class:`EarthGravity` instance.
        opsmode: Operation mode (``'i'`` improved, ``'a'`` AFSPC).
    """

    def __init__(
        self,
        elements: SGP4Elements,
        gravity: str | EarthGravity = WGS72,
        opsmode: str | OpsMode = "i",
    ) -> None:
        self._elements = elements
        self._gravity = resolve_gravity(gravity)
        self._opsmode = OpsMode(opsmode)

        init = sgp4_init(elements, self._gravity, self._opsmode)
        self._params: Array = init.params
        self._regime: Regime = init.regime
        self._resonance: Resonance = init.resonance
        self._init_error = SGP4ErrorCode(int(init.params[_IDX["init_error"]]))
        self._error: SGP4ErrorCode = init.error
        self._state: ResonanceState = init.state

    @classmethod
    def from_tle(
        cls,
        line1: str,
        line2: str,
        gravity: str | EarthGravity = WGS72,
        opsmode: str | OpsMode = "i",
    ) -> Satellite:
        """Create a satellite from TLE lines.

        Raises:
            ValueError: If the TLE lines are malformed.
        """
        return cls(parse_tle(line1, line2), gravity, opsmode)

    @classmethod
    def from_state(
        cls,
        r: ArrayLike,
        v: ArrayLike,
        epoch_jd: float,
        epoch_jd_frac: float = 0.0,
        bstar: float = 0.0,
        gravity: str | EarthGravity = WGS72,
        opsmode: str | OpsMode = "i",
        **metadata,
    ) -> Satellite:
        """Create a satellite whose mean elements are the osculating elements of a state.

        Args:
            r: TEME position [km].
            v: TEME velocity [km/s].
            epoch_jd: Julian date of the state.
            epoch_jd_frac: Fraction of a day to add to ``epoch_jd``.
            bstar: B* drag coefficient [1/earth_radii].
            gravity: Gravity model name or instance.
            opsmode: Operation mode.
            **metadata: Catalog fields for :class:`SGP4Elements`.

        Raises:
            ValueError: If the state is not a closed orbit.
        """
        elements = elements_from_state(
            r, v, epoch_jd, epoch_jd_frac, bstar=bstar, gravity=gravity, **metadata
        )
        return cls(elements, gravity, opsmode)

    # ------------------------------------------------------------------
    # Properties (user-friendly units)
    # ------------------------------------------------------------------

    @property
    def elements(self) -> SGP4Elements:
        """Mean elements in SGP4 internal units."""
        return self._elements

    @property
    def gravity(self) -> EarthGravity:
        return self._gravity

    @property
    def opsmode(self) -> OpsMode:
        return self._opsmode

    @property
    def params(self) -> Array:
        """Raw SGP4 parameter array (for advanced use)."""
        return self._params

    @property
    def satnum(self) -> str:
        """Catalog number (string, e.g. ``'25544'``)."""
        return self._elements.satnum_str

    @property
    def epoch(self) -> datetime:
        """Element-set epoch as an aware UTC ``datetime``."""
        return jd_to_datetime(self._elements.jdsatepoch, self._elements.jdsatepochF)

    @property
    def n(self) -> float:
        """Mean motion (Kozai) [rev/day]."""
        return self._elements.no_kozai * XPDOTP

    @property
    def e(self) -> float:
        """Eccentricity [dimensionless]."""
        return self._elements.ecco

    @property
    def i(self) -> float:
        """Inclination [degrees]."""
        return self._elements.inclo * RAD2DEG

    @property
    def raan(self) -> float:
        """Right ascension of ascending node [degrees]."""
        return self._elements.nodeo * RAD2DEG

    @property
    def argp(self) -> float:
        """Argument of perigee [degrees]."""
        return self._elements.argpo * RAD2DEG

    @property
    def M(self) -> float:
        """Mean anomaly [degrees]."""
        return self._elements.mo * RAD2DEG

    @property
    def bstar(self) -> float:
        """B* drag coefficient [1/earth_radii]."""
        return self._elements.bstar

    @property
    def period(self) -> float:
        """Orbital period from the un-Kozai'd mean motion [min]."""
        no = float(self._params[_IDX["no_unkozai"]])
        return 2.0 * _py_pi / no if no > 0.0 else float("nan")

    @property
    def perigee_alt(self) -> float:
        """Perigee altitude above the equatorial radius [km]."""
        return float(self._params[_IDX["altp"]]) * self._gravity.radiusearthkm

    @property
    def apogee_alt(self) -> float:
        """Apogee altitude above the equatorial radius [km]."""
        return float(self._params[_IDX["alta"]]) * self._gravity.radiusearthkm

    @property
    def regime(self) -> Regime:
        """Near-earth or deep-space, fixed at initialization."""
        return self._regime

    @property
    def resonance(self) -> Resonance:
        """Deep-space resonance class, fixed at initialization."""
        return self._resonance

    @property
    def init_error(self) -> SGP4ErrorCode:
        """Permanent initialization error (0, 1, 2 or 5)."""
        return self._init_error

    @property
    def error(self) -> SGP4ErrorCode:
        """Error code of the most recent propagation."""
        return self._error

    @property
    def resonance_state(self) -> ResonanceState:
        """Current resonance integration cursor."""
        return self._state

    # ------------------------------------------------------------------
    # Propagation
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Rewind the resonance cursor to epoch."""
        self._state = resonance_state_at_epoch(self._params)

    def propagate(self, tsince: float) -> PropagationResult:
        """Propagate to a time since epoch, advancing the resonance cursor.

        Args:
            tsince: Time since epoch [min].

        Returns:
            PropagationResult: TEME position [km], velocity [km/s] and
            error code. The vectors are ``nan`` when ``error != 0``.
        """
        tsince = float(tsince)
        if self._resonance != Resonance.NONE:
            atime = float(self._state.atime)
            if atime != 0.0 and (tsince * atime <= 0.0 or abs(tsince) < abs(atime)):
                logger.debug(
                    "Satellite %r: t=%.3f min is behind the resonance cursor at %.3f min, "
                    "restarting integration from epoch",
                    self.satnum,
                    tsince,
                    atime,
                )

        result, self._state = _propagate_jit(self._params, tsince, self._regime, self._state)
        self._error = SGP4ErrorCode(int(result.error))
        if self._error != SGP4ErrorCode.NONE:
            logger.debug(
                "Satellite %r failed at t=%.3f min with code %d: %s",
                self.satnum,
                tsince,
                int(self._error),
                self._error.message,
            )
        return result

    def propagate_jd(self, jd: float, fr: float = 0.0) -> PropagationResult:
        """Propagate to a split Julian date.

        Args:
            jd: Julian date.
            fr: Fraction of a day to add to ``jd``.
        """
        tsince = (jd - self._elements.jdsatepoch) * MINUTES_PER_DAY + (
            fr - self._elements.jdsatepochF
        ) * MINUTES_PER_DAY
        return self.propagate(tsince)

    def propagate_datetime(self, dt: datetime) -> PropagationResult:
        """Propagate to a ``datetime`` (naive values are taken as UTC)."""
        return self.propagate_jd(*jday(dt))

    def propagate_many(self, times: ArrayLike) -> PropagationResult:
        """Propagate to many times since epoch in one vectorized call.

        Each time is integrated from epoch; the record's cursor and last
        error code are left untouched.

        Args:
            times: 1-D array of times since epoch [min].

        Returns:
            PropagationResult: ``r`` and ``v`` of shape ``(N, 3)`` and
            ``error`` of shape ``(N,)``.
        """
        params = self._params
        regime = self._regime
        times = jnp.asarray(times, dtype=params.dtype)
        result, _ = jax.vmap(lambda t: _propagate_jit(params, t, regime))(times)
        return result

    # ------------------------------------------------------------------
    # Representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"Satellite(satnum={self.satnum!r}, epoch={self.epoch.isoformat()}, "
            f"n={self.n:.8f} rev/day, regime={self._regime.name}, "
            f"resonance={self._resonance.name})"
        )

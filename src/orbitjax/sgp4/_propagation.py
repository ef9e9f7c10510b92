"""
SGP4/SDP4 propagation in JAX.

Propagation is a pure function of the flat parameter array produced by
``sgp4_init``, the time since epoch, and (for deep-space resonant orbits)
the resonance cursor. The regime selects the near-earth or deep-space code
path at trace time, so ``sgp4_propagate`` can be ``jax.jit``-ed with
``regime`` static and ``jax.vmap``-ed over times or satellites of one
regime. ``sgp4_propagate_unified`` reads the regime from the params array
instead and dispatches with ``jax.lax.cond`` for mixed batches.

Failures never raise: every call returns a :class:`PropagationResult`
whose ``error`` is the code of the first failing stage, with ``nan``
vectors when it is non-zero.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitjax.sgp4._constants import (
    ECC_FLOOR,
    ECC_TOLERANCE,
    TEMP4,
    TWO_PI,
    X2O3,
)
from orbitjax.sgp4._deep_space import _dpper, _dspace, resonance_state_at_epoch
from orbitjax.sgp4._errors import combine_errors, mask_state
from orbitjax.sgp4._kepler import solve_kepler_sgp4
from orbitjax.sgp4._params import _IDX
from orbitjax.sgp4._types import (
    PropagationResult,
    Regime,
    ResonanceState,
    SGP4ErrorCode,
)
from orbitjax.sgp4._vectors import synthesize_state

_I = _IDX


def _secular_near_earth(params: Array, t: Array):
    """Secular gravity and drag update of the mean elements."""
    p = params
    bstar = p[_I["bstar"]]
    cc1 = p[_I["cc1"]]
    t2cof = p[_I["t2cof"]]

    xmdf = p[_I["mo"]] + p[_I["mdot"]] * t
    argpdf = p[_I["argpo"]] + p[_I["argpdot"]] * t
    nodedf = p[_I["nodeo"]] + p[_I["nodedot"]] * t
    t2 = t * t
    nodem = nodedf + p[_I["nodecf"]] * t2
    tempa = 1.0 - cc1 * t
    tempe = bstar * p[_I["cc4"]] * t
    templ = t2cof * t2

    # Full drag model terms, skipped for the simplified model
    full_drag = p[_I["isimp"]] < 0.5
    delomg = p[_I["omgcof"]] * t
    delmtemp = 1.0 + p[_I["eta"]] * jnp.cos(xmdf)
    delm = p[_I["xmcof"]] * (delmtemp * delmtemp * delmtemp - p[_I["delmo"]])
    temp = delomg + delm
    mm_full = xmdf + temp
    argpm_full = argpdf - temp
    t3 = t2 * t
    t4 = t3 * t
    tempa_full = tempa - p[_I["d2"]] * t2 - p[_I["d3"]] * t3 - p[_I["d4"]] * t4
    tempe_full = tempe + bstar * p[_I["cc5"]] * (jnp.sin(mm_full) - p[_I["sinmao"]])
    templ_full = templ + p[_I["t3cof"]] * t3 + t4 * (p[_I["t4cof"]] + t * p[_I["t5cof"]])

    mm = jnp.where(full_drag, mm_full, xmdf)
    argpm = jnp.where(full_drag, argpm_full, argpdf)
    tempa = jnp.where(full_drag, tempa_full, tempa)
    tempe = jnp.where(full_drag, tempe_full, tempe)
    templ = jnp.where(full_drag, templ_full, templ)

    return mm, argpm, nodem, tempa, tempe, templ


def _propagate(
    params: Array, tsince: ArrayLike, deep_space: bool, state: ResonanceState
) -> tuple[PropagationResult, ResonanceState]:
    p = params
    t = jnp.asarray(tsince, dtype=p.dtype)
    xke = p[_I["xke"]]
    j2 = p[_I["j2"]]
    j3oj2 = p[_I["j3oj2"]]
    no_unkozai = p[_I["no_unkozai"]]

    mm, argpm, nodem, tempa, tempe, templ = _secular_near_earth(p, t)
    nm = no_unkozai
    em = p[_I["ecco"]]
    inclm = p[_I["inclo"]]

    if deep_space:
        em, argpm, inclm, mm, nodem, nm, state = _dspace(
            p, t, state, em, argpm, inclm, mm, nodem, nm
        )

    nm_ok = nm > 0.0

    am = (xke / nm) ** X2O3 * tempa * tempa
    nm = xke / am**1.5
    em = em - tempe

    em_ok = (em < 1.0) & (em >= ECC_TOLERANCE)
    em = jnp.maximum(em, ECC_FLOOR)

    mm = mm + no_unkozai * templ
    xlm = mm + argpm + nodem

    nodem = jnp.fmod(nodem, TWO_PI)
    argpm = jnp.fmod(argpm, TWO_PI)
    xlm = jnp.fmod(xlm, TWO_PI)
    mm = jnp.fmod(xlm - argpm - nodem, TWO_PI)

    ep = em
    xincp = inclm
    argpp = argpm
    nodep = nodem
    mp = mm

    if deep_space:
        ep, xincp, nodep, argpp, mp = _dpper(p, t, ep, xincp, nodep, argpp, mp)
        neg = xincp < 0.0
        xincp = jnp.where(neg, -xincp, xincp)
        nodep = jnp.where(neg, nodep + jnp.pi, nodep)
        argpp = jnp.where(neg, argpp - jnp.pi, argpp)
        ep_ok = (ep >= 0.0) & (ep <= 1.0)

        # Long-period and short-period coefficients at the perturbed inclination
        sinip = jnp.sin(xincp)
        cosip = jnp.cos(xincp)
        aycof = -0.5 * j3oj2 * sinip
        denom = jnp.where(jnp.abs(cosip + 1.0) > TEMP4, 1.0 + cosip, TEMP4)
        xlcof = -0.25 * j3oj2 * sinip * (3.0 + 5.0 * cosip) / denom
        cosisq = cosip * cosip
        con41 = 3.0 * cosisq - 1.0
        x1mth2 = 1.0 - cosisq
        x7thm1 = 7.0 * cosisq - 1.0
    else:
        ep_ok = jnp.ones_like(em_ok)
        sinip = jnp.sin(xincp)
        cosip = jnp.cos(xincp)
        aycof = p[_I["aycof"]]
        xlcof = p[_I["xlcof"]]
        con41 = p[_I["con41"]]
        x1mth2 = p[_I["x1mth2"]]
        x7thm1 = p[_I["x7thm1"]]

    # Long-period periodics
    axnl = ep * jnp.cos(argpp)
    temp = 1.0 / (am * (1.0 - ep * ep))
    aynl = ep * jnp.sin(argpp) + temp * aycof
    xl = mp + argpp + nodep + temp * xlcof * axnl

    u = jnp.fmod(xl - nodep, TWO_PI)
    _, sineo1, coseo1 = solve_kepler_sgp4(u, axnl, aynl)

    # Short-period preliminary quantities
    ecose = axnl * coseo1 + aynl * sineo1
    esine = axnl * sineo1 - aynl * coseo1
    el2 = axnl * axnl + aynl * aynl
    pl = am * (1.0 - el2)
    pl_ok = pl >= 0.0

    rl = am * (1.0 - ecose)
    rdotl = jnp.sqrt(am) * esine / rl
    rvdotl = jnp.sqrt(pl) / rl
    betal = jnp.sqrt(1.0 - el2)
    temp = esine / (1.0 + betal)
    sinu = am / rl * (sineo1 - aynl - axnl * temp)
    cosu = am / rl * (coseo1 - axnl + aynl * temp)
    su = jnp.arctan2(sinu, cosu)
    sin2u = (cosu + cosu) * sinu
    cos2u = 1.0 - 2.0 * sinu * sinu
    temp = 1.0 / pl
    temp1 = 0.5 * j2 * temp
    temp2 = temp1 * temp

    # Short-period periodics
    mrt = rl * (1.0 - 1.5 * temp2 * betal * con41) + 0.5 * temp1 * x1mth2 * cos2u
    su = su - 0.25 * temp2 * x7thm1 * sin2u
    xnode = nodep + 1.5 * temp2 * cosip * sin2u
    xinc = xincp + 1.5 * temp2 * cosip * sinip * cos2u
    mvt = rdotl - nm * temp1 * x1mth2 * sin2u / xke
    rvdot = rvdotl + nm * temp1 * (x1mth2 * cos2u + 1.5 * con41) / xke

    r, v = synthesize_state(mrt, mvt, rvdot, su, xnode, xinc, p[_I["radiusearthkm"]], xke)

    error = combine_errors(
        p[_I["init_error"]],
        [
            (nm_ok, SGP4ErrorCode.MEAN_MOTION_NOT_POSITIVE),
            (em_ok, SGP4ErrorCode.PERTURBED_ELEMENTS_INVALID),
            (ep_ok, SGP4ErrorCode.PERTURBED_ELEMENTS_INVALID),
            (pl_ok, SGP4ErrorCode.SEMI_LATUS_RECTUM_NEGATIVE),
            (mrt >= 1.0, SGP4ErrorCode.SATELLITE_DECAYED),
        ],
    )
    r, v = mask_state(r, v, error)

    return PropagationResult(r=r, v=v, error=error), state


def sgp4_propagate(
    params: Array,
    tsince: ArrayLike,
    regime: Regime | int,
    state: ResonanceState | None = None,
) -> tuple[PropagationResult, ResonanceState]:
    """Propagate a satellite using SGP4/SDP4.

    This is the main propagation entry point. ``regime`` selects the
    near-earth or deep-space code path at Python trace time; mark it
    static when jitting:

    ```python
    prop = jax.jit(sgp4_propagate, static_argnames=("regime",))
    ```

    Args:
        params: Flat parameter array from ``sgp4_init``.
        tsince: Time since epoch [min].
        regime: ``Regime.NEAR_EARTH`` or ``Regime.DEEP_SPACE``.
        state: Resonance cursor from a previous call. ``None`` starts
            from epoch.

    Returns:
        tuple: ``(result, state)`` where ``result`` is a
        :class:`PropagationResult` with TEME position [km], velocity
        [km/s] and error code, and ``state`` is the updated cursor
        (unchanged for near-earth and non-resonant orbits).
    """
    if state is None:
        state = resonance_state_at_epoch(params)
    return _propagate(params, tsince, Regime(regime) == Regime.DEEP_SPACE, state)


def sgp4_propagate_unified(
    params: Array,
    tsince: ArrayLike,
    state: ResonanceState | None = None,
) -> tuple[PropagationResult, ResonanceState]:
    """Propagate a satellite with the regime read from ``params`` (JAX, JIT-compatible).

    Unlike ``sgp4_propagate``, the near-earth/deep-space branch is chosen
    with ``jax.lax.cond`` on the method flag stored in ``params``. This
    enables ``vmap`` over satellites with mixed regimes in a single batch.

    Args:
        params: Flat parameter array from ``sgp4_init``.
        tsince: Time since epoch [min].
        state: Resonance cursor. ``None`` starts from epoch.

    Returns:
        tuple: ``(result, state)`` as for :func:`sgp4_propagate`.
    """
    if state is None:
        state = resonance_state_at_epoch(params)
    tsince = jnp.asarray(tsince, dtype=params.dtype)
    is_deep = params[_I["method"]] > 0.5
    return jax.lax.cond(
        is_deep,
        lambda p, t, s: _propagate(p, t, True, s),
        lambda p, t, s: _propagate(p, t, False, s),
        params,
        tsince,
        state,
    )

"""
SGP4/SDP4 initialization.

Derives every coefficient propagation needs from one mean-element set and
packs them into a flat ``jnp.array`` (layout in ``_params``). This runs at
Python time on Python floats, reproducing the reference arithmetic, and is
therefore not traceable; propagation of the resulting array is.
"""

from __future__ import annotations

import logging
from math import cos, fabs, isfinite, sin, sqrt

import jax.numpy as jnp

from orbitjax.config import get_dtype
from orbitjax.sgp4._constants import (
    DEEP_SPACE_PERIOD,
    ECC_SMALL,
    LOW_PERIGEE,
    SIMPLE_DRAG_PERIGEE,
    TEMP4,
    TWO_PI,
    VERY_LOW_PERIGEE,
    WGS72,
    X2O3,
    EarthGravity,
    resolve_gravity,
)
from orbitjax.sgp4._deep_space import deep_space_init, resonance_state_at_epoch
from orbitjax.sgp4._params import _PARAM_NAMES
from orbitjax.sgp4._propagation import sgp4_propagate
from orbitjax.sgp4._types import (
    OpsMode,
    Regime,
    Resonance,
    SGP4Elements,
    SGP4ErrorCode,
    SGP4Init,
)
from orbitjax.time import gstime, gstime_afspc, sgp4_epoch

logger = logging.getLogger(__name__)


def _un_kozai(xke: float, j2: float, ecco: float, inclo: float, no_kozai: float) -> float:
    """Convert a Kozai mean motion to the Brouwer (un-Kozai'd) mean motion.

    Args:
        xke: Gravity constant ``sqrt(GM)`` in SGP4 units.
        j2: J2 zonal harmonic.
        ecco: Eccentricity.
        inclo: Inclination [rad].
        no_kozai: Kozai mean motion [rad/min].

    Returns:
        float: Un-Kozai'd mean motion [rad/min]. ``0.0`` when the
        conversion is singular.
    """
    omeosq = 1.0 - ecco * ecco
    rteosq = sqrt(omeosq)
    cosio = cos(inclo)
    cosio2 = cosio * cosio

    ak = (xke / no_kozai) ** X2O3
    d1 = 0.75 * j2 * (3.0 * cosio2 - 1.0) / (rteosq * omeosq)
    del_ = d1 / (ak * ak)
    adel = ak * (1.0 - del_ * del_ - del_ * (1.0 / 3.0 + 134.0 * del_ * del_ / 81.0))
    if adel == 0.0:
        return 0.0
    del_ = d1 / (adel * adel)
    if 1.0 + del_ == 0.0:
        return 0.0
    return no_kozai / (1.0 + del_)


def _validate(elements: SGP4Elements) -> SGP4ErrorCode:
    """Permanent checks on the mean elements themselves (codes 1 and 2)."""
    ecco = elements.ecco
    if not (isfinite(ecco) and 0.0 <= ecco < 1.0):
        return SGP4ErrorCode.MEAN_ELEMENTS_INVALID
    no = elements.no_kozai
    if not (isfinite(no) and no > 0.0):
        return SGP4ErrorCode.MEAN_MOTION_NOT_POSITIVE
    return SGP4ErrorCode.NONE


def _pack(d: dict[str, float]):
    return jnp.array([d[name] for name in _PARAM_NAMES], dtype=get_dtype())


def sgp4_init(
    elements: SGP4Elements,
    gravity: str | EarthGravity = WGS72,
    opsmode: str | OpsMode = "i",
) -> SGP4Init:
    """Initialize SGP4 satellite parameters from mean elements.

    Runs at Python time (not under JIT). Validates the elements, computes
    all intermediate coefficients of the theory, classifies the orbit as
    near-earth or deep-space and packs the result into a flat array. Like
    the reference, initialization finishes with a propagation at ``t = 0``
    whose error code is returned.

    Args:
        elements: Mean elements from ``parse_tle`` or
            ``SGP4Elements.from_degrees``.
        gravity: Earth gravity model constants or model name.
        opsmode: Operation mode (``'i'`` improved, ``'a'`` AFSPC).

    Returns:
        SGP4Init: ``(params, regime, resonance, error, state)``. A record
        with a permanent error (codes 1, 2, 5) keeps zeroed coefficients
        and every propagation of it returns the same code.

    Raises:
        ValueError: If ``gravity`` or ``opsmode`` is not recognized.

    Examples:
        ```python
        from orbitjax.sgp4 import parse_tle, sgp4_init, sgp4_propagate
        init = sgp4_init(parse_tle(line1, line2))
        result, state = sgp4_propagate(init.params, 60.0, init.regime)
        ```
    """
    gravity = resolve_gravity(gravity)
    opsmode = OpsMode(opsmode)

    d: dict[str, float] = {name: 0.0 for name in _PARAM_NAMES}

    # Store gravity constants
    d["tumin"] = gravity.tumin
    d["mu"] = gravity.mu
    d["radiusearthkm"] = gravity.radiusearthkm
    d["xke"] = gravity.xke
    d["j2"] = gravity.j2
    d["j3"] = gravity.j3
    d["j4"] = gravity.j4
    d["j3oj2"] = gravity.j3oj2

    # Store mean elements
    d["bstar"] = elements.bstar
    d["ecco"] = elements.ecco
    d["argpo"] = elements.argpo
    d["inclo"] = elements.inclo
    d["mo"] = elements.mo
    d["no_kozai"] = elements.no_kozai
    d["nodeo"] = elements.nodeo
    d["ndot"] = elements.ndot
    d["nddot"] = elements.nddot
    d["afspc"] = 1.0 if opsmode == OpsMode.AFSPC else 0.0

    error = _validate(elements)
    no_unkozai = 0.0
    if error == SGP4ErrorCode.NONE:
        no_unkozai = _un_kozai(
            gravity.xke, gravity.j2, elements.ecco, elements.inclo, elements.no_kozai
        )
        if not (isfinite(no_unkozai) and no_unkozai > 0.0):
            error = SGP4ErrorCode.EPOCH_ELEMENTS_SUBORBITAL

    if error != SGP4ErrorCode.NONE:
        logger.warning(
            "SGP4 initialization of satellite %r failed with code %d: %s",
            elements.satnum_str,
            int(error),
            error.message,
        )
        d["init_error"] = float(error)
        params = _pack(d)
        return SGP4Init(
            params=params,
            regime=Regime.NEAR_EARTH,
            resonance=Resonance.NONE,
            error=error,
            state=resonance_state_at_epoch(params),
        )

    regime, resonance = _derive_coefficients(d, elements, gravity, opsmode, no_unkozai)
    logger.debug(
        "Satellite %r initialized: regime=%s resonance=%s period=%.3f min",
        elements.satnum_str,
        regime.name,
        resonance.name,
        TWO_PI / no_unkozai,
    )

    params = _pack(d)
    state = resonance_state_at_epoch(params)
    result, _ = sgp4_propagate(params, 0.0, regime, state)
    error = SGP4ErrorCode(int(result.error))
    if error != SGP4ErrorCode.NONE:
        logger.debug(
            "Satellite %r fails at epoch with code %d: %s",
            elements.satnum_str,
            int(error),
            error.message,
        )

    return SGP4Init(params=params, regime=regime, resonance=resonance, error=error, state=state)


def _derive_coefficients(
    d: dict[str, float],
    elements: SGP4Elements,
    gravity: EarthGravity,
    opsmode: OpsMode,
    no_unkozai: float,
) -> tuple[Regime, Resonance]:
    """Fill ``d`` with the secular, drag and deep-space coefficients."""
    ecco = elements.ecco
    inclo = elements.inclo
    bstar = elements.bstar
    re = gravity.radiusearthkm
    j2 = gravity.j2

    epoch = sgp4_epoch(elements.jdsatepoch, elements.jdsatepochF)

    eccsq = ecco * ecco
    omeosq = 1.0 - eccsq
    rteosq = sqrt(omeosq)
    cosio = cos(inclo)
    cosio2 = cosio * cosio
    sinio = sin(inclo)

    ao = (gravity.xke / no_unkozai) ** X2O3
    po = ao * omeosq
    con42 = 1.0 - 5.0 * cosio2
    con41 = -con42 - cosio2 - cosio2
    posq = po * po
    rp = ao * (1.0 - ecco)

    if opsmode == OpsMode.AFSPC:
        gsto = gstime_afspc(epoch)
    else:
        gsto = gstime(epoch + 2433281.5)

    a = (no_unkozai * gravity.tumin) ** (-X2O3)
    d["no_unkozai"] = no_unkozai
    d["con41"] = con41
    d["gsto"] = gsto
    d["a"] = a
    d["alta"] = a * (1.0 + ecco) - 1.0
    d["altp"] = a * (1.0 - ecco) - 1.0

    # Atmospheric density parameters
    sfour = 78.0 / re + 1.0
    qzms2ttemp = (120.0 - 78.0) / re
    qzms24 = qzms2ttemp * qzms2ttemp * qzms2ttemp * qzms2ttemp

    isimp = 1 if rp < SIMPLE_DRAG_PERIGEE / re + 1.0 else 0
    perige = (rp - 1.0) * re
    if perige < LOW_PERIGEE:
        sfour = perige - 78.0
        if perige < VERY_LOW_PERIGEE:
            sfour = 20.0
        qzms24temp = (120.0 - sfour) / re
        qzms24 = qzms24temp * qzms24temp * qzms24temp * qzms24temp
        sfour = sfour / re + 1.0

    pinvsq = 1.0 / posq
    tsi = 1.0 / (ao - sfour)
    eta = ao * ecco * tsi
    etasq = eta * eta
    eeta = ecco * eta
    psisq = fabs(1.0 - etasq)
    coef = qzms24 * tsi**4
    coef1 = coef / psisq**3.5
    cc2 = (
        coef1
        * no_unkozai
        * (
            ao * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
            + 0.375 * j2 * tsi / psisq * con41 * (8.0 + 3.0 * etasq * (8.0 + etasq))
        )
    )
    cc1 = bstar * cc2
    cc3 = 0.0
    if ecco > ECC_SMALL:
        cc3 = -2.0 * coef * tsi * gravity.j3oj2 * no_unkozai * sinio / ecco
    x1mth2 = 1.0 - cosio2
    cc4 = (
        2.0
        * no_unkozai
        * coef1
        * ao
        * omeosq
        * (
            eta * (2.0 + 0.5 * etasq)
            + ecco * (0.5 + 2.0 * etasq)
            - j2
            * tsi
            / (ao * psisq)
            * (
                -3.0 * con41 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
                + 0.75 * x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq)) * cos(2.0 * elements.argpo)
            )
        )
    )
    cc5 = 2.0 * coef1 * ao * omeosq * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq)

    # Secular rates of the mean anomaly, perigee and node
    cosio4 = cosio2 * cosio2
    temp1 = 1.5 * j2 * pinvsq * no_unkozai
    temp2 = 0.5 * temp1 * j2 * pinvsq
    temp3 = -0.46875 * gravity.j4 * pinvsq * pinvsq * no_unkozai
    mdot = (
        no_unkozai
        + 0.5 * temp1 * rteosq * con41
        + 0.0625 * temp2 * rteosq * (13.0 - 78.0 * cosio2 + 137.0 * cosio4)
    )
    argpdot = (
        -0.5 * temp1 * con42
        + 0.0625 * temp2 * (7.0 - 114.0 * cosio2 + 395.0 * cosio4)
        + temp3 * (3.0 - 36.0 * cosio2 + 49.0 * cosio4)
    )
    xhdot1 = -temp1 * cosio
    nodedot = xhdot1 + (0.5 * temp2 * (4.0 - 19.0 * cosio2) + 2.0 * temp3 * (3.0 - 7.0 * cosio2)) * cosio
    xpidot = argpdot + nodedot

    omgcof = bstar * cc3 * cos(elements.argpo)
    xmcof = 0.0
    if ecco > ECC_SMALL:
        xmcof = -X2O3 * coef * bstar / eeta
    nodecf = 3.5 * omeosq * xhdot1 * cc1
    t2cof = 1.5 * cc1

    # Inclination within 1.5e-12 of 180 deg
    if fabs(cosio + 1.0) > TEMP4:
        xlcof = -0.25 * gravity.j3oj2 * sinio * (3.0 + 5.0 * cosio) / (1.0 + cosio)
    else:
        xlcof = -0.25 * gravity.j3oj2 * sinio * (3.0 + 5.0 * cosio) / TEMP4
    aycof = -0.5 * gravity.j3oj2 * sinio

    delmotemp = 1.0 + eta * cos(elements.mo)
    delmo = delmotemp * delmotemp * delmotemp

    d["cc1"] = cc1
    d["cc4"] = cc4
    d["cc5"] = cc5
    d["delmo"] = delmo
    d["eta"] = eta
    d["argpdot"] = argpdot
    d["omgcof"] = omgcof
    d["sinmao"] = sin(elements.mo)
    d["t2cof"] = t2cof
    d["x1mth2"] = x1mth2
    d["x7thm1"] = 7.0 * cosio2 - 1.0
    d["mdot"] = mdot
    d["nodedot"] = nodedot
    d["xlcof"] = xlcof
    d["xmcof"] = xmcof
    d["nodecf"] = nodecf
    d["aycof"] = aycof

    regime = Regime.NEAR_EARTH
    resonance = Resonance.NONE
    if TWO_PI / no_unkozai >= DEEP_SPACE_PERIOD:
        regime = Regime.DEEP_SPACE
        isimp = 1
        d["method"] = 1.0
        resonance = deep_space_init(
            d,
            epoch,
            ecco,
            inclo,
            elements.nodeo,
            elements.argpo,
            elements.mo,
            no_unkozai,
            gravity.xke,
            xpidot,
        )

    d["isimp"] = float(isimp)

    # Higher-order drag terms for the full drag model
    if isimp != 1:
        cc1sq = cc1 * cc1
        d2 = 4.0 * ao * tsi * cc1sq
        temp = d2 * tsi * cc1 / 3.0
        d3 = (17.0 * ao + sfour) * temp
        d4 = 0.5 * temp * ao * tsi * (221.0 * ao + 31.0 * sfour) * cc1
        d["d2"] = d2
        d["d3"] = d3
        d["d4"] = d4
        d["t3cof"] = d2 + 2.0 * cc1sq
        d["t4cof"] = 0.25 * (3.0 * d3 + cc1 * (12.0 * d2 + 10.0 * cc1sq))
        d["t5cof"] = 0.2 * (3.0 * d4 + 12.0 * cc1 * d3 + 6.0 * d2 * d2 + 15.0 * cc1sq * (2.0 * d2 + cc1sq))

    return regime, resonance

"""
Deep-space (SDP4) lunar/solar perturbations and resonance integration.

Initialization helpers (``_dscom``, ``_dsinit``, ``deep_space_init``) run at
Python time on Python floats and fill the parameter dict. The propagation
helpers (``_dpper``, ``_dspace``) are JAX-compatible and read the flat
parameter array.

The resonance integrator is the only stateful part of SGP4. Its cursor is
an explicit :class:`~orbitjax.sgp4.ResonanceState` passed into ``_dspace``
and returned updated. The cursor is reused only when the requested time
lies on its forward trajectory (same sign as, and no closer to epoch than,
``atime``); otherwise integration restarts at epoch. The step grid is
anchored at epoch, so reuse gives the same values a restart would and
calls may be made in any order.
"""

from __future__ import annotations

from math import atan2, cos, fmod, pi, sin, sqrt

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from orbitjax.sgp4._constants import (
    C1L,
    C1SS,
    FASX2,
    FASX4,
    FASX6,
    G22,
    G32,
    G44,
    G52,
    G54,
    HALF_DAY_ECC_MIN,
    HALF_DAY_NM_HIGH,
    HALF_DAY_NM_LOW,
    LYDDANE_INCLINATION,
    Q22,
    Q31,
    Q33,
    ROOT22,
    ROOT32,
    ROOT44,
    ROOT52,
    ROOT54,
    RPTIM,
    SHALLOW_INCLINATION,
    STEP2,
    STEPP,
    SYNC_NM_HIGH,
    SYNC_NM_LOW,
    TWO_PI,
    X2O3,
    ZCOSGS,
    ZCOSIS,
    ZEL,
    ZES,
    ZNL,
    ZNS,
    ZSINGS,
    ZSINIS,
)
from orbitjax.sgp4._params import _IDX
from orbitjax.sgp4._types import Resonance, ResonanceState

# Lunar/solar periodic coefficients stored by ``deep_space_init``
_PERIODIC_NAMES = (
    "e3", "ee2", "se2", "se3", "sgh2", "sgh3", "sgh4", "sh2", "sh3",
    "si2", "si3", "sl2", "sl3", "sl4", "xgh2", "xgh3", "xgh4", "xh2",
    "xh3", "xi2", "xi3", "xl2", "xl3", "xl4", "zmol", "zmos",
)  # fmt: skip


# ---------------------------------------------------------------------------
# Python-time initialization
# ---------------------------------------------------------------------------


def _third_body_terms(
    zcosg: float,
    zsing: float,
    zcosi: float,
    zsini: float,
    zcosh: float,
    zsinh: float,
    cc: float,
    xnoi: float,
    cosim: float,
    sinim: float,
    cosomm: float,
    sinomm: float,
    em: float,
    emsq: float,
) -> dict[str, float]:
    """Secular and periodic geometry terms of one perturbing body (sun or moon)."""
    betasq = 1.0 - emsq
    rtemsq = sqrt(betasq)

    a1 = zcosg * zcosh + zsing * zcosi * zsinh
    a3 = -zsing * zcosh + zcosg * zcosi * zsinh
    a7 = -zcosg * zsinh + zsing * zcosi * zcosh
    a8 = zsing * zsini
    a9 = zsing * zsinh + zcosg * zcosi * zcosh
    a10 = zcosg * zsini
    a2 = cosim * a7 + sinim * a8
    a4 = cosim * a9 + sinim * a10
    a5 = -sinim * a7 + cosim * a8
    a6 = -sinim * a9 + cosim * a10

    x1 = a1 * cosomm + a2 * sinomm
    x2 = a3 * cosomm + a4 * sinomm
    x3 = -a1 * sinomm + a2 * cosomm
    x4 = -a3 * sinomm + a4 * cosomm
    x5 = a5 * sinomm
    x6 = a6 * sinomm
    x7 = a5 * cosomm
    x8 = a6 * cosomm

    z31 = 12.0 * x1 * x1 - 3.0 * x3 * x3
    z32 = 24.0 * x1 * x2 - 6.0 * x3 * x4
    z33 = 12.0 * x2 * x2 - 3.0 * x4 * x4
    z1 = 3.0 * (a1 * a1 + a2 * a2) + z31 * emsq
    z2 = 6.0 * (a1 * a3 + a2 * a4) + z32 * emsq
    z3 = 3.0 * (a3 * a3 + a4 * a4) + z33 * emsq
    z11 = -6.0 * a1 * a5 + emsq * (-24.0 * x1 * x7 - 6.0 * x3 * x5)
    z12 = -6.0 * (a1 * a6 + a3 * a5) + emsq * (
        -24.0 * (x2 * x7 + x1 * x8) - 6.0 * (x3 * x6 + x4 * x5)
    )
    z13 = -6.0 * a3 * a6 + emsq * (-24.0 * x2 * x8 - 6.0 * x4 * x6)
    z21 = 6.0 * a2 * a5 + emsq * (24.0 * x1 * x5 - 6.0 * x3 * x7)
    z22 = 6.0 * (a4 * a5 + a2 * a6) + emsq * (
        24.0 * (x2 * x5 + x1 * x6) - 6.0 * (x4 * x7 + x3 * x8)
    )
    z23 = 6.0 * a4 * a6 + emsq * (24.0 * x2 * x6 - 6.0 * x4 * x8)
    z1 = z1 + z1 + betasq * z31
    z2 = z2 + z2 + betasq * z32
    z3 = z3 + z3 + betasq * z33

    s3 = cc * xnoi
    s2 = -0.5 * s3 / rtemsq
    s4 = s3 * rtemsq
    s1 = -15.0 * em * s4
    s5 = x1 * x3 + x2 * x4
    s6 = x2 * x3 + x1 * x4
    s7 = x2 * x4 - x1 * x3

    return {
        "s1": s1, "s2": s2, "s3": s3, "s4": s4, "s5": s5, "s6": s6, "s7": s7,
        "z1": z1, "z2": z2, "z3": z3,
        "z11": z11, "z12": z12, "z13": z13,
        "z21": z21, "z22": z22, "z23": z23,
        "z31": z31, "z32": z32, "z33": z33,
    }  # fmt: skip


def _dscom(
    epoch: float,
    ep: float,
    argpp: float,
    tc: float,
    inclp: float,
    nodep: float,
    np_: float,
) -> tuple[dict[str, float], dict[str, float], dict[str, float]]:
    """Lunar/solar geometry at epoch.

    Args:
        epoch: Days since 1949 December 31 00:00 UT.
        ep: Eccentricity.
        argpp: Argument of perigee [rad].
        tc: Minutes since epoch (0 during initialization).
        inclp: Inclination [rad].
        nodep: Right ascension of ascending node [rad].
        np_: Mean motion [rad/min].

    Returns:
        tuple: ``(solar, lunar, coeffs)``: the per-body geometry terms of
        :func:`_third_body_terms` and the periodic coefficients keyed by
        their parameter names.
    """
    em = ep
    emsq = em * em
    snodm = sin(nodep)
    cnodm = cos(nodep)
    sinomm = sin(argpp)
    cosomm = cos(argpp)
    sinim = sin(inclp)
    cosim = cos(inclp)

    # Lunar orbit orientation
    day = epoch + 18261.5 + tc / 1440.0
    xnodce = fmod(4.5236020 - 9.2422029e-4 * day, TWO_PI)
    stem = sin(xnodce)
    ctem = cos(xnodce)
    zcosil = 0.91375164 - 0.03568096 * ctem
    zsinil = sqrt(1.0 - zcosil * zcosil)
    zsinhl = 0.089683511 * stem / zsinil
    zcoshl = sqrt(1.0 - zsinhl * zsinhl)
    gam = 5.8351514 + 0.0019443680 * day
    zx = 0.39785416 * stem / zsinil
    zy = zcoshl * ctem + 0.91744867 * zsinhl * stem
    zx = atan2(zx, zy)
    zx = gam + zx - xnodce
    zcosgl = cos(zx)
    zsingl = sin(zx)

    xnoi = 1.0 / np_
    common = dict(
        xnoi=xnoi, cosim=cosim, sinim=sinim, cosomm=cosomm, sinomm=sinomm, em=em, emsq=emsq
    )
    solar = _third_body_terms(ZCOSGS, ZSINGS, ZCOSIS, ZSINIS, cnodm, snodm, C1SS, **common)
    lunar = _third_body_terms(
        zcosgl,
        zsingl,
        zcosil,
        zsinil,
        zcoshl * cnodm + zsinhl * snodm,
        snodm * zcoshl - cnodm * zsinhl,
        C1L,
        **common,
    )

    ss = solar
    s = lunar
    coeffs = {
        "zmol": fmod(4.7199672 + 0.22997150 * day - gam, TWO_PI),
        "zmos": fmod(6.2565837 + 0.017201977 * day, TWO_PI),
        # Solar terms
        "se2": 2.0 * ss["s1"] * ss["s6"],
        "se3": 2.0 * ss["s1"] * ss["s7"],
        "si2": 2.0 * ss["s2"] * ss["z12"],
        "si3": 2.0 * ss["s2"] * (ss["z13"] - ss["z11"]),
        "sl2": -2.0 * ss["s3"] * ss["z2"],
        "sl3": -2.0 * ss["s3"] * (ss["z3"] - ss["z1"]),
        "sl4": -2.0 * ss["s3"] * (-21.0 - 9.0 * emsq) * ZES,
        "sgh2": 2.0 * ss["s4"] * ss["z32"],
        "sgh3": 2.0 * ss["s4"] * (ss["z33"] - ss["z31"]),
        "sgh4": -18.0 * ss["s4"] * ZES,
        "sh2": -2.0 * ss["s2"] * ss["z22"],
        "sh3": -2.0 * ss["s2"] * (ss["z23"] - ss["z21"]),
        # Lunar terms
        "ee2": 2.0 * s["s1"] * s["s6"],
        "e3": 2.0 * s["s1"] * s["s7"],
        "xi2": 2.0 * s["s2"] * s["z12"],
        "xi3": 2.0 * s["s2"] * (s["z13"] - s["z11"]),
        "xl2": -2.0 * s["s3"] * s["z2"],
        "xl3": -2.0 * s["s3"] * (s["z3"] - s["z1"]),
        "xl4": -2.0 * s["s3"] * (-21.0 - 9.0 * emsq) * ZEL,
        "xgh2": 2.0 * s["s4"] * s["z32"],
        "xgh3": 2.0 * s["s4"] * (s["z33"] - s["z31"]),
        "xgh4": -18.0 * s["s4"] * ZEL,
        "xh2": -2.0 * s["s2"] * s["z22"],
        "xh3": -2.0 * s["s2"] * (s["z23"] - s["z21"]),
    }
    return solar, lunar, coeffs


def _half_day_g_terms(em: float, emsq: float) -> dict[str, float]:
    """Eccentricity functions of the 12-hour resonance."""
    eoc = em * emsq
    g = {"g201": -0.306 - (em - 0.64) * 0.440}

    if em <= 0.65:
        g["g211"] = 3.616 - 13.2470 * em + 16.2900 * emsq
        g["g310"] = -19.302 + 117.3900 * em - 228.4190 * emsq + 156.5910 * eoc
        g["g322"] = -18.9068 + 109.7927 * em - 214.6334 * emsq + 146.5816 * eoc
        g["g410"] = -41.122 + 242.6940 * em - 471.0940 * emsq + 313.9530 * eoc
        g["g422"] = -146.407 + 841.8800 * em - 1629.014 * emsq + 1083.4350 * eoc
        g["g520"] = -532.114 + 3017.977 * em - 5740.032 * emsq + 3708.2760 * eoc
    else:
        g["g211"] = -72.099 + 331.819 * em - 508.738 * emsq + 266.724 * eoc
        g["g310"] = -346.844 + 1582.851 * em - 2415.925 * emsq + 1246.113 * eoc
        g["g322"] = -342.585 + 1554.908 * em - 2366.899 * emsq + 1215.972 * eoc
        g["g410"] = -1052.797 + 4758.686 * em - 7193.992 * emsq + 3651.957 * eoc
        g["g422"] = -3581.690 + 16178.110 * em - 24462.770 * emsq + 12422.520 * eoc
        if em > 0.715:
            g["g520"] = -5149.66 + 29936.92 * em - 54087.36 * emsq + 31324.56 * eoc
        else:
            g["g520"] = 1464.74 - 4664.75 * em + 3763.64 * emsq

    if em < 0.7:
        g["g533"] = -919.22770 + 4988.6100 * em - 9064.7700 * emsq + 5542.21 * eoc
        g["g521"] = -822.71072 + 4568.6173 * em - 8491.4146 * emsq + 5337.524 * eoc
        g["g532"] = -853.66600 + 4690.2500 * em - 8624.7700 * emsq + 5341.4 * eoc
    else:
        g["g533"] = -37995.780 + 161616.52 * em - 229838.20 * emsq + 109377.94 * eoc
        g["g521"] = -51752.104 + 218913.95 * em - 309468.16 * emsq + 146349.42 * eoc
        g["g532"] = -40023.880 + 170470.89 * em - 242699.48 * emsq + 115605.82 * eoc

    return g


def classify_resonance(nm: float, em: float) -> Resonance:
    """Resonance class of a deep-space orbit.

    Args:
        nm: Un-Kozai'd mean motion [rad/min].
        em: Eccentricity.

    Returns:
        Resonance: ``SYNCHRONOUS`` for ``0.0034906585 < n < 0.0052359877``,
        ``HALF_DAY`` for ``8.26e-3 <= n <= 9.24e-3`` with ``e >= 0.5``,
        otherwise ``NONE``.
    """
    if SYNC_NM_LOW < nm < SYNC_NM_HIGH:
        return Resonance.SYNCHRONOUS
    if HALF_DAY_NM_LOW <= nm <= HALF_DAY_NM_HIGH and em >= HALF_DAY_ECC_MIN:
        return Resonance.HALF_DAY
    return Resonance.NONE


def _dsinit(
    solar: dict[str, float],
    lunar: dict[str, float],
    xke: float,
    ecco: float,
    inclo: float,
    argpo: float,
    mo: float,
    nodeo: float,
    no: float,
    gsto: float,
    mdot: float,
    nodedot: float,
    xpidot: float,
) -> tuple[Resonance, dict[str, float]]:
    """Deep-space secular rates and resonance integration constants at epoch.

    Returns:
        tuple: The resonance class and the coefficients keyed by their
        parameter names.
    """
    emsq = ecco * ecco
    sinim = sin(inclo)
    cosim = cos(inclo)
    shallow = inclo < SHALLOW_INCLINATION or inclo > pi - SHALLOW_INCLINATION

    irez = classify_resonance(no, ecco)
    out: dict[str, float] = {}

    # Solar terms
    ss = solar
    ses = ss["s1"] * ZNS * ss["s5"]
    sis = ss["s2"] * ZNS * (ss["z11"] + ss["z13"])
    sls = -ZNS * ss["s3"] * (ss["z1"] + ss["z3"] - 14.0 - 6.0 * emsq)
    sghs = ss["s4"] * ZNS * (ss["z31"] + ss["z33"] - 6.0)
    shs = -ZNS * ss["s2"] * (ss["z21"] + ss["z23"])
    if shallow:
        shs = 0.0
    if sinim != 0.0:
        shs = shs / sinim
    sgs = sghs - cosim * shs

    # Lunar terms
    s = lunar
    out["dedt"] = ses + s["s1"] * ZNL * s["s5"]
    out["didt"] = sis + s["s2"] * ZNL * (s["z11"] + s["z13"])
    out["dmdt"] = sls - ZNL * s["s3"] * (s["z1"] + s["z3"] - 14.0 - 6.0 * emsq)
    sghl = s["s4"] * ZNL * (s["z31"] + s["z33"] - 6.0)
    shll = -ZNL * s["s2"] * (s["z21"] + s["z23"])
    if shallow:
        shll = 0.0
    domdt = sgs + sghl
    dnodt = shs
    if sinim != 0.0:
        domdt = domdt - cosim / sinim * shll
        dnodt = dnodt + shll / sinim
    out["domdt"] = domdt
    out["dnodt"] = dnodt

    if irez == Resonance.NONE:
        return irez, out

    theta = fmod(gsto, TWO_PI)
    aonv = (no / xke) ** X2O3

    if irez == Resonance.HALF_DAY:
        g = _half_day_g_terms(ecco, emsq)
        cosisq = cosim * cosim
        sini2 = sinim * sinim
        f220 = 0.75 * (1.0 + 2.0 * cosim + cosisq)
        f221 = 1.5 * sini2
        f321 = 1.875 * sinim * (1.0 - 2.0 * cosim - 3.0 * cosisq)
        f322 = -1.875 * sinim * (1.0 + 2.0 * cosim - 3.0 * cosisq)
        f441 = 35.0 * sini2 * f220
        f442 = 39.3750 * sini2 * sini2
        f522 = (
            9.84375
            * sinim
            * (
                sini2 * (1.0 - 2.0 * cosim - 5.0 * cosisq)
                + 0.33333333 * (-2.0 + 4.0 * cosim + 6.0 * cosisq)
            )
        )
        f523 = sinim * (
            4.92187512 * sini2 * (-2.0 - 4.0 * cosim + 10.0 * cosisq)
            + 6.56250012 * (1.0 + 2.0 * cosim - 3.0 * cosisq)
        )
        f542 = (
            29.53125
            * sinim
            * (2.0 - 8.0 * cosim + cosisq * (-12.0 + 8.0 * cosim + 10.0 * cosisq))
        )
        f543 = (
            29.53125
            * sinim
            * (-2.0 - 8.0 * cosim + cosisq * (12.0 + 8.0 * cosim - 10.0 * cosisq))
        )
        xno2 = no * no
        ainv2 = aonv * aonv
        temp1 = 3.0 * xno2 * ainv2
        temp = temp1 * ROOT22
        out["d2201"] = temp * f220 * g["g201"]
        out["d2211"] = temp * f221 * g["g211"]
        temp1 = temp1 * aonv
        temp = temp1 * ROOT32
        out["d3210"] = temp * f321 * g["g310"]
        out["d3222"] = temp * f322 * g["g322"]
        temp1 = temp1 * aonv
        temp = 2.0 * temp1 * ROOT44
        out["d4410"] = temp * f441 * g["g410"]
        out["d4422"] = temp * f442 * g["g422"]
        temp1 = temp1 * aonv
        temp = temp1 * ROOT52
        out["d5220"] = temp * f522 * g["g520"]
        out["d5232"] = temp * f523 * g["g532"]
        temp = 2.0 * temp1 * ROOT54
        out["d5421"] = temp * f542 * g["g521"]
        out["d5433"] = temp * f543 * g["g533"]
        out["xlamo"] = fmod(mo + nodeo + nodeo - theta - theta, TWO_PI)
        out["xfact"] = mdot + out["dmdt"] + 2.0 * (nodedot + dnodt - RPTIM) - no
    else:
        g200 = 1.0 + emsq * (-2.5 + 0.8125 * emsq)
        g310 = 1.0 + 2.0 * emsq
        g300 = 1.0 + emsq * (-6.0 + 6.60937 * emsq)
        f220 = 0.75 * (1.0 + cosim) * (1.0 + cosim)
        f311 = 0.9375 * sinim * sinim * (1.0 + 3.0 * cosim) - 0.75 * (1.0 + cosim)
        f330 = 1.0 + cosim
        f330 = 1.875 * f330 * f330 * f330
        del1 = 3.0 * no * no * aonv * aonv
        out["del2"] = 2.0 * del1 * f220 * g200 * Q22
        out["del3"] = 3.0 * del1 * f330 * g300 * Q33 * aonv
        out["del1"] = del1 * f311 * g310 * Q31 * aonv
        out["xlamo"] = fmod(mo + nodeo + argpo - theta, TWO_PI)
        out["xfact"] = mdot + xpidot - RPTIM + out["dmdt"] + domdt + dnodt - no

    return irez, out


def deep_space_init(
    d: dict[str, float],
    epoch: float,
    ecco: float,
    inclo: float,
    nodeo: float,
    argpo: float,
    mo: float,
    no_unkozai: float,
    xke: float,
    xpidot: float,
) -> Resonance:
    """Compute lunar/solar and resonance coefficients. Modifies ``d`` in place.

    ``d`` must already hold ``gsto``, ``mdot`` and ``nodedot``. The periodic
    corrections at epoch are zero by construction, so the epoch-time
    ``dpper`` pass of the reference leaves the elements unchanged and is
    not repeated here.

    Returns:
        Resonance: The resonance class, also stored as ``d["irez"]``.
    """
    solar, lunar, coeffs = _dscom(epoch, ecco, argpo, 0.0, inclo, nodeo, no_unkozai)
    for name in _PERIODIC_NAMES:
        d[name] = coeffs[name]

    irez, rates = _dsinit(
        solar,
        lunar,
        xke,
        ecco,
        inclo,
        argpo,
        mo,
        nodeo,
        no_unkozai,
        d["gsto"],
        d["mdot"],
        d["nodedot"],
        xpidot,
    )
    d.update(rates)
    d["irez"] = float(irez)
    return irez


def resonance_state_at_epoch(params: Array) -> ResonanceState:
    """Return the resonance cursor positioned at epoch.

    Args:
        params: Flat parameter array from ``sgp4_init``.

    Returns:
        ResonanceState: ``atime = 0``, ``xni`` the un-Kozai'd mean motion
        and ``xli`` the resonance longitude at epoch.
    """
    return ResonanceState(
        atime=jnp.zeros((), dtype=params.dtype),
        xni=params[_IDX["no_unkozai"]],
        xli=params[_IDX["xlamo"]],
    )


# ---------------------------------------------------------------------------
# JAX propagation helpers
# ---------------------------------------------------------------------------


def _dpper(
    params: Array,
    t: ArrayLike,
    ep: ArrayLike,
    inclp: ArrayLike,
    nodep: ArrayLike,
    argpp: ArrayLike,
    mp: ArrayLike,
) -> tuple[Array, Array, Array, Array, Array]:
    """Apply lunar/solar periodic perturbations at time ``t`` (JAX).

    Inclinations of at least 0.2 rad take the corrections directly; lower
    inclinations use the Lyddane modification, which works with
    ``sin(i) * sin(node)`` and ``sin(i) * cos(node)`` to stay regular near
    the equator.

    Args:
        params: Flat parameter array.
        t: Time since epoch [min].
        ep: Eccentricity.
        inclp: Inclination [rad].
        nodep: RAAN [rad].
        argpp: Argument of perigee [rad].
        mp: Mean anomaly [rad].

    Returns:
        Tuple of ``(ep, inclp, nodep, argpp, mp)`` with perturbations applied.
    """
    p = params
    afspc = p[_IDX["afspc"]] > 0.5

    # Solar
    zm = p[_IDX["zmos"]] + ZNS * t
    zf = zm + 2.0 * ZES * jnp.sin(zm)
    sinzf = jnp.sin(zf)
    f2 = 0.5 * sinzf * sinzf - 0.25
    f3 = -0.5 * sinzf * jnp.cos(zf)
    ses = p[_IDX["se2"]] * f2 + p[_IDX["se3"]] * f3
    sis = p[_IDX["si2"]] * f2 + p[_IDX["si3"]] * f3
    sls = p[_IDX["sl2"]] * f2 + p[_IDX["sl3"]] * f3 + p[_IDX["sl4"]] * sinzf
    sghs = p[_IDX["sgh2"]] * f2 + p[_IDX["sgh3"]] * f3 + p[_IDX["sgh4"]] * sinzf
    shs = p[_IDX["sh2"]] * f2 + p[_IDX["sh3"]] * f3

    # Lunar
    zm = p[_IDX["zmol"]] + ZNL * t
    zf = zm + 2.0 * ZEL * jnp.sin(zm)
    sinzf = jnp.sin(zf)
    f2 = 0.5 * sinzf * sinzf - 0.25
    f3 = -0.5 * sinzf * jnp.cos(zf)
    sel = p[_IDX["ee2"]] * f2 + p[_IDX["e3"]] * f3
    sil = p[_IDX["xi2"]] * f2 + p[_IDX["xi3"]] * f3
    sll = p[_IDX["xl2"]] * f2 + p[_IDX["xl3"]] * f3 + p[_IDX["xl4"]] * sinzf
    sghl = p[_IDX["xgh2"]] * f2 + p[_IDX["xgh3"]] * f3 + p[_IDX["xgh4"]] * sinzf
    shll = p[_IDX["xh2"]] * f2 + p[_IDX["xh3"]] * f3

    pe = ses + sel
    pinc = sis + sil
    pl = sls + sll
    pgh = sghs + sghl
    ph = shs + shll

    inclp = inclp + pinc
    ep = ep + pe
    sinip = jnp.sin(inclp)
    cosip = jnp.cos(inclp)
    use_direct = inclp >= LYDDANE_INCLINATION

    # Direct application
    ph_direct = ph / jnp.where(use_direct, sinip, 1.0)
    pgh_direct = pgh - cosip * ph_direct
    argpp_direct = argpp + pgh_direct
    nodep_direct = nodep + ph_direct

    # Lyddane modification
    sinop = jnp.sin(nodep)
    cosop = jnp.cos(nodep)
    alfdp = sinip * sinop + (ph * cosop + pinc * cosip * sinop)
    betdp = sinip * cosop + (-ph * sinop + pinc * cosip * cosop)
    nodep_lyd = jnp.fmod(nodep, TWO_PI)
    nodep_lyd = jnp.where(afspc & (nodep_lyd < 0.0), nodep_lyd + TWO_PI, nodep_lyd)
    xls = mp + argpp + cosip * nodep_lyd
    dls = pl + pgh - pinc * nodep_lyd * sinip
    xls = xls + dls
    xnoh = nodep_lyd
    nodep_lyd = jnp.arctan2(alfdp, betdp)
    nodep_lyd = jnp.where(afspc & (nodep_lyd < 0.0), nodep_lyd + TWO_PI, nodep_lyd)
    nodep_lyd = jnp.where(
        jnp.abs(xnoh - nodep_lyd) > jnp.pi,
        jnp.where(nodep_lyd < xnoh, nodep_lyd + TWO_PI, nodep_lyd - TWO_PI),
        nodep_lyd,
    )

    mp = mp + pl
    argpp_lyd = xls - mp - cosip * nodep_lyd

    argpp = jnp.where(use_direct, argpp_direct, argpp_lyd)
    nodep = jnp.where(use_direct, nodep_direct, nodep_lyd)

    return ep, inclp, nodep, argpp, mp


def _dot_terms(params: Array, xli: ArrayLike, xni: ArrayLike, atime: ArrayLike):
    """Resonance rates ``(xndt, xldot, xnddt)`` at a cursor position."""
    p = params
    half_day = p[_IDX["irez"]] > 1.5
    xldot = xni + p[_IDX["xfact"]]

    # Synchronous
    del1 = p[_IDX["del1"]]
    del2 = p[_IDX["del2"]]
    del3 = p[_IDX["del3"]]
    xndt_sync = (
        del1 * jnp.sin(xli - FASX2)
        + del2 * jnp.sin(2.0 * (xli - FASX4))
        + del3 * jnp.sin(3.0 * (xli - FASX6))
    )
    xnddt_sync = (
        del1 * jnp.cos(xli - FASX2)
        + 2.0 * del2 * jnp.cos(2.0 * (xli - FASX4))
        + 3.0 * del3 * jnp.cos(3.0 * (xli - FASX6))
    )

    # Half-day
    xomi = p[_IDX["argpo"]] + p[_IDX["argpdot"]] * atime
    x2omi = xomi + xomi
    x2li = xli + xli
    d2201 = p[_IDX["d2201"]]
    d2211 = p[_IDX["d2211"]]
    d3210 = p[_IDX["d3210"]]
    d3222 = p[_IDX["d3222"]]
    d4410 = p[_IDX["d4410"]]
    d4422 = p[_IDX["d4422"]]
    d5220 = p[_IDX["d5220"]]
    d5232 = p[_IDX["d5232"]]
    d5421 = p[_IDX["d5421"]]
    d5433 = p[_IDX["d5433"]]
    xndt_hd = (
        d2201 * jnp.sin(x2omi + xli - G22)
        + d2211 * jnp.sin(xli - G22)
        + d3210 * jnp.sin(xomi + xli - G32)
        + d3222 * jnp.sin(-xomi + xli - G32)
        + d4410 * jnp.sin(x2omi + x2li - G44)
        + d4422 * jnp.sin(x2li - G44)
        + d5220 * jnp.sin(xomi + xli - G52)
        + d5232 * jnp.sin(-xomi + xli - G52)
        + d5421 * jnp.sin(xomi + x2li - G54)
        + d5433 * jnp.sin(-xomi + x2li - G54)
    )
    xnddt_hd = (
        d2201 * jnp.cos(x2omi + xli - G22)
        + d2211 * jnp.cos(xli - G22)
        + d3210 * jnp.cos(xomi + xli - G32)
        + d3222 * jnp.cos(-xomi + xli - G32)
        + d5220 * jnp.cos(xomi + xli - G52)
        + d5232 * jnp.cos(-xomi + xli - G52)
        + 2.0
        * (
            d4410 * jnp.cos(x2omi + x2li - G44)
            + d4422 * jnp.cos(x2li - G44)
            + d5421 * jnp.cos(xomi + x2li - G54)
            + d5433 * jnp.cos(-xomi + x2li - G54)
        )
    )

    xndt = jnp.where(half_day, xndt_hd, xndt_sync)
    xnddt = jnp.where(half_day, xnddt_hd, xnddt_sync) * xldot
    return xndt, xldot, xnddt


def _dspace(
    params: Array,
    t: ArrayLike,
    state: ResonanceState,
    em: ArrayLike,
    argpm: ArrayLike,
    inclm: ArrayLike,
    mm: ArrayLike,
    nodem: ArrayLike,
    nm: ArrayLike,
) -> tuple[Array, Array, Array, Array, Array, Array, ResonanceState]:
    """Deep-space secular rates and resonance integration (JAX).

    Non-resonant orbits only receive the lunar/solar secular rates; the
    cursor is returned unchanged for them.

    Args:
        params: Flat parameter array.
        t: Time since epoch [min].
        state: Resonance cursor.
        em: Eccentricity.
        argpm: Argument of perigee [rad].
        inclm: Inclination [rad].
        mm: Mean anomaly [rad].
        nodem: RAAN [rad].
        nm: Mean motion [rad/min].

    Returns:
        Tuple of ``(em, argpm, inclm, mm, nodem, nm, state)``.
    """
    p = params
    irez = p[_IDX["irez"]]
    no = p[_IDX["no_unkozai"]]
    is_resonant = irez > 0.5

    theta = jnp.fmod(p[_IDX["gsto"]] + t * RPTIM, TWO_PI)
    em = em + p[_IDX["dedt"]] * t
    inclm = inclm + p[_IDX["didt"]] * t
    argpm = argpm + p[_IDX["domdt"]] * t
    nodem = nodem + p[_IDX["dnodt"]] * t
    mm = mm + p[_IDX["dmdt"]] * t

    # Restart from epoch unless t lies on the cursor's forward trajectory
    restart = (state.atime == 0.0) | (t * state.atime <= 0.0) | (jnp.abs(t) < jnp.abs(state.atime))
    atime = jnp.where(restart, 0.0, state.atime)
    xni = jnp.where(restart, no, state.xni)
    xli = jnp.where(restart, p[_IDX["xlamo"]], state.xli)

    delt = jnp.where(t > 0.0, STEPP, -STEPP)

    def _loop_cond(carry):
        atime_c, _, _ = carry
        return is_resonant & (jnp.abs(t - atime_c) >= STEPP)

    def _loop_body(carry):
        atime_c, xni_c, xli_c = carry
        xndt, xldot, xnddt = _dot_terms(p, xli_c, xni_c, atime_c)
        xli_c = xli_c + xldot * delt + xndt * STEP2
        xni_c = xni_c + xndt * delt + xnddt * STEP2
        return atime_c + delt, xni_c, xli_c

    atime, xni, xli = jax.lax.while_loop(_loop_cond, _loop_body, (atime, xni, xli))

    # Taylor step from the cursor to t
    ft = t - atime
    xndt, xldot, xnddt = _dot_terms(p, xli, xni, atime)
    nm_res = xni + xndt * ft + xnddt * ft * ft * 0.5
    xl = xli + xldot * ft + xndt * ft * ft * 0.5

    mm_res = jnp.where(
        irez > 1.5,
        xl - 2.0 * nodem + 2.0 * theta,
        xl - nodem - argpm + theta,
    )
    dndt = nm_res - no
    nm_res = no + dndt

    nm = jnp.where(is_resonant, nm_res, nm)
    mm = jnp.where(is_resonant, mm_res, mm)
    new_state = ResonanceState(
        atime=jnp.where(is_resonant, atime, state.atime),
        xni=jnp.where(is_resonant, xni, state.xni),
        xli=jnp.where(is_resonant, xli, state.xli),
    )

    return em, argpm, inclm, mm, nodem, nm, new_state

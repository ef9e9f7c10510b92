"""
Index layout of the flat SGP4 parameter array.

Initialization packs every derived coefficient into one 1-D ``jnp.array``
so that propagation is a pure function of ``(params, tsince)`` and can be
``jit``-ed and ``vmap``-ed over satellites. ``_IDX`` maps a coefficient's
name to its position.
"""

from __future__ import annotations

_PARAM_NAMES = [
    # Gravity constants (0-7)
    "radiusearthkm",
    "xke",
    "j2",
    "j3oj2",
    "j4",
    "tumin",
    "mu",
    "j3",
    # Mean elements (8-16)
    "bstar",
    "ecco",
    "argpo",
    "inclo",
    "mo",
    "no_kozai",
    "nodeo",
    "ndot",
    "nddot",
    # Epoch quantities
    "no_unkozai",
    "con41",
    "gsto",
    "a",
    "alta",
    "altp",
    # Near-earth secular and drag coefficients
    "cc1",
    "cc4",
    "cc5",
    "d2",
    "d3",
    "d4",
    "delmo",
    "eta",
    "argpdot",
    "omgcof",
    "sinmao",
    "t2cof",
    "t3cof",
    "t4cof",
    "t5cof",
    "x1mth2",
    "x7thm1",
    "mdot",
    "nodedot",
    "xlcof",
    "xmcof",
    "nodecf",
    "aycof",
    "isimp",  # 0.0 or 1.0
    # Deep-space secular rates and resonance coefficients
    "irez",
    "d2201",
    "d2211",
    "d3210",
    "d3222",
    "d4410",
    "d4422",
    "d5220",
    "d5232",
    "d5421",
    "d5433",
    "dedt",
    "del1",
    "del2",
    "del3",
    "didt",
    "dmdt",
    "dnodt",
    "domdt",
    "xfact",
    "xlamo",
    # Deep-space lunar/solar periodic coefficients
    "e3",
    "ee2",
    "se2",
    "se3",
    "sgh2",
    "sgh3",
    "sgh4",
    "sh2",
    "sh3",
    "si2",
    "si3",
    "sl2",
    "sl3",
    "sl4",
    "xgh2",
    "xgh3",
    "xgh4",
    "xh2",
    "xh3",
    "xi2",
    "xi3",
    "xl2",
    "xl3",
    "xl4",
    "zmol",
    "zmos",
    # Flags
    "method",  # 0.0 = near-earth, 1.0 = deep-space
    "afspc",  # 1.0 for the AFSPC operational mode
    "init_error",  # permanent initialization error code
]

_IDX = {name: i for i, name in enumerate(_PARAM_NAMES)}

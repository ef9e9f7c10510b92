"""
orbitjax is an SGP4/SDP4 satellite propagation library implemented in JAX.
"""

from .constants import (
    DEG2RAD,
    RAD2DEG,
    MINUTES_PER_DAY,
    XPDOTP,
    GM_EARTH,
    R_EARTH,
)

from .config import set_dtype, get_dtype

from .rotations import Rx, Rz

from .time import (
    jday,
    invjday,
    days2mdhms,
    gstime,
    jd_to_datetime,
)

from .coordinates import (
    state_koe_to_eci,
    state_eci_to_koe,
)

from .sgp4 import (
    Satellite,
    SGP4Elements,
    SGP4Error,
    SGP4ErrorCode,
    PropagationResult,
    WGS72OLD,
    WGS72,
    WGS84,
    parse_tle,
    sgp4_init,
    sgp4_propagate,
    sgp4_propagate_unified,
    create_sgp4_propagator,
)

"""
The `constants` module defines mathematical, time and physical constants used by orbitjax.
"""

from math import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

"""
Full turn in radians. Units: *rad*
"""
TWO_PI = 2.0 * PI

# Time Constants

"""
Number of minutes in one day. Units: *min/day*
"""
MINUTES_PER_DAY = 1440.0

"""
Number of seconds in one day. Units: *s/day*
"""
SECONDS_PER_DAY = 86400.0

"""
Conversion from radians per minute to revolutions per day. Equal to 1440/2pi. Units: *(rev/day)/(rad/min)*
"""
XPDOTP = MINUTES_PER_DAY / TWO_PI

"""
Julian Date of 1949 December 31 00:00:00 UT, the origin of the SGP4 epoch day count. Units: *days*
"""
JD_SGP4_EPOCH0 = 2433281.5

"""
Julian Date of the J2000.0 epoch (2000-01-01 12:00:00). Units: *days*
"""
JD_J2000 = 2451545.0

"""
Offset between Julian Date and Modified Julian Date. Units: *days*
"""
JD_MJD_OFFSET = 2400000.5

"""
Number of days in a Julian century. Units: *days*
"""
DAYS_PER_JULIAN_CENTURY = 36525.0

# Earth Constants
"""
Earth's gravitational constant (EGM2008 / GGM05s value). Units: *m^3/s^2*

References:

1. GGM05s Gravity Model
"""
GM_EARTH = 3.986004415e14

"""
Earth's equatorial radius. Units: *m*

References:

1. GGM05s Gravity Model
"""
R_EARTH = 6.378136300e6

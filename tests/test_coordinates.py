"""Tests for the orbitjax.coordinates module.

Covers the classical-element conversions against a textbook example,
round trips for every orbit type (including the alternate angles of
circular and equatorial orbits) and the array-form wrappers.
"""

from math import pi, sqrt

import jax.numpy as jnp
import pytest

from orbitjax.constants import DEG2RAD, GM_EARTH, R_EARTH
from orbitjax.coordinates import (
    ClassicalElements,
    anomaly_mean_to_true,
    anomaly_true_to_mean,
    classical_to_state,
    state_eci_to_koe,
    state_koe_to_eci,
    state_to_classical,
)

_MU_KM = 398600.4418

# Vallado Example 2-5
_R = [6524.834, 6862.875, 6448.296]
_V = [4.901327, 5.533756, -1.976341]


class TestStateToClassical:
    def test_vallado_example(self):
        coe = state_to_classical(_R, _V, gm=_MU_KM)
        assert coe.p == pytest.approx(11067.790, abs=1e-2)
        assert coe.a == pytest.approx(36127.343, abs=1e-2)
        assert coe.ecc == pytest.approx(0.832853, abs=1e-6)
        assert coe.incl / DEG2RAD == pytest.approx(87.870, abs=1e-3)
        assert coe.raan / DEG2RAD == pytest.approx(227.898, abs=1e-3)
        assert coe.argp / DEG2RAD == pytest.approx(53.38, abs=1e-2)
        assert coe.nu / DEG2RAD == pytest.approx(92.335, abs=1e-3)

    def test_alternate_angles_undefined_for_general_orbit(self):
        coe = state_to_classical(_R, _V, gm=_MU_KM)
        assert jnp.isnan(coe.arglat)
        assert jnp.isnan(coe.truelon)
        assert jnp.isnan(coe.lonper)

    def test_circular_inclined_uses_arglat(self):
        v = sqrt(_MU_KM / 7000.0)
        coe = state_to_classical([0.0, 0.0, 7000.0], [v, 0.0, 0.0], gm=_MU_KM)
        assert coe.ecc < 1e-8
        assert jnp.isnan(coe.argp)
        assert coe.arglat == pytest.approx(0.5 * pi, abs=1e-10)
        assert coe.m == coe.arglat

    def test_circular_equatorial_uses_truelon(self):
        v = sqrt(_MU_KM / 7000.0)
        coe = state_to_classical([0.0, -7000.0, 0.0], [v, 0.0, 0.0], gm=_MU_KM)
        assert jnp.isnan(coe.raan)
        assert coe.truelon == pytest.approx(1.5 * pi, abs=1e-10)
        assert coe.m == coe.truelon

    def test_elliptical_equatorial_uses_lonper(self):
        coe = state_to_classical([7000.0, 0.0, 0.0], [0.0, 8.0, 0.0], gm=_MU_KM)
        assert coe.ecc > 1e-3
        assert jnp.isnan(coe.raan)
        assert coe.lonper == pytest.approx(0.0, abs=1e-10)

    def test_rectilinear_is_all_nan(self):
        coe = state_to_classical([7000.0, 0.0, 0.0], [1.0, 0.0, 0.0], gm=_MU_KM)
        assert all(jnp.isnan(x) for x in coe[:8])


class TestClassicalToState:
    @pytest.mark.parametrize(
        "r, v",
        [
            (_R, _V),
            ([0.0, 7000.0, 0.0], [-3.77, 0.0, 6.53]),
            ([7000.0, 0.0, 0.0], [0.0, 8.0, 0.0]),
            ([-6000.0, 2000.0, 3000.0], [-2.0, -6.0, 3.5]),
        ],
    )
    def test_round_trip(self, r, v):
        coe = state_to_classical(r, v, gm=_MU_KM)
        r2, v2 = classical_to_state(coe, gm=_MU_KM)
        assert jnp.allclose(r2, jnp.array(r), atol=1e-6)
        assert jnp.allclose(v2, jnp.array(v), atol=1e-9)

    def test_periapsis_on_x_axis(self):
        coe = ClassicalElements(
            p=7000.0 * (1 - 0.01**2), a=7000.0, ecc=0.01, incl=0.3, raan=0.0, argp=0.0, nu=0.0, m=0.0
        )
        r, v = classical_to_state(coe, gm=_MU_KM)
        assert float(r[0]) == pytest.approx(7000.0 * 0.99, rel=1e-12)
        assert float(r[1]) == pytest.approx(0.0, abs=1e-9)
        assert float(v[0]) == pytest.approx(0.0, abs=1e-12)


class TestAnomalies:
    @pytest.mark.parametrize("ecc", [0.0, 0.1, 0.5, 0.9])
    def test_mean_true_round_trip(self, ecc):
        for m in (0.1, 1.0, 2.5, 4.0, 6.0):
            nu = anomaly_mean_to_true(m, ecc)
            assert anomaly_true_to_mean(nu, ecc) == pytest.approx(m, abs=1e-10)

    def test_hyperbolic_mean_anomaly(self):
        assert anomaly_true_to_mean(0.5, 1.5) > 0.0

    def test_hyperbolic_outside_asymptote_is_nan(self):
        assert jnp.isnan(anomaly_true_to_mean(3.0, 1.5))


class TestArrayForm:
    def test_koe_eci_round_trip_si(self):
        oe = jnp.array([R_EARTH + 500e3, 0.001, 97.5, 15.0, 30.0, 45.0])
        x = state_koe_to_eci(oe, use_degrees=True)
        assert x.shape == (6,)
        oe2 = state_eci_to_koe(x, use_degrees=True)
        assert jnp.allclose(oe2, oe, rtol=1e-9, atol=1e-5)

    def test_circular_orbit_zero_argp(self):
        oe = [7000.0, 0.0, 0.5, 1.0, 0.0, 2.0]
        x = state_koe_to_eci(oe, gm=_MU_KM)
        oe2 = state_eci_to_koe(x, gm=_MU_KM)
        assert float(oe2[4]) == 0.0
        assert float(oe2[5]) == pytest.approx(2.0, abs=1e-10)

    def test_equatorial_orbit_zero_raan(self):
        oe = [7000.0, 0.05, 0.0, 0.0, 1.2, 0.3]
        x = state_koe_to_eci(oe, gm=_MU_KM)
        oe2 = state_eci_to_koe(x, gm=_MU_KM)
        assert float(oe2[3]) == 0.0
        assert float(oe2[4]) == pytest.approx(1.2, abs=1e-10)
        assert float(oe2[5]) == pytest.approx(0.3, abs=1e-10)

    def test_default_gm_is_si(self):
        a = R_EARTH + 500e3
        x = state_koe_to_eci([a, 0.0, 0.0, 0.0, 0.0, 0.0])
        assert float(jnp.linalg.norm(x[3:])) == pytest.approx(sqrt(GM_EARTH / a), rel=1e-12)

    def test_output_dtype(self):
        x = state_koe_to_eci([7000.0, 0.01, 0.5, 0.0, 0.0, 0.0], gm=_MU_KM)
        assert x.dtype == jnp.float64

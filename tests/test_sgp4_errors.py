"""Tests for SGP4 error codes, masking and reporting."""

import jax
import jax.numpy as jnp
import pytest

from orbitjax.sgp4 import (
    PropagationResult,
    Regime,
    SGP4Elements,
    SGP4Error,
    SGP4ErrorCode,
    sgp4_init,
    sgp4_propagate,
    sgp4_propagate_unified,
)
from orbitjax.sgp4._errors import ERROR_DTYPE, combine_errors, mask_state
from orbitjax.time import jday

_EPOCH = jday(2021, 1, 5, 12, 55, 10.0)


def _elements(**overrides) -> SGP4Elements:
    """Elements of a 1957 rocket body, with fields replaced to force failures."""
    values = dict(
        ecc=0.1846988,
        incl=34.2508,
        raan=325.6936,
        argp=181.8107,
        mean_anomaly=177.4919,
        mean_motion=10.84863720,
        jd=_EPOCH[0],
        jd_frac=_EPOCH[1],
        bstar=-1.1575e-4,
        satnum_str="00001",
    )
    values.update(overrides)
    return SGP4Elements.from_degrees(**values)


class TestPermanentErrors:
    """Codes detected at initialization stick to the record."""

    def test_eccentricity_too_high(self) -> None:
        init = sgp4_init(_elements(ecc=1.8))
        assert init.error == SGP4ErrorCode.MEAN_ELEMENTS_INVALID

    def test_eccentricity_of_one(self) -> None:
        init = sgp4_init(_elements(ecc=1.0))
        assert init.error == SGP4ErrorCode.MEAN_ELEMENTS_INVALID

    def test_negative_eccentricity(self) -> None:
        init = sgp4_init(_elements(ecc=-0.1))
        assert init.error == SGP4ErrorCode.MEAN_ELEMENTS_INVALID

    def test_zero_mean_motion(self) -> None:
        init = sgp4_init(_elements(mean_motion=0.0))
        assert init.error == SGP4ErrorCode.MEAN_MOTION_NOT_POSITIVE

    def test_negative_mean_motion(self) -> None:
        init = sgp4_init(_elements(mean_motion=-1.0))
        assert init.error == SGP4ErrorCode.MEAN_MOTION_NOT_POSITIVE

    def test_permanent_error_has_no_coefficients(self) -> None:
        init = sgp4_init(_elements(ecc=1.8))
        assert init.regime == Regime.NEAR_EARTH
        assert jnp.all(jnp.isfinite(init.params))

    @pytest.mark.parametrize("tsince", [0.0, 60.0, -1440.0, 1.0e5])
    def test_permanent_error_at_every_time(self, tsince) -> None:
        init = sgp4_init(_elements(mean_motion=0.0))
        result, _ = sgp4_propagate(init.params, tsince, init.regime)
        assert int(result.error) == SGP4ErrorCode.MEAN_MOTION_NOT_POSITIVE
        assert jnp.all(jnp.isnan(result.r))
        assert jnp.all(jnp.isnan(result.v))

    def test_permanent_error_under_unified(self) -> None:
        init = sgp4_init(_elements(ecc=1.8))
        result, _ = jax.jit(sgp4_propagate_unified)(init.params, 60.0)
        assert int(result.error) == SGP4ErrorCode.MEAN_ELEMENTS_INVALID

    def test_permanent_error_is_logged(self, caplog) -> None:
        with caplog.at_level("WARNING", logger="orbitjax"):
            sgp4_init(_elements(ecc=1.8))
        assert any(
            "failed with code 1" in record.getMessage() and record.levelname == "WARNING"
            for record in caplog.records
        )


class TestPropagationErrors:
    """Codes that depend on the requested time."""

    def test_perturbed_eccentricity_near_zero_mean_motion(self) -> None:
        # A deep-space orbit at ~1e-8 rev/day: lunar/solar periodics blow up
        init = sgp4_init(_elements(mean_motion=1.0e-8))
        assert init.regime == Regime.DEEP_SPACE
        assert init.error == SGP4ErrorCode.PERTURBED_ELEMENTS_INVALID

    def test_negative_semi_latus_rectum(self) -> None:
        init = sgp4_init(_elements(ecc=0.9999999))
        assert init.error == SGP4ErrorCode.SEMI_LATUS_RECTUM_NEGATIVE

    def test_decayed_at_epoch(self) -> None:
        init = sgp4_init(_elements(mean_motion=25.84863720))
        assert init.error == SGP4ErrorCode.SATELLITE_DECAYED

    def test_decay_over_time(self) -> None:
        # ~200 km perigee with very high drag
        elements = _elements(
            ecc=0.001, incl=90.0, mean_motion=16.25, bstar=0.05, satnum_str="99999"
        )
        init = sgp4_init(elements)
        assert init.error == SGP4ErrorCode.NONE

        at_epoch, _ = sgp4_propagate(init.params, 0.0, init.regime)
        assert int(at_epoch.error) == 0
        assert jnp.all(jnp.isfinite(at_epoch.r))

        later, _ = sgp4_propagate(init.params, 14400.0, init.regime)
        assert int(later.error) == SGP4ErrorCode.SATELLITE_DECAYED
        assert jnp.all(jnp.isnan(later.r))

    def test_vmap_reports_per_time_codes(self) -> None:
        elements = _elements(ecc=0.001, incl=90.0, mean_motion=16.25, bstar=0.05)
        init = sgp4_init(elements)
        times = jnp.array([0.0, 60.0, 14400.0])
        result, _ = jax.vmap(lambda t: sgp4_propagate(init.params, t, init.regime))(times)

        assert result.error.dtype == ERROR_DTYPE
        assert result.error.tolist() == [0, 0, int(SGP4ErrorCode.SATELLITE_DECAYED)]
        assert result.ok.tolist() == [True, True, False]
        assert jnp.all(jnp.isfinite(result.r[:2]))
        assert jnp.all(jnp.isnan(result.r[2]))


class TestErrorCombination:
    """The earliest failing stage determines the code."""

    def test_all_ok(self) -> None:
        error = combine_errors(
            0.0,
            [
                (jnp.array(True), SGP4ErrorCode.MEAN_MOTION_NOT_POSITIVE),
                (jnp.array(True), SGP4ErrorCode.SATELLITE_DECAYED),
            ],
        )
        assert int(error) == 0
        assert error.dtype == ERROR_DTYPE

    def test_first_failure_wins(self) -> None:
        error = combine_errors(
            0.0,
            [
                (jnp.array(True), SGP4ErrorCode.MEAN_MOTION_NOT_POSITIVE),
                (jnp.array(False), SGP4ErrorCode.SEMI_LATUS_RECTUM_NEGATIVE),
                (jnp.array(False), SGP4ErrorCode.SATELLITE_DECAYED),
            ],
        )
        assert int(error) == SGP4ErrorCode.SEMI_LATUS_RECTUM_NEGATIVE

    def test_init_error_overrides_checks(self) -> None:
        error = combine_errors(
            5.0, [(jnp.array(False), SGP4ErrorCode.SATELLITE_DECAYED)]
        )
        assert int(error) == SGP4ErrorCode.EPOCH_ELEMENTS_SUBORBITAL

    def test_nan_comparison_counts_as_failure(self) -> None:
        mrt = jnp.array(jnp.nan)
        error = combine_errors(0.0, [(mrt >= 1.0, SGP4ErrorCode.SATELLITE_DECAYED)])
        assert int(error) == SGP4ErrorCode.SATELLITE_DECAYED

    def test_mask_state(self) -> None:
        r = jnp.array([1.0, 2.0, 3.0])
        v = jnp.array([4.0, 5.0, 6.0])
        r_ok, v_ok = mask_state(r, v, jnp.array(0))
        assert jnp.array_equal(r_ok, r)
        assert jnp.array_equal(v_ok, v)

        r_bad, v_bad = mask_state(r, v, jnp.array(4))
        assert jnp.all(jnp.isnan(r_bad))
        assert jnp.all(jnp.isnan(v_bad))


class TestErrorReporting:
    """Messages and the opt-in exception."""

    @pytest.mark.parametrize("code", list(SGP4ErrorCode))
    def test_every_code_has_message(self, code) -> None:
        assert isinstance(code.message, str)
        assert code.message

    def test_code_values(self) -> None:
        assert [int(c) for c in SGP4ErrorCode] == [0, 1, 2, 3, 4, 5, 6]
        assert SGP4ErrorCode.EPOCH_ELEMENTS_SUBORBITAL.message.startswith("mean motion at epoch")

    def test_sgp4_error_is_value_error(self) -> None:
        err = SGP4Error(6)
        assert isinstance(err, ValueError)
        assert err.code == SGP4ErrorCode.SATELLITE_DECAYED
        assert "SGP4 error 6" in str(err)

    def test_raise_for_error(self) -> None:
        failed = PropagationResult(
            r=jnp.full(3, jnp.nan), v=jnp.full(3, jnp.nan), error=jnp.array(4, dtype=ERROR_DTYPE)
        )
        with pytest.raises(SGP4Error) as excinfo:
            failed.raise_for_error()
        assert excinfo.value.code == SGP4ErrorCode.SEMI_LATUS_RECTUM_NEGATIVE

    def test_raise_for_error_passes_through(self) -> None:
        ok = PropagationResult(
            r=jnp.zeros(3), v=jnp.zeros(3), error=jnp.array(0, dtype=ERROR_DTYPE)
        )
        assert ok.raise_for_error() is ok

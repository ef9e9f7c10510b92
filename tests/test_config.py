"""Tests for the orbitjax.config module."""

import jax
import jax.numpy as jnp
import pytest

from orbitjax.config import get_dtype, set_dtype
from orbitjax.sgp4 import parse_tle, sgp4_init

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"


@pytest.fixture(autouse=True)
def reset_dtype():
    """Restore float64 after each test."""
    yield
    set_dtype(jnp.float64)


class TestGetSetDtype:
    def test_default_dtype(self):
        assert get_dtype() == jnp.float64

    def test_set_float32(self):
        set_dtype(jnp.float32)
        assert get_dtype() == jnp.float32

    def test_set_float16(self):
        set_dtype(jnp.float16)
        assert get_dtype() == jnp.float16

    def test_set_bfloat16(self):
        set_dtype(jnp.bfloat16)
        assert get_dtype() == jnp.bfloat16

    def test_roundtrip(self):
        for dtype in (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64):
            set_dtype(dtype)
            assert get_dtype() == dtype

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.int32)

    def test_invalid_dtype_string_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype("float32")

    def test_float64_enables_x64(self):
        set_dtype(jnp.float64)
        assert jax.config.jax_enable_x64


class TestParamsDtype:
    def test_params_follow_float64(self):
        init = sgp4_init(parse_tle(ISS_LINE1, ISS_LINE2))
        assert init.params.dtype == jnp.float64

    def test_params_follow_float32(self):
        set_dtype(jnp.float32)
        init = sgp4_init(parse_tle(ISS_LINE1, ISS_LINE2))
        assert init.params.dtype == jnp.float32

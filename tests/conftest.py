import jax.numpy as jnp
import pytest

from orbitjax.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    Tests that need another precision (test_config.py, the float32
    propagation tests) switch it themselves and rely on this fixture to
    restore float64 for the next test.
    """
    set_dtype(jnp.float64)

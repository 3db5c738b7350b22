"""Tests for the astroprop.config module."""

import jax
import jax.numpy as jnp
import pytest

from astroprop.config import get_dtype, set_dtype
from astroprop.orbits import orbital_period


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

    def test_roundtrip(self):
        for dtype in (jnp.float32, jnp.float64):
            set_dtype(dtype)
            assert get_dtype() == dtype

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.int32)

    def test_invalid_dtype_string_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype("float64")

    def test_x64_enabled_on_import(self):
        assert jax.config.jax_enable_x64 is True


class TestDtypeSwitchingOutputs:
    def test_orbital_period_dtype_float64(self):
        T = orbital_period(7000.0)
        assert T.dtype == jnp.float64

    def test_orbital_period_dtype_float32(self):
        set_dtype(jnp.float32)
        T = orbital_period(7000.0)
        assert T.dtype == jnp.float32

import jax.numpy as jnp
import pytest

from astroprop.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    With pytest-xdist, each worker process imports astroprop on its own.
    This fixture ensures all tests get float64 unless they explicitly override
    it (e.g. test_config.py switches to float32 and back).
    """
    set_dtype(jnp.float64)

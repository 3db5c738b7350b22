"""Tests for the two-body orbit diagnostics."""

import math

import jax.numpy as jnp
import pytest

from astroprop.constants import DEG2RAD, GM_EARTH, J2_EARTH, R_EARTH
from astroprop.orbits import (
    angular_momentum,
    circular_velocity,
    orbital_period,
    orbital_period_from_state,
    raan_drift_rate,
    semimajor_axis_from_state,
    specific_energy,
    state_to_elements,
)


def _circular_state(a, inc=0.0):
    v = math.sqrt(GM_EARTH / a)
    return jnp.array([a, 0.0, 0.0, 0.0, v * math.cos(inc), v * math.sin(inc)])


class TestOrbitalPeriod:
    def test_leo(self):
        T = orbital_period(7000.0)
        assert float(T) == pytest.approx(2.0 * math.pi * math.sqrt(7000.0**3 / GM_EARTH), rel=1e-14)

    def test_from_state_matches(self):
        x = _circular_state(7000.0)
        assert float(orbital_period_from_state(x)) == pytest.approx(float(orbital_period(7000.0)), rel=1e-12)

    def test_circular_velocity(self):
        assert float(circular_velocity(7000.0)) == pytest.approx(7.5460, abs=1e-4)


class TestIntegrals:
    def test_specific_energy_circular(self):
        x = _circular_state(7000.0)
        assert float(specific_energy(x)) == pytest.approx(-GM_EARTH / (2.0 * 7000.0), rel=1e-12)

    def test_vis_viva(self):
        x = jnp.array([7000.0, 0.0, 0.0, 0.0, 8.0, 0.0])
        a = float(semimajor_axis_from_state(x))
        assert float(specific_energy(x)) == pytest.approx(-GM_EARTH / (2.0 * a), rel=1e-12)

    def test_angular_momentum(self):
        x = jnp.array([7000.0, 0.0, 0.0, 0.0, 7.5, 0.0])
        assert jnp.allclose(angular_momentum(x), jnp.array([0.0, 0.0, 52500.0]))


class TestStateToElements:
    def test_circular_inclined(self):
        oe = state_to_elements(_circular_state(7000.0, 51.6 * DEG2RAD))
        assert float(oe[0]) == pytest.approx(7000.0, rel=1e-10)
        assert float(oe[1]) == pytest.approx(0.0, abs=1e-7)
        assert float(oe[2]) == pytest.approx(51.6 * DEG2RAD, rel=1e-12)

    def test_elliptical_at_perigee(self):
        rp = 7000.0
        e = 0.1
        a = rp / (1.0 - e)
        vp = math.sqrt(GM_EARTH * (1.0 + e) / rp)
        oe = state_to_elements(jnp.array([rp, 0.0, 0.0, 0.0, vp, 0.0]))
        assert float(oe[0]) == pytest.approx(a, rel=1e-10)
        assert float(oe[1]) == pytest.approx(e, rel=1e-10)
        # Perigee on the x-axis: mean anomaly zero
        assert min(float(oe[5]), 2.0 * math.pi - float(oe[5])) < 1e-8

    def test_angles_in_range(self):
        x = jnp.array([-4000.0, 5000.0, 2000.0, -5.0, -4.0, 3.0])
        oe = state_to_elements(x)
        for angle in oe[3:]:
            assert 0.0 <= float(angle) < 2.0 * math.pi


class TestRaanDrift:
    def test_prograde_regresses(self):
        rate = raan_drift_rate(7000.0, 0.0, 51.6 * DEG2RAD)
        assert float(rate) < 0.0

    def test_polar_is_zero(self):
        assert float(raan_drift_rate(7000.0, 0.0, math.pi / 2.0)) == pytest.approx(0.0, abs=1e-20)

    def test_value(self):
        a = 7000.0
        n = math.sqrt(GM_EARTH / a**3)
        expected = -1.5 * n * J2_EARTH * (R_EARTH / a) ** 2
        assert float(raan_drift_rate(a, 0.0, 0.0)) == pytest.approx(expected, rel=1e-12)

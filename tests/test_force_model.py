"""Tests for the force model terms and their composition.

Validates gravity (point mass, J2, J3), the exponential atmosphere, drag,
SRP with both shadow models, third-body perturbations, model fallbacks and
the per-term acceleration breakdown.
"""

import logging
import math
from datetime import datetime, timezone

import jax
import jax.numpy as jnp
import pytest

from astroprop.constants import (
    AU,
    DRAG_CUTOFF_ALTITUDE,
    GM_EARTH,
    GM_MOON,
    J2_EARTH,
    J3_EARTH,
    OMEGA_EARTH,
    P_SUN,
    R_EARTH,
)
from astroprop.errors import ConfigurationError, ForceModelError
from astroprop.force_model import (
    MODEL_FALLBACKS,
    AtmosphereModelType,
    EclipseState,
    ForceModelConfiguration,
    GravityModelType,
    ShadowModel,
    SpacecraftProperties,
    SrpModelType,
    ThirdBodyPositions,
    accel_drag,
    accel_gravity,
    accel_j2,
    accel_j3,
    accel_point_mass,
    accel_srp,
    accel_third_bodies,
    accel_third_body,
    density_exponential,
    eclipse_conical,
    eclipse_cylindrical,
    eclipse_state,
    evaluate,
    relative_velocity,
    resolve_model,
    solar_pressure,
)
from astroprop.state import PhysicalState

EPOCH = datetime(2024, 3, 20, 12, tzinfo=timezone.utc)

# Sun on the +x axis, Moon on the +y axis
POSITIONS = ThirdBodyPositions(
    sun=jnp.array([AU, 0.0, 0.0]),
    moon=jnp.array([0.0, 384400.0, 0.0]),
)


def _state(position, velocity=(0.0, 7.5, 0.0)):
    return PhysicalState(EPOCH, list(position), list(velocity))


# ===========================================================================
# Configuration
# ===========================================================================
class TestSpacecraftProperties:
    def test_defaults(self):
        sc = SpacecraftProperties()
        assert sc.mass == 1000.0
        assert sc.drag_coefficient == 2.2
        assert sc.reflectivity_coefficient == 1.3

    def test_derived_ratios(self):
        sc = SpacecraftProperties(mass=500.0, drag_coefficient=2.0, drag_area=5.0, srp_area=2.0)
        assert sc.ballistic_coefficient == pytest.approx(50.0)
        assert sc.srp_area_to_mass == pytest.approx(0.004)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"mass": 0.0},
            {"mass": -1.0},
            {"drag_area": -1.0},
            {"srp_area": float("nan")},
            {"reflectivity_coefficient": float("inf")},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(ConfigurationError):
            SpacecraftProperties(**kwargs)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            SpacecraftProperties(mass=0.0)


class TestForceModelConfiguration:
    def test_two_body_defaults(self):
        cfg = ForceModelConfiguration.two_body()
        assert cfg.enable_central_body_gravity
        assert cfg.gravity_model is GravityModelType.POINT_MASS
        assert not cfg.drag_active
        assert not cfg.srp_active
        assert not cfg.needs_third_bodies

    def test_string_enums_are_coerced(self):
        cfg = ForceModelConfiguration(gravity_model="j2j3", shadow_model="cylindrical")
        assert cfg.gravity_model is GravityModelType.J2J3
        assert cfg.shadow_model is ShadowModel.CYLINDRICAL

    def test_unknown_model_raises(self):
        with pytest.raises(ConfigurationError, match="gravity_model"):
            ForceModelConfiguration(gravity_model="egm2008")

    def test_order_exceeding_degree_raises(self):
        with pytest.raises(ConfigurationError, match="gravity_order"):
            ForceModelConfiguration(gravity_degree=2, gravity_order=4)

    def test_medium_fidelity(self):
        cfg = ForceModelConfiguration.medium_fidelity()
        assert cfg.gravity_model is GravityModelType.J2J3
        assert cfg.drag_active
        assert cfg.srp_active
        assert cfg.enable_third_body_sun and cfg.enable_third_body_moon
        assert cfg.fidelity_notes() == ()

    def test_high_fidelity_reports_substitutions(self):
        cfg = ForceModelConfiguration.high_fidelity()
        notes = cfg.fidelity_notes()
        assert len(notes) == 3
        assert cfg.effective_gravity_model() is GravityModelType.J2J3

    def test_disabled_terms_have_no_notes(self):
        cfg = ForceModelConfiguration(
            gravity_model=GravityModelType.SPHERICAL_HARMONICS,
            gravity_degree=8,
            gravity_order=8,
            enable_central_body_gravity=False,
        )
        assert cfg.fidelity_notes() == ()

    def test_srp_model_none_is_inactive(self):
        cfg = ForceModelConfiguration(enable_srp=True, srp_model=SrpModelType.NONE)
        assert not cfg.srp_active

    def test_frozen(self):
        cfg = ForceModelConfiguration()
        with pytest.raises(AttributeError):
            cfg.enable_srp = True


class TestModelFallbacks:
    @pytest.mark.parametrize("model", list(MODEL_FALLBACKS))
    def test_fallback_has_note(self, model):
        effective, note = resolve_model(model)
        assert effective is MODEL_FALLBACKS[model]
        assert model.value in note

    @pytest.mark.parametrize(
        "model",
        [GravityModelType.J2, AtmosphereModelType.EXPONENTIAL, SrpModelType.CANNONBALL],
    )
    def test_implemented_models_are_unchanged(self, model):
        assert resolve_model(model) == (model, None)


# ===========================================================================
# Gravity
# ===========================================================================
class TestGravity:
    def test_point_mass_magnitude(self):
        a = accel_point_mass(jnp.array([7000.0, 0.0, 0.0]))
        assert float(a[0]) == pytest.approx(-GM_EARTH / 7000.0**2, rel=1e-12)
        assert float(a[1]) == 0.0

    def test_point_mass_accepts_full_state(self):
        x = jnp.array([7000.0, 0.0, 0.0, 0.0, 7.5, 0.0])
        assert jnp.allclose(accel_point_mass(x), accel_point_mass(x[:3]))

    def test_j2_equatorial(self):
        r = 7000.0
        a = accel_j2(jnp.array([r, 0.0, 0.0]))
        expected = -1.5 * J2_EARTH * GM_EARTH / r**2 * (R_EARTH / r) ** 2
        assert float(a[0]) == pytest.approx(expected, rel=1e-12)
        assert float(a[2]) == 0.0

    def test_j2_polar_points_outward(self):
        r = 7000.0
        a = accel_j2(jnp.array([0.0, 0.0, r]))
        expected = 3.0 * J2_EARTH * GM_EARTH / r**2 * (R_EARTH / r) ** 2
        assert float(a[2]) == pytest.approx(expected, rel=1e-12)

    def test_j3_equatorial_is_along_axis(self):
        r = 7000.0
        a = accel_j3(jnp.array([r, 0.0, 0.0]))
        expected = 1.5 * J3_EARTH * GM_EARTH * R_EARTH**3 / r**5
        assert float(a[0]) == 0.0
        assert float(a[2]) == pytest.approx(expected, rel=1e-12)

    def test_j3_odd_in_latitude(self):
        a_north = accel_j3(jnp.array([5000.0, 0.0, 4000.0]))
        a_south = accel_j3(jnp.array([5000.0, 0.0, -4000.0]))
        assert float(a_north[0]) == pytest.approx(-float(a_south[0]), rel=1e-12)
        assert float(a_north[2]) == pytest.approx(float(a_south[2]), rel=1e-12)

    def test_gravity_model_composition(self):
        r = jnp.array([5000.0, 3000.0, 4000.0])
        pm = accel_point_mass(r)
        assert jnp.allclose(accel_gravity(r, GravityModelType.J2), pm + accel_j2(r))
        assert jnp.allclose(
            accel_gravity(r, GravityModelType.J2J3), pm + accel_j2(r) + accel_j3(r)
        )

    def test_spherical_harmonics_evaluated_as_j2j3(self):
        r = jnp.array([5000.0, 3000.0, 4000.0])
        assert jnp.array_equal(
            accel_gravity(r, GravityModelType.SPHERICAL_HARMONICS),
            accel_gravity(r, GravityModelType.J2J3),
        )

    def test_jit_compatible(self):
        r = jnp.array([5000.0, 3000.0, 4000.0])
        eager = accel_gravity(r, GravityModelType.J2J3)
        jitted = jax.jit(lambda x: accel_gravity(x, GravityModelType.J2J3))(r)
        assert jnp.allclose(eager, jitted, rtol=1e-14)


# ===========================================================================
# Atmosphere and drag
# ===========================================================================
class TestDensityExponential:
    def test_sea_level(self):
        assert float(density_exponential(0.0)) == pytest.approx(1.225)

    def test_below_ground_returns_sea_level(self):
        assert float(density_exponential(-5.0)) == pytest.approx(1.225)

    def test_band_base(self):
        assert float(density_exponential(400.0)) == pytest.approx(3.725e-12, rel=1e-10)

    def test_within_band(self):
        expected = 3.725e-12 * math.exp(-25.0 / 58.515)
        assert float(density_exponential(425.0)) == pytest.approx(expected, rel=1e-10)

    def test_above_table_continues_top_band(self):
        expected = 3.019e-15 * math.exp(-500.0 / 268.0)
        assert float(density_exponential(1500.0)) == pytest.approx(expected, rel=1e-10)

    def test_decreasing_with_altitude(self):
        h = jnp.linspace(0.0, 1200.0, 241)
        rho = jax.vmap(density_exponential)(h)
        assert bool(jnp.all(jnp.diff(rho) < 0.0))


class TestDrag:
    def test_relative_velocity_removes_corotation(self):
        x = jnp.array([6778.0, 0.0, 0.0, 0.0, 7.67, 0.0])
        v_rel = relative_velocity(x)
        assert float(v_rel[1]) == pytest.approx(7.67 - OMEGA_EARTH * 6778.0, rel=1e-12)

    def test_opposes_relative_velocity(self):
        x = jnp.array([6778.0, 0.0, 0.0, 0.0, 7.67, 0.0])
        sc = SpacecraftProperties()
        rho = 3.7e-12
        a = accel_drag(x, rho, sc)
        v = 7.67 - OMEGA_EARTH * 6778.0
        expected = 0.5 * sc.drag_coefficient * sc.drag_area / sc.mass * rho * 1.0e3 * v**2
        assert float(a[1]) == pytest.approx(-expected, rel=1e-10)
        assert float(a[0]) == 0.0
        assert float(a[2]) == 0.0

    def test_zero_density_gives_zero(self):
        x = jnp.array([6778.0, 0.0, 0.0, 0.0, 7.67, 0.0])
        assert jnp.all(accel_drag(x, 0.0, SpacecraftProperties()) == 0.0)


# ===========================================================================
# Solar radiation pressure and eclipses
# ===========================================================================
class TestSrp:
    def test_pressure_at_one_au(self):
        assert float(solar_pressure(AU)) == pytest.approx(P_SUN, rel=1e-12)

    def test_pressure_inverse_square(self):
        assert float(solar_pressure(2.0 * AU)) == pytest.approx(P_SUN / 4.0, rel=1e-12)

    def test_points_away_from_sun(self):
        sc = SpacecraftProperties()
        r = jnp.array([7000.0, 0.0, 0.0])
        a = accel_srp(r, POSITIONS.sun, sc)
        d = AU - 7000.0
        expected = P_SUN * (AU / d) ** 2 * sc.reflectivity_coefficient * sc.srp_area_to_mass * 1e-3
        assert float(a[0]) == pytest.approx(-expected, rel=1e-10)
        assert float(a[1]) == 0.0

    def test_scales_with_reflectivity(self):
        r = jnp.array([7000.0, 0.0, 0.0])
        a1 = accel_srp(r, POSITIONS.sun, SpacecraftProperties(reflectivity_coefficient=1.0))
        a2 = accel_srp(r, POSITIONS.sun, SpacecraftProperties(reflectivity_coefficient=2.0))
        assert jnp.allclose(a2, 2.0 * a1)


class TestEclipse:
    def test_conical_sunlit(self):
        assert float(eclipse_conical(jnp.array([7000.0, 0.0, 0.0]), POSITIONS.sun)) == 1.0

    def test_conical_umbra(self):
        assert float(eclipse_conical(jnp.array([-7000.0, 0.0, 0.0]), POSITIONS.sun)) == 0.0

    def test_conical_penumbra_at_shadow_edge(self):
        nu = float(eclipse_conical(jnp.array([-7000.0, R_EARTH, 0.0]), POSITIONS.sun))
        assert 0.0 < nu < 1.0

    def test_conical_monotonic_across_edge(self):
        ys = jnp.linspace(R_EARTH - 50.0, R_EARTH + 50.0, 101)
        nus = jax.vmap(lambda y: eclipse_conical(jnp.array([-7000.0, y, 0.0]), POSITIONS.sun))(ys)
        assert float(nus[0]) == 0.0
        assert float(nus[-1]) == 1.0
        assert bool(jnp.all(jnp.diff(nus) >= 0.0))
        assert bool(jnp.all(jnp.isfinite(nus)))

    def test_cylindrical_is_binary(self):
        sun = POSITIONS.sun
        assert float(eclipse_cylindrical(jnp.array([-7000.0, 0.0, 0.0]), sun)) == 0.0
        assert float(eclipse_cylindrical(jnp.array([-7000.0, R_EARTH + 1.0, 0.0]), sun)) == 1.0
        assert float(eclipse_cylindrical(jnp.array([7000.0, 0.0, 0.0]), sun)) == 1.0

    def test_cylindrical_no_penumbra(self):
        nu = float(eclipse_cylindrical(jnp.array([-7000.0, R_EARTH - 1.0, 0.0]), POSITIONS.sun))
        assert nu == 0.0

    @pytest.mark.parametrize(
        "nu, expected",
        [(1.0, EclipseState.NONE), (0.0, EclipseState.UMBRA), (0.4, EclipseState.PENUMBRA)],
    )
    def test_eclipse_state(self, nu, expected):
        assert eclipse_state(nu) is expected


# ===========================================================================
# Third body
# ===========================================================================
class TestThirdBody:
    def test_zero_at_central_body(self):
        a = accel_third_body(jnp.zeros(3), POSITIONS.moon, GM_MOON)
        assert jnp.allclose(a, 0.0, atol=1e-20)

    def test_tidal_acceleration_towards_moon(self):
        s = 384400.0
        r = 7000.0
        a = accel_third_body(jnp.array([r, 0.0, 0.0]), jnp.array([s, 0.0, 0.0]), GM_MOON)
        assert float(a[0]) > 0.0
        assert float(a[0]) == pytest.approx(2.0 * GM_MOON * r / s**3, rel=0.1)

    def test_selection_flags(self):
        r = jnp.array([7000.0, 0.0, 0.0])
        sun_only = accel_third_bodies(r, POSITIONS, sun=True, moon=False)
        moon_only = accel_third_bodies(r, POSITIONS, sun=False, moon=True)
        both = accel_third_bodies(r, POSITIONS)
        assert jnp.allclose(both, sun_only + moon_only, rtol=1e-12)
        assert jnp.all(accel_third_bodies(r, POSITIONS, sun=False, moon=False) == 0.0)

    def test_planets_included_when_enabled(self):
        r = jnp.array([7000.0, 0.0, 0.0])
        positions = ThirdBodyPositions(
            sun=POSITIONS.sun,
            moon=POSITIONS.moon,
            planets={"jupiter": [5.0 * AU, 0.0, 0.0]},
        )
        without = accel_third_bodies(r, positions, planets=False)
        with_planets = accel_third_bodies(r, positions, planets=True)
        assert not jnp.allclose(without, with_planets, rtol=0.0, atol=0.0)

    def test_unknown_planet_raises(self):
        positions = ThirdBodyPositions(
            sun=POSITIONS.sun, moon=POSITIONS.moon, planets={"pluto": [40.0 * AU, 0.0, 0.0]}
        )
        with pytest.raises(KeyError):
            accel_third_bodies(jnp.array([7000.0, 0.0, 0.0]), positions, planets=True)


# ===========================================================================
# Composition
# ===========================================================================
class TestEvaluate:
    def test_two_body_breakdown(self):
        b = evaluate(_state([7000.0, 0.0, 0.0]), SpacecraftProperties())
        assert jnp.array_equal(b.total, b.gravity)
        assert b.drag_magnitude == 0.0
        assert b.srp_magnitude == 0.0
        assert b.third_body_magnitude == 0.0
        assert b.eclipse is EclipseState.NONE
        assert b.shadow_factor == 1.0
        assert b.gravity_magnitude == pytest.approx(GM_EARTH / 7000.0**2, rel=1e-12)

    def test_disabled_is_exactly_zero(self):
        b = evaluate(
            _state([7000.0, 0.0, 0.0]),
            SpacecraftProperties(),
            config=ForceModelConfiguration.disabled(),
            third_bodies=POSITIONS,
        )
        assert jnp.all(b.total == 0.0)

    def test_total_is_sum_of_terms(self):
        b = evaluate(
            _state([7000.0, 0.0, 0.0]),
            SpacecraftProperties(),
            config=ForceModelConfiguration.medium_fidelity(),
            third_bodies=POSITIONS,
        )
        assert jnp.allclose(b.total, b.gravity + b.drag + b.srp + b.third_body, rtol=1e-14)
        assert b.drag_magnitude > 0.0
        assert b.srp_magnitude > 0.0
        assert b.third_body_magnitude > 0.0

    def test_eclipse_zeroes_srp(self):
        b = evaluate(
            _state([-7000.0, 0.0, 0.0]),
            SpacecraftProperties(),
            config=ForceModelConfiguration.medium_fidelity(),
            third_bodies=POSITIONS,
        )
        assert b.eclipse is EclipseState.UMBRA
        assert b.in_eclipse
        assert b.srp_magnitude == 0.0

    def test_sunlit_srp_matches_cannonball(self):
        sc = SpacecraftProperties(mass=500.0, srp_area=4.0, reflectivity_coefficient=1.5)
        cfg = ForceModelConfiguration(enable_central_body_gravity=False, enable_srp=True)
        b = evaluate(_state([7000.0, 0.0, 0.0]), sc, config=cfg, third_bodies=POSITIONS)
        expected = P_SUN * (AU / (AU - 7000.0)) ** 2 * 1.5 * 4.0 / 500.0 * 1e-3
        assert b.eclipse is EclipseState.NONE
        assert not b.in_eclipse
        assert b.srp_magnitude == pytest.approx(expected, rel=1e-6)
        assert jnp.array_equal(b.total, b.srp)

    def test_penumbra_scales_srp(self):
        cfg = ForceModelConfiguration(enable_srp=True)
        sc = SpacecraftProperties()
        state = _state([-7000.0, R_EARTH, 0.0])
        b = evaluate(state, sc, config=cfg, third_bodies=POSITIONS)
        full = accel_srp(state.position, POSITIONS.sun, sc)
        assert b.eclipse is EclipseState.PENUMBRA
        assert jnp.allclose(b.srp, b.shadow_factor * full, rtol=1e-12)

    def test_eclipsing_disabled_keeps_full_srp(self):
        cfg = ForceModelConfiguration(enable_srp=True, enable_eclipsing=False)
        b = evaluate(_state([-7000.0, 0.0, 0.0]), SpacecraftProperties(), config=cfg,
                     third_bodies=POSITIONS)
        assert b.eclipse is EclipseState.NONE
        assert b.srp_magnitude > 0.0

    def test_drag_cut_off_at_high_altitude(self):
        r = R_EARTH + DRAG_CUTOFF_ALTITUDE + 200.0
        cfg = ForceModelConfiguration(enable_atmospheric_drag=True)
        b = evaluate(_state([r, 0.0, 0.0], [0.0, 7.0, 0.0]), SpacecraftProperties(), config=cfg)
        assert b.drag_magnitude == 0.0

    def test_missing_third_bodies_warns(self, caplog):
        cfg = ForceModelConfiguration.medium_fidelity()
        with caplog.at_level(logging.WARNING, logger="astroprop.force_model.evaluation"):
            b = evaluate(_state([7000.0, 0.0, 0.0]), SpacecraftProperties(), config=cfg)
        assert "No third-body positions" in caplog.text
        assert b.srp_magnitude == 0.0
        assert b.third_body_magnitude == 0.0

    def test_fallbacks_are_logged(self, caplog):
        cfg = ForceModelConfiguration.high_fidelity()
        with caplog.at_level(logging.WARNING, logger="astroprop.force_model.evaluation"):
            evaluate(_state([7000.0, 0.0, 0.0]), SpacecraftProperties(), config=cfg,
                     third_bodies=POSITIONS)
        assert "spherical_harmonics" in caplog.text
        assert "nrlmsise00" in caplog.text
        assert "box_wing" in caplog.text

    def test_non_finite_state_raises(self):
        with pytest.raises(ForceModelError, match="not finite"):
            evaluate(_state([float("nan"), 0.0, 0.0]), SpacecraftProperties())

    def test_state_at_centre_raises(self):
        with pytest.raises(ForceModelError, match="centre"):
            evaluate(_state([0.0, 0.0, 0.0]), SpacecraftProperties())

    def test_spacecraft_at_sun_raises(self):
        cfg = ForceModelConfiguration(enable_srp=True)
        with pytest.raises(ForceModelError, match="Sun"):
            evaluate(_state([AU, 0.0, 0.0]), SpacecraftProperties(), config=cfg,
                     third_bodies=POSITIONS)

    def test_spacecraft_at_moon_raises(self):
        cfg = ForceModelConfiguration(enable_third_body_moon=True)
        with pytest.raises(ForceModelError, match="Moon"):
            evaluate(_state([0.0, 384400.0, 0.0]), SpacecraftProperties(), config=cfg,
                     third_bodies=POSITIONS)

    def test_spacecraft_at_planet_raises(self):
        positions = ThirdBodyPositions(
            sun=POSITIONS.sun,
            moon=POSITIONS.moon,
            planets={"jupiter": jnp.array([7.0e8, 0.0, 0.0])},
        )
        cfg = ForceModelConfiguration(enable_third_body_planets=True)
        with pytest.raises(ForceModelError, match="jupiter"):
            evaluate(_state([7.0e8, 0.0, 0.0]), SpacecraftProperties(), config=cfg,
                     third_bodies=positions)

    def test_body_at_centre_raises(self):
        positions = ThirdBodyPositions(sun=POSITIONS.sun, moon=[0.0, 0.0, 0.0])
        cfg = ForceModelConfiguration(enable_third_body_moon=True)
        with pytest.raises(ForceModelError, match="Moon"):
            evaluate(_state([7000.0, 0.0, 0.0]), SpacecraftProperties(), config=cfg,
                     third_bodies=positions)

    def test_disabled_body_is_not_checked(self):
        cfg = ForceModelConfiguration(enable_third_body_sun=True)
        b = evaluate(_state([0.0, 384400.0, 0.0]), SpacecraftProperties(), config=cfg,
                     third_bodies=POSITIONS)
        assert bool(jnp.all(jnp.isfinite(b.total)))

    def test_non_finite_sun_raises(self):
        positions = ThirdBodyPositions(sun=[float("inf"), 0.0, 0.0], moon=POSITIONS.moon)
        with pytest.raises(ForceModelError, match="Sun position"):
            evaluate(_state([7000.0, 0.0, 0.0]), SpacecraftProperties(),
                     config=ForceModelConfiguration(enable_srp=True), third_bodies=positions)

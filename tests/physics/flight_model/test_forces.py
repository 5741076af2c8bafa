"""Unit tests for the force model."""

import math

import pytest

from aircore.physics.flight_model.base import (
    AircraftParameters,
    AircraftState,
    FlapPosition,
    PhysicsState,
)
from aircore.physics.flight_model.forces import (
    air_density,
    calculate_drag,
    calculate_lift,
    calculate_thrust,
    compute_forces,
    drag_coefficient,
    lift_coefficient,
)


class TestAirDensity:
    """Test the exponential atmosphere."""

    def test_sea_level(self):
        assert air_density(0.0) == pytest.approx(1.225)

    def test_scale_height(self):
        """Density drops by a factor e every 10 000 ft."""
        assert air_density(10000.0) == pytest.approx(1.225 / math.e, rel=1e-6)

    def test_decreases_with_altitude(self):
        assert air_density(35000.0) < air_density(10000.0) < air_density(0.0)

    def test_cruise_density(self):
        assert air_density(35000.0) == pytest.approx(1.225 * math.exp(-3.5))

    def test_negative_altitude_uses_sea_level(self):
        assert air_density(-500.0) == pytest.approx(1.225)


class TestThrust:
    """Test thrust from N1 and altitude."""

    def test_full_thrust_at_sea_level(self):
        assert calculate_thrust([100.0, 100.0], 80000.0, 0.0) == pytest.approx(80000.0)

    def test_uses_mean_n1(self):
        assert calculate_thrust([100.0, 50.0], 80000.0, 0.0) == pytest.approx(60000.0)

    def test_altitude_lapse(self):
        assert calculate_thrust([100.0, 100.0], 80000.0, 90000.0) == pytest.approx(40000.0)

    def test_altitude_lapse_floor(self):
        """Thrust never drops below 30% of the sea-level value."""
        assert calculate_thrust([100.0, 100.0], 80000.0, 170000.0) == pytest.approx(24000.0)

    def test_idle_engines(self):
        assert calculate_thrust([0.0, 0.0], 80000.0, 10000.0) == 0.0


class TestDragCoefficient:
    """Test configuration-dependent drag coefficients."""

    def test_clean(self):
        assert drag_coefficient(FlapPosition.UP, False, 0.0, 0.0) == pytest.approx(0.010)

    def test_takeoff_flaps(self):
        assert drag_coefficient(FlapPosition.TAKEOFF, False, 0.0, 0.0) == pytest.approx(0.018)

    def test_landing_flaps_and_gear(self):
        assert drag_coefficient(FlapPosition.LANDING, True, 0.0, 0.0) == pytest.approx(0.038)

    def test_angle_of_attack_increases_drag(self):
        assert drag_coefficient(FlapPosition.UP, False, 10.0, 0.0) == pytest.approx(0.015)
        assert drag_coefficient(FlapPosition.UP, False, -10.0, 0.0) == pytest.approx(0.015)

    def test_altitude_factor_floor(self):
        """Above 24 000 ft the altitude factor bottoms out at 0.7."""
        assert drag_coefficient(FlapPosition.UP, False, 0.0, 40000.0) == pytest.approx(0.007)


class TestDragForce:
    """Test drag force and its guards."""

    def test_quadratic_in_airspeed(self):
        slow = calculate_drag(0.01, 0.0, 100.0, 100.0)
        fast = calculate_drag(0.01, 0.0, 100.0, 200.0)
        assert fast == pytest.approx(4.0 * slow)

    def test_sea_level_value(self):
        velocity = 200.0 * 0.514444
        expected = 0.5 * 0.01 * 1.225 * 100.0 * velocity**2
        assert calculate_drag(0.01, 0.0, 100.0, 200.0) == pytest.approx(expected)

    @pytest.mark.parametrize("airspeed", [float("inf"), float("nan")])
    def test_non_finite_input(self, airspeed):
        assert calculate_drag(0.01, 0.0, 100.0, airspeed) == 0.0


class TestLiftCoefficient:
    """Test the lift curve."""

    def test_linear_region(self):
        assert lift_coefficient(2.0, 1.5, 0.0, False) == pytest.approx(0.3)

    def test_clamped_at_max(self):
        assert lift_coefficient(20.0, 1.5, 0.0, False) == pytest.approx(1.5)

    def test_clamped_at_min(self):
        assert lift_coefficient(-10.0, 1.5, 0.0, False) == pytest.approx(-0.5)

    def test_altitude_factor_floor(self):
        assert lift_coefficient(2.0, 1.5, 48000.0, False) == pytest.approx(0.3 * 0.6)

    @pytest.mark.parametrize("aoa", [-5.0, 0.0, 4.0, 12.0, 15.0])
    def test_stall_reduces_lift_to_thirty_percent(self, aoa):
        normal = lift_coefficient(aoa, 1.5, 20000.0, False)
        stalled = lift_coefficient(aoa, 1.5, 20000.0, True)
        assert stalled == pytest.approx(0.3 * normal)
        assert abs(stalled) <= 0.3 * abs(normal) + 1e-12


class TestLiftForce:
    """Test lift force corrections."""

    def test_high_altitude_has_only_stability_correction(self):
        velocity = 200.0 * 0.514444
        base = 0.5 * 0.5 * 1.225 * velocity**2 * 100.0
        assert calculate_lift(0.5, 200.0, 100.0, 0.0, 20000.0) == pytest.approx(base * 1.15)

    def test_low_altitude_boost_at_ground(self):
        high = calculate_lift(0.5, 200.0, 100.0, 0.0, 20000.0)
        ground = calculate_lift(0.5, 200.0, 100.0, 0.0, 0.0)
        assert ground == pytest.approx(high * 1.3)

    def test_low_altitude_boost_is_proportional(self):
        high = calculate_lift(0.5, 200.0, 100.0, 0.0, 20000.0)
        mid = calculate_lift(0.5, 200.0, 100.0, 0.0, 5000.0)
        assert mid == pytest.approx(high * 1.15)

    def test_stability_correction_follows_pitch(self):
        level = calculate_lift(0.5, 200.0, 100.0, 0.0, 20000.0)
        pitched = calculate_lift(0.5, 200.0, 100.0, 60.0, 20000.0)
        assert pitched == pytest.approx(level * 1.075 / 1.15)

    def test_non_finite_input(self):
        assert calculate_lift(0.5, float("nan"), 100.0, 0.0, 20000.0) == 0.0


class TestComputeForces:
    """Test the combined force computation."""

    @pytest.fixture
    def params(self):
        return AircraftParameters()

    def test_gravity_is_weight(self, params):
        forces = compute_forces(AircraftState(), PhysicsState(mass=params.mass), params)
        assert forces.gravity == pytest.approx(24000.0 * 9.81)

    def test_cruise_forces(self, params):
        state = AircraftState()
        physics = PhysicsState(mass=params.mass, angle_of_attack=3.7)
        forces = compute_forces(state, physics, params)

        assert forces.thrust > forces.drag > 0
        assert forces.lift == pytest.approx(forces.gravity, rel=0.05)
        assert forces.lift_coefficient == pytest.approx(0.47 * 0.6)

    def test_uses_stall_flag(self, params):
        physics = PhysicsState(mass=params.mass, angle_of_attack=5.0)
        normal = compute_forces(AircraftState(), physics, params)
        stalled = compute_forces(AircraftState(is_stalling=True), physics, params)
        assert stalled.lift_coefficient == pytest.approx(0.3 * normal.lift_coefficient)
        assert stalled.lift == pytest.approx(0.3 * normal.lift)

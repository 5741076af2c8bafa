"""Unit tests for the point-mass integrator."""

import pytest

from aircore.physics.flight_model.base import PhysicsState
from aircore.physics.flight_model.forces import ForceResult
from aircore.physics.flight_model.integrator import (
    advance_altitude,
    integrate,
    max_speed_at_altitude,
)

MASS = 24000.0
WEIGHT = MASS * 9.81
MS2_TO_KTS = 1.0 / 0.514444
MS2_TO_FTS2 = 1.0 / 0.3048


def make_forces(thrust=10000.0, drag=10000.0, lift=WEIGHT, gravity=WEIGHT):
    return ForceResult(
        thrust=thrust,
        drag=drag,
        lift=lift,
        gravity=gravity,
        lift_coefficient=0.3,
        drag_coefficient=0.01,
    )


class TestMaxSpeed:
    """Test the altitude-dependent speed ceiling."""

    def test_sea_level(self):
        assert max_speed_at_altitude(0.0) == pytest.approx(350.0)

    def test_mid_altitude(self):
        assert max_speed_at_altitude(16000.0) == pytest.approx(280.0)

    def test_floor(self):
        assert max_speed_at_altitude(35000.0) == pytest.approx(210.0)
        assert max_speed_at_altitude(60000.0) == pytest.approx(210.0)


class TestIntegrate:
    """Test velocity integration."""

    @pytest.fixture
    def physics(self):
        return PhysicsState(horizontal_velocity=200.0, vertical_velocity=0.0, mass=MASS)

    def test_balanced_forces_hold_velocity(self, physics):
        result = integrate(physics, make_forces(), 0.0, 10000.0, 115.0, 0.1)
        assert result.horizontal_velocity == pytest.approx(200.0)
        assert result.vertical_velocity == pytest.approx(0.0)
        assert result.horizontal_acceleration == pytest.approx(0.0)

    def test_excess_thrust_accelerates(self, physics):
        result = integrate(physics, make_forces(thrust=20000.0), 0.0, 10000.0, 115.0, 0.1)
        expected = 10000.0 / MASS * MS2_TO_KTS
        assert result.horizontal_acceleration == pytest.approx(expected)
        assert result.horizontal_velocity == pytest.approx(200.0 + expected * 0.1)

    def test_near_balance_horizontal_damping(self, physics):
        result = integrate(physics, make_forces(thrust=10500.0), 0.0, 10000.0, 115.0, 0.1)
        expected = 500.0 / MASS * MS2_TO_KTS * 0.95
        assert result.horizontal_acceleration == pytest.approx(expected)

    def test_near_balance_vertical_damping(self, physics):
        forces = make_forces(thrust=0.0, drag=0.0, lift=1.05 * WEIGHT)
        result = integrate(physics, forces, 0.0, 10000.0, 115.0, 0.1)
        expected = 0.05 * WEIGHT / MASS * MS2_TO_FTS2 * 0.85
        assert result.vertical_acceleration == pytest.approx(expected)

    def test_no_vertical_damping_at_high_pitch(self, physics):
        forces = make_forces(thrust=0.0, drag=0.0, lift=1.05 * WEIGHT)
        result = integrate(physics, forces, 6.0, 10000.0, 115.0, 0.1)
        expected = 0.05 * WEIGHT / MASS * MS2_TO_FTS2
        assert result.vertical_acceleration == pytest.approx(expected)

    def test_thrust_component_along_pitch(self, physics):
        forces = make_forces(thrust=20000.0, drag=0.0, lift=WEIGHT)
        result = integrate(physics, forces, 30.0, 10000.0, 115.0, 0.1)
        expected = 20000.0 * 0.5 / MASS * MS2_TO_FTS2
        assert result.vertical_acceleration == pytest.approx(expected)

    def test_zero_drag_and_gravity_do_not_divide_by_zero(self, physics):
        forces = make_forces(thrust=1000.0, drag=0.0, lift=0.0, gravity=0.0)
        result = integrate(physics, forces, 0.0, 10000.0, 115.0, 0.1)
        assert result.horizontal_acceleration > 0

    def test_minimum_speed_floor(self):
        physics = PhysicsState(horizontal_velocity=100.0, mass=MASS)
        result = integrate(physics, make_forces(), 0.0, 10000.0, 115.0, 0.1)
        assert result.horizontal_velocity == pytest.approx(126.5)

    def test_floor_skipped_while_actively_stalling(self):
        physics = PhysicsState(horizontal_velocity=100.0, mass=MASS)
        result = integrate(
            physics, make_forces(), 0.0, 10000.0, 115.0, 0.1, allow_below_floor=True
        )
        assert result.horizontal_velocity == pytest.approx(100.0)

    def test_ceiling_always_applies(self):
        physics = PhysicsState(horizontal_velocity=400.0, mass=MASS)
        result = integrate(
            physics, make_forces(), 0.0, 0.0, 115.0, 0.1, allow_below_floor=True
        )
        assert result.horizontal_velocity == pytest.approx(350.0)


class TestAdvanceAltitude:
    """Test altitude integration."""

    def test_climb(self):
        assert advance_altitude(1000.0, 10.0, 0.5) == pytest.approx(1005.0)

    def test_floored_at_ground(self):
        assert advance_altitude(10.0, -200.0, 0.1) == 0.0

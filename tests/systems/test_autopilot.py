"""Unit tests for the autopilot control laws."""

import random

import pytest

from aircore.physics.flight_model.base import AircraftState, AutopilotTargets, PhysicsState
from aircore.systems.autopilot.controller import (
    AutopilotGains,
    airspeed_hold,
    altitude_hold,
    compute_autopilot_command,
    engage_attitude,
    flight_path_pitch,
    thrust_imbalance_rates,
)


@pytest.fixture
def gains():
    return AutopilotGains()


class TestAltitudeHold:
    """Test the vertical speed command."""

    def test_proportional(self, gains):
        assert altitude_hold(34900.0, 35000.0, gains) == pytest.approx(600.0)

    def test_limited(self, gains):
        assert altitude_hold(30000.0, 35000.0, gains) == pytest.approx(2000.0)
        assert altitude_hold(40000.0, 35000.0, gains) == pytest.approx(-2000.0)

    def test_on_target(self, gains):
        assert altitude_hold(35000.0, 35000.0, gains) == 0.0


class TestFlightPathPitch:
    """Test pitch targets from vertical speed commands."""

    def test_level_flight_holds_angle_of_attack(self):
        assert flight_path_pitch(0.0, 3.5, 210.0) == pytest.approx(3.5)

    def test_climb_adds_flight_path_angle(self):
        pitch = flight_path_pitch(2000.0, 3.5, 210.0)
        assert pitch == pytest.approx(3.5 + 5.37, abs=0.05)

    def test_descent(self):
        assert flight_path_pitch(-2000.0, 3.5, 210.0) < 0.0


class TestAirspeedHold:
    """Test the autothrottle."""

    def test_on_speed(self, gains):
        assert airspeed_hold(210.0, 210.0, 35000.0, gains) == pytest.approx(85.0)

    def test_slow_adds_thrust(self, gains):
        assert airspeed_hold(200.0, 210.0, 0.0, gains) == pytest.approx(90.0)

    def test_gain_grows_with_altitude(self, gains):
        assert airspeed_hold(205.0, 210.0, 50000.0, gains) == pytest.approx(85.0 + 5 * 0.65)

    def test_limits(self, gains):
        assert airspeed_hold(100.0, 250.0, 0.0, gains) == pytest.approx(95.0)
        assert airspeed_hold(300.0, 200.0, 0.0, gains) == pytest.approx(60.0)


class TestThrustImbalance:
    """Test asymmetric thrust coupling."""

    def test_left_engine_stronger(self, gains):
        assert thrust_imbalance_rates([90.0, 70.0], gains) == pytest.approx((2.0, 10.0))

    def test_right_engine_stronger(self, gains):
        roll_rate, heading_rate = thrust_imbalance_rates([70.0, 90.0], gains)
        assert roll_rate < 0
        assert heading_rate < 0

    def test_small_difference_ignored(self, gains):
        assert thrust_imbalance_rates([85.0, 85.5], gains) == (0.0, 0.0)


class TestAutopilotCommand:
    """Test one autopilot tick."""

    @pytest.fixture
    def rng(self):
        return random.Random(7)

    def test_pitch_rate_limited(self, gains, rng):
        state = AircraftState(
            altitude=30000.0, autopilot_targets=AutopilotTargets(altitude=35000.0)
        )
        physics = PhysicsState(horizontal_velocity=210.0, angle_of_attack=3.7)
        command = compute_autopilot_command(state, physics, gains, 0.1, rng)
        assert 0.0 < command.pitch <= 0.05 + gains.attitude_noise
        assert command.target_vertical_speed == pytest.approx(2000.0)

    def test_pitch_limited(self, gains, rng):
        state = AircraftState(
            pitch=10.0, altitude=30000.0, autopilot_targets=AutopilotTargets(altitude=35000.0)
        )
        physics = PhysicsState(horizontal_velocity=210.0, angle_of_attack=12.0)
        for _ in range(20):
            command = compute_autopilot_command(state, physics, gains, 0.1, rng)
            assert abs(command.pitch) <= gains.pitch_limit
            state.pitch = command.pitch

    def test_roll_damped_toward_level(self, gains, rng):
        state = AircraftState(roll=10.0)
        command = compute_autopilot_command(state, PhysicsState(), gains, 0.1, rng)
        assert command.roll == pytest.approx(9.5, abs=gains.attitude_noise)

    def test_imbalance_rolls_and_turns(self, gains, rng):
        state = AircraftState(engine_n1=[90.0, 70.0])
        command = compute_autopilot_command(state, PhysicsState(), gains, 0.1, rng)
        assert command.roll > 0
        assert command.heading_change == pytest.approx(1.0)

    def test_autothrottle_command(self, gains, rng):
        state = AircraftState(
            indicated_airspeed=200.0, autopilot_targets=AutopilotTargets(airspeed=210.0)
        )
        command = compute_autopilot_command(state, PhysicsState(), gains, 0.1, rng)
        assert command.target_n1 == pytest.approx(85.0 + 10 * 0.5 * (1 + 0.3 * 0.7))


class TestEngageAttitude:
    """Test attitude snapping on engagement."""

    def test_snaps_into_envelope(self, gains):
        assert engage_attitude(8.0, -12.0, gains) == (2.0, -5.0)

    def test_small_attitude_unchanged(self, gains):
        assert engage_attitude(1.0, 3.0, gains) == (1.0, 3.0)

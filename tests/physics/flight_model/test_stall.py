"""Unit tests for stall detection and stall effects."""

import random

import pytest

from aircore.physics.flight_model.base import FlapPosition
from aircore.physics.flight_model.stall import (
    angle_of_attack,
    apply_stall_effects,
    configuration_stall_speed,
    control_effectiveness,
    detect_stall,
    is_actively_stalling,
)


class TestAngleOfAttack:
    """Test angle of attack from pitch and flight path."""

    def test_level_flight_equals_pitch(self):
        assert angle_of_attack(5.0, 0.0, 200.0) == pytest.approx(5.0)

    def test_climb_reduces_angle_of_attack(self):
        assert angle_of_attack(5.0, 20.0, 200.0) < 5.0

    def test_descent_increases_angle_of_attack(self):
        assert angle_of_attack(5.0, -20.0, 200.0) > 5.0

    def test_clamped(self):
        assert angle_of_attack(40.0, 0.0, 200.0) == pytest.approx(15.0)
        assert angle_of_attack(-40.0, 0.0, 200.0) == pytest.approx(-10.0)

    def test_zero_airspeed(self):
        """atan2 handles a stopped aircraft without dividing by zero."""
        assert angle_of_attack(0.0, -10.0, 0.0) == pytest.approx(15.0)


class TestConfigurationStallSpeed:
    """Test stall speed for flap and gear settings."""

    def test_clean(self):
        assert configuration_stall_speed(100.0, FlapPosition.UP, False) == pytest.approx(100.0)

    def test_takeoff_flaps(self):
        assert configuration_stall_speed(100.0, FlapPosition.TAKEOFF, False) == pytest.approx(
            85.0
        )

    def test_landing_flaps(self):
        assert configuration_stall_speed(100.0, FlapPosition.LANDING, False) == pytest.approx(
            75.0
        )

    def test_gear_raises_stall_speed(self):
        assert configuration_stall_speed(100.0, FlapPosition.LANDING, True) == pytest.approx(
            78.75
        )


class TestDetectStall:
    """Test warning and stall thresholds."""

    def test_normal_flight(self):
        status = detect_stall(2.0, 0.0, 130.0, 100.0)
        assert not status.stall_warning
        assert not status.is_stalling

    def test_warning_below_120_percent(self):
        status = detect_stall(2.0, 0.0, 110.0, 100.0)
        assert status.stall_warning
        assert not status.is_stalling

    def test_stalling_below_stall_speed(self):
        status = detect_stall(2.0, 0.0, 99.0, 100.0)
        assert status.stall_warning
        assert status.is_stalling
        assert status.stall_speed == 100.0


class TestStallEffects:
    """Test the per-tick stall behaviour."""

    def test_speed_decays(self):
        effects = apply_stall_effects(100.0, 0.0, 5.0, random.Random(1))
        assert effects.horizontal_velocity == pytest.approx(99.8)

    def test_sink_rate_limited(self):
        effects = apply_stall_effects(100.0, -80.0, 5.0, random.Random(1))
        assert effects.vertical_velocity == pytest.approx(-50.0)

    def test_moderate_sink_rate_kept(self):
        effects = apply_stall_effects(100.0, -20.0, 5.0, random.Random(1))
        assert effects.vertical_velocity == pytest.approx(-20.0)

    def test_buffet_amplitude(self):
        rng = random.Random(3)
        for _ in range(200):
            effects = apply_stall_effects(100.0, 0.0, 5.0, rng)
            assert abs(effects.pitch - 5.0) <= 0.3

    def test_reduced_control_effectiveness(self):
        assert control_effectiveness(True) == (0.3, 0.5)
        assert control_effectiveness(False) == (1.0, 1.0)


class TestActivelyStalling:
    """Test when the minimum-speed floor is suspended."""

    def test_already_stalling(self):
        assert is_actively_stalling(True, True, -5.0, 50000.0, 1000.0)

    def test_hand_flown_nose_up_without_thrust(self):
        assert is_actively_stalling(False, False, 10.0, 0.0, 5000.0)

    def test_autopilot_never_bleeds_speed(self):
        assert not is_actively_stalling(False, True, 10.0, 0.0, 5000.0)

    def test_nose_down(self):
        assert not is_actively_stalling(False, False, -2.0, 0.0, 5000.0)

    def test_thrust_exceeds_drag(self):
        assert not is_actively_stalling(False, False, 10.0, 6000.0, 5000.0)

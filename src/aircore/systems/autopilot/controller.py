"""Autopilot: altitude hold, autothrottle and wings-level control.

The altitude channel commands a vertical speed proportional to the altitude
error and converts it into a pitch target on top of the current angle of
attack, so the flight path (not just the nose) points where it should. The
autothrottle trims N1 around a base setting from the airspeed error. Roll is
damped toward wings level, except that asymmetric thrust yaws and rolls the
aircraft toward the weaker engine's side.

Typical usage:
    from aircore.systems.autopilot.controller import AutopilotGains, compute_autopilot_command

    command = compute_autopilot_command(state, physics, AutopilotGains(), dt=0.1, rng=rng)
    state.pitch = command.pitch
"""

import math
import random
from collections.abc import Sequence
from dataclasses import dataclass

from aircore.physics.flight_model.base import KNOTS_TO_MS, AircraftState, PhysicsState

FEET_PER_KNOT_SECOND = KNOTS_TO_MS / 0.3048  # 1 kt in ft/s


@dataclass(frozen=True)
class AutopilotGains:
    """Autopilot tuning.

    Attributes:
        altitude_kp: Commanded vertical speed per foot of altitude error (fpm/ft).
        max_vertical_speed: Vertical speed command limit, ft/min.
        pitch_rate: Maximum pitch change, degrees per second.
        pitch_limit: Pitch authority, degrees.
        roll_limit: Roll authority, degrees.
        airspeed_kp: N1 percent per knot of airspeed error at sea level.
        base_n1: Autothrottle N1 with zero airspeed error.
        min_n1: Autothrottle lower limit.
        max_n1: Autothrottle upper limit.
        roll_damping: Roll multiplier per tick.
        imbalance_threshold: N1 difference below which thrust is treated as symmetric.
        imbalance_roll_gain: Roll rate (°/s) per percent of N1 imbalance.
        imbalance_yaw_gain: Heading rate (°/s) per percent of N1 imbalance.
        attitude_noise: Pitch and roll jitter amplitude, degrees.
        engage_pitch_limit: Pitch is snapped into this range on engagement.
        engage_roll_limit: Roll is snapped into this range on engagement.
    """

    altitude_kp: float = 6.0
    max_vertical_speed: float = 2000.0
    pitch_rate: float = 0.5
    pitch_limit: float = 10.0
    roll_limit: float = 15.0
    airspeed_kp: float = 0.5
    base_n1: float = 85.0
    min_n1: float = 60.0
    max_n1: float = 95.0
    roll_damping: float = 0.95
    imbalance_threshold: float = 1.0
    imbalance_roll_gain: float = 0.1
    imbalance_yaw_gain: float = 0.5
    attitude_noise: float = 0.02
    engage_pitch_limit: float = 2.0
    engage_roll_limit: float = 5.0


@dataclass(frozen=True)
class AutopilotCommand:
    """Autopilot output for one tick.

    Attributes:
        pitch: New pitch, degrees.
        roll: New roll, degrees.
        heading_change: Heading change this tick, degrees.
        target_n1: Autothrottle N1 for both engines, percent.
        target_vertical_speed: Commanded vertical speed, ft/min.
    """

    pitch: float
    roll: float
    heading_change: float
    target_n1: float
    target_vertical_speed: float


def _clamp(value: float, limit: float) -> float:
    return max(-limit, min(limit, value))


def altitude_hold(altitude: float, target_altitude: float, gains: AutopilotGains) -> float:
    """Commanded vertical speed in ft/min for an altitude error."""
    error = target_altitude - altitude
    return _clamp(error * gains.altitude_kp, gains.max_vertical_speed)


def flight_path_pitch(
    target_vertical_speed: float, angle_of_attack: float, horizontal_velocity: float
) -> float:
    """Pitch that puts the flight path on the commanded vertical speed.

    Args:
        target_vertical_speed: ft/min.
        angle_of_attack: Current angle of attack, degrees.
        horizontal_velocity: Knots.

    Returns:
        Target pitch in degrees.
    """
    vertical_fts = target_vertical_speed / 60.0
    horizontal_fts = max(1.0, horizontal_velocity * FEET_PER_KNOT_SECOND)
    return angle_of_attack + math.degrees(math.atan2(vertical_fts, horizontal_fts))


def airspeed_hold(
    airspeed: float, target_airspeed: float, altitude: float, gains: AutopilotGains
) -> float:
    """Autothrottle N1 command for an airspeed error.

    The gain grows with altitude to compensate for the thinner air.
    """
    error = target_airspeed - airspeed
    gain = gains.airspeed_kp * (1.0 + 0.3 * altitude / 50000.0)
    return max(gains.min_n1, min(gains.max_n1, gains.base_n1 + error * gain))


def thrust_imbalance_rates(n1: Sequence[float], gains: AutopilotGains) -> tuple[float, float]:
    """Roll and heading rates induced by asymmetric thrust.

    Args:
        n1: N1 per engine, left engine first.
        gains: Autopilot tuning.

    Returns:
        (roll rate, heading rate) in degrees per second. Positive when the
        left engine produces more thrust.
    """
    imbalance = n1[0] - n1[1]
    if abs(imbalance) <= gains.imbalance_threshold:
        return 0.0, 0.0
    return imbalance * gains.imbalance_roll_gain, imbalance * gains.imbalance_yaw_gain


def compute_autopilot_command(
    state: AircraftState,
    physics: PhysicsState,
    gains: AutopilotGains,
    dt: float,
    rng: random.Random,
) -> AutopilotCommand:
    """Run one autopilot tick.

    Args:
        state: Current aircraft state (targets are read from it).
        physics: Current physics state.
        gains: Autopilot tuning.
        dt: Time step in seconds.
        rng: Random source for attitude jitter.

    Returns:
        New attitude, heading change and autothrottle command.
    """
    targets = state.autopilot_targets

    target_vs = altitude_hold(state.altitude, targets.altitude, gains)
    target_pitch = _clamp(
        flight_path_pitch(target_vs, physics.angle_of_attack, physics.horizontal_velocity),
        gains.pitch_limit,
    )
    pitch = state.pitch + _clamp(target_pitch - state.pitch, gains.pitch_rate * dt)
    pitch += rng.uniform(-gains.attitude_noise, gains.attitude_noise)
    pitch = _clamp(pitch, gains.pitch_limit)

    roll_rate, heading_rate = thrust_imbalance_rates(state.engine_n1, gains)
    roll = (state.roll + roll_rate * dt) * gains.roll_damping
    roll += rng.uniform(-gains.attitude_noise, gains.attitude_noise)
    roll = _clamp(roll, gains.roll_limit)

    return AutopilotCommand(
        pitch=pitch,
        roll=roll,
        heading_change=heading_rate * dt,
        target_n1=airspeed_hold(state.indicated_airspeed, targets.airspeed, state.altitude, gains),
        target_vertical_speed=target_vs,
    )


def engage_attitude(pitch: float, roll: float, gains: AutopilotGains) -> tuple[float, float]:
    """Snap attitude into the engagement envelope.

    Returns:
        (pitch, roll) clamped to the engage limits.
    """
    return _clamp(pitch, gains.engage_pitch_limit), _clamp(roll, gains.engage_roll_limit)

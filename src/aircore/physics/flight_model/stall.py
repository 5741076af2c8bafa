"""Stall detection and stall effects.

The aircraft stalls when its forward speed drops below the stall speed for
the current flap and gear configuration. The angle of attack computed here
feeds the force model on the next tick.

Typical usage:
    from aircore.physics.flight_model.stall import detect_stall

    status = detect_stall(pitch=5.0, vertical_velocity=-10.0,
                          horizontal_velocity=140.0, stall_speed=115.0)
    if status.is_stalling:
        ...
"""

import math
import random
from dataclasses import dataclass

from aircore.physics.flight_model.base import FEET_TO_METERS, KNOTS_TO_MS, FlapPosition

MIN_AOA = -10.0
MAX_AOA = 15.0

TAKEOFF_FLAPS_FACTOR = 0.85
LANDING_FLAPS_FACTOR = 0.75
GEAR_FACTOR = 1.05
WARNING_MARGIN = 1.2

STALL_SPEED_DECAY = 0.998  # Per tick
MAX_STALL_SINK_RATE = -50.0  # ft/s
BUFFET_AMPLITUDE = 0.3  # Degrees

PITCH_EFFECTIVENESS_STALLED = 0.3
ROLL_EFFECTIVENESS_STALLED = 0.5


@dataclass(frozen=True)
class StallStatus:
    """Result of a stall evaluation.

    Attributes:
        angle_of_attack: Degrees, clamped to [-10, 15].
        stall_speed: Stall speed for the configuration, in knots.
        stall_warning: Speed below 1.2 times the stall speed.
        is_stalling: Speed below the stall speed.
    """

    angle_of_attack: float
    stall_speed: float
    stall_warning: bool
    is_stalling: bool


@dataclass(frozen=True)
class StallEffects:
    """Velocities and pitch after stall effects are applied."""

    horizontal_velocity: float
    vertical_velocity: float
    pitch: float


def angle_of_attack(pitch: float, vertical_velocity: float, horizontal_velocity: float) -> float:
    """Angle between the nose and the flight path.

    Args:
        pitch: Degrees.
        vertical_velocity: ft/s.
        horizontal_velocity: Knots.

    Returns:
        Angle of attack in degrees, clamped to [-10, 15].
    """
    vertical_ms = vertical_velocity * FEET_TO_METERS
    horizontal_ms = horizontal_velocity * KNOTS_TO_MS
    flight_path = math.degrees(math.atan2(vertical_ms, horizontal_ms))
    return max(MIN_AOA, min(MAX_AOA, pitch - flight_path))


def configuration_stall_speed(
    base_stall_speed: float, flaps: FlapPosition, gear_extended: bool
) -> float:
    """Stall speed for a flap and gear configuration, in knots."""
    speed = base_stall_speed
    if flaps == FlapPosition.TAKEOFF:
        speed *= TAKEOFF_FLAPS_FACTOR
    elif flaps == FlapPosition.LANDING:
        speed *= LANDING_FLAPS_FACTOR
    if gear_extended:
        speed *= GEAR_FACTOR
    return speed


def detect_stall(
    pitch: float,
    vertical_velocity: float,
    horizontal_velocity: float,
    stall_speed: float,
) -> StallStatus:
    """Evaluate stall state.

    Args:
        pitch: Degrees.
        vertical_velocity: ft/s.
        horizontal_velocity: Knots.
        stall_speed: Stall speed for the current configuration, in knots.

    Returns:
        Stall status for this tick.
    """
    return StallStatus(
        angle_of_attack=angle_of_attack(pitch, vertical_velocity, horizontal_velocity),
        stall_speed=stall_speed,
        stall_warning=horizontal_velocity < WARNING_MARGIN * stall_speed,
        is_stalling=horizontal_velocity < stall_speed,
    )


def apply_stall_effects(
    horizontal_velocity: float,
    vertical_velocity: float,
    pitch: float,
    rng: random.Random,
) -> StallEffects:
    """Apply one tick of stall behaviour.

    Forward speed decays, the sink rate is held to a controlled descent and
    the nose buffets.

    Args:
        horizontal_velocity: Knots.
        vertical_velocity: ft/s.
        pitch: Degrees.
        rng: Random source for the buffet.

    Returns:
        Adjusted velocities and pitch.
    """
    return StallEffects(
        horizontal_velocity=horizontal_velocity * STALL_SPEED_DECAY,
        vertical_velocity=max(MAX_STALL_SINK_RATE, vertical_velocity),
        pitch=pitch + rng.uniform(-BUFFET_AMPLITUDE, BUFFET_AMPLITUDE),
    )


def control_effectiveness(is_stalling: bool) -> tuple[float, float]:
    """Pitch and roll control effectiveness multipliers."""
    if is_stalling:
        return PITCH_EFFECTIVENESS_STALLED, ROLL_EFFECTIVENESS_STALLED
    return 1.0, 1.0


def is_actively_stalling(
    is_stalling: bool,
    autopilot_engaged: bool,
    pitch: float,
    thrust: float,
    drag: float,
) -> bool:
    """Whether the minimum-speed floor should be suspended.

    True when the aircraft is already stalling, or when the pilot is hand
    flying nose-up with less thrust than drag.
    """
    if is_stalling:
        return True
    return not autopilot_engaged and pitch > 0 and thrust < drag

"""Point-mass integrator.

Turns the forces of one tick into new horizontal and vertical velocities
using semi-implicit Euler: velocities are updated first, and the altitude is
then advanced with the new vertical velocity by advance_altitude().

Typical usage:
    from aircore.physics.flight_model.integrator import advance_altitude, integrate

    result = integrate(physics, forces, pitch, altitude, stall_speed, dt=0.1)
    altitude = advance_altitude(altitude, result.vertical_velocity, dt=0.1)
"""

import math
from dataclasses import dataclass

from aircore.physics.flight_model.base import METERS_TO_FEET, MS_TO_KNOTS, PhysicsState
from aircore.physics.flight_model.forces import ForceResult

MIN_SPEED_MARGIN = 1.1  # Horizontal velocity floor as a multiple of stall speed
MAX_SPEED_KT = 350.0

BALANCE_TOLERANCE = 0.1
HORIZONTAL_DAMPING = 0.95
VERTICAL_DAMPING = 0.85
VERTICAL_DAMPING_MAX_PITCH = 5.0


@dataclass(frozen=True)
class IntegrationResult:
    """Velocities and accelerations after one integration step.

    Attributes:
        horizontal_velocity: Knots.
        vertical_velocity: ft/s.
        horizontal_acceleration: kt/s.
        vertical_acceleration: ft/s².
    """

    horizontal_velocity: float
    vertical_velocity: float
    horizontal_acceleration: float
    vertical_acceleration: float


def max_speed_at_altitude(altitude_ft: float) -> float:
    """Maximum horizontal speed in knots at the given altitude."""
    return MAX_SPEED_KT * max(0.6, 1.0 - altitude_ft / 80000.0)


def _ratio_near_one(numerator: float, denominator: float) -> bool:
    if denominator == 0:
        return False
    return abs(numerator / denominator - 1.0) < BALANCE_TOLERANCE


def integrate(
    physics: PhysicsState,
    forces: ForceResult,
    pitch: float,
    altitude_ft: float,
    stall_speed: float,
    dt: float,
    allow_below_floor: bool = False,
) -> IntegrationResult:
    """Integrate velocities over one tick.

    Args:
        physics: Physics state holding the current velocities and mass.
        forces: Forces computed for this tick.
        pitch: Degrees.
        altitude_ft: Altitude in feet, used for the speed ceiling.
        stall_speed: Stall speed for the current configuration, in knots.
        dt: Time step in seconds.
        allow_below_floor: Skip the 1.1 * stall speed floor (active stall).

    Returns:
        New velocities and the accelerations that produced them.
    """
    pitch_rad = math.radians(pitch)
    mass = physics.mass

    horizontal_force = forces.thrust * math.cos(pitch_rad) - forces.drag
    vertical_force = forces.lift + forces.thrust * math.sin(pitch_rad) - forces.gravity

    horizontal_acceleration = horizontal_force / mass * MS_TO_KNOTS
    vertical_acceleration = vertical_force / mass * METERS_TO_FEET

    # Near-equilibrium damping
    if _ratio_near_one(forces.thrust, forces.drag):
        horizontal_acceleration *= HORIZONTAL_DAMPING
    if _ratio_near_one(forces.lift, forces.gravity) and abs(pitch) < VERTICAL_DAMPING_MAX_PITCH:
        vertical_acceleration *= VERTICAL_DAMPING

    horizontal_velocity = physics.horizontal_velocity + horizontal_acceleration * dt
    vertical_velocity = physics.vertical_velocity + vertical_acceleration * dt

    ceiling = max_speed_at_altitude(altitude_ft)
    if not allow_below_floor:
        horizontal_velocity = max(MIN_SPEED_MARGIN * stall_speed, horizontal_velocity)
    horizontal_velocity = max(0.0, min(ceiling, horizontal_velocity))

    return IntegrationResult(
        horizontal_velocity=horizontal_velocity,
        vertical_velocity=vertical_velocity,
        horizontal_acceleration=horizontal_acceleration,
        vertical_acceleration=vertical_acceleration,
    )


def advance_altitude(altitude_ft: float, vertical_velocity: float, dt: float) -> float:
    """Advance altitude by vertical_velocity * dt, floored at 0 ft."""
    return max(0.0, altitude_ft + vertical_velocity * dt)

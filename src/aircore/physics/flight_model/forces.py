"""Aerodynamic and propulsive force model.

Computes thrust, drag, lift and weight for a single point-mass airliner.
Every function is pure; the simulation feeds the results to the integrator.

Physics model:
- Thrust = mean(N1)/100 * max_thrust * max(0.3, 1 - altitude/180000)
- Drag = 0.5 * Cd * ρ * S * v², ρ = 1.225 * exp(-altitude_ft / 10000)
- Lift = CL * 0.5 * ρ0 * IAS² * S, plus stability and low-altitude corrections
- Weight = mass * g

Typical usage:
    from aircore.physics.flight_model.forces import compute_forces

    forces = compute_forces(aircraft_state, physics_state, params)
    print(forces.lift, forces.drag)
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from aircore.physics.flight_model.base import (
    AIR_DENSITY_SEA_LEVEL,
    GRAVITY,
    KNOTS_TO_MS,
    AircraftParameters,
    AircraftState,
    FlapPosition,
    PhysicsState,
)

DENSITY_SCALE_HEIGHT_FT = 10000.0

# Drag coefficients by configuration
CD_CLEAN = 0.010
CD_TAKEOFF_FLAPS = 0.018
CD_LANDING_FLAPS = 0.030
CD_GEAR = 0.008
CD_AOA_FACTOR = 0.05  # Fractional drag increase per degree of AoA

# Lift curve
CL_SLOPE = 0.1  # per degree
CL_ZERO_AOA = 0.1
CL_MIN = -0.5
STALL_LIFT_FACTOR = 0.3

STABILITY_LIFT_FACTOR = 0.15
LOW_ALTITUDE_BOOST_CEILING_FT = 10000.0
LOW_ALTITUDE_BOOST_MAX = 0.3


@dataclass(frozen=True)
class ForceResult:
    """Forces acting on the aircraft for one tick.

    Attributes:
        thrust: N.
        drag: N.
        lift: N.
        gravity: N (weight, positive).
        lift_coefficient: Effective CL used for the lift force.
        drag_coefficient: Effective Cd used for the drag force.
    """

    thrust: float
    drag: float
    lift: float
    gravity: float
    lift_coefficient: float
    drag_coefficient: float


def air_density(altitude_ft: float) -> float:
    """Air density at altitude using an exponential atmosphere.

    Args:
        altitude_ft: Altitude in feet.

    Returns:
        Density in kg/m³.
    """
    return AIR_DENSITY_SEA_LEVEL * math.exp(-max(0.0, altitude_ft) / DENSITY_SCALE_HEIGHT_FT)


def altitude_efficiency(altitude_ft: float, scale: float, floor: float) -> float:
    """Linear altitude falloff factor max(floor, 1 - altitude/scale)."""
    return max(floor, 1.0 - altitude_ft / scale)


def calculate_thrust(engine_n1: Sequence[float], max_thrust: float, altitude_ft: float) -> float:
    """Total engine thrust.

    Args:
        engine_n1: N1 per engine in percent.
        max_thrust: Total thrust at 100% N1 in N.
        altitude_ft: Altitude in feet.

    Returns:
        Thrust in N.
    """
    if not engine_n1:
        return 0.0
    mean_n1 = sum(engine_n1) / len(engine_n1)
    return mean_n1 / 100.0 * max_thrust * altitude_efficiency(altitude_ft, 180000.0, 0.3)


def drag_coefficient(
    flaps: FlapPosition,
    gear_extended: bool,
    angle_of_attack: float,
    altitude_ft: float,
) -> float:
    """Effective drag coefficient for the current configuration.

    Args:
        flaps: Flap setting.
        gear_extended: Landing gear down.
        angle_of_attack: Degrees.
        altitude_ft: Altitude in feet.

    Returns:
        Drag coefficient.
    """
    if flaps == FlapPosition.LANDING:
        cd = CD_LANDING_FLAPS
    elif flaps == FlapPosition.TAKEOFF:
        cd = CD_TAKEOFF_FLAPS
    else:
        cd = CD_CLEAN

    if gear_extended:
        cd += CD_GEAR

    cd *= 1.0 + CD_AOA_FACTOR * abs(angle_of_attack)
    cd *= altitude_efficiency(altitude_ft, 80000.0, 0.7)
    return cd


def calculate_drag(cd: float, altitude_ft: float, wing_area: float, airspeed_kt: float) -> float:
    """Drag force 0.5 * Cd * ρ * S * v².

    Returns 0.0 when any input is not finite.
    """
    velocity = airspeed_kt * KNOTS_TO_MS
    drag = 0.5 * cd * air_density(altitude_ft) * wing_area * velocity * velocity
    if not math.isfinite(drag):
        return 0.0
    return drag


def lift_coefficient(
    angle_of_attack: float,
    max_lift_coefficient: float,
    altitude_ft: float,
    is_stalling: bool,
) -> float:
    """Effective lift coefficient.

    Args:
        angle_of_attack: Degrees.
        max_lift_coefficient: Upper clamp of the lift curve.
        altitude_ft: Altitude in feet.
        is_stalling: Stall reduces lift to 30%.

    Returns:
        Lift coefficient.
    """
    cl = CL_SLOPE * angle_of_attack + CL_ZERO_AOA
    cl = max(CL_MIN, min(max_lift_coefficient, cl))
    cl *= altitude_efficiency(altitude_ft, 80000.0, 0.6)
    if is_stalling:
        cl *= STALL_LIFT_FACTOR
    return cl


def calculate_lift(
    cl: float,
    airspeed_kt: float,
    wing_area: float,
    pitch: float,
    altitude_ft: float,
) -> float:
    """Lift force from indicated dynamic pressure.

    Indicated airspeed is sea-level equivalent, so the dynamic pressure uses
    the sea-level density. A stability correction proportional to cos(pitch)
    and a boost of up to 30% below 10 000 ft are applied on top.

    Args:
        cl: Lift coefficient.
        airspeed_kt: Indicated airspeed in knots.
        wing_area: m².
        pitch: Degrees.
        altitude_ft: Altitude in feet.

    Returns:
        Lift in N.
    """
    velocity = airspeed_kt * KNOTS_TO_MS
    dynamic_pressure = 0.5 * AIR_DENSITY_SEA_LEVEL * velocity * velocity
    lift = cl * dynamic_pressure * wing_area

    lift += lift * math.cos(math.radians(pitch)) * STABILITY_LIFT_FACTOR

    if altitude_ft < LOW_ALTITUDE_BOOST_CEILING_FT:
        deficit = (LOW_ALTITUDE_BOOST_CEILING_FT - max(0.0, altitude_ft)) / (
            LOW_ALTITUDE_BOOST_CEILING_FT
        )
        lift *= 1.0 + LOW_ALTITUDE_BOOST_MAX * deficit

    if not math.isfinite(lift):
        return 0.0
    return lift


def compute_forces(
    state: AircraftState,
    physics: PhysicsState,
    params: AircraftParameters,
) -> ForceResult:
    """Compute every force for the current tick.

    Uses the angle of attack and stall flag from the previous stall
    evaluation.

    Args:
        state: Current aircraft state.
        physics: Current physics state.
        params: Aircraft parameters.

    Returns:
        Forces and the coefficients that produced them.
    """
    altitude = state.altitude
    airspeed = state.indicated_airspeed
    aoa = physics.angle_of_attack

    thrust = calculate_thrust(state.engine_n1, params.max_thrust, altitude)

    cd = drag_coefficient(state.flaps, state.gear_extended, aoa, altitude)
    drag = calculate_drag(cd, altitude, params.wing_area, airspeed)

    cl = lift_coefficient(aoa, params.max_lift_coefficient, altitude, state.is_stalling)
    lift = calculate_lift(cl, airspeed, params.wing_area, state.pitch, altitude)

    return ForceResult(
        thrust=thrust,
        drag=drag,
        lift=lift,
        gravity=physics.mass * GRAVITY,
        lift_coefficient=cl,
        drag_coefficient=cd,
    )

"""Flight phase detection.

Classifies the current phase of flight from the aircraft's altitude,
airspeed, vertical speed and engine setting. The phase is informational:
it drives logging and telemetry, never the physics.

Typical usage:
    from aircore.physics.flight_model.flight_phase import FlightPhase, detect_flight_phase

    phase = detect_flight_phase(altitude=35000, indicated_airspeed=210,
                                vertical_speed=0, mean_n1=85)
"""

from enum import Enum

# Vertical speed thresholds in ft/min
TAKEOFF_CLIMB_FPM = 984.0
CLIMB_FPM = 394.0

APPROACH_MAX_ALTITUDE_FT = 1000.0
APPROACH_MAX_SPEED_KT = 180.0


class FlightPhase(Enum):
    """Phases of flight reported by the simulation."""

    PARKED = "parked"  # On the ground, stopped
    TAXI = "taxi"  # On the ground, moving slowly
    TAKEOFF = "takeoff"  # Low and slow with a strong climb
    CLIMB = "climb"
    CRUISE = "cruise"
    DESCENT = "descent"
    APPROACH = "approach"  # Low, slow and descending
    CRASHED = "crashed"


def detect_flight_phase(
    altitude: float,
    indicated_airspeed: float,
    vertical_speed: float,
    mean_n1: float,
    has_crashed: bool = False,
) -> FlightPhase:
    """Determine the phase of flight.

    Args:
        altitude: Altitude in feet.
        indicated_airspeed: Knots.
        vertical_speed: ft/min, positive up.
        mean_n1: Mean engine N1 in percent.
        has_crashed: Terminal crash state.

    Returns:
        The detected phase. Level or gently changing flight counts as cruise.
    """
    if has_crashed:
        return FlightPhase.CRASHED

    if altitude < 10 and indicated_airspeed < 5:
        return FlightPhase.PARKED

    if altitude < 100 and indicated_airspeed < 40:
        return FlightPhase.TAXI

    low_and_slow = (
        altitude < APPROACH_MAX_ALTITUDE_FT and indicated_airspeed < APPROACH_MAX_SPEED_KT
    )

    if low_and_slow and vertical_speed > TAKEOFF_CLIMB_FPM and mean_n1 > 70:
        return FlightPhase.TAKEOFF

    if vertical_speed > CLIMB_FPM:
        return FlightPhase.CLIMB

    if low_and_slow and vertical_speed < -CLIMB_FPM:
        return FlightPhase.APPROACH

    if altitude > APPROACH_MAX_ALTITUDE_FT and vertical_speed < -CLIMB_FPM:
        return FlightPhase.DESCENT

    return FlightPhase.CRUISE

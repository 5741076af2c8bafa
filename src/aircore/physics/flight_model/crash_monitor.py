"""Ground-proximity warnings and crash detection.

Evaluates the aircraft's altitude and sink rate every tick and reports the
highest-priority warning together with every active caution. The warning
is reported as-is on every tick; blinking or acknowledgement belongs to the
presentation layer.

Typical usage:
    from aircore.physics.flight_model.crash_monitor import evaluate_crash_state

    status = evaluate_crash_state(altitude=1500.0, vertical_velocity=-120.0)
    print(status.warning, status.time_to_crash)
"""

from collections.abc import Sequence
from dataclasses import dataclass

from aircore.physics.flight_model.base import Alarm, CrashWarning

PULL_UP_SECONDS = 10.0
TERRAIN_SECONDS = 20.0
SINK_RATE_LIMIT = -100.0  # ft/s
LOW_FUEL_FRACTION = 0.05

OVERSPEED_KT = 340.0
BANK_ANGLE_LIMIT = 40.0  # degrees
GEAR_WARNING_ALTITUDE = 500.0  # ft
GEAR_WARNING_SPEED = 180.0  # kt
FLAPS_WARNING_ALTITUDE = 200.0  # ft
FLAPS_WARNING_SPEED = 160.0  # kt


@dataclass(frozen=True)
class CrashStatus:
    """Crash monitor output for one tick.

    Attributes:
        warning: Highest-priority warning, or None.
        time_to_crash: Seconds to ground contact while descending, else None.
        has_crashed: Ground contact.
        alarms: Every active caution condition.
    """

    warning: CrashWarning | None
    time_to_crash: float | None
    has_crashed: bool
    alarms: tuple[Alarm, ...] = ()


def time_to_crash(altitude: float, vertical_velocity: float) -> float | None:
    """Seconds until ground contact at the current sink rate.

    Args:
        altitude: Feet.
        vertical_velocity: ft/s.

    Returns:
        Time in seconds, or None when not descending.
    """
    if vertical_velocity >= 0:
        return None
    return max(0.0, altitude) / abs(vertical_velocity)


def evaluate_crash_state(
    altitude: float,
    vertical_velocity: float,
    already_crashed: bool = False,
    stall_warning: bool = False,
    fuel: float | None = None,
    fuel_capacity: float | None = None,
    airspeed: float | None = None,
    roll: float = 0.0,
    gear_extended: bool = True,
    flaps_extended: bool = True,
    engine_failed: Sequence[bool] = (),
) -> CrashStatus:
    """Determine the crash warning and active alarms.

    Priority, highest first: CRASHED (altitude at or below 0), PULL_UP
    (ground contact within 10 s), TERRAIN (within 20 s), SINK_RATE (sinking
    faster than 100 ft/s).

    Args:
        altitude: Feet.
        vertical_velocity: ft/s.
        already_crashed: Crash is sticky once reported.
        stall_warning: Adds the STALL alarm.
        fuel: Remaining fuel in kg, for the LOW_FUEL alarm.
        fuel_capacity: Fuel capacity in kg, for the LOW_FUEL alarm.
        airspeed: Indicated airspeed in knots, for the OVERSPEED and
            configuration alarms. Those alarms are skipped when None.
        roll: Degrees, for the BANK_ANGLE alarm.
        gear_extended: Landing gear down, for TOO_LOW_GEAR.
        flaps_extended: Flaps out of the UP position, for TOO_LOW_FLAPS.
        engine_failed: Flameout flag per engine, for ENGINE_FAILURE.

    Returns:
        Crash status for this tick.
    """
    ttc = time_to_crash(altitude, vertical_velocity)

    if already_crashed or altitude <= 0:
        warning: CrashWarning | None = CrashWarning.CRASHED
    elif ttc is not None and ttc <= PULL_UP_SECONDS:
        warning = CrashWarning.PULL_UP
    elif ttc is not None and ttc <= TERRAIN_SECONDS:
        warning = CrashWarning.TERRAIN
    elif vertical_velocity < SINK_RATE_LIMIT:
        warning = CrashWarning.SINK_RATE
    else:
        warning = None

    has_crashed = warning == CrashWarning.CRASHED

    alarms: list[Alarm] = []
    if not has_crashed:
        if vertical_velocity < SINK_RATE_LIMIT:
            alarms.append(Alarm.SINK_RATE)
        if ttc is not None and ttc <= TERRAIN_SECONDS:
            alarms.append(Alarm.TERRAIN)
        if ttc is not None and ttc <= PULL_UP_SECONDS:
            alarms.append(Alarm.PULL_UP)
        if stall_warning:
            alarms.append(Alarm.STALL)
        if fuel is not None and fuel_capacity and fuel < LOW_FUEL_FRACTION * fuel_capacity:
            alarms.append(Alarm.LOW_FUEL)
        if airspeed is not None and airspeed > OVERSPEED_KT:
            alarms.append(Alarm.OVERSPEED)
        if abs(roll) > BANK_ANGLE_LIMIT:
            alarms.append(Alarm.BANK_ANGLE)
        if airspeed is not None:
            alarms.extend(_configuration_alarms(altitude, airspeed, gear_extended, flaps_extended))
        if any(engine_failed):
            alarms.append(Alarm.ENGINE_FAILURE)

    return CrashStatus(
        warning=warning,
        time_to_crash=ttc,
        has_crashed=has_crashed,
        alarms=tuple(alarms),
    )


def _configuration_alarms(
    altitude: float,
    airspeed: float,
    gear_extended: bool,
    flaps_extended: bool,
) -> list[Alarm]:
    """Landing-configuration alarms for a slow aircraft close to the ground."""
    alarms = []
    if altitude < GEAR_WARNING_ALTITUDE and not gear_extended and airspeed < GEAR_WARNING_SPEED:
        alarms.append(Alarm.TOO_LOW_GEAR)
    if (
        altitude < FLAPS_WARNING_ALTITUDE
        and gear_extended
        and not flaps_extended
        and airspeed < FLAPS_WARNING_SPEED
    ):
        alarms.append(Alarm.TOO_LOW_FLAPS)
    return alarms

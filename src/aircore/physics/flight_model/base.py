"""Shared data model for the flight-dynamics core.

Defines the immutable aircraft parameters, the internal physics state, the
public aircraft state owned by the simulation and the frozen snapshot handed
to observers after every tick.

Units follow the cockpit: knots for airspeed, feet for altitude, ft/s for the
internal vertical velocity, ft/min for the displayed vertical speed, degrees
for attitude. Forces are computed in SI units.

Typical usage:
    from aircore.physics.flight_model.base import AircraftParameters, AircraftState

    params = AircraftParameters(mass=24000.0, wing_area=100.0)
    state = AircraftState()
    snapshot = state.snapshot()
"""

import math
from dataclasses import asdict, dataclass, field, fields
from enum import Enum, IntEnum
from typing import Any

from aircore.physics.flight_model.flight_phase import FlightPhase

# Unit conversions
KNOTS_TO_MS = 0.514444
MS_TO_KNOTS = 1.0 / KNOTS_TO_MS
FEET_TO_METERS = 0.3048
METERS_TO_FEET = 1.0 / FEET_TO_METERS

GRAVITY = 9.81  # m/s²
AIR_DENSITY_SEA_LEVEL = 1.225  # kg/m³

ENGINE_COUNT = 2


class ConfigurationError(ValueError):
    """Raised when aircraft parameters, presets or saved state are invalid."""


class FlapPosition(IntEnum):
    """Discrete flap settings."""

    UP = 0
    TAKEOFF = 1
    LANDING = 2


class CrashWarning(str, Enum):
    """Ground-proximity warning levels, in increasing severity."""

    SINK_RATE = "SINK_RATE"
    TERRAIN = "TERRAIN"
    PULL_UP = "PULL_UP"
    CRASHED = "CRASHED"

    @property
    def severity(self) -> int:
        """Ordinal severity (SINK_RATE lowest, CRASHED highest)."""
        return list(CrashWarning).index(self) + 1


class Alarm(str, Enum):
    """Active caution conditions reported alongside the crash warning."""

    SINK_RATE = "SINK_RATE"
    TERRAIN = "TERRAIN"
    PULL_UP = "PULL_UP"
    STALL = "STALL"
    LOW_FUEL = "LOW_FUEL"
    OVERSPEED = "OVERSPEED"
    BANK_ANGLE = "BANK_ANGLE"
    TOO_LOW_GEAR = "TOO_LOW_GEAR"
    TOO_LOW_FLAPS = "TOO_LOW_FLAPS"
    ENGINE_FAILURE = "ENGINE_FAILURE"


@dataclass(frozen=True)
class AircraftParameters:
    """Static description of the simulated aircraft.

    Attributes:
        name: Display name of the aircraft type.
        mass: Aircraft mass in kg (held constant during the flight).
        wing_area: Reference wing area in m².
        max_thrust: Total thrust of both engines at 100% N1, in N.
        stall_speed: Clean-configuration stall speed in knots.
        max_lift_coefficient: Upper bound of the lift coefficient.
        engine_count: Number of engines. Only twin-engine aircraft are modelled.
        fuel_capacity: Usable fuel in kg.

    Examples:
        >>> params = AircraftParameters(mass=30000.0)
        >>> params.engine_count
        2
    """

    name: str = "Regional Twinjet"
    mass: float = 24000.0
    wing_area: float = 100.0
    max_thrust: float = 80000.0
    stall_speed: float = 115.0
    max_lift_coefficient: float = 1.5
    engine_count: int = ENGINE_COUNT
    fuel_capacity: float = 20000.0

    def __post_init__(self) -> None:
        """Validate parameter values."""
        for name in ("mass", "wing_area", "max_thrust", "stall_speed", "max_lift_coefficient"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive number, got {value!r}")
        if not isinstance(self.fuel_capacity, (int, float)) or self.fuel_capacity < 0:
            raise ConfigurationError(
                f"fuel_capacity must be a non-negative number, got {self.fuel_capacity!r}"
            )
        if self.engine_count != ENGINE_COUNT:
            raise ConfigurationError(
                f"engine_count must be {ENGINE_COUNT}, got {self.engine_count!r}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AircraftParameters":
        """Build parameters from a dictionary.

        Unknown keys are ignored. mass, wing_area, max_thrust and stall_speed
        are required; the remaining fields fall back to their defaults.

        Args:
            data: Parameter mapping, e.g. parsed from a YAML preset.

        Returns:
            Validated parameters.

        Raises:
            ConfigurationError: If a required key is missing or a value is invalid.
        """
        if not isinstance(data, dict):
            raise ConfigurationError("aircraft parameters must be a mapping")

        for required in ("mass", "wing_area", "max_thrust", "stall_speed"):
            if required not in data:
                raise ConfigurationError(f"{required} required")

        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigurationError(str(e)) from e


@dataclass
class PhysicsState:
    """Internal physics quantities, recomputed every tick.

    Attributes:
        horizontal_velocity: Forward speed in knots.
        vertical_velocity: Climb rate in ft/s (positive up).
        horizontal_acceleration: kt/s.
        vertical_acceleration: ft/s².
        mass: Aircraft mass in kg.
        thrust_force: N.
        drag_force: N.
        lift_force: N.
        gravity_force: N.
        angle_of_attack: Degrees, from the latest stall evaluation.
        lift_coefficient: Effective lift coefficient used last tick.
    """

    horizontal_velocity: float = 210.0
    vertical_velocity: float = 0.0
    horizontal_acceleration: float = 0.0
    vertical_acceleration: float = 0.0
    mass: float = 24000.0
    thrust_force: float = 0.0
    drag_force: float = 0.0
    lift_force: float = 0.0
    gravity_force: float = 0.0
    angle_of_attack: float = 0.0
    lift_coefficient: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Convert to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PhysicsState":
        """Rebuild physics state from a dictionary, ignoring unknown keys.

        Raises:
            ConfigurationError: If a velocity is missing, a value is not a
                finite number or the horizontal velocity is negative.
        """
        if not isinstance(data, dict):
            raise ConfigurationError("physics state must be a mapping")
        for required in ("horizontal_velocity", "vertical_velocity"):
            if required not in data:
                raise ConfigurationError(f"physics {required} required")

        known = {f.name for f in fields(cls)}
        try:
            values = {key: float(value) for key, value in data.items() if key in known}
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid physics state: {e}") from e

        for key, value in values.items():
            if not math.isfinite(value):
                raise ConfigurationError(f"physics {key} must be finite, got {value!r}")
        if values["horizontal_velocity"] < 0:
            raise ConfigurationError("physics horizontal_velocity must not be negative")
        return cls(**values)


@dataclass
class AutopilotTargets:
    """Altitude (ft) and indicated airspeed (kt) held by the autopilot."""

    altitude: float = 35000.0
    airspeed: float = 210.0


def _default_engine_values(value: float) -> list[float]:
    return [value] * ENGINE_COUNT


@dataclass
class AircraftState:
    """Public aircraft state, mutated only by the simulation tick and controls.

    Attributes:
        heading: Magnetic heading in degrees, wrapped to [0, 360).
        pitch: Degrees, nose up positive.
        roll: Degrees, right wing down positive.
        vertical_speed: ft/min, derived from the physics vertical velocity.
        indicated_airspeed: Knots.
        true_airspeed: Knots.
        ground_speed: Knots.
        altitude: Feet above the ground, never negative.
        engine_n1: Fan speed per engine, percent.
        engine_n2: Core speed per engine, percent.
        engine_egt: Exhaust gas temperature per engine, °C.
        engine_fuel_flow: Fuel flow per engine, kg/h.
        thrust_levers: Commanded N1 per engine, percent.
        engine_failed: Flameout flag per engine.
        fuel: Remaining fuel in kg.
        flaps: Flap setting.
        gear_extended: Landing gear down.
        autopilot_engaged: Autopilot and autothrottle active.
        autopilot_targets: Targets held while engaged.
        is_stalling: Airspeed below the configuration stall speed.
        stall_warning: Airspeed below 1.2 times the stall speed.
        crash_warning: Highest-priority ground-proximity warning.
        time_to_crash: Seconds to ground contact at the current sink rate.
        has_crashed: Terminal state, cleared only by a reset.
        alarms: Every active caution condition.
        flight_phase: Derived phase of flight.
        sim_time: Simulated seconds since the last reset.
    """

    heading: float = 270.0
    pitch: float = 0.0
    roll: float = 0.0
    vertical_speed: float = 0.0
    indicated_airspeed: float = 210.0
    true_airspeed: float = 0.0
    ground_speed: float = 0.0
    altitude: float = 35000.0
    engine_n1: list[float] = field(default_factory=lambda: _default_engine_values(85.0))
    engine_n2: list[float] = field(default_factory=lambda: _default_engine_values(95.2))
    engine_egt: list[float] = field(default_factory=lambda: _default_engine_values(855.0))
    engine_fuel_flow: list[float] = field(default_factory=lambda: _default_engine_values(3060.0))
    thrust_levers: list[float] = field(default_factory=lambda: _default_engine_values(85.0))
    engine_failed: list[bool] = field(default_factory=lambda: [False] * ENGINE_COUNT)
    fuel: float = 20000.0
    flaps: FlapPosition = FlapPosition.UP
    gear_extended: bool = False
    autopilot_engaged: bool = True
    autopilot_targets: AutopilotTargets = field(default_factory=AutopilotTargets)
    is_stalling: bool = False
    stall_warning: bool = False
    crash_warning: CrashWarning | None = None
    time_to_crash: float | None = None
    has_crashed: bool = False
    alarms: list[Alarm] = field(default_factory=list)
    flight_phase: FlightPhase = FlightPhase.CRUISE
    sim_time: float = 0.0

    def snapshot(self) -> "FlightSnapshot":
        """Create an immutable copy of the current state."""
        return FlightSnapshot(
            heading=self.heading,
            pitch=self.pitch,
            roll=self.roll,
            vertical_speed=self.vertical_speed,
            indicated_airspeed=self.indicated_airspeed,
            true_airspeed=self.true_airspeed,
            ground_speed=self.ground_speed,
            altitude=self.altitude,
            engine_n1=tuple(self.engine_n1),
            engine_n2=tuple(self.engine_n2),
            engine_egt=tuple(self.engine_egt),
            engine_fuel_flow=tuple(self.engine_fuel_flow),
            thrust_levers=tuple(self.thrust_levers),
            engine_failed=tuple(self.engine_failed),
            fuel=self.fuel,
            flaps=self.flaps,
            gear_extended=self.gear_extended,
            autopilot_engaged=self.autopilot_engaged,
            autopilot_target_altitude=self.autopilot_targets.altitude,
            autopilot_target_airspeed=self.autopilot_targets.airspeed,
            is_stalling=self.is_stalling,
            stall_warning=self.stall_warning,
            crash_warning=self.crash_warning,
            time_to_crash=self.time_to_crash,
            has_crashed=self.has_crashed,
            alarms=tuple(self.alarms),
            flight_phase=self.flight_phase,
            sim_time=self.sim_time,
        )

    @classmethod
    def from_snapshot(cls, snapshot: "FlightSnapshot") -> "AircraftState":
        """Rebuild a mutable state from a snapshot."""
        return cls(
            heading=snapshot.heading,
            pitch=snapshot.pitch,
            roll=snapshot.roll,
            vertical_speed=snapshot.vertical_speed,
            indicated_airspeed=snapshot.indicated_airspeed,
            true_airspeed=snapshot.true_airspeed,
            ground_speed=snapshot.ground_speed,
            altitude=snapshot.altitude,
            engine_n1=list(snapshot.engine_n1),
            engine_n2=list(snapshot.engine_n2),
            engine_egt=list(snapshot.engine_egt),
            engine_fuel_flow=list(snapshot.engine_fuel_flow),
            thrust_levers=list(snapshot.thrust_levers),
            engine_failed=list(snapshot.engine_failed),
            fuel=snapshot.fuel,
            flaps=snapshot.flaps,
            gear_extended=snapshot.gear_extended,
            autopilot_engaged=snapshot.autopilot_engaged,
            autopilot_targets=AutopilotTargets(
                altitude=snapshot.autopilot_target_altitude,
                airspeed=snapshot.autopilot_target_airspeed,
            ),
            is_stalling=snapshot.is_stalling,
            stall_warning=snapshot.stall_warning,
            crash_warning=snapshot.crash_warning,
            time_to_crash=snapshot.time_to_crash,
            has_crashed=snapshot.has_crashed,
            alarms=list(snapshot.alarms),
            flight_phase=snapshot.flight_phase,
            sim_time=snapshot.sim_time,
        )


@dataclass(frozen=True)
class FlightSnapshot:
    """Immutable copy of the aircraft state returned after each tick.

    Field meanings match AircraftState; engine arrays are tuples and the
    autopilot targets are flattened into two fields.
    """

    heading: float
    pitch: float
    roll: float
    vertical_speed: float
    indicated_airspeed: float
    true_airspeed: float
    ground_speed: float
    altitude: float
    engine_n1: tuple[float, ...]
    engine_n2: tuple[float, ...]
    engine_egt: tuple[float, ...]
    engine_fuel_flow: tuple[float, ...]
    thrust_levers: tuple[float, ...]
    engine_failed: tuple[bool, ...]
    fuel: float
    flaps: FlapPosition
    gear_extended: bool
    autopilot_engaged: bool
    autopilot_target_altitude: float
    autopilot_target_airspeed: float
    is_stalling: bool
    stall_warning: bool
    crash_warning: CrashWarning | None
    time_to_crash: float | None
    has_crashed: bool
    alarms: tuple[Alarm, ...]
    flight_phase: FlightPhase
    sim_time: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-compatible data (enums become their values)."""
        data = asdict(self)
        data["engine_n1"] = list(self.engine_n1)
        data["engine_n2"] = list(self.engine_n2)
        data["engine_egt"] = list(self.engine_egt)
        data["engine_fuel_flow"] = list(self.engine_fuel_flow)
        data["thrust_levers"] = list(self.thrust_levers)
        data["engine_failed"] = list(self.engine_failed)
        data["flaps"] = int(self.flaps)
        data["crash_warning"] = self.crash_warning.value if self.crash_warning else None
        data["alarms"] = [alarm.value for alarm in self.alarms]
        data["flight_phase"] = self.flight_phase.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FlightSnapshot":
        """Parse data produced by to_dict().

        Raises:
            ConfigurationError: If a field is missing or holds an invalid value.
        """
        try:
            crash_warning = data["crash_warning"]
            return cls(
                heading=float(data["heading"]),
                pitch=float(data["pitch"]),
                roll=float(data["roll"]),
                vertical_speed=float(data["vertical_speed"]),
                indicated_airspeed=float(data["indicated_airspeed"]),
                true_airspeed=float(data["true_airspeed"]),
                ground_speed=float(data["ground_speed"]),
                altitude=float(data["altitude"]),
                engine_n1=_engine_tuple(data["engine_n1"]),
                engine_n2=_engine_tuple(data["engine_n2"]),
                engine_egt=_engine_tuple(data["engine_egt"]),
                engine_fuel_flow=_engine_tuple(data["engine_fuel_flow"]),
                thrust_levers=_engine_tuple(data["thrust_levers"]),
                engine_failed=_engine_flags(data.get("engine_failed", [False] * ENGINE_COUNT)),
                fuel=float(data["fuel"]),
                flaps=FlapPosition(int(data["flaps"])),
                gear_extended=bool(data["gear_extended"]),
                autopilot_engaged=bool(data["autopilot_engaged"]),
                autopilot_target_altitude=float(data["autopilot_target_altitude"]),
                autopilot_target_airspeed=float(data["autopilot_target_airspeed"]),
                is_stalling=bool(data["is_stalling"]),
                stall_warning=bool(data["stall_warning"]),
                crash_warning=CrashWarning(crash_warning) if crash_warning else None,
                time_to_crash=(
                    float(data["time_to_crash"]) if data["time_to_crash"] is not None else None
                ),
                has_crashed=bool(data["has_crashed"]),
                alarms=tuple(Alarm(alarm) for alarm in data["alarms"]),
                flight_phase=FlightPhase(data["flight_phase"]),
                sim_time=float(data["sim_time"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid flight snapshot: {e}") from e


def _engine_tuple(values: Any) -> tuple[float, ...]:
    result = tuple(float(v) for v in values)
    if len(result) != ENGINE_COUNT:
        raise ValueError(f"expected {ENGINE_COUNT} engine values, got {len(result)}")
    return result


def _engine_flags(values: Any) -> tuple[bool, ...]:
    result = tuple(bool(v) for v in values)
    if len(result) != ENGINE_COUNT:
        raise ValueError(f"expected {ENGINE_COUNT} engine flags, got {len(result)}")
    return result


def check_snapshot_bounds(snapshot: FlightSnapshot) -> None:
    """Reject a snapshot that breaks the state invariants.

    Every number must be finite; altitude, fuel, airspeed and simulated time
    must not be negative; N1 and thrust levers must lie in [0, 100].

    Raises:
        ConfigurationError: If any value is out of bounds.
    """
    for f in fields(snapshot):
        value = getattr(snapshot, f.name)
        values = value if isinstance(value, tuple) else (value,)
        for item in values:
            if isinstance(item, float) and not math.isfinite(item):
                raise ConfigurationError(f"{f.name} must be finite, got {value!r}")

    for name in ("altitude", "fuel", "indicated_airspeed", "sim_time"):
        value = getattr(snapshot, name)
        if value < 0:
            raise ConfigurationError(f"{name} must not be negative, got {value!r}")

    for name in ("engine_n1", "thrust_levers"):
        values = getattr(snapshot, name)
        if any(not 0.0 <= value <= 100.0 for value in values):
            raise ConfigurationError(f"{name} must lie in [0, 100], got {values!r}")

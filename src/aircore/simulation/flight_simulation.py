"""Flight simulation: state ownership, tick orchestration and controls.

FlightSimulation owns the aircraft and physics state and is the only place
they change. Each call to update() runs one tick in a fixed order:

    autopilot (when engaged) -> forces -> integration -> stall detection ->
    engine spool -> heading and altitude -> crash monitor -> flight phase

and returns an immutable snapshot. The caller decides the cadence; the
simulation never reads the wall clock.

Typical usage:
    from aircore.simulation.flight_simulation import FlightSimulation, SimulationConfig

    sim = FlightSimulation(config=SimulationConfig(seed=42))
    sim.control_flaps(1)
    snapshot = sim.update(100)
"""

import math
import random
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any

from aircore.core.logging_system import get_logger
from aircore.physics.flight_model.base import (
    ENGINE_COUNT,
    AircraftParameters,
    AircraftState,
    AutopilotTargets,
    ConfigurationError,
    CrashWarning,
    FlapPosition,
    FlightSnapshot,
    PhysicsState,
    check_snapshot_bounds,
)
from aircore.physics.flight_model.crash_monitor import evaluate_crash_state
from aircore.physics.flight_model.flight_phase import FlightPhase, detect_flight_phase
from aircore.physics.flight_model.forces import compute_forces
from aircore.physics.flight_model.integrator import advance_altitude, integrate
from aircore.physics.flight_model.stall import (
    apply_stall_effects,
    configuration_stall_speed,
    control_effectiveness,
    detect_stall,
    is_actively_stalling,
)
from aircore.systems.autopilot.controller import (
    AutopilotGains,
    compute_autopilot_command,
    engage_attitude,
)
from aircore.systems.engine.spool import update_engines

logger = get_logger(__name__)

MANUAL_PITCH_LIMIT = 15.0
MANUAL_ROLL_LIMIT = 30.0
TURN_RATE_AT_FULL_BANK = 3.0  # Degrees per second per unit sin(roll)
TRUE_AIRSPEED_GAIN = 0.3  # TAS gain per 40 000 ft
FORCE_LOG_INTERVAL = 100  # Ticks between debug force dumps


@dataclass
class SimulationConfig:
    """Simulation settings.

    Attributes:
        default_tick_ms: Tick length used when update() is called without dt.
        max_tick_ms: Upper clamp of a single tick.
        seed: Seed for the internal random generator when none is injected.
        autopilot_gains: Autopilot tuning.
        initial_targets: Autopilot targets after a reset.
    """

    default_tick_ms: float = 100.0
    max_tick_ms: float = 1000.0
    seed: int | None = None
    autopilot_gains: AutopilotGains = field(default_factory=AutopilotGains)
    initial_targets: AutopilotTargets = field(default_factory=AutopilotTargets)


def _wrap_heading(heading: float) -> float:
    return heading % 360.0


def _check_engine_index(engine_index: int) -> None:
    if not isinstance(engine_index, int) or not 0 <= engine_index < ENGINE_COUNT:
        raise ConfigurationError(f"Invalid engine index: {engine_index!r}")


class FlightSimulation:
    """Single-aircraft flight simulation.

    Not thread-safe. update() and the control methods must not be called
    from inside a tick.

    Examples:
        >>> sim = FlightSimulation(config=SimulationConfig(seed=1))
        >>> sim.snapshot().autopilot_engaged
        True
    """

    def __init__(
        self,
        params: AircraftParameters | None = None,
        config: SimulationConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the simulation in the default cruise state.

        Args:
            params: Aircraft parameters. Defaults to the regional twinjet.
            config: Simulation settings.
            rng: Random source. Defaults to random.Random(config.seed).
        """
        self.params = params or AircraftParameters()
        self.config = config or SimulationConfig()
        self.rng = rng or random.Random(self.config.seed)

        self._aircraft = AircraftState()
        self._physics = PhysicsState()
        self._in_tick = False
        self._tick_count = 0

        self._reset_state()
        logger.info(
            "FlightSimulation initialized: %s, mass=%.0f kg, wing area=%.1f m²",
            self.params.name,
            self.params.mass,
            self.params.wing_area,
        )

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> AircraftState:
        """Live aircraft state. Treat as read-only; use the control methods."""
        return self._aircraft

    @property
    def physics(self) -> PhysicsState:
        """Live physics state. Treat as read-only."""
        return self._physics

    @property
    def tick_count(self) -> int:
        """Ticks run since the last reset."""
        return self._tick_count

    def snapshot(self) -> FlightSnapshot:
        """Immutable copy of the current aircraft state."""
        return self._aircraft.snapshot()

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        if self._in_tick:
            raise RuntimeError(f"{operation}() cannot be called while a tick is in progress")
        self._in_tick = True
        try:
            yield
        finally:
            self._in_tick = False

    def _ensure_idle(self, operation: str) -> None:
        if self._in_tick:
            raise RuntimeError(f"{operation}() cannot be called while a tick is in progress")

    def update(self, dt_ms: float | None = None) -> FlightSnapshot:
        """Advance the simulation by one tick.

        Args:
            dt_ms: Tick length in milliseconds. Defaults to the configured
                tick; clamped to [0, max_tick_ms].

        Returns:
            Snapshot of the state after the tick.

        Raises:
            RuntimeError: If called from inside a tick.
        """
        if dt_ms is None:
            dt_ms = self.config.default_tick_ms
        if not math.isfinite(dt_ms):
            dt_ms = 0.0
        dt = max(0.0, min(self.config.max_tick_ms, dt_ms)) / 1000.0

        with self._exclusive("update"):
            if not self._aircraft.has_crashed and dt > 0:
                self._step(dt)

        return self.snapshot()

    def _step(self, dt: float) -> None:
        aircraft = self._aircraft
        physics = self._physics
        params = self.params
        gains = self.config.autopilot_gains

        self._tick_count += 1

        if aircraft.autopilot_engaged:
            command = compute_autopilot_command(aircraft, physics, gains, dt, self.rng)
            aircraft.pitch = command.pitch
            aircraft.roll = command.roll
            aircraft.heading = _wrap_heading(aircraft.heading + command.heading_change)
            aircraft.thrust_levers = [command.target_n1] * ENGINE_COUNT

        forces = compute_forces(aircraft, physics, params)
        physics.thrust_force = forces.thrust
        physics.drag_force = forces.drag
        physics.lift_force = forces.lift
        physics.gravity_force = forces.gravity
        physics.lift_coefficient = forces.lift_coefficient

        stall_speed = configuration_stall_speed(
            params.stall_speed, aircraft.flaps, aircraft.gear_extended
        )
        allow_below_floor = is_actively_stalling(
            aircraft.is_stalling,
            aircraft.autopilot_engaged,
            aircraft.pitch,
            forces.thrust,
            forces.drag,
        )
        result = integrate(
            physics,
            forces,
            aircraft.pitch,
            aircraft.altitude,
            stall_speed,
            dt,
            allow_below_floor=allow_below_floor,
        )
        physics.horizontal_velocity = result.horizontal_velocity
        physics.vertical_velocity = result.vertical_velocity
        physics.horizontal_acceleration = result.horizontal_acceleration
        physics.vertical_acceleration = result.vertical_acceleration

        self._update_stall(stall_speed)

        engines = update_engines(
            aircraft.engine_n1,
            aircraft.thrust_levers,
            aircraft.altitude,
            aircraft.fuel,
            dt,
            self.rng,
            failed=aircraft.engine_failed,
        )
        if engines.fuel <= 0 < aircraft.fuel:
            logger.warning("Fuel exhausted, engines winding down")
        aircraft.engine_n1 = list(engines.n1)
        aircraft.engine_n2 = list(engines.n2)
        aircraft.engine_egt = list(engines.egt)
        aircraft.engine_fuel_flow = list(engines.fuel_flow)
        aircraft.fuel = engines.fuel

        turn_rate = math.sin(math.radians(aircraft.roll)) * TURN_RATE_AT_FULL_BANK
        aircraft.heading = _wrap_heading(aircraft.heading + turn_rate * dt)
        aircraft.altitude = advance_altitude(aircraft.altitude, physics.vertical_velocity, dt)

        aircraft.indicated_airspeed = physics.horizontal_velocity
        aircraft.true_airspeed = physics.horizontal_velocity * (
            1.0 + aircraft.altitude / 40000.0 * TRUE_AIRSPEED_GAIN
        )
        aircraft.ground_speed = aircraft.true_airspeed
        aircraft.vertical_speed = physics.vertical_velocity * 60.0
        aircraft.sim_time += dt

        self._update_crash_state()

        phase = detect_flight_phase(
            aircraft.altitude,
            aircraft.indicated_airspeed,
            aircraft.vertical_speed,
            sum(aircraft.engine_n1) / ENGINE_COUNT,
            aircraft.has_crashed,
        )
        if phase != aircraft.flight_phase:
            logger.info("Flight phase: %s -> %s", aircraft.flight_phase.value, phase.value)
            aircraft.flight_phase = phase

        if self._tick_count % FORCE_LOG_INTERVAL == 0:
            logger.debug(
                "Forces: T=%.0f N D=%.0f N L=%.0f N W=%.0f N AoA=%.2f° alt=%.0f ft IAS=%.1f kt",
                forces.thrust,
                forces.drag,
                forces.lift,
                forces.gravity,
                physics.angle_of_attack,
                aircraft.altitude,
                aircraft.indicated_airspeed,
            )

    def _update_stall(self, stall_speed: float) -> None:
        aircraft = self._aircraft
        physics = self._physics

        status = detect_stall(
            aircraft.pitch,
            physics.vertical_velocity,
            physics.horizontal_velocity,
            stall_speed,
        )
        physics.angle_of_attack = status.angle_of_attack

        if status.is_stalling and not aircraft.is_stalling:
            logger.warning(
                "Stall: %.1f kt below stall speed %.1f kt",
                physics.horizontal_velocity,
                stall_speed,
            )
        elif aircraft.is_stalling and not status.is_stalling:
            logger.info("Stall recovered at %.1f kt", physics.horizontal_velocity)

        aircraft.is_stalling = status.is_stalling
        aircraft.stall_warning = status.stall_warning

        if status.is_stalling:
            effects = apply_stall_effects(
                physics.horizontal_velocity,
                physics.vertical_velocity,
                aircraft.pitch,
                self.rng,
            )
            physics.horizontal_velocity = effects.horizontal_velocity
            physics.vertical_velocity = effects.vertical_velocity
            limit = (
                self.config.autopilot_gains.pitch_limit
                if aircraft.autopilot_engaged
                else MANUAL_PITCH_LIMIT
            )
            aircraft.pitch = max(-limit, min(limit, effects.pitch))

    def _update_crash_state(self) -> None:
        aircraft = self._aircraft
        previous = aircraft.crash_warning

        status = evaluate_crash_state(
            aircraft.altitude,
            self._physics.vertical_velocity,
            already_crashed=aircraft.has_crashed,
            stall_warning=aircraft.stall_warning,
            fuel=aircraft.fuel,
            fuel_capacity=self.params.fuel_capacity,
            airspeed=aircraft.indicated_airspeed,
            roll=aircraft.roll,
            gear_extended=aircraft.gear_extended,
            flaps_extended=aircraft.flaps != FlapPosition.UP,
            engine_failed=aircraft.engine_failed,
        )
        aircraft.crash_warning = status.warning
        aircraft.time_to_crash = status.time_to_crash
        aircraft.alarms = list(status.alarms)

        if status.has_crashed and not aircraft.has_crashed:
            aircraft.has_crashed = True
            aircraft.altitude = 0.0
            logger.warning(
                "Aircraft crashed at %.1f kt, %.0f ft/min",
                aircraft.indicated_airspeed,
                aircraft.vertical_speed,
            )
        elif status.warning != previous and status.warning is not None:
            logger.warning("Ground proximity warning: %s", status.warning.value)

    # ------------------------------------------------------------------
    # Manual controls
    # ------------------------------------------------------------------

    def control_pitch(self, amount: float) -> None:
        """Change pitch by amount degrees (scaled by control effectiveness).

        Ignored while the autopilot is engaged or after a crash.
        """
        self._ensure_idle("control_pitch")
        aircraft = self._aircraft
        if aircraft.has_crashed or aircraft.autopilot_engaged:
            return
        pitch_effect, _ = control_effectiveness(aircraft.is_stalling)
        aircraft.pitch = max(
            -MANUAL_PITCH_LIMIT,
            min(MANUAL_PITCH_LIMIT, aircraft.pitch + amount * pitch_effect),
        )

    def control_roll(self, amount: float) -> None:
        """Change roll by amount degrees (scaled by control effectiveness).

        Ignored while the autopilot is engaged or after a crash.
        """
        self._ensure_idle("control_roll")
        aircraft = self._aircraft
        if aircraft.has_crashed or aircraft.autopilot_engaged:
            return
        _, roll_effect = control_effectiveness(aircraft.is_stalling)
        aircraft.roll = max(
            -MANUAL_ROLL_LIMIT,
            min(MANUAL_ROLL_LIMIT, aircraft.roll + amount * roll_effect),
        )

    def control_thrust(self, engine_index: int, amount: float) -> None:
        """Change one engine's N1 and thrust lever by amount percent.

        Args:
            engine_index: 0 (left) or 1 (right).
            amount: N1 change in percent.

        Raises:
            ConfigurationError: If engine_index does not name an engine.
        """
        self._ensure_idle("control_thrust")
        _check_engine_index(engine_index)

        aircraft = self._aircraft
        if aircraft.has_crashed or aircraft.autopilot_engaged:
            return

        n1 = max(0.0, min(100.0, aircraft.engine_n1[engine_index] + amount))
        aircraft.engine_n1[engine_index] = n1
        aircraft.thrust_levers[engine_index] = max(
            0.0, min(100.0, aircraft.thrust_levers[engine_index] + amount)
        )

    def control_flaps(self, position: int) -> None:
        """Set the flap position (clamped to 0-2). Ignored after a crash."""
        self._ensure_idle("control_flaps")
        aircraft = self._aircraft
        if aircraft.has_crashed:
            return
        flaps = FlapPosition(max(0, min(2, int(position))))
        if flaps != aircraft.flaps:
            logger.info("Flaps %s", flaps.name)
        aircraft.flaps = flaps

    def control_gear(self, extended: bool) -> None:
        """Extend or retract the landing gear. Ignored after a crash."""
        self._ensure_idle("control_gear")
        aircraft = self._aircraft
        if aircraft.has_crashed:
            return
        if bool(extended) != aircraft.gear_extended:
            logger.info("Gear %s", "down" if extended else "up")
        aircraft.gear_extended = bool(extended)

    # ------------------------------------------------------------------
    # Failures
    # ------------------------------------------------------------------

    def fail_engine(self, engine_index: int) -> None:
        """Flame out one engine.

        The engine spools down to 0% N1 at the normal spool rate and burns no
        fuel until relit. Under the autopilot the resulting N1 split drives
        the thrust-imbalance roll and yaw.

        Raises:
            ConfigurationError: If engine_index does not name an engine.
        """
        self._ensure_idle("fail_engine")
        _check_engine_index(engine_index)
        aircraft = self._aircraft
        if aircraft.has_crashed or aircraft.engine_failed[engine_index]:
            return
        aircraft.engine_failed[engine_index] = True
        logger.warning("Engine %d flameout", engine_index + 1)

    def relight_engine(self, engine_index: int) -> None:
        """Clear a flameout; the engine spools back toward its lever.

        Raises:
            ConfigurationError: If engine_index does not name an engine.
        """
        self._ensure_idle("relight_engine")
        _check_engine_index(engine_index)
        aircraft = self._aircraft
        if aircraft.has_crashed or not aircraft.engine_failed[engine_index]:
            return
        aircraft.engine_failed[engine_index] = False
        logger.info("Engine %d relit", engine_index + 1)

    # ------------------------------------------------------------------
    # Autopilot
    # ------------------------------------------------------------------

    def toggle_autopilot(self) -> bool:
        """Engage or disengage the autopilot.

        Engaging snaps the attitude into the engagement envelope. Disengaging
        leaves every other value untouched.

        Returns:
            Whether the autopilot is engaged afterwards.
        """
        self._ensure_idle("toggle_autopilot")
        aircraft = self._aircraft
        if aircraft.has_crashed:
            return aircraft.autopilot_engaged

        if aircraft.autopilot_engaged:
            aircraft.autopilot_engaged = False
            logger.info("Autopilot disengaged")
        else:
            aircraft.pitch, aircraft.roll = engage_attitude(
                aircraft.pitch, aircraft.roll, self.config.autopilot_gains
            )
            aircraft.autopilot_engaged = True
            logger.info(
                "Autopilot engaged: %.0f ft, %.0f kt",
                aircraft.autopilot_targets.altitude,
                aircraft.autopilot_targets.airspeed,
            )
        return aircraft.autopilot_engaged

    def set_autopilot_targets(
        self, altitude: float | None = None, airspeed: float | None = None
    ) -> None:
        """Set the altitude (ft) and/or airspeed (kt) the autopilot holds."""
        self._ensure_idle("set_autopilot_targets")
        aircraft = self._aircraft
        if aircraft.has_crashed:
            return

        targets = aircraft.autopilot_targets
        if altitude is not None:
            targets = replace(targets, altitude=max(0.0, float(altitude)))
        if airspeed is not None:
            targets = replace(targets, airspeed=max(0.0, float(airspeed)))
        aircraft.autopilot_targets = targets
        logger.info("Autopilot targets: %.0f ft, %.0f kt", targets.altitude, targets.airspeed)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _reset_state(self) -> None:
        self._aircraft = AircraftState(
            fuel=self.params.fuel_capacity,
            autopilot_targets=replace(self.config.initial_targets),
        )
        self._physics = PhysicsState(
            horizontal_velocity=self._aircraft.indicated_airspeed,
            mass=self.params.mass,
        )
        self._tick_count = 0
        self._refresh_derived()

    def _refresh_derived(self) -> None:
        aircraft = self._aircraft
        aircraft.indicated_airspeed = self._physics.horizontal_velocity
        aircraft.true_airspeed = aircraft.indicated_airspeed * (
            1.0 + aircraft.altitude / 40000.0 * TRUE_AIRSPEED_GAIN
        )
        aircraft.ground_speed = aircraft.true_airspeed
        aircraft.vertical_speed = self._physics.vertical_velocity * 60.0

    def reset_flight(self) -> FlightSnapshot:
        """Return to the default cruise state and clear any crash."""
        self._ensure_idle("reset_flight")
        self._reset_state()
        logger.info("Flight reset to default cruise state")
        return self.snapshot()

    def set_test_configuration(self, altitude: float, ias: float) -> FlightSnapshot:
        """Re-seed a level, hand-flown state at the given altitude and airspeed.

        The autopilot is disengaged, attitude and vertical speed are zeroed and
        any crash is cleared. Engines keep the default cruise setting.

        Args:
            altitude: Feet.
            ias: Indicated airspeed in knots.

        Returns:
            Snapshot of the new state.
        """
        self._ensure_idle("set_test_configuration")
        altitude = max(0.0, float(altitude))
        ias = max(0.0, float(ias))

        self._reset_state()
        self._aircraft.altitude = altitude
        self._aircraft.autopilot_engaged = False
        self._aircraft.autopilot_targets = AutopilotTargets(altitude=altitude, airspeed=ias)
        self._aircraft.flight_phase = detect_flight_phase(altitude, ias, 0.0, 85.0)
        self._physics.horizontal_velocity = ias
        self._refresh_derived()

        logger.info("Test configuration: %.0f ft, %.0f kt, autopilot off", altitude, ias)
        return self.snapshot()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_state(self) -> dict[str, Any]:
        """Export the complete simulation state as plain data."""
        return {
            "parameters": self.params.to_dict(),
            "aircraft": self.snapshot().to_dict(),
            "physics": self._physics.to_dict(),
            "tick_count": self._tick_count,
        }

    def restore_state(self, data: dict[str, Any]) -> None:
        """Replace the aircraft and physics state with exported data.

        Aircraft parameters are not changed.

        Raises:
            ConfigurationError: If the data is malformed or breaks the state
                invariants (non-finite values, negative altitude or fuel, N1
                outside [0, 100]).
        """
        self._ensure_idle("restore_state")
        try:
            aircraft_data = data["aircraft"]
            physics_data = data["physics"]
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Invalid simulation state: {e}") from e

        snapshot = FlightSnapshot.from_dict(aircraft_data)
        check_snapshot_bounds(snapshot)
        physics = PhysicsState.from_dict(physics_data)

        try:
            tick_count = int(data.get("tick_count", 0))
        except (TypeError, ValueError, OverflowError) as e:
            raise ConfigurationError(f"Invalid tick count: {e}") from e
        if tick_count < 0:
            raise ConfigurationError(f"tick_count must not be negative, got {tick_count}")

        self._aircraft = AircraftState.from_snapshot(snapshot)
        self._physics = replace(physics, mass=self.params.mass)
        self._tick_count = tick_count
        logger.info(
            "Flight state restored: %.0f ft, %.0f kt",
            self._aircraft.altitude,
            self._aircraft.indicated_airspeed,
        )

    @classmethod
    def from_state(
        cls,
        data: dict[str, Any],
        params: AircraftParameters | None = None,
        config: SimulationConfig | None = None,
        rng: random.Random | None = None,
    ) -> "FlightSimulation":
        """Create a simulation from exported state.

        Args:
            data: Output of export_state().
            params: Aircraft parameters. Defaults to those stored in data.
            config: Simulation settings.
            rng: Random source.

        Returns:
            Simulation continuing from the exported state.
        """
        if params is None and isinstance(data, dict) and "parameters" in data:
            params = AircraftParameters.from_dict(data["parameters"])
        sim = cls(params=params, config=config, rng=rng)
        sim.restore_state(data)
        return sim

    @property
    def crash_warning(self) -> CrashWarning | None:
        """Current ground-proximity warning."""
        return self._aircraft.crash_warning

    @property
    def flight_phase(self) -> FlightPhase:
        """Current phase of flight."""
        return self._aircraft.flight_phase

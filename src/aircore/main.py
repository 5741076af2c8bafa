"""AirCore headless runner.

Runs the flight simulation without any user interface: seeds a scenario,
advances the simulation at a fixed step or paced to the wall clock, reports
the state periodically and optionally records or saves the flight.

Typical usage:
    python -m aircore.main --duration 120
    python -m aircore.main --altitude 34000 --airspeed 210 --target-altitude 35000
    python -m aircore.main --realtime --record flight.db --seed 42
"""

import argparse
import logging
import sys
from pathlib import Path

import pygame

from aircore.aircraft.loader import DEFAULT_PRESET, get_aircraft_preset, load_aircraft_parameters
from aircore.core.logging_system import get_logger, initialize_logging
from aircore.persistence.flight_save import load_flight, save_flight
from aircore.physics.flight_model.base import ConfigurationError, FlightSnapshot
from aircore.simulation.flight_simulation import FlightSimulation, SimulationConfig
from aircore.telemetry.flight_recorder import FlightRecorder
from aircore.version import get_about_info, get_version

logger = get_logger(__name__)


def format_status(snapshot: FlightSnapshot) -> str:
    """One-line cockpit summary of a snapshot."""
    warning = snapshot.crash_warning.value if snapshot.crash_warning else "-"
    return (
        f"t={snapshot.sim_time:7.1f}s  ALT {snapshot.altitude:7.0f} ft  "
        f"IAS {snapshot.indicated_airspeed:5.1f} kt  VS {snapshot.vertical_speed:+6.0f} fpm  "
        f"HDG {snapshot.heading:5.1f}  PITCH {snapshot.pitch:+5.1f}  "
        f"N1 {snapshot.engine_n1[0]:4.1f}/{snapshot.engine_n1[1]:4.1f}  "
        f"FUEL {snapshot.fuel:7.0f} kg  AP {'ON ' if snapshot.autopilot_engaged else 'OFF'}  "
        f"{snapshot.flight_phase.value.upper():8s}  WARN {warning}"
    )


class HeadlessRunner:
    """Drives a FlightSimulation from the command line."""

    def __init__(
        self,
        sim: FlightSimulation,
        recorder: FlightRecorder | None = None,
        report_interval: float = 10.0,
    ) -> None:
        """Initialize the runner.

        Args:
            sim: Simulation to drive.
            recorder: Optional flight recorder fed every tick.
            report_interval: Simulated seconds between status lines (0 disables).
        """
        self.sim = sim
        self.recorder = recorder
        self.report_interval = report_interval
        self._next_report = 0.0

    def _after_tick(self, snapshot: FlightSnapshot) -> None:
        if self.recorder:
            self.recorder.record(snapshot, self.sim.physics)
        if self.report_interval > 0 and snapshot.sim_time >= self._next_report:
            print(format_status(snapshot))
            self._next_report = snapshot.sim_time + self.report_interval

    def run_fixed(self, duration: float, tick_ms: float) -> FlightSnapshot:
        """Run as fast as possible with a fixed tick.

        Stops early if the aircraft crashes.
        """
        if not tick_ms > 0:
            raise ValueError(f"tick_ms must be positive, got {tick_ms}")
        snapshot = self.sim.snapshot()
        self._next_report = snapshot.sim_time
        end_time = snapshot.sim_time + duration

        while snapshot.sim_time < end_time - 1e-9 and not snapshot.has_crashed:
            snapshot = self.sim.update(tick_ms)
            self._after_tick(snapshot)

        return snapshot

    def run_realtime(self, duration: float, tick_ms: float) -> FlightSnapshot:
        """Run paced to the wall clock with a pygame clock.

        Each tick advances the simulation by the real time elapsed since the
        previous one.
        """
        if not tick_ms > 0:
            raise ValueError(f"tick_ms must be positive, got {tick_ms}")
        pygame.init()
        clock = pygame.time.Clock()
        fps = max(1, round(1000.0 / tick_ms))

        snapshot = self.sim.snapshot()
        self._next_report = snapshot.sim_time
        end_time = snapshot.sim_time + duration
        logger.info("Real-time run at %d Hz", fps)

        try:
            clock.tick(fps)
            while snapshot.sim_time < end_time and not snapshot.has_crashed:
                elapsed_ms = clock.tick(fps)
                snapshot = self.sim.update(elapsed_ms)
                self._after_tick(snapshot)
        finally:
            pygame.quit()

        return snapshot


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(description="AirCore - headless flight-dynamics runner")

    about = get_about_info()
    parser.add_argument(
        "--version",
        action="version",
        version=f"{about['name']} {about['version']} - {about['description']}",
    )

    aircraft = parser.add_mutually_exclusive_group()
    aircraft.add_argument(
        "--aircraft",
        type=str,
        default=None,
        help=f"Bundled aircraft preset (default: {DEFAULT_PRESET})",
    )
    aircraft.add_argument("--aircraft-file", type=Path, help="Aircraft preset YAML file")

    parser.add_argument(
        "--altitude",
        type=float,
        help="Start hand-flown at this altitude in feet (requires --airspeed)",
    )
    parser.add_argument("--airspeed", type=float, help="Start airspeed in knots")
    parser.add_argument("--target-altitude", type=float, help="Autopilot altitude target (ft)")
    parser.add_argument("--target-airspeed", type=float, help="Autopilot airspeed target (kt)")
    parser.add_argument(
        "--autopilot",
        action="store_true",
        help="Engage the autopilot after seeding a test configuration",
    )

    parser.add_argument("--duration", type=float, default=60.0, help="Simulated seconds to run")
    parser.add_argument("--tick-ms", type=float, default=100.0, help="Tick length in ms")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible runs")
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Pace the simulation to the wall clock",
    )
    parser.add_argument(
        "--report-interval",
        type=float,
        default=10.0,
        help="Simulated seconds between status lines (0 to disable)",
    )

    parser.add_argument("--record", type=Path, help="Record flight data to this SQLite file")
    parser.add_argument("--load", type=Path, help="Resume from a save file")
    parser.add_argument("--save", type=Path, help="Write a save file when the run ends")

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override the configured log level",
    )
    parser.add_argument(
        "--log-to-file",
        action="store_true",
        help="Also write logs under ~/.aircore/logs",
    )

    args = parser.parse_args(argv)
    if (args.altitude is None) != (args.airspeed is None):
        parser.error("--altitude and --airspeed must be given together")
    if not args.tick_ms > 0:
        parser.error("--tick-ms must be positive")
    if not args.duration >= 0:
        parser.error("--duration must not be negative")
    return args


def build_simulation(args: argparse.Namespace) -> FlightSimulation:
    """Create the simulation described by the command line.

    Raises:
        ConfigurationError: If the aircraft or save file is invalid.
    """
    config = SimulationConfig(default_tick_ms=args.tick_ms, seed=args.seed)

    if args.load:
        return load_flight(args.load, config=config)

    if args.aircraft_file:
        params = load_aircraft_parameters(args.aircraft_file)
    else:
        params = get_aircraft_preset(args.aircraft or DEFAULT_PRESET)

    sim = FlightSimulation(params=params, config=config)

    if args.altitude is not None:
        sim.set_test_configuration(args.altitude, args.airspeed)
    if args.target_altitude is not None or args.target_airspeed is not None:
        sim.set_autopilot_targets(altitude=args.target_altitude, airspeed=args.target_airspeed)
    if args.autopilot and not sim.state.autopilot_engaged:
        sim.toggle_autopilot()

    return sim


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 2 for configuration errors).
    """
    args = parse_args(argv)

    initialize_logging(use_platform_dir=args.log_to_file)
    if args.log_level:
        logging.getLogger("aircore").setLevel(args.log_level)
    logger.info("AirCore %s starting", get_version())

    try:
        sim = build_simulation(args)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2

    recorder = FlightRecorder(args.record) if args.record else None
    if recorder:
        recorder.set_metadata("aircraft", sim.params.name)
        recorder.set_metadata("seed", args.seed)

    runner = HeadlessRunner(sim, recorder=recorder, report_interval=args.report_interval)
    try:
        if args.realtime:
            snapshot = runner.run_realtime(args.duration, args.tick_ms)
        else:
            snapshot = runner.run_fixed(args.duration, args.tick_ms)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        snapshot = sim.snapshot()
    finally:
        if recorder:
            recorder.close()

    print(format_status(snapshot))
    if snapshot.has_crashed:
        print("Aircraft crashed.")

    if args.save:
        save_flight(sim, args.save)

    return 0


if __name__ == "__main__":
    sys.exit(main())

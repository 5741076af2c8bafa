"""Flight model: forces, integration, stall, crash and phase detection."""

from aircore.physics.flight_model.base import (
    AircraftParameters,
    AircraftState,
    Alarm,
    AutopilotTargets,
    ConfigurationError,
    CrashWarning,
    FlapPosition,
    FlightSnapshot,
    PhysicsState,
)
from aircore.physics.flight_model.flight_phase import FlightPhase

__all__ = [
    "AircraftParameters",
    "AircraftState",
    "Alarm",
    "AutopilotTargets",
    "ConfigurationError",
    "CrashWarning",
    "FlapPosition",
    "FlightPhase",
    "FlightSnapshot",
    "PhysicsState",
]

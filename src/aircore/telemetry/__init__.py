"""Flight data recording and analysis."""

from aircore.telemetry.flight_recorder import FlightAnalyzer, FlightRecorder

__all__ = ["FlightRecorder", "FlightAnalyzer"]

"""Flight simulation orchestration."""

from aircore.simulation.flight_simulation import FlightSimulation, SimulationConfig

__all__ = ["FlightSimulation", "SimulationConfig"]

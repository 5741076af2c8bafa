"""Aircraft systems: engines and autopilot."""

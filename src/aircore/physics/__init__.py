"""Physics models for the flight-dynamics core."""

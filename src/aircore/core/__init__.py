"""Core infrastructure shared by every AirCore subsystem."""

"""AirCore - flight-dynamics core for a twin-engine airliner simulator."""

from aircore.version import __version__

__all__ = ["__version__"]

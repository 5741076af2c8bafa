"""Aircraft presets."""

from aircore.aircraft.loader import (
    DEFAULT_PRESET,
    get_aircraft_preset,
    list_aircraft_presets,
    load_aircraft_parameters,
)

__all__ = [
    "DEFAULT_PRESET",
    "get_aircraft_preset",
    "list_aircraft_presets",
    "load_aircraft_parameters",
]

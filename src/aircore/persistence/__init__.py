"""Flight save files."""

from aircore.persistence.flight_save import (
    SAVE_FORMAT_VERSION,
    get_save_dir,
    list_saved_flights,
    load_flight,
    save_flight,
)

__all__ = [
    "SAVE_FORMAT_VERSION",
    "get_save_dir",
    "list_saved_flights",
    "load_flight",
    "save_flight",
]

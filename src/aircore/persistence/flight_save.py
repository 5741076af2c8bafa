"""Flight save files.

Saves a running simulation to JSON and restores it later. Save files hold
the aircraft parameters, the aircraft and physics state and a format
version. By default they live in ~/.aircore/saves.

Typical usage:
    from aircore.persistence.flight_save import load_flight, save_flight

    path = save_flight(sim, "cruise_checkpoint")
    sim = load_flight(path)
"""

import json
import logging
import random
from datetime import datetime
from pathlib import Path
from typing import Any

from aircore.physics.flight_model.base import ConfigurationError
from aircore.simulation.flight_simulation import FlightSimulation, SimulationConfig

logger = logging.getLogger(__name__)

SAVE_FORMAT_VERSION = 1
SAVE_SUFFIX = ".json"


def get_save_dir() -> Path:
    """Default save directory (~/.aircore/saves, not created)."""
    return Path.home() / ".aircore" / "saves"


def _resolve_path(name_or_path: str | Path, save_dir: Path | None) -> Path:
    path = Path(name_or_path)
    if path.suffix != SAVE_SUFFIX:
        path = path.with_suffix(SAVE_SUFFIX)
    if not path.is_absolute() and path.parent == Path("."):
        path = (save_dir or get_save_dir()) / path
    return path


def save_flight(
    sim: FlightSimulation,
    name_or_path: str | Path,
    save_dir: Path | None = None,
    description: str = "",
) -> Path:
    """Write the simulation state to a JSON save file.

    Args:
        sim: Simulation to save.
        name_or_path: Save name (stored in save_dir) or explicit file path.
        save_dir: Directory for bare save names. Defaults to get_save_dir().
        description: Free-form note stored with the save.

    Returns:
        Path of the written file.
    """
    path = _resolve_path(name_or_path, save_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "version": SAVE_FORMAT_VERSION,
        "saved_at": datetime.now().isoformat(),
        "description": description,
        "state": sim.export_state(),
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    logger.info("Flight saved to %s", path)
    return path


def read_save_file(path: str | Path) -> dict[str, Any]:
    """Read and validate a save file without building a simulation.

    Raises:
        ConfigurationError: If the file is missing, not JSON or an unknown version.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        logger.error("Failed to read save file %s: %s", path, e)
        raise ConfigurationError(f"Cannot read save file {path}: {e}") from e
    except json.JSONDecodeError as e:
        logger.error("Malformed save file %s: %s", path, e)
        raise ConfigurationError(f"Malformed save file {path}: {e}") from e

    if not isinstance(data, dict) or "state" not in data:
        raise ConfigurationError(f"Save file {path} has no state")
    if data.get("version") != SAVE_FORMAT_VERSION:
        raise ConfigurationError(
            f"Unsupported save format version {data.get('version')!r} in {path}"
        )
    return data


def load_flight(
    name_or_path: str | Path,
    save_dir: Path | None = None,
    config: SimulationConfig | None = None,
    rng: random.Random | None = None,
) -> FlightSimulation:
    """Restore a simulation from a save file.

    Args:
        name_or_path: Save name (looked up in save_dir) or explicit file path.
        save_dir: Directory for bare save names. Defaults to get_save_dir().
        config: Simulation settings for the restored simulation.
        rng: Random source for the restored simulation.

    Returns:
        Simulation continuing from the saved state.

    Raises:
        ConfigurationError: If the save file cannot be loaded.
    """
    path = _resolve_path(name_or_path, save_dir)
    data = read_save_file(path)
    sim = FlightSimulation.from_state(data["state"], config=config, rng=rng)
    logger.info("Flight loaded from %s", path)
    return sim


def list_saved_flights(save_dir: Path | None = None) -> list[dict[str, Any]]:
    """List save files, newest first.

    Unreadable files are skipped with a warning.

    Returns:
        One entry per save with its name, path, save time and description.
    """
    directory = save_dir or get_save_dir()
    if not directory.exists():
        return []

    saves = []
    for path in directory.glob(f"*{SAVE_SUFFIX}"):
        try:
            data = read_save_file(path)
        except ConfigurationError as e:
            logger.warning("Skipping save file %s: %s", path.name, e)
            continue
        saves.append(
            {
                "name": path.stem,
                "path": str(path),
                "saved_at": data.get("saved_at", ""),
                "description": data.get("description", ""),
            }
        )

    saves.sort(key=lambda save: save["saved_at"], reverse=True)
    return saves

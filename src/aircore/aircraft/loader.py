"""Aircraft preset loading.

Presets are YAML files with a display name, an optional description and a
``parameters`` mapping matching AircraftParameters. The bundled presets live
in aircore/config/aircraft.

Typical usage:
    from aircore.aircraft.loader import get_aircraft_preset, load_aircraft_parameters

    params = get_aircraft_preset("regional_twinjet")
    custom = load_aircraft_parameters("my_aircraft.yaml")
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from aircore.physics.flight_model.base import AircraftParameters, ConfigurationError

logger = logging.getLogger(__name__)

AIRCRAFT_CONFIG_DIR = Path(__file__).parent.parent / "config" / "aircraft"
DEFAULT_PRESET = "regional_twinjet"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except OSError as e:
        logger.error("Failed to read aircraft config %s: %s", path, e)
        raise ConfigurationError(f"Cannot read aircraft config {path}: {e}") from e
    except yaml.YAMLError as e:
        logger.error("Malformed aircraft config %s: %s", path, e)
        raise ConfigurationError(f"Malformed aircraft config {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Aircraft config {path} must contain a mapping")
    return config


def load_aircraft_parameters(path: str | Path) -> AircraftParameters:
    """Load aircraft parameters from a YAML file.

    Args:
        path: Path to the preset file.

    Returns:
        Validated aircraft parameters.

    Raises:
        ConfigurationError: If the file is missing, malformed or invalid.
    """
    path = Path(path)
    config = _read_yaml(path)

    parameters = config.get("parameters")
    if not isinstance(parameters, dict):
        raise ConfigurationError(f"Aircraft config {path} has no parameters section")

    data = dict(parameters)
    data.setdefault("name", config.get("name", path.stem))
    try:
        params = AircraftParameters.from_dict(data)
    except ConfigurationError as e:
        logger.error("Invalid aircraft config %s: %s", path, e)
        raise

    logger.info("Loaded aircraft %s from %s", params.name, path)
    return params


def list_aircraft_presets() -> list[dict[str, str]]:
    """List the bundled aircraft presets.

    Returns:
        One entry per preset with its id, name, description and path.
        Unreadable files are skipped with a warning.
    """
    presets = []
    for yaml_file in sorted(AIRCRAFT_CONFIG_DIR.glob("*.yaml")):
        try:
            config = _read_yaml(yaml_file)
        except ConfigurationError as e:
            logger.warning("Skipping aircraft preset %s: %s", yaml_file.name, e)
            continue
        presets.append(
            {
                "id": yaml_file.stem,
                "name": config.get("name", yaml_file.stem),
                "description": config.get("description", ""),
                "path": str(yaml_file),
            }
        )
    return presets


def get_aircraft_preset(name: str = DEFAULT_PRESET) -> AircraftParameters:
    """Load a bundled preset by id.

    Args:
        name: Preset id (file name without .yaml).

    Returns:
        Validated aircraft parameters.

    Raises:
        ConfigurationError: If no such preset exists.
    """
    path = AIRCRAFT_CONFIG_DIR / f"{name}.yaml"
    if not path.is_file():
        available = ", ".join(preset["id"] for preset in list_aircraft_presets())
        raise ConfigurationError(f"Unknown aircraft preset {name!r} (available: {available})")
    return load_aircraft_parameters(path)

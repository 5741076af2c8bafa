"""Version information for AirCore.

This module provides version information read from the VERSION file
in the project root, with fallback for packaged distributions.
"""

from pathlib import Path

__version__ = "0.1.0"
__license__ = "MIT"


def get_version() -> str:
    """Get the current version string.

    Reads from the VERSION file in the project root or falls back to __version__.

    Returns:
        Version string (e.g., "0.1.0").
    """
    version_paths = [
        Path(__file__).parent.parent.parent / "VERSION",  # src/aircore -> root
        Path(__file__).parent.parent / "VERSION",
    ]

    for version_path in version_paths:
        if version_path.exists():
            try:
                return version_path.read_text().strip()
            except OSError:
                continue

    return __version__


def get_about_info() -> dict[str, str]:
    """Get complete about information.

    Returns:
        Dictionary with name, version, license and description.
    """
    return {
        "name": "AirCore",
        "version": get_version(),
        "license": __license__,
        "description": "Flight-dynamics core for a twin-engine airliner simulator",
    }

"""Altitude-hold and autothrottle autopilot."""

from aircore.systems.autopilot.controller import (
    AutopilotCommand,
    AutopilotGains,
    compute_autopilot_command,
    engage_attitude,
)

__all__ = [
    "AutopilotCommand",
    "AutopilotGains",
    "compute_autopilot_command",
    "engage_attitude",
]

"""Turbofan engine spool model."""

from aircore.systems.engine.spool import EngineUpdate, spool_toward, update_engines

__all__ = ["EngineUpdate", "spool_toward", "update_engines"]

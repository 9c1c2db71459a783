"""Persistence helpers."""

from .settings_store import MemoryMedium, ParameterStore, QSettingsMedium

__all__ = ["MemoryMedium", "ParameterStore", "QSettingsMedium"]

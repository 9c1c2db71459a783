"""Persistence of the generator parameters.

The store keeps the carrier frequency, the beat source and the volume in
memory and writes every change through to a key/value medium.  Each field is
restored on its own, so one corrupted entry never resets the others.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Mapping, Optional

from PyQt5.QtCore import QSettings

from ..audio.beat_resolver import (
    NO_BEAT,
    BeatSource,
    CustomBeat,
    PresetBeat,
    resolve_source,
    source_from_fields,
)
from ..constants import (
    BEAT_PRESET_KEY,
    CARRIER_FREQUENCY_KEY,
    CUSTOM_BEAT_FREQUENCY_KEY,
    DEFAULT_CARRIER_FREQUENCY,
    DEFAULT_VOLUME,
    SETTINGS_APPLICATION,
    SETTINGS_ORGANIZATION,
    VOLUME_KEY,
)
from ..presets import BEAT_PRESETS, BeatPreset

logger = logging.getLogger(__name__)


class MemoryMedium:
    """Dictionary backed medium, used headless and in tests."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class QSettingsMedium:
    """Medium stored in the platform settings through :class:`QSettings`."""

    def __init__(self, settings: Optional[QSettings] = None) -> None:
        if settings is None:
            settings = QSettings(SETTINGS_ORGANIZATION, SETTINGS_APPLICATION)
        self._settings = settings

    def get(self, key: str) -> Optional[str]:
        if not self._settings.contains(key):
            return None
        value = self._settings.value(key)
        if value is None:
            return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        self._settings.setValue(key, str(value))
        self._settings.sync()

    def remove(self, key: str) -> None:
        self._settings.remove(key)
        self._settings.sync()


def _parse_float(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def _check_carrier(value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"Carrier frequency must be a finite positive number, got {value!r}")
    return value


def _check_volume(value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise ValueError(f"Volume must be within [0, 1], got {value!r}")
    return value


class ParameterStore:
    """Current generator parameters with write-through persistence."""

    def __init__(
        self,
        medium=None,
        catalog: Mapping[str, BeatPreset] = BEAT_PRESETS,
    ) -> None:
        self._medium = medium if medium is not None else MemoryMedium()
        self._catalog = catalog
        self._carrier_frequency = DEFAULT_CARRIER_FREQUENCY
        self._beat_source: BeatSource = NO_BEAT
        self._volume = DEFAULT_VOLUME
        self._restore()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def carrier_frequency(self) -> float:
        return self._carrier_frequency

    @property
    def beat_source(self) -> BeatSource:
        return self._beat_source

    @property
    def preset(self) -> Optional[str]:
        if isinstance(self._beat_source, PresetBeat):
            return self._beat_source.preset_id
        return None

    @property
    def custom_beat_frequency(self) -> Optional[float]:
        if isinstance(self._beat_source, CustomBeat):
            return self._beat_source.frequency
        return None

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def effective_beat_frequency(self) -> float:
        return resolve_source(self._beat_source, self._catalog)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def set_carrier_frequency(self, value: float) -> None:
        self._carrier_frequency = _check_carrier(value)
        self._write(CARRIER_FREQUENCY_KEY, repr(self._carrier_frequency))

    def select_preset(self, name: Optional[str]) -> None:
        """Select ``name`` and drop any custom override; ``None`` clears both."""

        if not name:
            self._beat_source = NO_BEAT
            self._remove(BEAT_PRESET_KEY)
            self._remove(CUSTOM_BEAT_FREQUENCY_KEY)
            return
        if name not in self._catalog:
            raise KeyError(f"Unknown beat preset: {name}")
        self._beat_source = PresetBeat(name)
        self._write(BEAT_PRESET_KEY, name)
        self._remove(CUSTOM_BEAT_FREQUENCY_KEY)

    def set_custom_beat_frequency(self, value: Optional[float]) -> None:
        """Override the beat with ``value`` and drop the preset selection."""

        if value is None:
            if isinstance(self._beat_source, CustomBeat):
                self._beat_source = NO_BEAT
            self._remove(CUSTOM_BEAT_FREQUENCY_KEY)
            return
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Custom beat frequency must be finite, got {value!r}")
        self._beat_source = CustomBeat(value)
        self._write(CUSTOM_BEAT_FREQUENCY_KEY, repr(value))
        self._remove(BEAT_PRESET_KEY)

    def set_volume(self, value: float) -> None:
        self._volume = _check_volume(value)
        self._write(VOLUME_KEY, repr(self._volume))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _restore(self) -> None:
        carrier = _parse_float(self._read(CARRIER_FREQUENCY_KEY))
        if carrier is not None and carrier > 0:
            self._carrier_frequency = carrier

        volume = _parse_float(self._read(VOLUME_KEY))
        if volume is not None and 0.0 <= volume <= 1.0:
            self._volume = volume

        custom = _parse_float(self._read(CUSTOM_BEAT_FREQUENCY_KEY))
        preset = self._read(BEAT_PRESET_KEY)
        if preset not in self._catalog:
            preset = None
        self._beat_source = source_from_fields(custom, preset)

        logger.debug(
            "Restored parameters: carrier=%s source=%s volume=%s",
            self._carrier_frequency,
            self._beat_source,
            self._volume,
        )

    def _read(self, key: str) -> Optional[str]:
        try:
            return self._medium.get(key)
        except Exception:
            logger.warning("Could not read setting %s", key, exc_info=True)
            return None

    def _write(self, key: str, value: str) -> None:
        try:
            self._medium.set(key, value)
        except Exception:
            logger.warning("Could not persist setting %s", key, exc_info=True)

    def _remove(self, key: str) -> None:
        try:
            self._medium.remove(key)
        except Exception:
            logger.warning("Could not remove setting %s", key, exc_info=True)


__all__ = ["MemoryMedium", "ParameterStore", "QSettingsMedium"]

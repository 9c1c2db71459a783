"""Resolution of the effective beat frequency.

A beat comes either from a named preset or from a custom frequency typed by
the user, never both.  :class:`BeatSource` models that choice as a tagged
variant; :func:`resolve` keeps the plain ``(custom, preset)`` form used by the
parameter store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Union

from ..presets import BEAT_PRESETS, BeatPreset

NO_BEAT_FREQUENCY = 0.0


@dataclass(frozen=True)
class PresetBeat:
    preset_id: str


@dataclass(frozen=True)
class CustomBeat:
    frequency: float


@dataclass(frozen=True)
class NoBeat:
    pass


BeatSource = Union[PresetBeat, CustomBeat, NoBeat]

NO_BEAT = NoBeat()


def resolve(
    custom_beat: Optional[float],
    preset_id: Optional[str],
    catalog: Mapping[str, BeatPreset] = BEAT_PRESETS,
) -> float:
    """Return the beat frequency in Hz, ``0.0`` when nothing is configured.

    A custom value always wins over the preset.
    """

    if custom_beat is not None:
        return float(custom_beat)
    if preset_id and preset_id in catalog:
        return float(catalog[preset_id].frequency)
    return NO_BEAT_FREQUENCY


def resolve_source(source: BeatSource, catalog: Mapping[str, BeatPreset] = BEAT_PRESETS) -> float:
    if isinstance(source, CustomBeat):
        return resolve(source.frequency, None, catalog)
    if isinstance(source, PresetBeat):
        return resolve(None, source.preset_id, catalog)
    return NO_BEAT_FREQUENCY


def source_from_fields(custom_beat: Optional[float], preset_id: Optional[str]) -> BeatSource:
    """Build the variant from the two stored fields, custom value first."""

    if custom_beat is not None:
        return CustomBeat(float(custom_beat))
    if preset_id:
        return PresetBeat(preset_id)
    return NO_BEAT


__all__ = [
    "BeatSource",
    "CustomBeat",
    "NO_BEAT",
    "NO_BEAT_FREQUENCY",
    "NoBeat",
    "PresetBeat",
    "resolve",
    "resolve_source",
    "source_from_fields",
]

"""Built-in beat frequency presets.

The catalogue is fixed at import time and ordered the way the preset selector
lists it.  Each entry maps a preset name to its beat frequency and a short
description of the brainwave band it targets.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class BeatPreset:
    """A named, fixed beat frequency."""

    name: str
    frequency: float
    description: str = ""


@dataclass(frozen=True)
class BeatPresetChoice:
    """Descriptor for a selectable preset in the beat selector."""

    id: str
    label: str
    description: str = ""


BEAT_PRESETS: Dict[str, BeatPreset] = {
    preset.name: preset
    for preset in (
        BeatPreset("Alfa", 10.0, "Relaxation and meditation (8-12 Hz)"),
        BeatPreset("Teta", 6.0, "Creativity and deep relaxation (4-7 Hz)"),
        BeatPreset("Delta", 2.0, "Deep sleep and regeneration (0.5-4 Hz)"),
        BeatPreset("Beta", 20.0, "Focus, attention and cognitive performance (13-30 Hz)"),
        BeatPreset("Gamma", 40.0, "Advanced cognitive processing and alertness (30-100 Hz)"),
    )
}


def get_preset(name: Optional[str], catalog: Mapping[str, BeatPreset] = BEAT_PRESETS) -> Optional[BeatPreset]:
    if not name:
        return None
    return catalog.get(name)


def describe_preset(name: Optional[str], catalog: Mapping[str, BeatPreset] = BEAT_PRESETS) -> str:
    """Return the description shown under the selector, or an empty string."""

    preset = get_preset(name, catalog)
    return preset.description if preset is not None else ""


def _format_hz(value: float) -> str:
    return f"{value:g} Hz"


def build_beat_preset_catalog(
    catalog: Mapping[str, BeatPreset] = BEAT_PRESETS,
) -> Dict[str, BeatPresetChoice]:
    """Return selector entries labelled ``"<name> (<frequency> Hz)"``."""

    return {
        name: BeatPresetChoice(
            id=name,
            label=f"{name} ({_format_hz(preset.frequency)})",
            description=preset.description,
        )
        for name, preset in catalog.items()
    }


__all__ = [
    "BEAT_PRESETS",
    "BeatPreset",
    "BeatPresetChoice",
    "build_beat_preset_catalog",
    "describe_preset",
    "get_preset",
]

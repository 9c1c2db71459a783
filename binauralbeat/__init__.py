"""Real-time binaural beat generator."""

from .audio import (
    ParameterField,
    PlaybackState,
    SessionController,
    ToneEngine,
    resolve,
)
from .presets import BEAT_PRESETS, BeatPreset, build_beat_preset_catalog, describe_preset
from .utils import MemoryMedium, ParameterStore, QSettingsMedium


def create_controller(medium=None, **engine_kwargs) -> SessionController:
    """Build a controller with a restored store and a fresh engine."""

    store = ParameterStore(medium if medium is not None else QSettingsMedium())
    engine = ToneEngine(**engine_kwargs)
    return SessionController(store, engine)


__all__ = [
    "BEAT_PRESETS",
    "BeatPreset",
    "MemoryMedium",
    "ParameterField",
    "ParameterStore",
    "PlaybackState",
    "QSettingsMedium",
    "SessionController",
    "ToneEngine",
    "build_beat_preset_catalog",
    "create_controller",
    "describe_preset",
    "resolve",
]

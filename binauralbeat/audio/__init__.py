"""Binaural tone engine and playback session control."""

from .beat_resolver import (
    NO_BEAT,
    BeatSource,
    CustomBeat,
    NoBeat,
    PresetBeat,
    resolve,
    resolve_source,
)
from .nodes import AudioParam, GainNode, SineOscillator, ToneGraph, merge_channels
from .session_controller import ParameterField, PlaybackState, SessionController
from .tone_stream import ToneEngine, ToneSession, channel_frequencies

__all__ = [
    "NO_BEAT",
    "BeatSource",
    "CustomBeat",
    "NoBeat",
    "PresetBeat",
    "resolve",
    "resolve_source",
    "AudioParam",
    "GainNode",
    "SineOscillator",
    "ToneGraph",
    "merge_channels",
    "ParameterField",
    "PlaybackState",
    "SessionController",
    "ToneEngine",
    "ToneSession",
    "channel_frequencies",
]

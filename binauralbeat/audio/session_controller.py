"""Idle/Playing state machine tying the parameter store to the tone engine.

Every change goes through :meth:`SessionController.apply_change`: the value is
always persisted, and it reaches the engine only while playing.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    IDLE = "idle"
    PLAYING = "playing"


class ParameterField(Enum):
    CARRIER_FREQUENCY = "carrier_frequency"
    PRESET = "preset"
    CUSTOM_BEAT_FREQUENCY = "custom_beat_frequency"
    VOLUME = "volume"


_FREQUENCY_FIELDS = (
    ParameterField.CARRIER_FREQUENCY,
    ParameterField.PRESET,
    ParameterField.CUSTOM_BEAT_FREQUENCY,
)


class SessionController:
    """Owns the single tone session and routes parameter changes."""

    def __init__(self, store, engine) -> None:
        self._store = store
        self._engine = engine
        self._state = PlaybackState.IDLE
        self._state_callback: Optional[Callable[[PlaybackState], None]] = None

    def set_state_callback(self, callback: Optional[Callable[[PlaybackState], None]]) -> None:
        self._state_callback = callback

    @property
    def store(self):
        return self._store

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    @property
    def effective_beat_frequency(self) -> float:
        return self._store.effective_beat_frequency

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start(self) -> bool:
        """Start playback; return ``False`` when the request is refused."""
        if self.is_playing:
            logger.debug("Start ignored, already playing")
            return False
        beat = self.effective_beat_frequency
        if not beat:
            logger.info("Start refused, no beat frequency configured")
            return False
        try:
            self._engine.start(self._store.carrier_frequency, beat, self._store.volume)
        except Exception:
            self._engine.stop()
            raise
        self._set_state(PlaybackState.PLAYING)
        return True

    def stop(self) -> None:
        try:
            self._engine.stop()
        finally:
            self._set_state(PlaybackState.IDLE)

    # ------------------------------------------------------------------
    # Parameter changes
    # ------------------------------------------------------------------
    def apply_change(self, field: Union[ParameterField, str], value) -> None:
        field = ParameterField(field)
        if field is ParameterField.CARRIER_FREQUENCY:
            self._store.set_carrier_frequency(value)
        elif field is ParameterField.PRESET:
            self._store.select_preset(value)
        elif field is ParameterField.CUSTOM_BEAT_FREQUENCY:
            self._store.set_custom_beat_frequency(value)
        else:
            self._store.set_volume(value)

        if not self.is_playing:
            return
        if field in _FREQUENCY_FIELDS:
            self._engine.update_frequencies(
                self._store.carrier_frequency, self.effective_beat_frequency
            )
        else:
            self._engine.update_volume(self._store.volume)

    def set_carrier_frequency(self, value: float) -> None:
        self.apply_change(ParameterField.CARRIER_FREQUENCY, value)

    def select_preset(self, name: Optional[str]) -> None:
        self.apply_change(ParameterField.PRESET, name)

    def set_custom_beat_frequency(self, value: Optional[float]) -> None:
        self.apply_change(ParameterField.CUSTOM_BEAT_FREQUENCY, value)

    def set_volume(self, value: float) -> None:
        self.apply_change(ParameterField.VOLUME, value)

    def _set_state(self, state: PlaybackState) -> None:
        if state is self._state:
            return
        self._state = state
        logger.info("Playback state: %s", state.value)
        if self._state_callback:
            self._state_callback(state)


__all__ = ["ParameterField", "PlaybackState", "SessionController"]

"""Audio graph used by the tone engine.

Two sine oscillators feed a stereo merge, the merge feeds a linear gain stage.
Rendering is pulled block by block by the audio output; every rendered frame
advances the graph clock, which is the time reference for scheduled
parameter changes.
"""

from __future__ import annotations

import bisect
import itertools
import math
from typing import Callable, List, Tuple

import numpy as np
from PyQt5.QtCore import QMutex, QMutexLocker

_TWO_PI = 2.0 * math.pi


class AudioParam:
    """A parameter whose value can be changed at a given audio-clock time.

    Changes are instantaneous: a value set at ``when`` holds from the first
    frame at or after ``when`` until the next change.
    """

    def __init__(self, value: float, sample_rate: int, clock: Callable[[], int]) -> None:
        self._value = float(value)
        self._sample_rate = int(sample_rate)
        self._clock = clock
        self._events: List[Tuple[int, int, float]] = []
        self._sequence = itertools.count()

    @property
    def value(self) -> float:
        """Value in effect at the current clock frame."""
        now = self._clock()
        current = self._value
        for frame, _, value in self._events:
            if frame > now:
                break
            current = value
        return current

    def set_value_at_time(self, value: float, when: float) -> None:
        frame = max(int(round(when * self._sample_rate)), 0)
        bisect.insort(self._events, (frame, next(self._sequence), float(value)))

    def render(self, start_frame: int, frames: int) -> np.ndarray:
        """Return per-frame values for ``[start_frame, start_frame + frames)``."""
        out = np.full(frames, self._value, dtype=np.float64)
        end_frame = start_frame + frames
        while self._events and self._events[0][0] < end_frame:
            frame, _, value = self._events.pop(0)
            out[max(frame - start_frame, 0):] = value
            self._value = value
        return out


class SineOscillator:
    """Phase-continuous sine generator."""

    def __init__(self, frequency: float, sample_rate: int, clock: Callable[[], int]) -> None:
        self.frequency = AudioParam(frequency, sample_rate, clock)
        self._sample_rate = int(sample_rate)
        self._phase = 0.0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    def render(self, start_frame: int, frames: int) -> np.ndarray:
        freqs = self.frequency.render(start_frame, frames)
        if not self._running:
            return np.zeros(frames, dtype=np.float64)
        increments = _TWO_PI * freqs / self._sample_rate
        # Phase at the start of each frame, carried over from the last block.
        phases = self._phase + np.cumsum(increments) - increments
        self._phase = float((self._phase + increments.sum()) % _TWO_PI)
        return np.sin(phases)


class GainNode:
    def __init__(self, gain: float, sample_rate: int, clock: Callable[[], int]) -> None:
        self.gain = AudioParam(gain, sample_rate, clock)

    def process(self, audio: np.ndarray, start_frame: int) -> np.ndarray:
        gains = self.gain.render(start_frame, audio.shape[0])
        return audio * gains[:, np.newaxis]


def merge_channels(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    """Stack two mono signals into ``(frames, 2)``; left is channel 0."""
    return np.column_stack((left, right))


class ToneGraph:
    """Left/right oscillators, stereo merge and gain, with their audio clock.

    Control calls and render pulls may come from different threads, both go
    through the graph mutex.
    """

    def __init__(
        self,
        sample_rate: int,
        left_frequency: float,
        right_frequency: float,
        gain: float,
    ) -> None:
        self.sample_rate = int(sample_rate)
        self._frame = 0
        self._mutex = QMutex()
        clock = self._clock
        self.left = SineOscillator(left_frequency, self.sample_rate, clock)
        self.right = SineOscillator(right_frequency, self.sample_rate, clock)
        self.gain = GainNode(gain, self.sample_rate, clock)

    def _clock(self) -> int:
        return self._frame

    @property
    def current_time(self) -> float:
        """Seconds of audio rendered so far."""
        locker = QMutexLocker(self._mutex)
        return self._frame / float(self.sample_rate)

    @property
    def frames_rendered(self) -> int:
        locker = QMutexLocker(self._mutex)
        return self._frame

    def start(self) -> None:
        locker = QMutexLocker(self._mutex)
        self.left.start()
        self.right.start()

    def stop(self) -> None:
        locker = QMutexLocker(self._mutex)
        self.left.stop()
        self.right.stop()

    def retune(self, left_frequency: float, right_frequency: float) -> float:
        """Set both oscillator frequencies at the current time and return it."""
        locker = QMutexLocker(self._mutex)
        now = self._frame / float(self.sample_rate)
        self.left.frequency.set_value_at_time(left_frequency, now)
        self.right.frequency.set_value_at_time(right_frequency, now)
        return now

    def set_gain(self, gain: float) -> float:
        locker = QMutexLocker(self._mutex)
        now = self._frame / float(self.sample_rate)
        self.gain.gain.set_value_at_time(gain, now)
        return now

    def render(self, frames: int) -> np.ndarray:
        """Render the next ``frames`` stereo frames as float32."""
        locker = QMutexLocker(self._mutex)
        if frames <= 0:
            return np.zeros((0, 2), dtype=np.float32)
        start = self._frame
        stereo = merge_channels(self.left.render(start, frames), self.right.render(start, frames))
        audio = self.gain.process(stereo, start)
        self._frame = start + frames
        return audio.astype(np.float32)


__all__ = ["AudioParam", "GainNode", "SineOscillator", "ToneGraph", "merge_channels"]

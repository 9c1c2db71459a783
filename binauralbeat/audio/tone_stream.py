"""Live binaural tone playback through :class:`QAudioOutput`."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np
from PyQt5.QtCore import QIODevice, QObject

try:  # pragma: no cover - import guard mirrors UI dialogs
    from PyQt5.QtMultimedia import QAudio, QAudioDeviceInfo, QAudioFormat, QAudioOutput

    QT_MULTIMEDIA_AVAILABLE = True
except ImportError:  # pragma: no cover - allow headless operation
    QAudio = None  # type: ignore
    QAudioDeviceInfo = None  # type: ignore
    QAudioFormat = None  # type: ignore
    QAudioOutput = None  # type: ignore
    QT_MULTIMEDIA_AVAILABLE = False

from ..constants import BYTES_PER_FRAME, DEFAULT_SAMPLE_RATE, PCM_CHANNELS, PCM_SAMPLE_SIZE
from .nodes import SineOscillator, ToneGraph

logger = logging.getLogger(__name__)

_INT16_MAX = np.int16(32767).item()
# Frames reported as readable on each pull; the stream itself never ends.
_STREAM_CHUNK_FRAMES = 4096


def channel_frequencies(carrier: float, beat: float) -> Tuple[float, float]:
    """Return ``(left, right)`` frequencies for ``carrier`` split by ``beat``."""
    half = float(beat) / 2.0
    return float(carrier) - half, float(carrier) + half


def _float_to_pcm(audio: np.ndarray) -> bytes:
    if audio.size == 0:
        return b""
    clipped = np.clip(audio, -1.0, 1.0)
    pcm = np.asarray((clipped * _INT16_MAX).round(), dtype="<i2")
    return pcm.tobytes()


class _ToneBufferDevice(QIODevice):
    """Sequential ``QIODevice`` rendering PCM from a :class:`ToneGraph` on demand."""

    def __init__(self, graph: ToneGraph, parent: Optional[QObject] = None) -> None:  # type: ignore[override]
        super().__init__(parent)
        self._graph = graph

    @property
    def graph(self) -> ToneGraph:
        return self._graph

    def isSequential(self) -> bool:  # pragma: no cover - Qt hook
        return True

    def bytesAvailable(self) -> int:  # pragma: no cover - Qt hook
        return _STREAM_CHUNK_FRAMES * BYTES_PER_FRAME + super().bytesAvailable()

    def readData(self, maxlen: int) -> bytes:
        frames = max(int(maxlen), 0) // BYTES_PER_FRAME
        if frames <= 0:
            return bytes()
        return _float_to_pcm(self._graph.render(frames))

    def writeData(self, data: bytes) -> int:  # pragma: no cover - Qt hook
        return -1  # Read-only device

    def render_frames(self, frames: int) -> np.ndarray:
        """Pull ``frames`` float frames, bypassing PCM conversion."""
        return self._graph.render(frames)


@dataclass
class ToneSession:
    """Resources owned by one playback run."""

    graph: ToneGraph
    device: _ToneBufferDevice
    audio_output: object

    @property
    def left(self) -> SineOscillator:
        return self.graph.left

    @property
    def right(self) -> SineOscillator:
        return self.graph.right


class ToneEngine(QObject):  # type: ignore[misc]
    """Play two sine tones, one per ear, and retune them while they play."""

    def __init__(
        self,
        parent: Optional[QObject] = None,  # type: ignore[override]
        *,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        audio_output_factory: Optional[Callable[[object, Optional[QObject]], object]] = None,
        validate_format: bool = True,
    ) -> None:
        super().__init__(parent)  # type: ignore[misc]
        self._sample_rate = int(sample_rate)
        self._validate_format = bool(validate_format)

        if audio_output_factory is None:
            if not QT_MULTIMEDIA_AVAILABLE:  # pragma: no cover - guard
                raise RuntimeError("Qt multimedia backend is not available")
            audio_output_factory = QAudioOutput
        self._audio_output_factory = audio_output_factory

        self._session: Optional[ToneSession] = None

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def session(self) -> Optional[ToneSession]:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def current_time(self) -> float:
        """Audio clock of the running session, ``0.0`` when idle."""
        if self._session is None:
            return 0.0
        return self._session.graph.current_time

    def start(self, carrier: float, beat: float, volume: float) -> ToneSession:
        """Start the tones; an already running session is kept and returned."""
        if self._session is not None:
            logger.debug("Tone session already running, start ignored")
            return self._session
        if not beat:
            raise ValueError("Beat frequency must be non-zero to start playback")

        left_hz, right_hz = channel_frequencies(carrier, beat)
        graph = ToneGraph(self._sample_rate, left_hz, right_hz, float(volume))
        device = _ToneBufferDevice(graph)
        device.open(QIODevice.ReadOnly)
        graph.start()
        audio_output = None
        try:
            fmt = self._build_format()
            audio_output = self._create_audio_output(fmt)
            audio_output.start(device)
        except Exception:
            graph.stop()
            device.close()
            if audio_output is not None:
                self._discard_audio_output(audio_output)
            raise

        self._session = ToneSession(graph=graph, device=device, audio_output=audio_output)
        logger.info(
            "Started tones: left=%.3f Hz right=%.3f Hz gain=%.3f",
            left_hz,
            right_hz,
            volume,
        )
        return self._session

    def update_frequencies(self, carrier: float, beat: float) -> None:
        if self._session is None:
            return
        left_hz, right_hz = channel_frequencies(carrier, beat)
        when = self._session.graph.retune(left_hz, right_hz)
        logger.debug("Retuned to %.3f/%.3f Hz at t=%.4f s", left_hz, right_hz, when)

    def update_volume(self, volume: float) -> None:
        if self._session is None:
            return
        when = self._session.graph.set_gain(float(volume))
        logger.debug("Gain set to %.3f at t=%.4f s", volume, when)

    def stop(self) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        try:
            session.graph.stop()
            if session.audio_output is not None:
                session.audio_output.stop()
        finally:
            session.device.close()
            if hasattr(session.audio_output, "deleteLater"):
                session.audio_output.deleteLater()
        logger.info("Stopped tones")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _create_audio_output(self, fmt) -> object:
        audio_output = self._audio_output_factory(fmt, self)  # type: ignore[misc]
        if hasattr(audio_output, "stateChanged"):
            audio_output.stateChanged.connect(self._handle_state_change)  # type: ignore[call-arg]
        return audio_output

    def _discard_audio_output(self, audio_output) -> None:
        try:
            audio_output.stop()
        except Exception:
            logger.warning("Could not stop audio output after failed start", exc_info=True)
        if hasattr(audio_output, "deleteLater"):
            audio_output.deleteLater()

    def _build_format(self):
        if QAudioFormat is None:  # pragma: no cover - headless with injected output
            return None
        fmt = QAudioFormat()
        fmt.setCodec("audio/pcm")
        fmt.setSampleRate(self._sample_rate)
        fmt.setSampleSize(PCM_SAMPLE_SIZE)
        fmt.setChannelCount(PCM_CHANNELS)
        fmt.setByteOrder(QAudioFormat.LittleEndian)
        fmt.setSampleType(QAudioFormat.SignedInt)

        if self._validate_format and QAudioDeviceInfo is not None:
            device_info = QAudioDeviceInfo.defaultOutputDevice()
            if not device_info.isFormatSupported(fmt):  # pragma: no cover - hardware dependent
                raise RuntimeError("Default output device does not support 16-bit stereo PCM")
        return fmt

    def _handle_state_change(self, state: int) -> None:  # pragma: no cover - Qt runtime
        if self._session is None or QAudio is None:
            return
        if state == QAudio.StoppedState:
            output = self._session.audio_output
            error = output.error() if hasattr(output, "error") else QAudio.NoError
            if error != QAudio.NoError:
                logger.warning("Audio output stopped with error %s", error)


__all__ = ["ToneEngine", "ToneSession", "channel_frequencies"]

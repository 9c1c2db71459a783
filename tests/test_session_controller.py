from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from binauralbeat.audio import ParameterField, PlaybackState, SessionController, ToneEngine
from binauralbeat.constants import CARRIER_FREQUENCY_KEY, VOLUME_KEY
from binauralbeat.utils import MemoryMedium, ParameterStore


class RecordingEngine:
    """Engine double that records the calls it receives."""

    def __init__(self, fail_on_start=False):
        self.calls = []
        self.active = False
        self.fail_on_start = fail_on_start

    def start(self, carrier, beat, volume):
        self.calls.append(("start", carrier, beat, volume))
        if self.fail_on_start:
            raise RuntimeError("no output device")
        self.active = True

    def update_frequencies(self, carrier, beat):
        self.calls.append(("update_frequencies", carrier, beat))

    def update_volume(self, volume):
        self.calls.append(("update_volume", volume))

    def stop(self):
        self.calls.append(("stop",))
        self.active = False


class FakeAudioOutput:
    def __init__(self, fmt, parent=None):
        self.stopped = False

    def start(self, device):
        pass

    def stop(self):
        self.stopped = True


class StuckAudioOutput(FakeAudioOutput):
    def stop(self):
        raise RuntimeError("output refused to stop")


@pytest.fixture
def medium():
    return MemoryMedium()


@pytest.fixture
def engine():
    return RecordingEngine()


@pytest.fixture
def controller(medium, engine):
    return SessionController(ParameterStore(medium), engine)


def test_start_refused_without_beat(controller, engine):
    assert controller.start() is False
    assert controller.state is PlaybackState.IDLE
    assert engine.calls == []


def test_start_uses_current_parameters(controller, engine):
    controller.select_preset("Alfa")
    assert controller.start() is True

    assert controller.is_playing
    assert engine.calls == [("start", 400.0, 10.0, pytest.approx(0.1))]


def test_start_while_playing_is_ignored(controller, engine):
    controller.set_custom_beat_frequency(4.0)
    controller.start()
    assert controller.start() is False

    assert [call[0] for call in engine.calls].count("start") == 1
    assert controller.is_playing


def test_stop_from_idle_is_a_no_op(controller, engine):
    controller.stop()
    assert controller.state is PlaybackState.IDLE


def test_stop_returns_to_idle(controller, engine):
    controller.select_preset("Teta")
    controller.start()
    controller.stop()

    assert controller.state is PlaybackState.IDLE
    assert engine.calls[-1] == ("stop",)
    assert not engine.active


def test_failed_engine_start_releases_and_stays_idle(medium):
    engine = RecordingEngine(fail_on_start=True)
    controller = SessionController(ParameterStore(medium), engine)
    controller.select_preset("Delta")

    with pytest.raises(RuntimeError):
        controller.start()

    assert controller.state is PlaybackState.IDLE
    assert engine.calls[-1] == ("stop",)


def test_volume_change_while_idle_only_persists(controller, engine, medium):
    controller.set_volume(0.4)

    assert engine.calls == []
    assert float(medium.get(VOLUME_KEY)) == pytest.approx(0.4)


def test_volume_change_while_playing_updates_gain_once(controller, engine, medium):
    controller.select_preset("Beta")
    controller.start()
    engine.calls.clear()

    controller.set_volume(0.7)

    assert engine.calls == [("update_volume", pytest.approx(0.7))]
    assert float(medium.get(VOLUME_KEY)) == pytest.approx(0.7)


def test_carrier_change_while_playing_retunes(controller, engine, medium):
    controller.select_preset("Alfa")
    controller.start()
    engine.calls.clear()

    controller.apply_change(ParameterField.CARRIER_FREQUENCY, 500.0)

    assert engine.calls == [("update_frequencies", 500.0, 10.0)]
    assert float(medium.get(CARRIER_FREQUENCY_KEY)) == 500.0


def test_beat_source_changes_while_playing_use_new_beat(controller, engine):
    controller.select_preset("Alfa")
    controller.start()
    engine.calls.clear()

    controller.set_custom_beat_frequency(3.5)
    controller.apply_change("preset", "Gamma")

    assert engine.calls == [
        ("update_frequencies", 400.0, 3.5),
        ("update_frequencies", 400.0, 40.0),
    ]
    assert controller.store.custom_beat_frequency is None


def test_frequency_change_while_idle_does_not_touch_engine(controller, engine):
    controller.set_carrier_frequency(250.0)
    controller.select_preset("Delta")
    assert engine.calls == []
    assert controller.effective_beat_frequency == 2.0


def test_state_callback_reports_transitions(controller):
    seen = []
    controller.set_state_callback(seen.append)
    controller.select_preset("Alfa")

    controller.start()
    controller.start()
    controller.stop()
    controller.stop()

    assert seen == [PlaybackState.PLAYING, PlaybackState.IDLE]


def test_live_carrier_update_with_real_engine(medium):
    engine = ToneEngine(
        sample_rate=8000,
        audio_output_factory=FakeAudioOutput,
        validate_format=False,
    )
    controller = SessionController(ParameterStore(medium), engine)
    controller.set_custom_beat_frequency(10.0)
    controller.start()
    session = engine.session
    left = session.left

    assert left.frequency.value == pytest.approx(395.0)
    assert session.right.frequency.value == pytest.approx(405.0)

    controller.set_carrier_frequency(500.0)

    assert engine.session is session
    assert engine.session.left is left
    assert left.frequency.value == pytest.approx(495.0)
    assert session.right.frequency.value == pytest.approx(505.0)

    controller.stop()
    assert engine.session is None
    assert not engine.is_active


def test_restart_after_reload_restores_parameters(medium, engine):
    first = SessionController(ParameterStore(medium), engine)
    first.set_carrier_frequency(320.0)
    first.select_preset("Teta")
    first.set_volume(0.3)

    second = SessionController(ParameterStore(medium), engine)
    assert second.start() is True
    assert engine.calls[-1] == ("start", 320.0, 6.0, pytest.approx(0.3))


def test_create_controller_wires_store_and_engine(medium):
    from binauralbeat import create_controller

    controller = create_controller(
        medium,
        sample_rate=8000,
        audio_output_factory=FakeAudioOutput,
        validate_format=False,
    )
    controller.select_preset("Gamma")

    assert controller.start() is True
    assert controller.effective_beat_frequency == 40.0
    controller.stop()
    assert controller.state is PlaybackState.IDLE


def test_stop_returns_to_idle_when_output_stop_fails(medium):
    engine = ToneEngine(
        sample_rate=8000,
        audio_output_factory=StuckAudioOutput,
        validate_format=False,
    )
    controller = SessionController(ParameterStore(medium), engine)
    controller.select_preset("Alfa")
    assert controller.start() is True

    with pytest.raises(RuntimeError):
        controller.stop()

    assert controller.state is PlaybackState.IDLE
    assert not engine.is_active
    assert controller.start() is True

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from binauralbeat.audio.beat_resolver import (
    NO_BEAT,
    CustomBeat,
    PresetBeat,
    resolve,
    resolve_source,
    source_from_fields,
)
from binauralbeat.presets import BEAT_PRESETS, build_beat_preset_catalog, describe_preset


@pytest.mark.parametrize("name", list(BEAT_PRESETS))
def test_preset_resolves_to_its_frequency(name):
    assert resolve(None, name) == BEAT_PRESETS[name].frequency
    assert resolve_source(PresetBeat(name)) == BEAT_PRESETS[name].frequency


@pytest.mark.parametrize("custom", [0.001, 3.5, 7.83, 100.0])
def test_custom_value_wins_over_preset(custom):
    assert resolve(custom, "Gamma") == custom
    assert resolve_source(CustomBeat(custom)) == custom


def test_nothing_configured_resolves_to_zero():
    assert resolve(None, None) == 0.0
    assert resolve(None, "") == 0.0
    assert resolve(None, "Epsilon") == 0.0
    assert resolve_source(NO_BEAT) == 0.0


def test_source_from_fields_prefers_custom():
    assert source_from_fields(4.0, "Alfa") == CustomBeat(4.0)
    assert source_from_fields(None, "Alfa") == PresetBeat("Alfa")
    assert source_from_fields(None, None) == NO_BEAT


def test_catalog_order_and_labels():
    assert list(BEAT_PRESETS) == ["Alfa", "Teta", "Delta", "Beta", "Gamma"]
    assert [p.frequency for p in BEAT_PRESETS.values()] == [10.0, 6.0, 2.0, 20.0, 40.0]

    choices = build_beat_preset_catalog()
    assert choices["Alfa"].label == "Alfa (10 Hz)"
    assert choices["Delta"].description == BEAT_PRESETS["Delta"].description


def test_describe_preset_unknown_is_empty():
    assert describe_preset("Teta").startswith("Creativity")
    assert describe_preset(None) == ""
    assert describe_preset("nope") == ""

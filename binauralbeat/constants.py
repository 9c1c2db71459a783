"""Defaults and fixed settings for the binaural beat engine."""

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_CARRIER_FREQUENCY = 400.0
DEFAULT_VOLUME = 0.1

# Range offered by the carrier slider; the engine itself only needs a
# finite positive number.
MIN_CARRIER_FREQUENCY = 50.0
MAX_CARRIER_FREQUENCY = 600.0

SETTINGS_ORGANIZATION = "BinauralBeat"
SETTINGS_APPLICATION = "BinauralBeatGenerator"

CARRIER_FREQUENCY_KEY = "binaural/carrier_frequency"
BEAT_PRESET_KEY = "binaural/beat_preset"
CUSTOM_BEAT_FREQUENCY_KEY = "binaural/custom_beat_frequency"
VOLUME_KEY = "binaural/volume"

PCM_SAMPLE_SIZE = 16
PCM_CHANNELS = 2
BYTES_PER_FRAME = 4  # 16-bit stereo

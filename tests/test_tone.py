import math

import numpy as np
import pytest

from SWGE.errors import ConfigurationError
from SWGE.SGM.tone import generate_tone, sine_cycle


@pytest.mark.parametrize("frequency, sample_rate", [(440.0, 44_100), (1000.0, 8_000), (123.4, 48_000)])
def test_cycle_is_one_period(frequency, sample_rate) -> None:
    cycle = sine_cycle(frequency, sample_rate)
    n = math.floor(sample_rate / frequency)
    assert len(cycle) == n
    assert cycle.dtype == np.float32
    assert abs(float(cycle[0])) < 1e-6

    # Exactly one sign change from + to - around the half-period index
    half = n // 2
    body = cycle[1:]
    falling = np.where((body[:-1] >= 0) & (body[1:] < 0))[0] + 1
    assert len(falling) == 1
    assert abs(int(falling[0]) - half) <= 1


def test_cycle_values_follow_sine_of_exact_period() -> None:
    cycle = sine_cycle(441.0, 44_100)          # period exactly 100 samples
    assert cycle[25] == pytest.approx(1.0, abs=1e-6)
    assert cycle[75] == pytest.approx(-1.0, abs=1e-6)


def test_generate_tiles_the_cycle() -> None:
    cycle = sine_cycle(1000.0, 8_000)
    tone = generate_tone(0.01, 1000.0, 8_000)
    assert len(tone) == 80
    assert np.array_equal(tone, np.tile(cycle, 10))


def test_generate_wraps_partial_cycle() -> None:
    cycle = sine_cycle(1000.0, 8_000)
    tone = generate_tone(0.0016, 1000.0, 8_000)   # floor(12.8) = 12 samples = 1.5 tables
    assert len(tone) == 12
    assert np.array_equal(tone[8:], cycle[:4])


def test_generate_emits_exact_sample_count() -> None:
    assert len(generate_tone(2.0, 440.0, 44_100)) == 88_200


def test_frequency_above_sample_rate_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        sine_cycle(9_000.0, 8_000)


@pytest.mark.parametrize("run_length, frequency", [(0.0, 440.0), (1.0, 0.0), (1.0, -5.0)])
def test_non_positive_inputs_are_rejected(run_length, frequency) -> None:
    with pytest.raises(ConfigurationError):
        generate_tone(run_length, frequency, 44_100)


@pytest.mark.parametrize("frequency", [1e-300, 1e-320, 44_100 / (2**24 + 1)])
def test_frequency_too_low_for_a_table_is_rejected(frequency) -> None:
    with pytest.raises(ConfigurationError):
        sine_cycle(frequency, 44_100)


def test_sub_audio_frequency_builds_a_long_table() -> None:
    assert len(sine_cycle(1.0, 1_000)) == 1_000

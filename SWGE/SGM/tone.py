# =============================================================================
# tone.py — Sine Tone Generator
# =============================================================================
#
# One period of the sine is computed once and tiled.  The table holds
# floor(sample_rate / frequency) samples; sample i is
#
#     sin(i * pi / (P / 2))        P = sample_rate / frequency (unfloored)
#
# so the phase runs 0 → 2pi across one exact period and P/2 is the half-period
# index.  When P is not an integer the table is cut short of a full period, and
# the tiled output carries a small phase jump at every wrap.  That is the cost
# of never regenerating the table mid-run.

from __future__ import annotations

import logging
import math

import numpy as np
from numpy.typing import NDArray

from SWGE.errors import ConfigurationError
from SWGE.SMM.constants import MAX_PERIOD_SAMPLES, SAMPLE_RATE
from SWGE.SMM.params import check_positive, check_sample_rate, sample_count

_LOGGER = logging.getLogger(__name__)


def sine_cycle(frequency: float, sample_rate: int = SAMPLE_RATE) -> NDArray[np.float32]:
    """
    Build one period of a sine at `frequency`.

    Returns:
        float32 array of length floor(sample_rate / frequency).

    Raises:
        ConfigurationError: non-positive inputs, a frequency above the
                            sample rate (the table would be empty), or one
                            so low the table would exceed MAX_PERIOD_SAMPLES.
    """
    check_positive("frequency", frequency)
    check_sample_rate(sample_rate)

    period = sample_rate / frequency
    if period > MAX_PERIOD_SAMPLES:
        raise ConfigurationError(
            f"frequency {frequency} Hz is too low: one period at {sample_rate} Hz "
            f"exceeds {MAX_PERIOD_SAMPLES} samples"
        )
    table_len = math.floor(period)
    if table_len < 1:
        raise ConfigurationError(
            f"frequency {frequency} Hz is above the sample rate {sample_rate} Hz"
        )

    half_wave = period / 2.0
    index = np.arange(table_len, dtype=np.float64)
    return np.sin(index * math.pi / half_wave).astype(np.float32)


def generate_tone(
    run_length: float,
    frequency: float,
    sample_rate: int = SAMPLE_RATE,
) -> NDArray[np.float32]:
    """
    Tile the sine period table until floor(run_length * sample_rate)
    samples exist.
    """
    cycle = sine_cycle(frequency, sample_rate)
    total = sample_count(run_length, sample_rate)
    _LOGGER.debug(
        "tone: %.3f Hz, table=%d samples, total=%d samples",
        frequency, len(cycle), total,
    )
    # np.resize repeats the input cyclically to fill the new shape
    return np.resize(cycle, total)

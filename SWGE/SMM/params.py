# =============================================================================
# params.py — Run-time synthesis parameters
# =============================================================================
#
# SynthParams is the validated bundle handed from the CLI (or a library
# caller) to SWGE.render.  Validation happens once, at construction, so the
# generators and encoders downstream only ever see in-range values.
#
# SAMPLE COUNT:
#   Every channel holds exactly floor(run_length * sample_rate) samples.
#   Both generators share sample_count() so tone and pluck output agree.
# =============================================================================

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from SWGE.errors import ConfigurationError
from SWGE.SMM.constants import (
    MAX_CHANNEL_SAMPLES, SAMPLE_RATE, SUPPORTED_CHANNELS, U32_MAX,
)

Generator = Literal["tone", "karplus-strong"]
GENERATORS: tuple[str, ...] = ("tone", "karplus-strong")


def check_positive(name: str, value: float) -> float:
    """Reject zero, negative and non-finite values with a ConfigurationError."""
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive number, got {value!r}")
    return value


def check_sample_rate(sample_rate: int) -> int:
    if isinstance(sample_rate, bool) or not isinstance(sample_rate, int):
        raise ConfigurationError(f"sample_rate must be an integer, got {sample_rate!r}")
    if not 0 < sample_rate <= U32_MAX:
        raise ConfigurationError(
            f"sample_rate must be in 1..{U32_MAX}, got {sample_rate}"
        )
    return sample_rate


def sample_count(run_length: float, sample_rate: int) -> int:
    """Number of samples per channel for a run of `run_length` seconds."""
    check_positive("run_length", run_length)
    check_sample_rate(sample_rate)
    exact = run_length * sample_rate
    if exact > MAX_CHANNEL_SAMPLES:
        raise ConfigurationError(
            f"{run_length} s at {sample_rate} Hz is more than {MAX_CHANNEL_SAMPLES} "
            f"samples per channel (4 GiB data limit)"
        )
    return math.floor(exact)


@dataclass(frozen=True)
class SynthParams:
    """
    Everything needed to render one WAV file.

    Attributes:
        frequency:        Tone / string frequency in Hz.
        run_length:       Duration in seconds.
        sample_rate:      Output rate in Hz.
        channels:         1 (mono) or 2 (stereo).
        generator:        "tone" or "karplus-strong".
        repeat_threshold: When set (karplus-strong only), re-pluck the string
                          whenever an emitted sample falls below this value.
        seed:             Seed for the pluck noise; None draws from OS entropy.
    """

    frequency: float
    run_length: float
    sample_rate: int = SAMPLE_RATE
    channels: int = 1
    generator: Generator = "tone"
    repeat_threshold: float | None = None
    seed: int | None = None

    def __post_init__(self) -> None:
        check_positive("frequency", self.frequency)
        check_positive("run_length", self.run_length)
        check_sample_rate(self.sample_rate)
        if self.channels not in SUPPORTED_CHANNELS:
            raise ConfigurationError(
                f"channels must be one of {SUPPORTED_CHANNELS}, got {self.channels!r}"
            )
        if self.generator not in GENERATORS:
            raise ConfigurationError(
                f"generator must be one of {GENERATORS}, got {self.generator!r}"
            )
        if self.repeat_threshold is not None:
            if self.generator != "karplus-strong":
                raise ConfigurationError(
                    "repeat_threshold only applies to the karplus-strong generator"
                )
            if not math.isfinite(self.repeat_threshold):
                raise ConfigurationError(
                    f"repeat_threshold must be finite, got {self.repeat_threshold!r}"
                )
        if self.seed is not None and (
            isinstance(self.seed, bool) or not isinstance(self.seed, int) or self.seed < 0
        ):
            raise ConfigurationError(
                f"seed must be a non-negative integer, got {self.seed!r}"
            )

    @property
    def sample_count(self) -> int:
        return sample_count(self.run_length, self.sample_rate)

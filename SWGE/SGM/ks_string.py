# =============================================================================
# ks_string.py — Karplus-Strong Plucked String
# =============================================================================
#
# A ring of N = round(sample_rate / frequency) float32 cells models one
# period of a vibrating string.  Plucking fills the ring with uniform noise;
# every tick averages the cell under the cursor with its neighbour, damps the
# result and moves the cursor on:
#
#     ring[i] = (ring[i] + ring[(i + 1) % N]) * 0.5 * 0.994
#     i       = (i + 1) % N
#
# The average is a low-pass filter, so high partials die first; the 0.994
# factor drains energy on every pass round the ring.  Together they turn a
# burst of noise into a decaying pitched pluck at sample_rate / N Hz.
#
# STATE MACHINE:
#   KarplusStrong(...)  → IDLE      ring all zero, cursor 0, ticks 0
#   pluck()             → PLUCKED   ring refilled with noise (any time)
#   set_frequency(...)  → IDLE      ring resized, re-pluck before use
#
# THREADING:
#   The ring and cursor are mutated in place.  One instance must not be
#   ticked, plucked or resized from several threads without an external lock.

from __future__ import annotations

import enum
import logging
import math
from typing import Protocol

import numpy as np
from numpy.typing import NDArray

from SWGE.errors import RingSizeError
from SWGE.SMM.constants import (
    KS_AVERAGE, KS_DAMPING, KS_MIN_RING, MAX_PERIOD_SAMPLES,
    PLUCK_LOW, PLUCK_HIGH,
    SAMPLE_RATE,
)
from SWGE.SMM.params import check_positive, check_sample_rate, sample_count

_LOGGER = logging.getLogger(__name__)

# float32 operands keep the recurrence in single precision
_AVERAGE = np.float32(KS_AVERAGE)
_DAMPING = np.float32(KS_DAMPING)


class UniformSource(Protocol):
    """Anything with numpy.random.Generator.uniform's signature."""

    def uniform(self, low: float, high: float, size: int) -> NDArray[np.floating]: ...


class StringState(enum.Enum):
    IDLE = "idle"
    PLUCKED = "plucked"


def ring_size_for(frequency: float, sample_rate: int = SAMPLE_RATE) -> int:
    """
    Ring length for `frequency`, rounded half away from zero.

    Raises:
        RingSizeError: the frequency is too high for the sample rate
                       (fewer than KS_MIN_RING cells), or too low
                       (more than MAX_PERIOD_SAMPLES cells).
    """
    check_positive("frequency", frequency)
    check_sample_rate(sample_rate)
    period = sample_rate / frequency
    if period > MAX_PERIOD_SAMPLES:
        raise RingSizeError(
            f"frequency {frequency} Hz is too low: the ring at {sample_rate} Hz "
            f"would exceed {MAX_PERIOD_SAMPLES} cells"
        )
    size = math.floor(period + 0.5)
    if size < KS_MIN_RING:
        raise RingSizeError(
            f"frequency {frequency} Hz at {sample_rate} Hz gives a ring of {size} "
            f"cell(s); at least {KS_MIN_RING} are needed "
            f"(use a frequency <= {sample_rate / (KS_MIN_RING - 0.5):.1f} Hz)"
        )
    return size


class KarplusStrong:
    """
    Stateful plucked-string simulation.

    Usage:
        ks = KarplusStrong(220.0, rng=np.random.default_rng(7))
        ks.pluck()
        for _ in range(44_100):
            ks.tick()
            out.append(ks.sample())

    Args:
        frequency:   String frequency in Hz.
        sample_rate: Simulation rate in Hz.
        rng:         Noise source for pluck().  Defaults to a fresh
                     numpy.random.default_rng() seeded from OS entropy.
    """

    def __init__(
        self,
        frequency: float,
        sample_rate: int = SAMPLE_RATE,
        rng: UniformSource | None = None,
    ) -> None:
        self.sample_rate = sample_rate
        self.frequency   = frequency
        self._size       = ring_size_for(frequency, sample_rate)
        self._ring: NDArray[np.float32] = np.zeros(self._size, dtype=np.float32)
        self._head       = 0
        self._ticks      = 0
        self._state      = StringState.IDLE
        self._rng: UniformSource = rng if rng is not None else np.random.default_rng()

    # ── Excitation ───────────────────────────────────────────────────────────

    def pluck(self) -> None:
        """
        Refill every active cell with uniform noise in [-0.5, 0.5).
        Cursor and tick counter are left alone.
        """
        noise = self._rng.uniform(PLUCK_LOW, PLUCK_HIGH, self._size)
        self._ring[: self._size] = noise
        self._state = StringState.PLUCKED

    def set_frequency(self, frequency: float) -> None:
        """
        Retune the string.  Storage grows when the new ring is longer; cells
        outside the new ring are zeroed.  The string must be plucked again
        before it sounds at the new pitch.
        """
        size = ring_size_for(frequency, self.sample_rate)
        capacity = len(self._ring)
        if size > capacity:
            self._ring = np.concatenate(
                (self._ring, np.zeros(size - capacity, dtype=np.float32))
            )
        self._ring[size:] = 0.0
        _LOGGER.debug("ks: retune %.3f → %.3f Hz, ring %d → %d",
                      self.frequency, frequency, self._size, size)
        self.frequency = frequency
        self._size  = size
        self._head %= size
        self._state = StringState.IDLE

    # ── Simulation ───────────────────────────────────────────────────────────

    def tick(self) -> None:
        """Advance the simulation by one sample."""
        ring = self._ring
        cur = self._head
        nxt = cur + 1
        if nxt >= self._size:
            nxt = 0
        ring[cur] = (ring[cur] + ring[nxt]) * _AVERAGE * _DAMPING
        self._head = nxt
        self._ticks += 1

    def sample(self) -> float:
        """Value under the cursor.  Does not advance the simulation."""
        return float(self._ring[self._head])

    # ── Inspection ───────────────────────────────────────────────────────────

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def ring_size(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return len(self._ring)

    @property
    def head(self) -> int:
        return self._head

    @property
    def state(self) -> StringState:
        return self._state

    def snapshot(self) -> NDArray[np.float32]:
        """Return a copy of the active ring."""
        return self._ring[: self._size].copy()


# -----------------------------------------------------------------------------
# Driving functions
# -----------------------------------------------------------------------------

def _run(
    ks: KarplusStrong,
    total: int,
    threshold: float | None = None,
) -> NDArray[np.float32]:
    out = np.empty(total, dtype=np.float32)
    replucks = 0
    for i in range(total):
        ks.tick()
        value = ks.sample()
        out[i] = value
        if threshold is not None and value < threshold:
            ks.pluck()
            replucks += 1
    if threshold is not None:
        _LOGGER.debug("ks: %d re-pluck(s) below threshold %.4f over %d samples",
                      replucks, threshold, total)
    return out


def generate_pluck(
    run_length: float,
    frequency: float,
    sample_rate: int = SAMPLE_RATE,
    rng: UniformSource | None = None,
) -> NDArray[np.float32]:
    """
    A single decaying pluck: one pluck, then tick + sample for
    floor(run_length * sample_rate) samples.
    """
    total = sample_count(run_length, sample_rate)
    ks = KarplusStrong(frequency, sample_rate, rng)
    ks.pluck()
    _LOGGER.debug("ks: %.3f Hz, ring=%d cells, total=%d samples",
                  frequency, ks.ring_size, total)
    return _run(ks, total)


def generate_pluck_with_threshold(
    run_length: float,
    frequency: float,
    sample_rate: int,
    threshold: float,
    rng: UniformSource | None = None,
) -> NDArray[np.float32]:
    """
    Self-retriggering pluck.  After each emitted sample, a value strictly
    below `threshold` re-plucks the string before the next tick.  The
    comparison is on the signed sample as emitted.
    """
    total = sample_count(run_length, sample_rate)
    ks = KarplusStrong(frequency, sample_rate, rng)
    ks.pluck()
    return _run(ks, total, threshold)

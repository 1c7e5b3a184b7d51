import itertools

import numpy as np
import pytest

from SWGE.errors import ConfigurationError, RingSizeError
from SWGE.SGM.ks_string import (
    KarplusStrong, StringState,
    generate_pluck, generate_pluck_with_threshold, ring_size_for,
)


class FixedSource:
    """Noise source that repeats a fixed pattern; counts pluck() draws."""

    def __init__(self, values):
        self.values = np.asarray(values, dtype=np.float64)
        self.calls = 0

    def uniform(self, low, high, size):
        self.calls += 1
        return np.resize(self.values, size)


class CountingSource:
    def __init__(self, seed):
        self._rng = np.random.default_rng(seed)
        self.calls = 0

    def uniform(self, low, high, size):
        self.calls += 1
        return self._rng.uniform(low, high, size)


def _ring_energy(ks: KarplusStrong) -> float:
    return float(np.sum(ks.snapshot().astype(np.float64) ** 2))


@pytest.mark.parametrize(
    "frequency, sample_rate, expected",
    [(440.0, 44_100, 100), (441.0, 44_100, 100), (110.0, 44_100, 401),
     (300.0, 1_000, 3), (400.0, 1_000, 3), (666.0, 1_000, 2)],
)
def test_ring_size_is_rounded_ratio(frequency, sample_rate, expected) -> None:
    assert ring_size_for(frequency, sample_rate) == expected
    assert KarplusStrong(frequency, sample_rate).ring_size == expected


def test_frequency_equal_to_sample_rate_is_rejected() -> None:
    with pytest.raises(RingSizeError):
        KarplusStrong(44_100.0, 44_100)


def test_ring_size_error_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        KarplusStrong(900.0, 1_000)


def test_new_string_is_idle_and_silent() -> None:
    ks = KarplusStrong(441.0, 44_100)
    assert ks.state is StringState.IDLE
    assert ks.ticks == 0
    assert ks.head == 0
    assert not np.any(ks.snapshot())


def test_pluck_fills_ring_with_bounded_noise() -> None:
    ks = KarplusStrong(110.0, 44_100, rng=np.random.default_rng(3))
    ks.pluck()
    ring = ks.snapshot()
    assert ks.state is StringState.PLUCKED
    assert np.all(ring >= -0.5) and np.all(ring < 0.5)
    assert len(np.unique(ring)) > ks.ring_size // 2


def test_pluck_keeps_cursor_and_tick_count() -> None:
    ks = KarplusStrong(441.0, 44_100, rng=np.random.default_rng(0))
    ks.pluck()
    for _ in range(7):
        ks.tick()
    ks.pluck()
    assert ks.ticks == 7
    assert ks.head == 7


def test_tick_applies_damped_two_point_average() -> None:
    ks = KarplusStrong(1_000.0, 3_000, rng=FixedSource([0.4, -0.2, 0.1]))
    ks.pluck()
    half, damp = np.float32(0.5), np.float32(0.994)
    r0, r1, r2 = (np.float32(v) for v in (0.4, -0.2, 0.1))

    ks.tick()
    new0 = (r0 + r1) * half * damp
    assert ks.snapshot()[0] == new0
    assert ks.head == 1
    assert ks.sample() == pytest.approx(-0.2)

    ks.tick()
    new1 = (r1 + r2) * half * damp
    assert ks.snapshot()[1] == new1

    ks.tick()                       # wraps: last cell averages with updated cell 0
    assert ks.snapshot()[2] == (r2 + new0) * half * damp
    assert ks.head == 0
    assert ks.ticks == 3


def test_sample_does_not_mutate() -> None:
    ks = KarplusStrong(441.0, 44_100, rng=np.random.default_rng(5))
    ks.pluck()
    before = ks.snapshot()
    assert ks.sample() == ks.sample() == float(before[0])
    assert np.array_equal(before, ks.snapshot())
    assert ks.ticks == 0


@pytest.mark.parametrize("seed", range(5))
def test_ring_energy_never_grows_over_a_rotation(seed) -> None:
    ks = KarplusStrong(220.0, 44_100, rng=np.random.default_rng(seed))
    ks.pluck()
    energies = []
    for _ in range(50):
        energies.append(_ring_energy(ks))
        for _ in range(ks.ring_size):
            ks.tick()
    assert all(later <= earlier for earlier, later in zip(energies, energies[1:]))
    assert energies[-1] < energies[0] * 0.5


def test_set_frequency_grows_storage_with_silent_cells() -> None:
    ks = KarplusStrong(441.0, 44_100, rng=np.random.default_rng(1))
    ks.pluck()
    for _ in range(60):
        ks.tick()
    ks.set_frequency(220.5)
    assert ks.ring_size == 200
    assert ks.capacity >= 200
    assert ks.state is StringState.IDLE
    assert ks.ticks == 60
    assert ks.head == 60
    assert not np.any(ks.snapshot()[100:])


def test_set_frequency_shrink_wraps_cursor_and_clears_tail() -> None:
    ks = KarplusStrong(441.0, 44_100, rng=np.random.default_rng(1))
    ks.pluck()
    for _ in range(90):
        ks.tick()
    ks.set_frequency(882.0)                     # 50 cells
    assert ks.ring_size == 50
    assert ks.head == 90 % 50
    ks.set_frequency(441.0)                     # back to 100: old cells stay cleared
    assert not np.any(ks.snapshot()[50:])
    ks.pluck()
    assert np.all(ks.snapshot() != 0)


def test_set_frequency_rejects_tiny_ring_without_changing_state() -> None:
    ks = KarplusStrong(441.0, 44_100)
    with pytest.raises(RingSizeError):
        ks.set_frequency(44_100.0)
    assert ks.ring_size == 100
    assert ks.frequency == 441.0


def test_default_noise_source_is_used_when_none_given() -> None:
    ks = KarplusStrong(220.0)
    ks.pluck()
    assert np.any(ks.snapshot())


def test_generate_pluck_length_and_determinism() -> None:
    a = generate_pluck(0.25, 220.0, 8_000, rng=np.random.default_rng(11))
    b = generate_pluck(0.25, 220.0, 8_000, rng=np.random.default_rng(11))
    assert a.dtype == np.float32
    assert len(a) == 2_000
    assert np.array_equal(a, b)
    assert np.max(np.abs(a)) < 0.5


def test_generate_pluck_decays() -> None:
    out = generate_pluck(1.0, 220.0, 44_100, rng=np.random.default_rng(4))
    head = np.sqrt(np.mean(out[:4_410] ** 2))
    tail = np.sqrt(np.mean(out[-4_410:] ** 2))
    assert tail < head / 2


def test_generate_pluck_plucks_once() -> None:
    source = CountingSource(9)
    generate_pluck(0.1, 220.0, 8_000, rng=source)
    assert source.calls == 1


def test_threshold_replucks_after_every_sub_threshold_sample() -> None:
    source = CountingSource(21)
    threshold = -0.3
    out = generate_pluck_with_threshold(0.1, 220.0, 8_000, threshold, rng=source)
    assert len(out) == 800
    assert source.calls == 1 + int(np.sum(out.astype(np.float64) < threshold))


def test_threshold_keeps_the_string_sounding() -> None:
    # Constant excitation: every cell starts at 0.4 and decays in lockstep,
    # so a plain pluck ends well below 0.1 while the re-plucked one never
    # stays there for more than one sample.
    threshold = 0.1
    plain = generate_pluck(0.5, 4_410.0, 44_100, rng=FixedSource([0.4]))
    source = FixedSource([0.4])
    sustained = generate_pluck_with_threshold(0.5, 4_410.0, 44_100, threshold, rng=source)

    assert np.all(plain[-100:] < threshold)
    assert source.calls > 2

    below = sustained.astype(np.float64) < threshold
    longest = max((len(list(run)) for is_below, run in itertools.groupby(below) if is_below),
                  default=0)
    assert longest == 1


@pytest.mark.parametrize("frequency", [1e-300, 1e-320, 44_100 / (2**24 + 1)])
def test_frequency_too_low_for_a_ring_is_rejected(frequency) -> None:
    with pytest.raises(RingSizeError):
        KarplusStrong(frequency, 44_100)


def test_set_frequency_rejects_oversized_ring() -> None:
    ks = KarplusStrong(441.0, 44_100)
    with pytest.raises(RingSizeError):
        ks.set_frequency(1e-300)
    assert ks.ring_size == 100

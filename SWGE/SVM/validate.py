#!/usr/bin/env python3
# =============================================================================
# validate.py — SWGE Self-Validation Suite
# =============================================================================
#
# Run directly:  python -m SWGE.SVM.validate
#             or python SWGE/SVM/validate.py (from project root)
#
# Tests:
#   1. Constants integrity   — record sizes and minimum fills agree
#   2. Byte codec            — little-endian fields, range checks
#   3. Tone generator        — table length, one full period, exact duration
#   4. Karplus-Strong        — ring size, recurrence, decay, re-pluck
#   5. Container encoder     — round trip, resumable fill, buffer errors
#   6. libsndfile cross-check — written file header as soundfile sees it
# =============================================================================

import os
import sys
import tempfile

# Allow running from project root without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import numpy as np
import soundfile as sf

from SWGE.errors import BufferTooSmallError, ChannelLengthError, RingSizeError
from SWGE.SMM.constants import (
    HEADER_SIZE, FORMAT_CHUNK_SIZE, DATA_HEADER_SIZE, WAV_PREAMBLE_SIZE,
    HEADER_MIN_FILL, FORMAT_MIN_FILL, DATA_MIN_FILL,
    KS_DAMPING, SAMPLE_RATE,
)
from SWGE.SWM.byte_codec import u16_le, u32_le, f32_le, read_f32_le
from SWGE.SGM.tone import sine_cycle, generate_tone
from SWGE.SGM.ks_string import KarplusStrong, generate_pluck, generate_pluck_with_threshold
from SWGE.SWM.wavefile import create_wav, interleave
from SWGE.SVM.wav_reader import decode_wav, read_wav
from SWGE.render import write_wav

PASS = "[PASS]"
FAIL = "[FAIL]"
INFO = "[INFO]"

failures = 0

def check(label: str, condition: bool, detail: str = "") -> bool:
    global failures
    if condition:
        print(f"  {PASS} {label}")
    else:
        print(f"  {FAIL} {label}{(' -- ' + detail) if detail else ''}")
        failures += 1
    return condition


def raises(exc_type, fn, *args) -> bool:
    try:
        fn(*args)
    except exc_type:
        return True
    return False


# =============================================================================
# TEST 1 — Constants Integrity
# =============================================================================
print("\n" + "="*60)
print("TEST 1 — Constants Integrity")
print("="*60)

check("HEADER_SIZE = 12",              HEADER_SIZE == 12)
check("FORMAT_CHUNK_SIZE = 24",        FORMAT_CHUNK_SIZE == 24)
check("DATA_HEADER_SIZE = 8",          DATA_HEADER_SIZE == 8)
check("Preamble = 44 bytes",           WAV_PREAMBLE_SIZE == 44,
      f"got {WAV_PREAMBLE_SIZE}")
check("Header/fmt are single-shot",    HEADER_MIN_FILL == 12 and FORMAT_MIN_FILL == 24)
check("Data min fill = header + 1 sample", DATA_MIN_FILL == 12)
check("0 < damping < 1",               0.0 < KS_DAMPING < 1.0)


# =============================================================================
# TEST 2 — Byte Codec
# =============================================================================
print("\n" + "="*60)
print("TEST 2 — Byte Codec")
print("="*60)

check("u16 LE: 0x0102 → 02 01",        u16_le(0x0102) == b"\x02\x01")
check("u32 LE: 0x01020304 → 04..01",   u32_le(0x01020304) == b"\x04\x03\x02\x01")
check("f32 LE: 1.0 → 00 00 80 3f",     f32_le(1.0) == b"\x00\x00\x80\x3f")
check("f32 round trip 0.25",           read_f32_le(f32_le(0.25)) == 0.25)
check("u16 rejects 65536",             raises(ValueError, u16_le, 0x10000))
check("u32 rejects -1",                raises(ValueError, u32_le, -1))


# =============================================================================
# TEST 3 — Tone Generator
# =============================================================================
print("\n" + "="*60)
print("TEST 3 — Tone Generator")
print("="*60)

cycle = sine_cycle(440.0, SAMPLE_RATE)
half = len(cycle) // 2
check("440 Hz table = floor(44100/440) = 100 samples", len(cycle) == 100,
      f"got {len(cycle)}")
check("Table starts at zero",          abs(float(cycle[0])) < 1e-6)
check("Positive first half-period",    bool(np.all(cycle[1:half] > 0)))
check("Sign change at half period",    cycle[half] >= 0 > cycle[half + 1],
      f"cycle[{half}]={cycle[half]:.4f} cycle[{half + 1}]={cycle[half + 1]:.4f}")

tone = generate_tone(1.0, 440.0, SAMPLE_RATE)
check("1 s tone = 44100 samples",      len(tone) == 44_100, f"got {len(tone)}")
check("Tone tiles the table",          bool(np.array_equal(tone[100:200], cycle)))
check("Tone stays in [-1, 1]",         float(np.max(np.abs(tone))) <= 1.0)


# =============================================================================
# TEST 4 — Karplus-Strong
# =============================================================================
print("\n" + "="*60)
print("TEST 4 — Karplus-Strong")
print("="*60)

ks = KarplusStrong(441.0, SAMPLE_RATE, rng=np.random.default_rng(1))
check("441 Hz ring = 100 cells",       ks.ring_size == 100, f"got {ks.ring_size}")
check("Fresh ring is silent",          not np.any(ks.snapshot()))
check("f = sample rate is rejected",
      raises(RingSizeError, KarplusStrong, float(SAMPLE_RATE), SAMPLE_RATE))

ks.pluck()
ring = ks.snapshot()
check("Pluck noise within [-0.5, 0.5)", bool(np.all((ring >= -0.5) & (ring < 0.5))))

expected = (ring[0] + ring[1]) * np.float32(0.5) * np.float32(KS_DAMPING)
ks.tick()
check("tick(): cell 0 = (r0 + r1) * 0.5 * 0.994",
      ks.snapshot()[0] == expected, f"{ks.snapshot()[0]} != {expected}")
check("tick(): cursor advanced, one tick counted", ks.head == 1 and ks.ticks == 1)

energies = []
for _ in range(20):
    energies.append(float(np.sum(ks.snapshot().astype(np.float64) ** 2)))
    for _ in range(ks.ring_size):
        ks.tick()
check("Ring energy falls every rotation",
      all(b <= a for a, b in zip(energies, energies[1:])))

pluck = generate_pluck(0.5, 220.0, SAMPLE_RATE, rng=np.random.default_rng(2))
check("0.5 s pluck = 22050 samples",   len(pluck) == 22_050)
head_rms = float(np.sqrt(np.mean(pluck[:2000] ** 2)))
tail_rms = float(np.sqrt(np.mean(pluck[-2000:] ** 2)))
print(f"  {INFO} Pluck RMS head={head_rms:.4f} tail={tail_rms:.4f}")
check("Pluck decays",                  tail_rms < head_rms)

drone = generate_pluck_with_threshold(0.5, 220.0, SAMPLE_RATE, -0.2,
                                      rng=np.random.default_rng(2))
drone_tail = float(np.sqrt(np.mean(drone[-2000:] ** 2)))
print(f"  {INFO} Re-plucked tail RMS={drone_tail:.4f}")
check("Re-pluck keeps the tail louder than a single pluck", drone_tail > tail_rms)


# =============================================================================
# TEST 5 — Container Encoder
# =============================================================================
print("\n" + "="*60)
print("TEST 5 — Container Encoder")
print("="*60)

known = [0.0, 0.25, -0.25, 0.5]
wav = create_wav([known], 8000)
decoded = decode_wav(wav.to_bytes())
check("Round trip: samples",           decoded.samples.tolist() == known)
check("Round trip: mono @ 8000 Hz",    decoded.channels == 1 and decoded.sample_rate == 8000)
check("Round trip: data length = 16",  decoded.data_size == 16)
check("Round trip: fmt size = 16",     decoded.fmt_size == 16)
check("Round trip: total = 16 + 24 + 8", decoded.riff_size == 48,
      f"got {decoded.riff_size}")

big = create_wav([generate_tone(0.05, 1000.0, SAMPLE_RATE)], SAMPLE_RATE)
reference = big.data.to_bytes()
streamed = bytearray()
buf = bytearray(DATA_MIN_FILL + 2)     # deliberately not a multiple of 4
calls = 0
while True:
    n = big.data.fill(buf)
    calls += 1
    if n == 0:
        break
    streamed += buf[:n]
check("Resumable fill matches one-shot bytes", bytes(streamed) == reference)
check("Fill took many calls",          calls > 10, f"{calls} calls")
check("Finished record keeps returning 0", big.data.fill(bytearray(64)) == 0)
check("Small buffer is an error, not EOF",
      raises(BufferTooSmallError, create_wav([known], 8000).data.fill, bytearray(11)))

check("interleave([1,2],[3,4]) = [1,3,2,4]",
      interleave([[1, 2], [3, 4]]).tolist() == [1, 3, 2, 4])
check("interleave rejects mismatched lengths",
      raises(ChannelLengthError, interleave, [[1, 2], [3]]))


# =============================================================================
# TEST 6 — libsndfile cross-check
# =============================================================================
print("\n" + "="*60)
print("TEST 6 — libsndfile cross-check")
print("="*60)

stereo = create_wav([tone[:4410], tone[:4410]], SAMPLE_RATE)
with tempfile.TemporaryDirectory() as td:
    path = os.path.join(td, "stereo.wav")
    n_written = write_wav(path, stereo)
    check("File size = preamble + payload",
          os.path.getsize(path) == n_written == WAV_PREAMBLE_SIZE + 4410 * 2 * 4)
    ours = read_wav(path)
    check("Our reader: 2 ch, 4410 frames", ours.channels == 2 and ours.frames == 4410)
    try:
        info = sf.info(path)
    except RuntimeError as e:
        check("soundfile opens the file", False, str(e))
    else:
        print(f"  {INFO} soundfile: {info.samplerate} Hz, {info.channels} ch, "
              f"{info.frames} frames, {info.subtype}")
        check("soundfile agrees on rate/channels/frames",
              (info.samplerate, info.channels, info.frames) == (SAMPLE_RATE, 2, 4410))


# =============================================================================
# Summary
# =============================================================================
print("\n" + "="*60)
if failures == 0:
    print(f"  ALL TESTS PASSED")
else:
    print(f"  {failures} TEST(S) FAILED")
print("="*60 + "\n")
sys.exit(0 if failures == 0 else 1)

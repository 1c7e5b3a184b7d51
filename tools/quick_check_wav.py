"""
Quick numeric checker for a WAV file written by swge-synth.
Usage: python tools/quick_check_wav.py path/to/file.wav

Prints the header as libsndfile reports it, the fields decoded by
SWGE.SVM.wav_reader, and peak / RMS / std for every channel.
"""
import os
import sys

import numpy as np
import soundfile as sf

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from SWGE.errors import WavFormatError
from SWGE.SMM.constants import FORMAT_CHUNK_SIZE, DATA_HEADER_SIZE
from SWGE.SVM.wav_reader import channel_stats, deinterleave, read_wav

if len(sys.argv) < 2:
    print("Usage: python tools/quick_check_wav.py file.wav")
    raise SystemExit(1)

f = sys.argv[1]

print("=" * 60)
print(f"File        : {f}")
try:
    info = sf.info(f)
except RuntimeError as e:
    print(f"libsndfile  : cannot open ({e})")
else:
    print(f"libsndfile  : {info.samplerate} Hz, {info.channels} ch, "
          f"{info.frames} frames, {info.subtype}")

try:
    wav = read_wav(f)
except (OSError, WavFormatError) as e:
    print(f"[!!] {e}")
    raise SystemExit(1)

print(f"Sample rate : {wav.sample_rate} Hz")
print(f"Channels    : {wav.channels}")
print(f"Bits        : {wav.bits_per_sample} (format tag {wav.format_tag})")
print(f"Byte rate   : {wav.byte_rate}   block align: {wav.block_align}")
print(f"Frames      : {wav.frames}")
print(f"Duration    : {wav.duration:.4f} s")
print(f"RIFF size   : {wav.riff_size}   data size: {wav.data_size}")
print("=" * 60)

expected_riff = wav.data_size + FORMAT_CHUNK_SIZE + DATA_HEADER_SIZE
if wav.riff_size != expected_riff:
    print(f"  [!!] RIFF size {wav.riff_size} != data + 32 = {expected_riff}")
if wav.byte_rate != wav.sample_rate * wav.block_align:
    print(f"  [!!] byte rate != sample rate * block align")

for i, st in enumerate(channel_stats(wav)):
    print(f"  Ch{i}: peak={st.peak:.3f}  rms={st.rms:.3f}  std={st.std:.3f}")


def estimate_frequency(ch, sr):
    s = np.sign(ch)
    s[s == 0] = 1
    edges = np.where(np.diff(s) != 0)[0]
    if len(edges) < 4:
        return None, 0
    # Two zero crossings per period
    return sr / (np.mean(np.diff(edges)) * 2.0), len(edges)


print()
print("Estimated fundamental per channel (zero-crossing rate):")
frames = deinterleave(wav.samples, wav.channels)
for i in range(wav.channels):
    hz, n_edges = estimate_frequency(frames[:, i], wav.sample_rate)
    if hz:
        print(f"  Ch{i}: ~{hz:.1f} Hz  ({n_edges} crossings)")
    else:
        print(f"  Ch{i}: too few crossings, likely silence")

print("=" * 60)

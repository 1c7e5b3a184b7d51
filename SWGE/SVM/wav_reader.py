#!/usr/bin/env python3
# =============================================================================
# wav_reader.py — RIFF/WAVE decoder (inverse of SWGE.SWM)
# =============================================================================
#
# Parses the bytes SWGE writes back into header fields and float32 samples so
# that files can be round-trip checked without trusting the encoder.
#
# Parsing strategy
# ----------------
#   1. Check the 12-byte file header: "RIFF" <size> "WAVE".
#   2. Walk chunks from offset 12: <4-byte id> <u32 size> <payload>, padded
#      to an even length.  Unknown chunks are skipped.
#   3. "fmt " must come before "data"; both are required.
#   4. The data payload is reinterpreted as little-endian float32.
#
# The RIFF size field is reported as found and never used for bounds; chunk
# sizes alone drive the walk.
# =============================================================================

from __future__ import annotations

import os
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray

from SWGE.errors import WavFormatError
from SWGE.SMM.constants import (
    RIFF_MAGIC, WAVE_MAGIC, FMT_MAGIC, DATA_MAGIC,
    HEADER_SIZE, FORMAT_BODY_SIZE, FORMAT_TAG_PCM, SUPPORTED_BITS,
)
from SWGE.SWM.byte_codec import read_u16_le, read_u32_le, f32_array_from_le


class DecodedWav(NamedTuple):
    riff_size:       int      # value of the RIFF size field
    fmt_size:        int      # value of the fmt size field (16)
    format_tag:      int      # 1 = linear PCM
    channels:        int
    sample_rate:     int
    byte_rate:       int
    block_align:     int
    bits_per_sample: int
    data_size:       int      # declared data payload length in bytes
    samples:         NDArray[np.float32]   # interleaved

    @property
    def frames(self) -> int:
        return len(self.samples) // max(self.channels, 1)

    @property
    def duration(self) -> float:
        return self.frames / self.sample_rate


class ChannelStats(NamedTuple):
    peak: float
    rms:  float
    std:  float


def decode_wav(raw: bytes | bytearray | memoryview) -> DecodedWav:
    """
    Decode a complete WAV byte string.

    Raises:
        WavFormatError: missing magics, truncated chunks, missing fmt/data,
                        or a format other than 32-bit samples.
    """
    buf = memoryview(raw)
    if len(buf) < HEADER_SIZE:
        raise WavFormatError(f"{len(buf)} bytes is too short for a RIFF header")
    if bytes(buf[0:4]) != RIFF_MAGIC or bytes(buf[8:12]) != WAVE_MAGIC:
        raise WavFormatError("missing RIFF/WAVE magic")
    riff_size = read_u32_le(buf, 4)

    fmt: tuple[int, ...] | None = None
    data_size = None
    payload = None

    pos = HEADER_SIZE
    while pos + 8 <= len(buf):
        chunk_id = bytes(buf[pos:pos + 4])
        chunk_size = read_u32_le(buf, pos + 4)
        body = pos + 8
        if body + chunk_size > len(buf):
            raise WavFormatError(
                f"chunk {chunk_id!r} at offset {pos} declares {chunk_size} bytes, "
                f"only {len(buf) - body} present"
            )

        if chunk_id == FMT_MAGIC:
            if chunk_size < FORMAT_BODY_SIZE:
                raise WavFormatError(f"fmt chunk too short: {chunk_size} bytes")
            fmt = (
                chunk_size,
                read_u16_le(buf, body),         # format tag
                read_u16_le(buf, body + 2),     # channels
                read_u32_le(buf, body + 4),     # sample rate
                read_u32_le(buf, body + 8),     # byte rate
                read_u16_le(buf, body + 12),    # block align
                read_u16_le(buf, body + 14),    # bits per sample
            )
        elif chunk_id == DATA_MAGIC:
            if fmt is None:
                raise WavFormatError("data chunk found before fmt chunk")
            data_size = chunk_size
            payload = buf[body:body + chunk_size]
            break

        pos = body + chunk_size + (chunk_size & 1)

    if fmt is None:
        raise WavFormatError("no fmt chunk")
    if payload is None or data_size is None:
        raise WavFormatError("no data chunk")

    fmt_size, format_tag, channels, sample_rate, byte_rate, block_align, bits = fmt
    if format_tag != FORMAT_TAG_PCM:
        raise WavFormatError(f"unsupported format tag {format_tag}")
    if bits not in SUPPORTED_BITS:
        raise WavFormatError(f"unsupported sample width {bits} bits")
    if data_size % 4:
        raise WavFormatError(f"data length {data_size} is not a multiple of 4")

    return DecodedWav(
        riff_size=riff_size,
        fmt_size=fmt_size,
        format_tag=format_tag,
        channels=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits,
        data_size=data_size,
        samples=f32_array_from_le(payload),
    )


def read_wav(path: str | os.PathLike[str]) -> DecodedWav:
    with open(path, "rb") as f:
        return decode_wav(f.read())


def deinterleave(samples: NDArray[np.floating], channels: int) -> NDArray[np.float32]:
    """Reshape interleaved samples to (frames, channels)."""
    arr = np.asarray(samples, dtype=np.float32)
    if channels < 1 or len(arr) % channels:
        raise WavFormatError(
            f"{len(arr)} samples cannot be split into {channels} channel(s)"
        )
    return arr.reshape(-1, channels)


def channel_stats(wav: DecodedWav) -> list[ChannelStats]:
    """Peak, RMS and standard deviation per channel."""
    frames = deinterleave(wav.samples, wav.channels).astype(np.float64)
    stats = []
    for ci in range(wav.channels):
        ch = frames[:, ci]
        if len(ch) == 0:
            stats.append(ChannelStats(0.0, 0.0, 0.0))
            continue
        stats.append(ChannelStats(
            peak=float(np.max(np.abs(ch))),
            rms=float(np.sqrt(np.mean(ch ** 2))),
            std=float(np.std(ch)),
        ))
    return stats

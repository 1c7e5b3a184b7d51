# =============================================================================
# wavefile.py — WAV assembly and streaming
# =============================================================================
#
# Builds the three records from already-validated parameters and ties them
# together as a WaveFile that can be pulled into any binary sink.
#
# SIZE INVARIANTS (bits = 32, so bytes/sample = 4):
#   byte_rate   = channels * sample_rate * 4
#   block_align = channels * 4
#   data length = frames * channels * 4
#   total size  = data length + FORMAT_CHUNK_SIZE (24) + DATA_HEADER_SIZE (8)
#
# The total-size field leaves out the 4 bytes of the "WAVE" tag, so it is 4
# less than the byte count after the RIFF size field.  Readers in practice
# walk chunks by their own sizes; the value is kept for compatibility with
# files already written by this tool.

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import BinaryIO, NamedTuple

import numpy as np
from numpy.typing import NDArray

from SWGE.errors import ChannelLengthError, ConfigurationError
from SWGE.SMM.constants import (
    FORMAT_CHUNK_SIZE, DATA_HEADER_SIZE,
    SUPPORTED_BITS, SUPPORTED_CHANNELS,
    U32_MAX, COPY_BUFSIZE, DATA_MIN_FILL, FORMAT_MIN_FILL,
)
from .chunks import WavHeader, FormatChunk, DataChunk

_LOGGER = logging.getLogger(__name__)

SampleSeq = Sequence[float] | NDArray[np.floating]


# ── Record builders ──────────────────────────────────────────────────────────

def build_header(total_size: int) -> WavHeader:
    return WavHeader(total_size)


def build_format(sample_rate: int, channels: int, bits_per_sample: int = 32) -> FormatChunk:
    """
    Build the fmt record, deriving byte rate and block alignment.

    Raises:
        ConfigurationError: unsupported channel count / bit depth, or a rate
                            whose byte rate overflows the u32 field.
    """
    if channels not in SUPPORTED_CHANNELS:
        raise ConfigurationError(
            f"channels must be one of {SUPPORTED_CHANNELS}, got {channels!r}"
        )
    if bits_per_sample not in SUPPORTED_BITS:
        raise ConfigurationError(
            f"bits_per_sample must be one of {SUPPORTED_BITS}, got {bits_per_sample!r}"
        )
    if sample_rate <= 0:
        raise ConfigurationError(f"sample_rate must be positive, got {sample_rate}")

    bytes_per_sample = bits_per_sample // 8
    block_align = channels * bytes_per_sample
    byte_rate = sample_rate * block_align
    if byte_rate > U32_MAX:
        raise ConfigurationError(
            f"byte rate {byte_rate} for {sample_rate} Hz x {channels} ch overflows u32"
        )
    return FormatChunk(
        channels=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
    )


def build_data(interleaved_samples: SampleSeq) -> DataChunk:
    return DataChunk(interleaved_samples)


# ── Channel assembly ─────────────────────────────────────────────────────────

def interleave(channel_sequences: Sequence[SampleSeq]) -> NDArray[np.float32]:
    """
    Zip equal-length channels sample by sample.

        interleave([L])      → L
        interleave([L, R])   → L0 R0 L1 R1 ...

    Raises:
        ChannelLengthError: no channels, or channels of different lengths.
    """
    if len(channel_sequences) == 0:
        raise ChannelLengthError("interleave() needs at least one channel")

    arrays = [np.asarray(ch, dtype=np.float32).ravel() for ch in channel_sequences]
    lengths = {len(a) for a in arrays}
    if len(lengths) != 1:
        raise ChannelLengthError(
            f"channel lengths differ: {[len(a) for a in arrays]}"
        )
    if len(arrays) == 1:
        return arrays[0]
    return np.column_stack(arrays).ravel()


# ── Whole file ───────────────────────────────────────────────────────────────

class WaveFile(NamedTuple):
    header: WavHeader
    format_chunk: FormatChunk
    data: DataChunk

    @property
    def total_bytes(self) -> int:
        return len(self.header) + len(self.format_chunk) + len(self.data)

    def iter_bytes(self, buffer_size: int = COPY_BUFSIZE) -> Iterator[bytes]:
        """
        Pull every record through one reusable buffer, yielding each filled
        slice as bytes.  Records are drained in file order.
        """
        if buffer_size < max(FORMAT_MIN_FILL, DATA_MIN_FILL):
            # fmt is the largest single-shot record; the same buffer serves all
            raise ConfigurationError(
                f"buffer_size must be at least {FORMAT_MIN_FILL}, got {buffer_size}"
            )
        buf = bytearray(buffer_size)
        for record in self:
            while True:
                n = record.fill(buf)
                if n == 0:
                    break
                yield bytes(buf[:n])

    def write_to(self, fileobj: BinaryIO, buffer_size: int = COPY_BUFSIZE) -> int:
        """
        Stream the whole file into `fileobj`.  OSError from the sink is not
        caught.

        Returns:
            Total bytes written.
        """
        written = 0
        for block in self.iter_bytes(buffer_size):
            fileobj.write(block)
            written += len(block)
        _LOGGER.debug("wav: wrote %d bytes in %d-byte pulls", written, buffer_size)
        return written

    def to_bytes(self) -> bytes:
        return b"".join(r.to_bytes() for r in self)


def create_wav(
    channels: Sequence[SampleSeq],
    sample_rate: int,
    bits_per_sample: int = 32,
) -> WaveFile:
    """
    Package one (mono) or two (stereo) channel arrays as a WaveFile.

    Raises:
        ChannelLengthError: see interleave().
        ConfigurationError: see build_format(), or a payload over 4 GiB.
    """
    fmt = build_format(sample_rate, len(channels), bits_per_sample)
    data = build_data(interleave(channels))

    total_size = data.data_size + FORMAT_CHUNK_SIZE + DATA_HEADER_SIZE
    if total_size > U32_MAX:
        raise ConfigurationError(
            f"{data.data_size} bytes of audio does not fit a RIFF file (4 GiB limit)"
        )
    header = build_header(total_size)
    _LOGGER.debug("wav: %d ch @ %d Hz, %d frames, riff size %d",
                  fmt.channels, sample_rate, data.sample_count // fmt.channels,
                  total_size)
    return WaveFile(header, fmt, data)

# =============================================================================
# chunks.py — Resumable RIFF/WAVE record encoders
# =============================================================================
#
# Each record is encoded to bytes once, when it is built, and then handed out
# through a pull interface:
#
#     n = record.fill(buffer)      # buffer: bytearray / memoryview
#
# FILL CONTRACT:
#   - n > 0   : n bytes were written at the start of `buffer`.
#   - n == 0  : every byte of the record has already been delivered.  Every
#               later call also returns 0.
#   - A buffer shorter than the record's minimum raises BufferTooSmallError,
#     never returns 0, so "too small" cannot be mistaken for "done".
#   - Fields are never split across calls.  The first call always carries the
#     whole lead (the full 12-byte header, the full 24-byte fmt record, or the
#     8-byte data header); after that the data block moves in whole 4-byte
#     samples only.
#
# EMISSION STATE (per record):
#
#     NOT_STARTED ──fill──▶ STREAMING(cursor) ──fill──▶ DONE
#          │                                              ▲
#          └───────────── fill (record fits) ─────────────┘
#
# The cursor counts bytes already handed to the caller.  Once content is
# built, state and cursor are the only things that change.

from __future__ import annotations

import enum
import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from SWGE.errors import BufferTooSmallError
from SWGE.SMM.constants import (
    RIFF_MAGIC, WAVE_MAGIC, FMT_MAGIC, DATA_MAGIC,
    FORMAT_BODY_SIZE,
    HEADER_MIN_FILL, FORMAT_MIN_FILL, DATA_MIN_FILL,
    FORMAT_TAG_PCM, BYTES_PER_SAMPLE,
)
from .byte_codec import u16_le, u32_le, f32_array_le

_LOGGER = logging.getLogger(__name__)


class FillState(enum.Enum):
    NOT_STARTED = "not_started"
    STREAMING = "streaming"
    DONE = "done"


class _Record:
    """
    Shared fill() machinery.

    Subclasses set `_encoded` (the full record bytes), `_lead` (bytes that
    must go out together on the first call) and `_unit` (granularity of
    everything after the lead).
    """

    MIN_FILL = 0
    NAME = "record"

    def __init__(self, lead: bytes, body: bytes = b"", unit: int = 1) -> None:
        self._encoded = lead + body
        self._lead    = len(lead)
        self._unit    = unit
        self._cursor  = 0
        self._state   = FillState.NOT_STARTED

    # ── Pull interface ───────────────────────────────────────────────────────

    def fill(self, buffer: bytearray | memoryview) -> int:
        """
        Copy the next run of record bytes into `buffer`.

        Returns:
            Bytes written; 0 once the record is exhausted.

        Raises:
            BufferTooSmallError: len(buffer) < MIN_FILL.
        """
        if self._state is FillState.DONE:
            return 0

        dest = memoryview(buffer).cast("B")
        if len(dest) < self.MIN_FILL:
            raise BufferTooSmallError(
                f"{self.NAME}: fill() needs at least {self.MIN_FILL} bytes, "
                f"got a {len(dest)}-byte buffer"
            )

        start = self._cursor
        if self._state is FillState.NOT_STARTED:
            room = self._lead + (len(dest) - self._lead) // self._unit * self._unit
            self._state = FillState.STREAMING
        else:
            room = len(dest) // self._unit * self._unit

        end = min(start + room, len(self._encoded))
        written = end - start
        dest[:written] = self._encoded[start:end]
        self._cursor = end

        if self._cursor >= len(self._encoded):
            self._state = FillState.DONE
        return written

    # ── Inspection ───────────────────────────────────────────────────────────

    @property
    def state(self) -> FillState:
        return self._state

    @property
    def bytes_emitted(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._encoded)

    def to_bytes(self) -> bytes:
        """The whole encoded record, independent of the fill cursor."""
        return bytes(self._encoded)


# -----------------------------------------------------------------------------
# File header: "RIFF" <u32 total size> "WAVE"
# -----------------------------------------------------------------------------

class WavHeader(_Record):
    MIN_FILL = HEADER_MIN_FILL
    NAME = "RIFF header"

    def __init__(self, total_size: int) -> None:
        self.total_size = total_size
        lead = RIFF_MAGIC + u32_le(total_size) + WAVE_MAGIC
        super().__init__(lead)


# -----------------------------------------------------------------------------
# Format descriptor: "fmt " and 16 bytes of linear PCM description
# -----------------------------------------------------------------------------

class FormatChunk(_Record):
    MIN_FILL = FORMAT_MIN_FILL
    NAME = "fmt chunk"

    def __init__(
        self,
        channels: int,
        sample_rate: int,
        byte_rate: int,
        block_align: int,
        bits_per_sample: int,
    ) -> None:
        self.channels        = channels
        self.sample_rate     = sample_rate
        self.byte_rate       = byte_rate
        self.block_align     = block_align
        self.bits_per_sample = bits_per_sample
        lead = (
            FMT_MAGIC
            + u32_le(FORMAT_BODY_SIZE)
            + u16_le(FORMAT_TAG_PCM)
            + u16_le(channels)
            + u32_le(sample_rate)
            + u32_le(byte_rate)
            + u16_le(block_align)
            + u16_le(bits_per_sample)
        )
        super().__init__(lead)


# -----------------------------------------------------------------------------
# Data block: "data" <u32 length> <float32 samples...>
# -----------------------------------------------------------------------------

class DataChunk(_Record):
    """
    Interleaved float32 payload.  The only record that genuinely streams:
    after the 8-byte header, each fill() moves as many whole samples as the
    buffer holds.
    """

    MIN_FILL = DATA_MIN_FILL
    NAME = "data chunk"

    def __init__(self, samples: Sequence[float] | NDArray[np.floating]) -> None:
        payload = f32_array_le(samples)
        self.sample_count = len(payload) // BYTES_PER_SAMPLE
        self.data_size = len(payload)
        lead = DATA_MAGIC + u32_le(self.data_size)
        _LOGGER.debug("data chunk: %d samples, %d payload bytes",
                      self.sample_count, self.data_size)
        super().__init__(lead, payload, unit=BYTES_PER_SAMPLE)

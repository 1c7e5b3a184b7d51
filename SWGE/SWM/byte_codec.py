# =============================================================================
# byte_codec.py — Fixed-width little-endian transcoding
# =============================================================================
#
# Every numeric field in the container goes through one of these helpers.
# The struct format strings all carry "<", so output never depends on host
# byte order or alignment.

from __future__ import annotations

import struct
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from SWGE.errors import ConfigurationError
from SWGE.SMM.constants import U16_MAX, U32_MAX

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_F32 = struct.Struct("<f")

# numpy dtype for payloads: float32, explicitly little-endian
F32_LE = np.dtype("<f4")


# ── Encoders ─────────────────────────────────────────────────────────────────

def u16_le(value: int) -> bytes:
    """Encode an unsigned 16-bit field."""
    if not 0 <= value <= U16_MAX:
        raise ConfigurationError(f"{value} does not fit in a u16 field")
    return _U16.pack(value)


def u32_le(value: int) -> bytes:
    """Encode an unsigned 32-bit field."""
    if not 0 <= value <= U32_MAX:
        raise ConfigurationError(f"{value} does not fit in a u32 field")
    return _U32.pack(value)


def f32_le(value: float) -> bytes:
    """Encode one float32 sample (rounded to single precision)."""
    return _F32.pack(value)


def f32_array_le(samples: Sequence[float] | NDArray[np.floating]) -> bytes:
    """Pack a whole sample sequence as consecutive little-endian float32."""
    return np.asarray(samples, dtype=F32_LE).tobytes()


# ── Decoders ─────────────────────────────────────────────────────────────────

def read_u16_le(buf: bytes | bytearray | memoryview, offset: int = 0) -> int:
    return _U16.unpack_from(buf, offset)[0]


def read_u32_le(buf: bytes | bytearray | memoryview, offset: int = 0) -> int:
    return _U32.unpack_from(buf, offset)[0]


def read_f32_le(buf: bytes | bytearray | memoryview, offset: int = 0) -> float:
    return _F32.unpack_from(buf, offset)[0]


def f32_array_from_le(buf: bytes | bytearray | memoryview) -> NDArray[np.float32]:
    """Inverse of f32_array_le; returns native-order float32."""
    if len(buf) % F32_LE.itemsize:
        raise ValueError(f"{len(buf)} bytes is not a whole number of float32 samples")
    return np.frombuffer(buf, dtype=F32_LE).astype(np.float32)

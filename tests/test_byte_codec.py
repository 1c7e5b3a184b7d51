import numpy as np
import pytest

from SWGE.errors import ConfigurationError
from SWGE.SWM.byte_codec import (
    f32_array_from_le, f32_array_le, f32_le,
    read_f32_le, read_u16_le, read_u32_le,
    u16_le, u32_le,
)


def test_integer_fields_are_little_endian() -> None:
    assert u16_le(1) == b"\x01\x00"
    assert u16_le(0xBEEF) == b"\xef\xbe"
    assert u32_le(16) == b"\x10\x00\x00\x00"
    assert u32_le(0xDEADBEEF) == b"\xef\xbe\xad\xde"


def test_float_field_is_ieee754_little_endian() -> None:
    assert f32_le(1.0) == b"\x00\x00\x80\x3f"
    assert f32_le(-2.0) == b"\x00\x00\x00\xc0"


@pytest.mark.parametrize("encode, bad", [(u16_le, -1), (u16_le, 0x10000), (u32_le, 2**32)])
def test_out_of_range_fields_are_rejected(encode, bad) -> None:
    with pytest.raises(ConfigurationError):
        encode(bad)


def test_decoders_read_at_offset() -> None:
    buf = b"xx" + u16_le(513) + u32_le(70_000) + f32_le(0.5)
    assert read_u16_le(buf, 2) == 513
    assert read_u32_le(buf, 4) == 70_000
    assert read_f32_le(buf, 8) == 0.5


def test_bulk_payload_matches_per_sample_encoding() -> None:
    samples = [0.0, 0.25, -0.25, 0.5]
    assert f32_array_le(samples) == b"".join(f32_le(s) for s in samples)


def test_bulk_payload_ignores_host_byte_order() -> None:
    big_endian = np.array([1.0, -0.5], dtype=">f4")
    assert f32_array_le(big_endian) == f32_le(1.0) + f32_le(-0.5)


def test_bulk_decode_rejects_partial_samples() -> None:
    with pytest.raises(ValueError):
        f32_array_from_le(b"\x00\x00\x00")

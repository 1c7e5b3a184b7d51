import struct

import pytest

from SWGE.errors import BufferTooSmallError
from SWGE.SMM.constants import DATA_HEADER_SIZE, FORMAT_CHUNK_SIZE, HEADER_SIZE
from SWGE.SWM.chunks import DataChunk, FillState, FormatChunk, WavHeader


def _drain(record, size: int) -> tuple[bytes, list[int]]:
    out = bytearray()
    returns = []
    buf = bytearray(size)
    while True:
        n = record.fill(buf)
        returns.append(n)
        if n == 0:
            return bytes(out), returns
        out += buf[:n]


def _fmt() -> FormatChunk:
    return FormatChunk(channels=2, sample_rate=44_100, byte_rate=352_800,
                       block_align=8, bits_per_sample=32)


def test_header_layout() -> None:
    hdr = WavHeader(48)
    assert hdr.to_bytes() == b"RIFF" + struct.pack("<I", 48) + b"WAVE"
    assert len(hdr) == 12


def test_format_layout() -> None:
    raw = _fmt().to_bytes()
    assert len(raw) == 24
    assert raw[:4] == b"fmt "
    assert struct.unpack("<IHHIIHH", raw[4:]) == (16, 1, 2, 44_100, 352_800, 8, 32)


def test_data_layout() -> None:
    raw = DataChunk([0.0, 0.25, -0.25, 0.5]).to_bytes()
    assert raw[:8] == b"data" + struct.pack("<I", 16)
    assert struct.unpack("<4f", raw[8:]) == (0.0, 0.25, -0.25, 0.5)


@pytest.mark.parametrize("record", [WavHeader(0), _fmt()])
def test_fixed_records_are_single_shot(record) -> None:
    buf = bytearray(100)
    assert record.state is FillState.NOT_STARTED
    assert record.fill(buf) == len(record)
    assert bytes(buf[:len(record)]) == record.to_bytes()
    assert record.state is FillState.DONE
    assert record.fill(buf) == 0
    assert record.fill(buf) == 0


@pytest.mark.parametrize(
    "record, too_small",
    [(WavHeader(0), 11), (_fmt(), 23), (DataChunk([0.1]), 11)],
)
def test_undersized_buffer_is_an_error_not_end_of_record(record, too_small) -> None:
    with pytest.raises(BufferTooSmallError):
        record.fill(bytearray(too_small))
    assert record.state is FillState.NOT_STARTED
    assert record.bytes_emitted == 0


def test_finished_record_returns_zero_even_for_small_buffers() -> None:
    hdr = WavHeader(0)
    hdr.fill(bytearray(12))
    assert hdr.fill(bytearray(1)) == 0


@pytest.mark.parametrize("size", [12, 13, 15, 16, 17, 40, 4096])
def test_resumable_fill_matches_one_shot(size) -> None:
    samples = [i / 1000.0 for i in range(-250, 250)]
    reference = DataChunk(samples).to_bytes()

    streamed, returns = _drain(DataChunk(samples), size)

    assert streamed == reference
    assert returns[-1] == 0
    assert all(n > 0 for n in returns[:-1])


def test_data_fill_never_splits_a_sample() -> None:
    chunk = DataChunk([1.0] * 10)
    buf = bytearray(15)
    assert chunk.fill(buf) == 12                 # header + 1 sample, 3 bytes unused
    assert chunk.state is FillState.STREAMING
    while (n := chunk.fill(buf)) > 0:
        assert n % 4 == 0
        assert n <= 12
    assert chunk.bytes_emitted == len(chunk) == 48


def test_fill_accepts_memoryview() -> None:
    backing = bytearray(64)
    chunk = DataChunk([0.5, -0.5])
    n = chunk.fill(memoryview(backing)[8:])
    assert n == 16
    assert bytes(backing[8:24]) == chunk.to_bytes()


def test_empty_data_chunk_emits_only_its_header() -> None:
    chunk = DataChunk([])
    buf = bytearray(32)
    assert chunk.fill(buf) == 8
    assert bytes(buf[:8]) == b"data\x00\x00\x00\x00"
    assert chunk.fill(buf) == 0


def test_record_lengths_match_layout_constants() -> None:
    assert len(WavHeader(0)) == HEADER_SIZE
    assert len(_fmt()) == FORMAT_CHUNK_SIZE
    assert len(DataChunk([])) == DATA_HEADER_SIZE
    assert len(DataChunk([0.0, 1.0])) == DATA_HEADER_SIZE + 8

import io
import struct
import threading

import pytest

from singlib.rng import RNG_MASK, Source, SyncReader


def test_int64_reads_big_endian_signed():
    source = Source(io.BytesIO(struct.pack(">q", -5) + struct.pack(">q", 42)))
    assert source.int64() == -5
    assert source.int64() == 42


def test_uint64_reads_big_endian_unsigned():
    source = Source(io.BytesIO(struct.pack(">Q", 123456789)))
    assert source.uint64() == 123456789


def test_int63_masks_sign_bit():
    source = Source(io.BytesIO(struct.pack(">q", -1)))
    assert source.int63() == RNG_MASK


def test_int63_keeps_positive_values():
    source = Source(io.BytesIO(struct.pack(">q", 987654321)))
    assert source.int63() == 987654321


def test_short_reader_raises():
    source = Source(io.BytesIO(b"\x00\x01"))
    with pytest.raises(EOFError):
        source.int64()


def test_default_source_in_range():
    source = Source()
    source.seed(1)
    values = [source.int63() for _ in range(50)]
    assert all(0 <= value <= RNG_MASK for value in values)
    assert all(0 <= source.uint64() < 2**64 for _ in range(10))


def test_sync_reader_shares_data_between_threads():
    original = bytes(range(256)) * 4
    reader = SyncReader(io.BytesIO(original))
    chunks = []
    lock = threading.Lock()

    def worker():
        for _ in range(8):
            data = reader.read(16)
            with lock:
                chunks.append(data)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    combined = b"".join(chunks)
    assert len(combined) == len(original)
    assert sorted(combined) == sorted(original)
"""Unit tests for DiskChunk and MemoryChunk."""

import io
import threading

import pytest

from chunkstore.chunk import Chunk
from chunkstore.disk_chunk import DiskChunk
from chunkstore.memory_chunk import MemoryChunk


class FailingSink(io.RawIOBase):
    """Sink that rejects every write."""

    def writable(self):
        return True

    def write(self, data):
        raise OSError("disk full")


class ShortWriteSink(io.RawIOBase):
    """Raw sink that accepts at most a few bytes per write."""

    def __init__(self, limit=5):
        super().__init__()
        self.limit = limit
        self.data = bytearray()

    def writable(self):
        return True

    def write(self, data):
        accepted = bytes(data[:self.limit])
        self.data += accepted
        return len(accepted)


class StalledSink(io.RawIOBase):
    """Raw sink that never accepts any bytes."""

    def writable(self):
        return True

    def write(self, data):
        return 0


class TestDiskChunkChecksum:
    """Checksum identity and copied input."""

    def test_checksum_round_trip(self, chunk_file):
        path, _ = chunk_file
        checksum = bytes.fromhex('00ff10ab')

        chunk = DiskChunk(checksum, path)

        assert chunk.checksum == checksum

    def test_checksum_copied_in(self, chunk_file):
        path, _ = chunk_file
        source = bytearray(b'\x01\x02\x03')

        chunk = DiskChunk(source, path)
        source[0] = 0xff

        assert chunk.checksum == b'\x01\x02\x03'

    def test_returned_checksum_cannot_alter_chunk(self, chunk_file):
        path, _ = chunk_file
        chunk = DiskChunk(b'\x01\x02\x03', path)

        returned = bytearray(chunk.checksum)
        returned[0] = 0xff

        assert chunk.checksum == b'\x01\x02\x03'
        assert isinstance(chunk.checksum, bytes)

    def test_empty_checksum_allowed(self, chunk_file):
        path, _ = chunk_file
        assert DiskChunk(b'', path).checksum == b''

    def test_none_checksum_rejected(self, chunk_file):
        path, _ = chunk_file
        with pytest.raises(TypeError):
            DiskChunk(None, path)

    def test_none_file_rejected(self):
        with pytest.raises(TypeError):
            DiskChunk(b'\x01', None)

    def test_checksum_attribute_is_read_only(self, chunk_file):
        path, _ = chunk_file
        chunk = DiskChunk(b'\x01', path)
        with pytest.raises(AttributeError):
            chunk.checksum = b'\x02'


class TestDiskChunkEquality:
    """Equality and hashing are defined by checksum only."""

    def test_equal_checksums_different_files(self, tmp_path):
        first = tmp_path / 'first.chk'
        second = tmp_path / 'second.chk'
        first.write_bytes(b'one')
        second.write_bytes(b'two')

        assert DiskChunk(b'\xaa', first) == DiskChunk(b'\xaa', second)
        assert hash(DiskChunk(b'\xaa', first)) == hash(DiskChunk(b'\xaa', second))

    def test_different_checksums_same_file(self, chunk_file):
        path, _ = chunk_file
        assert DiskChunk(b'\xaa', path) != DiskChunk(b'\xbb', path)

    def test_equal_across_variants(self, chunk_file):
        path, data = chunk_file
        assert DiskChunk(b'\xaa', path) == MemoryChunk(b'\xaa', data)
        assert len({DiskChunk(b'\xaa', path), MemoryChunk(b'\xaa', data)}) == 1

    def test_not_equal_to_plain_bytes(self, chunk_file):
        path, _ = chunk_file
        assert DiskChunk(b'\xaa', path) != b'\xaa'

    def test_repr_shows_hex_checksum(self, chunk_file):
        path, _ = chunk_file
        assert 'checksum=abcd' in repr(DiskChunk(b'\xab\xcd', path))


class TestDiskChunkReading:
    """copy_to() and reader()."""

    def test_copy_to_writes_full_content(self, chunk_file):
        path, data = chunk_file
        sink = io.BytesIO()

        written = DiskChunk(b'\x01', path).copy_to(sink)

        assert written == len(data)
        assert sink.getvalue() == data

    def test_copy_to_with_small_pieces(self, chunk_file):
        path, data = chunk_file
        sink = io.BytesIO()

        written = DiskChunk(b'\x01', path).copy_to(sink, piece_size=7)

        assert written == len(data)
        assert sink.getvalue() == data

    def test_copy_to_empty_file(self, tmp_path):
        path = tmp_path / 'empty.chk'
        path.write_bytes(b'')
        sink = io.BytesIO()

        assert DiskChunk(b'\x01', path).copy_to(sink) == 0
        assert sink.getvalue() == b''

    def test_copy_to_repeatable(self, chunk_file):
        path, data = chunk_file
        chunk = DiskChunk(b'\x01', path)

        first, second = io.BytesIO(), io.BytesIO()
        chunk.copy_to(first)
        chunk.copy_to(second)

        assert first.getvalue() == second.getvalue() == data

    def test_copy_to_missing_file_raises_os_error(self, tmp_path):
        chunk = DiskChunk(b'\x01', tmp_path / 'missing.chk')
        with pytest.raises(OSError):
            chunk.copy_to(io.BytesIO())

    def test_copy_to_failing_sink_raises_os_error(self, chunk_file):
        path, _ = chunk_file
        with pytest.raises(OSError, match="disk full"):
            DiskChunk(b'\x01', path).copy_to(FailingSink())

    def test_copy_to_short_writes_deliver_every_byte(self, chunk_file):
        path, data = chunk_file
        sink = ShortWriteSink(limit=333)

        written = DiskChunk(b'\x01', path).copy_to(sink, piece_size=1000)

        assert written == len(data)
        assert bytes(sink.data) == data

    def test_copy_to_stalled_sink_raises_os_error(self, chunk_file):
        path, _ = chunk_file
        with pytest.raises(OSError, match="accepted no bytes"):
            DiskChunk(b'\x01', path).copy_to(StalledSink())

    def test_readers_are_independent(self, chunk_file):
        path, data = chunk_file
        chunk = DiskChunk(b'\x01', path)

        with chunk.reader() as first, chunk.reader() as second:
            assert first.read(10) == data[:10]
            assert second.read(20) == data[:20]
            assert first.read(5) == data[10:15]

    def test_concurrent_copies(self, chunk_file):
        path, data = chunk_file
        chunk = DiskChunk(b'\x01', path)
        results = []
        lock = threading.Lock()

        def copy():
            sink = io.BytesIO()
            chunk.copy_to(sink, piece_size=1024)
            with lock:
                results.append(sink.getvalue())

        threads = [threading.Thread(target=copy) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [data] * 8

    def test_satisfies_protocol(self, chunk_file):
        path, _ = chunk_file
        assert isinstance(DiskChunk(b'\x01', path), Chunk)


class TestMemoryChunk:
    """Test the in-memory chunk variant."""

    def test_copy_to_and_reader(self):
        chunk = MemoryChunk(b'\x01', b'hello world')
        sink = io.BytesIO()

        assert chunk.copy_to(sink) == 11
        assert sink.getvalue() == b'hello world'
        assert chunk.reader().read() == b'hello world'
        assert len(chunk) == 11

    def test_copy_to_short_writes(self):
        sink = ShortWriteSink(limit=3)

        assert MemoryChunk(b'\x01', b'hello world').copy_to(sink) == 11
        assert bytes(sink.data) == b'hello world'

    def test_data_copied_in(self):
        data = bytearray(b'abc')
        chunk = MemoryChunk(b'\x01', data)
        data[0] = ord('z')

        assert chunk.reader().read() == b'abc'

    def test_none_rejected(self):
        with pytest.raises(TypeError):
            MemoryChunk(None, b'')
        with pytest.raises(TypeError):
            MemoryChunk(b'', None)

    def test_satisfies_protocol(self):
        assert isinstance(MemoryChunk(b'\x01', b''), Chunk)

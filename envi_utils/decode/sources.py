import os
import threading
from typing import Protocol


class ByteRangeReader(Protocol):
    def size(self) -> int: ...

    def read_range(self, start: int, end: int) -> bytes: ...


class FileByteSource:
    """
    Byte-range access to a local binary file.

    The file is opened on first use and all threads share that one handle;
    each seek and read pair runs under a lock.
    """

    def __init__(self, path: str):
        self.path = path
        self._file = None
        self._lock = threading.Lock()

    def _get_file(self):
        if self._file is None:
            self._file = open(self.path, "rb")
        return self._file

    def size(self) -> int:
        return os.path.getsize(self.path)

    def read_range(self, start: int, end: int) -> bytes:
        with self._lock:
            f = self._get_file()
            f.seek(start)
            data = f.read(end - start)
        if len(data) != end - start:
            raise OSError(
                f"Short read from {self.path}: expected {end - start} bytes at offset "
                f"{start}, got {len(data)}"
            )
        return data

    def close(self):
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class BytesSource:
    """In-memory byte-range source, e.g. for data already fetched from elsewhere."""

    def __init__(self, data: bytes):
        self._data = memoryview(bytes(data))

    def size(self) -> int:
        return len(self._data)

    def read_range(self, start: int, end: int) -> bytes:
        if start < 0 or end > len(self._data) or start > end:
            raise OSError(f"Range [{start}, {end}) outside of {len(self._data)} byte buffer")
        return self._data[start:end].tobytes()

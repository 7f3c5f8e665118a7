# ==================================================
# fixed_list/store.py
# ==================================================
from __future__ import annotations

import logging
import os
import struct
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

import numpy as np

from .const import (CURRENT_VERSION, FSYNC, HEADER_SIZE, MAX_CAPACITY, MAX_RECORD_LEN,
                    SCAN_BATCH, SIZE_FIELD_OFFSET, SLOT_SIZE)
from .errors import (AlreadyExistsError, CapacityExceededError, CorruptionError,
                     FixedListError, IndexOutOfRangeError, InvalidArgumentError,
                     InvalidPathError, InvalidStateError, IOFailureError,
                     NotFoundError)
from .layout import Header, Slot, data_start, decode_slots, slot_position

log = logging.getLogger(__name__)

_SIZE = struct.Struct(">i")


@contextmanager
def _io_errors(action: str, path: Path):
    """Surface raw OSErrors as IOFailureError, leaving our own errors alone."""
    try:
        yield
    except FixedListError:
        raise
    except OSError as exc:
        raise IOFailureError(f"{action} {path}: {exc}") from exc


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


class FixedList:
    """Fixed-capacity, append-only list of byte records kept on disk.

    Build one with :meth:`create` (a writer) or :meth:`open` (a reader).
    Every public call holds the instance lock for its duration, since the
    file handle has a single shared position.

    ``size`` is written back to the header on :meth:`close` (or an explicit
    :meth:`flush`), not after each append. A crash before then leaves the
    on-disk size understated: appended records are intact but not counted.
    """
    read_only = True

    def __init__(self, path: Path, handle, capacity: int, size: int):
        self.path = path
        self._f = handle
        self._capacity = capacity
        self._size = size
        self._lock = threading.RLock()
        self._header_dirty = False

    # ------------------------------------------------------------------
    @classmethod
    def create(cls, path: str | os.PathLike, capacity: int) -> "FixedListWriter":
        """Create a new list file with room for ``capacity`` records."""
        if not _is_int(capacity):
            raise InvalidArgumentError(f"capacity must be an integer, got {capacity!r}")
        capacity = int(capacity)
        if capacity <= 0 or capacity > MAX_CAPACITY:
            raise InvalidArgumentError(
                f"capacity must be in 1..{MAX_CAPACITY}, got {capacity}")

        path = Path(path)
        if path.exists():
            raise AlreadyExistsError(f"{path} already exists")
        with _io_errors("cannot create parent directory of", path):
            path.parent.mkdir(parents=True, exist_ok=True)
        try:
            f = open(path, "x+b")
        except FileExistsError as exc:
            raise AlreadyExistsError(f"{path} already exists") from exc
        except OSError as exc:
            raise IOFailureError(f"cannot create {path}: {exc}") from exc

        try:
            f.write(Header(CURRENT_VERSION, capacity, 0).pack())
            # zero-filled index table; the data region starts right after it
            f.truncate(data_start(capacity))
            f.flush()
        except OSError as exc:
            cls._discard(f, path)
            raise IOFailureError(f"cannot initialise {path}: {exc}") from exc
        except BaseException:
            cls._discard(f, path)
            raise

        log.debug("created %s (capacity=%d)", path, capacity)
        return FixedListWriter(path, f, capacity, 0)

    @classmethod
    def open(cls, path: str | os.PathLike) -> "FixedListReader":
        """Open an existing list file read-only."""
        path = Path(path)
        if not path.exists():
            raise NotFoundError(f"{path} does not exist")
        if path.is_dir():
            raise InvalidPathError(f"{path} is a directory, expected a file")
        if not path.is_file():
            raise InvalidPathError(f"{path} is not a regular file")
        try:
            f = open(path, "rb")
        except FileNotFoundError as exc:
            raise NotFoundError(f"{path} does not exist") from exc
        except OSError as exc:
            raise IOFailureError(f"cannot open {path}: {exc}") from exc

        try:
            with _io_errors("cannot read header of", path):
                header = Header.unpack(f.read(HEADER_SIZE))
                file_len = f.seek(0, os.SEEK_END)
            if file_len < data_start(header.capacity):
                raise CorruptionError(
                    f"{path}: index table truncated ({file_len} bytes, "
                    f"need {data_start(header.capacity)} for capacity {header.capacity})")
        except BaseException:
            f.close()
            raise

        log.debug("opened %s (size=%d, capacity=%d)", path, header.size, header.capacity)
        return FixedListReader(path, f, header.capacity, header.size)

    @staticmethod
    def _discard(f, path: Path) -> None:
        f.close()
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        log.warning("removed partially created %s", path)

    # ------------------------------------------------------------------
    @property
    def closed(self) -> bool:
        return self._f is None

    @property
    def size(self) -> int:
        with self._lock:
            self._check_open()
            return self._size

    @property
    def capacity(self) -> int:
        with self._lock:
            self._check_open()
            return self._capacity

    def __len__(self) -> int:
        return self.size

    def __repr__(self):
        if self.closed:
            return f"<{type(self).__name__} {str(self.path)!r} closed>"
        return f"<{type(self).__name__} {str(self.path)!r} {self._size}/{self._capacity}>"

    # ------------------------------------------------------------------
    def append(self, record: bytes) -> int:
        """Append ``record`` and return its index."""
        with self._lock:
            self._check_open()
            self._check_writable()
            if not isinstance(record, (bytes, bytearray, memoryview)):
                raise InvalidArgumentError(
                    f"record must be bytes-like, got {type(record).__name__}")
            record = bytes(record)
            if not record:
                raise InvalidArgumentError("record cannot be empty")
            if self._size >= self._capacity:
                raise CapacityExceededError(
                    f"list is full ({self._capacity} records)")
            if len(record) > MAX_RECORD_LEN:
                raise InvalidArgumentError(f"record too large ({len(record)} bytes)")

            with _io_errors("cannot append to", self.path):
                offset = self._file_len()
                slot = Slot(offset, len(record))
                self._f.seek(slot_position(self._size))
                self._f.write(slot.pack())
                self._f.seek(offset)
                self._f.write(record)
                # the record only counts once its bytes have left the buffer
                self._f.flush()

            index = self._size
            self._size += 1
            self._header_dirty = True
            return index

    def flush(self) -> None:
        """Persist the current size to the header without closing."""
        with self._lock:
            self._check_open()
            self._check_writable()
            with _io_errors("cannot flush", self.path):
                self._flush_header()

    # ------------------------------------------------------------------
    def get(self, index: int) -> bytes:
        with self._lock:
            self._check_open()
            self._check_index(index)
            with _io_errors("cannot read from", self.path):
                slot = self._read_slot(int(index))
                slot.check_bounds(data_start(self._capacity), self._file_len())
                return self._read_exact(slot.offset, slot.length)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self.get(i) for i in range(*index.indices(self.size))]
        return self.get(index)

    def get_all(self) -> List[bytes]:
        """Every record in append order, read with one forward scan."""
        with self._lock:
            self._check_open()
            if self._size == 0:
                return []
            with _io_errors("cannot read from", self.path):
                slots = self._read_slots(0, self._size, self._file_len())
                offsets = slots["offset"].astype(np.int64)
                ends = offsets + slots["length"]
                start, stop = int(offsets.min()), int(ends.max())
                blob = self._read_exact(start, stop - start)
        return [blob[lo - start:hi - start] for lo, hi in zip(offsets.tolist(), ends.tolist())]

    def iterate(self) -> Iterator[bytes]:
        """Lazy cursor over the records present when it was created."""
        with self._lock:
            self._check_open()
            total = self._size
        return self._scan(total)

    __iter__ = iterate

    def _scan(self, total: int) -> Iterator[bytes]:
        for first in range(0, total, SCAN_BATCH):
            count = min(SCAN_BATCH, total - first)
            with self._lock:
                self._check_open()
                with _io_errors("cannot read from", self.path):
                    slots = self._read_slots(first, count, self._file_len())
            for offset, length in zip(slots["offset"].tolist(), slots["length"].tolist()):
                with self._lock:
                    self._check_open()
                    with _io_errors("cannot read from", self.path):
                        record = self._read_exact(offset, length)
                yield record

    # ------------------------------------------------------------------
    def close(self) -> None:
        with self._lock:
            if self._f is None:
                return
            try:
                if not self.read_only:
                    with _io_errors("cannot write header of", self.path):
                        self._flush_header()
            finally:
                self._f.close()
                self._f = None
                log.debug("closed %s (size=%d)", self.path, self._size)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # -- helpers -----------------------------------------------------------
    def _check_open(self) -> None:
        if self._f is None:
            raise InvalidStateError(f"{self.path} is closed")

    def _check_writable(self) -> None:
        if self.read_only:
            raise InvalidStateError(f"{self.path} is open read-only")

    def _check_index(self, index) -> None:
        if not _is_int(index):
            raise InvalidArgumentError(f"index must be an integer, got {index!r}")
        if index < 0 or index >= self._size:
            raise IndexOutOfRangeError(
                f"index {index} out of range for list of size {self._size}")

    def _file_len(self) -> int:
        return self._f.seek(0, os.SEEK_END)

    def _read_exact(self, offset: int, length: int) -> bytes:
        self._f.seek(offset)
        data = self._f.read(length)
        if len(data) != length:
            raise CorruptionError(
                f"short read at offset {offset}: got {len(data)} of {length} bytes")
        return data

    def _read_slot(self, index: int) -> Slot:
        return Slot.unpack(self._read_exact(slot_position(index), SLOT_SIZE))

    def _read_slots(self, first: int, count: int, file_len: int) -> np.ndarray:
        raw = self._read_exact(slot_position(first), count * SLOT_SIZE)
        return decode_slots(raw, first, data_start(self._capacity), file_len)

    def _flush_header(self) -> None:
        if self._header_dirty:
            self._f.seek(SIZE_FIELD_OFFSET)
            self._f.write(_SIZE.pack(self._size))
            self._header_dirty = False
        self._f.flush()
        if FSYNC:
            os.fsync(self._f.fileno())


class FixedListWriter(FixedList):
    """A freshly created list; accepts appends until full."""
    read_only = False


class FixedListReader(FixedList):
    """A list recovered from an existing file; never writable."""
    read_only = True

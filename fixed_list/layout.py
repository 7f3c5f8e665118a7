# ==================================================
# fixed_list/layout.py
# ==================================================
"""Header and index-slot codecs.

    Header      [ version: u64 ][ capacity: i32 ][ size: i32 ]
    IndexTable  capacity × [ offset: u64 ][ length: i32 ]
    DataRegion  raw record bytes, extents given by the index table

Single slots are packed with ``struct``; runs of slots are decoded in one
go through a numpy structured dtype with the same byte layout.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

import numpy as np

from .const import (CURRENT_VERSION, HEADER_FMT, HEADER_SIZE, SLOT_DTYPE,
                    SLOT_FMT, SLOT_SIZE)
from .errors import CorruptionError, VersionMismatchError

_HEADER = struct.Struct(HEADER_FMT)
_SLOT = struct.Struct(SLOT_FMT)
_SLOT_NP = np.dtype(SLOT_DTYPE)


@dataclass(frozen=True)
class Header:
    version: int
    capacity: int
    size: int

    def __post_init__(self):
        if self.capacity <= 0:
            raise CorruptionError(f"capacity must be positive, got {self.capacity}")
        if self.size < 0:
            raise CorruptionError(f"size cannot be negative, got {self.size}")
        if self.size > self.capacity:
            raise CorruptionError(
                f"size {self.size} exceeds capacity {self.capacity}; possible data corruption")

    def pack(self) -> bytes:
        return _HEADER.pack(self.version, self.capacity, self.size)

    @classmethod
    def unpack(cls, data: bytes) -> "Header":
        """Decode a header read from disk, refusing unknown versions."""
        if len(data) < HEADER_SIZE:
            raise CorruptionError(
                f"truncated header: {len(data)} of {HEADER_SIZE} bytes")
        version, capacity, size = _HEADER.unpack_from(data, 0)
        if version != CURRENT_VERSION:
            raise VersionMismatchError(
                f"unsupported format version {version} (expected {CURRENT_VERSION})")
        return cls(version, capacity, size)


@dataclass(frozen=True)
class Slot:
    """Location of one record in the data region."""
    offset: int
    length: int

    def __post_init__(self):
        if self.offset <= 0:
            raise CorruptionError(f"invalid offset {self.offset}; possible data corruption")
        if self.length <= 0:
            raise CorruptionError(f"invalid length {self.length}; possible data corruption")

    @property
    def end(self) -> int:
        return self.offset + self.length

    def check_bounds(self, region_start: int, file_len: int) -> None:
        if self.offset < region_start:
            raise CorruptionError(
                f"record offset {self.offset} points inside the header or index table "
                f"(data region starts at {region_start})")
        if self.end > file_len:
            raise CorruptionError(
                f"record [{self.offset}, {self.end}) runs past end of file ({file_len} bytes)")

    def pack(self) -> bytes:
        return _SLOT.pack(self.offset, self.length)

    @classmethod
    def unpack(cls, data: bytes) -> "Slot":
        if len(data) < SLOT_SIZE:
            raise CorruptionError(f"truncated index slot: {len(data)} of {SLOT_SIZE} bytes")
        return cls(*_SLOT.unpack_from(data, 0))


# ── position arithmetic ───────────────────────────────────────
def slot_position(index: int) -> int:
    return HEADER_SIZE + index * SLOT_SIZE


def data_start(capacity: int) -> int:
    """First byte of the data region for a list of ``capacity`` slots."""
    return HEADER_SIZE + capacity * SLOT_SIZE


# ── bulk slot decoding ────────────────────────────────────────
def decode_slots(data: bytes, first_index: int, region_start: int, file_len: int) -> np.ndarray:
    """Decode and validate a run of slots starting at ``first_index``.

    Every extent must lie inside ``[region_start, file_len)``. Returns a
    structured array with ``offset`` and ``length`` fields.
    Raises CorruptionError naming the first offending slot.
    """
    count = len(data) // SLOT_SIZE
    if count * SLOT_SIZE != len(data):
        raise CorruptionError(f"truncated index table at slot {first_index + count}")
    slots = np.frombuffer(data, dtype=_SLOT_NP, count=count)
    offsets = slots["offset"].astype(np.int64)
    lengths = slots["length"].astype(np.int64)
    bad = (offsets < region_start) | (lengths <= 0) | (offsets + lengths > file_len)
    if bad.any():
        i = int(np.argmax(bad))
        raise CorruptionError(
            f"slot {first_index + i} holds invalid extent "
            f"(offset={int(slots['offset'][i])}, length={int(lengths[i])}, "
            f"file length={file_len}); possible data corruption")
    return slots

"""
Header / slot codec tests.
"""

import struct

import pytest

from fixed_list.const import CURRENT_VERSION, HEADER_SIZE, SLOT_SIZE
from fixed_list.errors import CorruptionError, VersionMismatchError
from fixed_list.layout import Header, Slot, data_start, decode_slots, slot_position


class TestHeader:

    def test_pack_is_big_endian(self):
        raw = Header(CURRENT_VERSION, 3, 1).pack()
        assert len(raw) == HEADER_SIZE == 16
        assert raw == struct.pack(">Q", CURRENT_VERSION) + b"\x00\x00\x00\x03\x00\x00\x00\x01"

    def test_unpack(self):
        header = Header.unpack(struct.pack(">Qii", CURRENT_VERSION, 10, 4))
        assert header == Header(CURRENT_VERSION, 10, 4)

    def test_unknown_version(self):
        with pytest.raises(VersionMismatchError):
            Header.unpack(struct.pack(">Qii", 7, 10, 4))

    @pytest.mark.parametrize("capacity,size", [(0, 0), (-1, 0), (3, -1), (3, 4)])
    def test_invariants(self, capacity, size):
        with pytest.raises(CorruptionError):
            Header.unpack(struct.pack(">Qii", CURRENT_VERSION, capacity, size))

    def test_truncated(self):
        with pytest.raises(CorruptionError):
            Header.unpack(b"\x00" * 10)


class TestSlot:

    def test_pack(self):
        slot = Slot(64, 5)
        assert slot.pack() == struct.pack(">Qi", 64, 5)
        assert len(slot.pack()) == SLOT_SIZE == 12
        assert slot.end == 69

    @pytest.mark.parametrize("offset,length", [(0, 5), (10, 0), (10, -3)])
    def test_rejects_non_positive(self, offset, length):
        with pytest.raises(CorruptionError):
            Slot(offset, length)

    def test_bounds(self):
        Slot(10, 5).check_bounds(10, 15)
        with pytest.raises(CorruptionError):
            Slot(10, 5).check_bounds(10, 14)

    def test_offset_inside_metadata(self):
        with pytest.raises(CorruptionError, match="header or index table"):
            Slot(1, 5).check_bounds(HEADER_SIZE + SLOT_SIZE, 100)

    def test_positions(self):
        assert slot_position(0) == HEADER_SIZE
        assert slot_position(3) == HEADER_SIZE + 3 * SLOT_SIZE
        assert data_start(4) == HEADER_SIZE + 4 * SLOT_SIZE


class TestDecodeSlots:

    def test_decodes_run(self):
        raw = struct.pack(">Qi", 100, 3) + struct.pack(">Qi", 103, 7)
        slots = decode_slots(raw, 0, 100, 110)
        assert slots["offset"].tolist() == [100, 103]
        assert slots["length"].tolist() == [3, 7]
        assert slots.dtype.itemsize == SLOT_SIZE

    def test_names_first_bad_slot(self):
        raw = struct.pack(">Qi", 100, 3) + struct.pack(">Qi", 0, 0)
        with pytest.raises(CorruptionError, match="slot 6"):
            decode_slots(raw, 5, 100, 200)

    def test_offset_before_data_region(self):
        raw = struct.pack(">Qi", 100, 3) + struct.pack(">Qi", 20, 3)
        with pytest.raises(CorruptionError, match="slot 1"):
            decode_slots(raw, 0, 40, 200)

    def test_past_end(self):
        with pytest.raises(CorruptionError):
            decode_slots(struct.pack(">Qi", 100, 50), 0, 100, 120)

    def test_huge_offset_is_rejected(self):
        raw = struct.pack(">Qi", 2 ** 64 - 1, 1)
        with pytest.raises(CorruptionError):
            decode_slots(raw, 0, 16, 1000)

    def test_ragged_buffer(self):
        with pytest.raises(CorruptionError):
            decode_slots(b"\x00" * (SLOT_SIZE + 1), 0, 16, 100)


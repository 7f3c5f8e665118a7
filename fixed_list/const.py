# ==================================================
# fixed_list/const.py
# ==================================================
import os
import struct

# ── on-disk layout (big-endian, network byte order) ───────────
HEADER_FMT = ">Qii"       # version (u64), capacity (i32), size (i32)
HEADER_SIZE = struct.calcsize(HEADER_FMT)      # 16 bytes
SIZE_FIELD_OFFSET = 8 + 4                      # size lives after version + capacity
SLOT_FMT = ">Qi"          # offset of record in data region (u64), length (i32)
SLOT_SIZE = struct.calcsize(SLOT_FMT)          # 12 bytes
SLOT_DTYPE = [("offset", ">u8"), ("length", ">i4")]   # numpy view of one slot

# version 0: record length is kept only in the index table, never inline
CURRENT_VERSION = 0
MAX_CAPACITY = 2 ** 31 - 1
MAX_RECORD_LEN = 2 ** 31 - 1     # length field is a signed 32-bit int

# ── configuration ─────────────────────────────────────────────
SCAN_BATCH = int(os.getenv("FIXED_LIST_SCAN_BATCH", "1024"))
FSYNC = os.getenv("FIXED_LIST_FSYNC", "1") not in ("0", "false", "no")

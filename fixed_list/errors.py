# ==================================================
# fixed_list/errors.py
# ==================================================
"""Error taxonomy for fixed lists.

Every error derives from :class:`FixedListError`; where a builtin exception
means the same thing it is mixed in too, so ``except FileExistsError`` or
``except IndexError`` keep working for callers that do not know this module.
"""


class FixedListError(Exception):
    """Base class of every error raised by fixed_list."""


class AlreadyExistsError(FixedListError, FileExistsError):
    """create() target path is already occupied."""


class NotFoundError(FixedListError, FileNotFoundError):
    """open() target path does not exist."""


class InvalidPathError(FixedListError, ValueError):
    """open() target is a directory or not a regular file."""


class VersionMismatchError(FixedListError):
    """On-disk format version is not one this module can read."""


class CorruptionError(FixedListError):
    """A header or index slot violates the layout invariants."""


class CapacityExceededError(FixedListError):
    """append() on a list whose size already equals its capacity."""


class InvalidArgumentError(FixedListError, ValueError):
    """Empty record, bad capacity, or a non-integer index."""


class IndexOutOfRangeError(FixedListError, IndexError):
    pass


class InvalidStateError(FixedListError, RuntimeError):
    """Operation on a closed list, or a write on a reader."""


class IOFailureError(FixedListError, OSError):
    """Underlying storage I/O failed; the original OSError is chained."""

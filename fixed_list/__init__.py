import logging

from .store import FixedList, FixedListReader, FixedListWriter
from .errors import (AlreadyExistsError, CapacityExceededError, CorruptionError,
                     FixedListError, IndexOutOfRangeError, InvalidArgumentError,
                     InvalidPathError, InvalidStateError, IOFailureError,
                     NotFoundError, VersionMismatchError)

create = FixedList.create
open_list = FixedList.open

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "FixedList", "FixedListReader", "FixedListWriter", "create", "open_list",
    "FixedListError", "AlreadyExistsError", "NotFoundError", "InvalidPathError",
    "VersionMismatchError", "CorruptionError", "CapacityExceededError",
    "InvalidArgumentError", "IndexOutOfRangeError", "InvalidStateError",
    "IOFailureError",
]

# src/text2gds/gds_struct.py
from __future__ import annotations

import struct
from typing import Sequence

import numpy as np

from .constants import INT32_MIN, INT32_MAX
from .exceptions import InvalidCoordinate

# --------------------------------------------------------------------------- #
# GDSII Big-Endian Struct Definitions
# --------------------------------------------------------------------------- #

INT32 = struct.Struct(">i")
UINT16 = struct.Struct(">H")
RECORD_HEADER = struct.Struct(">HBB")  # byte count, record type, data type

_BE_INT32 = np.dtype(">i4")


def encode32(value: int) -> bytes:
    """Big-endian two's complement of a signed 32-bit integer."""
    if not INT32_MIN <= value <= INT32_MAX:
        raise InvalidCoordinate(value)
    return INT32.pack(value)


def decode32(data: bytes, offset: int = 0) -> int:
    return INT32.unpack_from(data, offset)[0]


def encode_coordinates(coords: Sequence[int]) -> bytes:
    """
    Encode a whole coordinate list at once.

    Same bytes as joining ``encode32`` over *coords*.
    """
    if len(coords) == 0:
        return b""
    try:
        arr = np.asarray(coords, dtype=np.int64)
    except OverflowError:
        raise InvalidCoordinate(next(c for c in coords if not INT32_MIN <= c <= INT32_MAX)) from None
    out_of_range = (arr < INT32_MIN) | (arr > INT32_MAX)
    if out_of_range.any():
        raise InvalidCoordinate(int(arr[out_of_range][0]))
    return arr.astype(_BE_INT32).tobytes()


def decode_coordinates(payload: bytes) -> tuple[int, ...]:
    return tuple(int(v) for v in np.frombuffer(payload, dtype=_BE_INT32))

# src/text2gds/encoder.py
from typing import Optional, Sequence, Tuple

from .constants import (
    MAX_USHORT, RECORD_HEADER_SIZE, COORD_SIZE, MAX_VERTEX_PAIRS,
    LAYER, DATATYPE, XY, INT2, INT4,
    BOUNDARY_RECORD, ENDEL_RECORD,
)
from .exceptions import EmptyPolygon, EncodingOverflow, InvalidCoordinate, OddCoordinateCount, TooManyVertices
from .gds_struct import RECORD_HEADER, UINT16, encode_coordinates

"""
encoder.py — GDSII record framing and BOUNDARY element blocks.
"""

# ────────────────────────────────────────────────────────────────
# Record Framing
# ────────────────────────────────────────────────────────────────

def frame_record(record_type: int, data_type: int, payload: bytes = b"") -> bytes:
    """
    Wraps *payload* into a record: 2-byte byte count (header included),
    record type, data type, payload.
    """
    byte_count = RECORD_HEADER_SIZE + len(payload)
    if byte_count > MAX_USHORT or byte_count % 2:
        raise EncodingOverflow(byte_count)
    return RECORD_HEADER.pack(byte_count, record_type, data_type) + payload


def frame_xy(coords: Sequence[int]) -> bytes:
    """
    XY record (tag 0x10 0x03): ``4 + 4 * len(coords)`` bytes.
    """
    byte_count = RECORD_HEADER_SIZE + COORD_SIZE * len(coords)
    if byte_count > MAX_USHORT:
        # checked before encoding so huge lists fail fast
        raise EncodingOverflow(byte_count)
    return frame_record(XY, INT4, encode_coordinates(coords))


# ────────────────────────────────────────────────────────────────
# Boundary Elements
# ────────────────────────────────────────────────────────────────

def close_boundary(coords: Sequence[int]) -> Tuple[int, ...]:
    """
    Append the first x,y pair to the end of *coords*.

    The pair is appended unconditionally, so an input that is already closed
    ends up with a zero-length closing edge.
    """
    if len(coords) % 2:
        raise OddCoordinateCount(len(coords))
    closed = tuple(coords)
    return closed + closed[:2]


def boundary_open(layer: int = 0, datatype: int = 0) -> bytes:
    """BOUNDARY + LAYER + DATATYPE, 16 bytes; the layer low byte sits at offset 9."""
    if not 0 <= layer <= MAX_USHORT:
        raise ValueError(f"Layer {layer} does not fit a 16-bit field")
    if not 0 <= datatype <= MAX_USHORT:
        raise ValueError(f"Datatype {datatype} does not fit a 16-bit field")
    return (
        BOUNDARY_RECORD
        + frame_record(LAYER, INT2, UINT16.pack(layer))
        + frame_record(DATATYPE, INT2, UINT16.pack(datatype))
    )


def build_block(
    vertices: Sequence[int],
    layer: int = 0,
    *,
    datatype: int = 0,
    line_number: Optional[int] = None,
) -> bytes:
    """
    Encodes one closed polygon into a complete BOUNDARY element.

    *vertices* must already be closed (see ``close_boundary``) and non-empty.
    The block is built entirely in memory so a rejected polygon never reaches
    the sink.
    """
    count = len(vertices)
    if count == 0:
        raise EmptyPolygon(line_number=line_number)
    if count % 2:
        raise OddCoordinateCount(count, line_number=line_number)

    pairs = count // 2
    if pairs > MAX_VERTEX_PAIRS:
        raise TooManyVertices(pairs, MAX_VERTEX_PAIRS, line_number=line_number)

    try:
        xy = frame_xy(vertices)
    except (EncodingOverflow, InvalidCoordinate) as e:
        e.line_number = line_number
        raise

    return boundary_open(layer, datatype) + xy + ENDEL_RECORD

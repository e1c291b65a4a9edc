"""
Reads a GDSII stream back record by record and checks what the converter
promises: exact preamble/postamble, well-framed records, closed boundaries
within the vertex cap.

Usage: text2gds-validate out.gds [--dump]
"""
from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .constants import (
    RECORD_HEADER_SIZE, RECORD_NAMES, MAX_VERTEX_PAIRS,
    LIBRARY_PREAMBLE, LIBRARY_POSTAMBLE,
    UNITS, BOUNDARY, LAYER, DATATYPE, XY, ENDEL,
)
from .exceptions import MalformedStream
from .gds_struct import RECORD_HEADER, UINT16, decode_coordinates

log = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# RECORD READER
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Record:
    offset: int
    record_type: int
    data_type: int
    payload: bytes

    @property
    def name(self) -> str:
        return RECORD_NAMES.get(self.record_type, f"0x{self.record_type:02X}")

    @property
    def size(self) -> int:
        return RECORD_HEADER_SIZE + len(self.payload)


def iter_records(data: bytes) -> Iterator[Record]:
    """Walks *data* record by record, raising ``MalformedStream`` on bad framing."""
    view = memoryview(data)
    offset = 0
    while offset < len(view):
        if offset + RECORD_HEADER_SIZE > len(view):
            raise MalformedStream(offset, "truncated record header")
        byte_count, record_type, data_type = RECORD_HEADER.unpack_from(view, offset)
        if byte_count < RECORD_HEADER_SIZE:
            raise MalformedStream(offset, f"byte count {byte_count} is shorter than the header")
        if byte_count % 2:
            raise MalformedStream(offset, f"odd byte count {byte_count}")
        if offset + byte_count > len(view):
            raise MalformedStream(offset, f"byte count {byte_count} runs past end of data")
        yield Record(offset, record_type, data_type, bytes(view[offset + RECORD_HEADER_SIZE:offset + byte_count]))
        offset += byte_count


def decode_real8(data: bytes) -> float:
    """GDSII 8-byte real: sign bit, excess-64 base-16 exponent, 56-bit mantissa."""
    if len(data) != 8:
        raise ValueError(f"REAL8 needs 8 bytes, got {len(data)}")
    sign = -1.0 if data[0] & 0x80 else 1.0
    exponent = (data[0] & 0x7F) - 64
    mantissa = int.from_bytes(data[1:], "big")
    return sign * mantissa / (1 << 56) * 16.0 ** exponent


# -----------------------------------------------------------------------------
# BOUNDARIES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Boundary:
    layer: int
    datatype: int
    coords: Tuple[int, ...]

    @property
    def vertex_pairs(self) -> int:
        return len(self.coords) // 2

    @property
    def is_closed(self) -> bool:
        return len(self.coords) >= 2 and self.coords[:2] == self.coords[-2:]


def read_boundaries(data: bytes) -> List[Boundary]:
    """Collects every BOUNDARY element in stream order."""
    boundaries: List[Boundary] = []
    current: Optional[dict] = None
    for rec in iter_records(data):
        if rec.record_type == BOUNDARY:
            current = {"layer": 0, "datatype": 0, "coords": ()}
        elif current is None:
            continue
        elif rec.record_type in (LAYER, DATATYPE):
            if len(rec.payload) != 2:
                raise MalformedStream(rec.offset, f"{rec.name} payload is {len(rec.payload)} bytes, expected 2")
            key = "layer" if rec.record_type == LAYER else "datatype"
            current[key] = UINT16.unpack(rec.payload)[0]
        elif rec.record_type == XY:
            if len(rec.payload) % 4:
                raise MalformedStream(rec.offset, "XY payload is not a whole number of coordinates")
            current["coords"] = decode_coordinates(rec.payload)
        elif rec.record_type == ENDEL:
            boundaries.append(Boundary(**current))
            current = None
    return boundaries


# -----------------------------------------------------------------------------
# STREAM VALIDATION
# -----------------------------------------------------------------------------

@dataclass
class StreamReport:
    size: int = 0
    record_count: int = 0
    boundary_count: int = 0
    user_unit: Optional[float] = None
    meters_per_unit: Optional[float] = None
    problems: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


def validate_stream(data: bytes, *, progress: bool = False) -> StreamReport:
    report = StreamReport(size=len(data))

    if not data.startswith(LIBRARY_PREAMBLE):
        report.problems.append("stream does not start with the library preamble")
    if not data.endswith(LIBRARY_POSTAMBLE):
        report.problems.append("stream does not end with the library postamble")

    try:
        with tqdm(total=len(data), unit="B", unit_scale=True, desc="Checking records", disable=not progress) as pbar:
            for rec in iter_records(data):
                report.record_count += 1
                pbar.update(rec.size)
                if rec.record_type == UNITS and len(rec.payload) == 16:
                    report.user_unit = decode_real8(rec.payload[:8])
                    report.meters_per_unit = decode_real8(rec.payload[8:])
    except MalformedStream as e:
        report.problems.append(str(e))
        return report

    try:
        boundaries = read_boundaries(data)
    except MalformedStream as e:
        report.problems.append(str(e))
        return report

    for index, boundary in enumerate(boundaries, start=1):
        report.boundary_count += 1
        if not boundary.is_closed:
            report.problems.append(f"boundary {index} is not closed")
        if boundary.vertex_pairs > MAX_VERTEX_PAIRS:
            report.problems.append(
                f"boundary {index} has {boundary.vertex_pairs} vertices, MAX = {MAX_VERTEX_PAIRS}"
            )
    return report


def cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate a GDSII stream written by text2gds.")
    parser.add_argument("gds", type=pathlib.Path)
    parser.add_argument("--dump", action="store_true", help="list every record")
    parser.add_argument("--progress", action="store_true")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        data = args.gds.read_bytes()
    except OSError as e:
        log.error("[FAIL] cannot read %s: %s", args.gds, e.strerror or e)
        return 2

    if args.dump:
        try:
            for rec in iter_records(data):
                log.info("0x%06X %-9s len=%d", rec.offset, rec.name, rec.size)
        except MalformedStream as e:
            log.error("[FAIL] %s", e)

    report = validate_stream(data, progress=args.progress)
    log.info("[INFO] %s: %d bytes, %d records, %d boundaries", args.gds, report.size, report.record_count, report.boundary_count)
    if report.user_unit is not None:
        log.info("[INFO] units: %g user, %g m per database unit", report.user_unit, report.meters_per_unit)
    for problem in report.problems:
        log.error("[FAIL] %s", problem)
    if report.ok:
        log.info("[OK] %s is a valid stream", args.gds)
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(cli())

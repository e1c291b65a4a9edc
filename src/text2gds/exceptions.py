"""Error taxonomy for text-to-GDSII conversion.

Every error raised by the package derives from ``Text2GdsError`` and
optionally carries the 1-based input line it refers to, so the CLI and
tests can report or assert on it without parsing messages.

- ``SinkUnavailable`` / ``SourceUnavailable``: output or input cannot be opened.
- ``OddCoordinateCount`` / ``TooManyVertices`` / ``InvalidCoordinate`` / ``EmptyPolygon``:
  a single polygon line is unusable.
- ``EncodingOverflow``: a record would not fit its 16-bit length field.
- ``InvalidState``: the stream writer was driven out of order.
- ``MalformedStream``: a GDSII stream could not be walked record by record.
- ``ConversionFailed``: aggregate of per-line errors raised by ``convert``.
"""

from __future__ import annotations

from typing import Optional, Sequence


class Text2GdsError(Exception):
    """Base exception for all conversion errors.

    Attributes:
        message: Human-readable description.
        line_number: Input line the error refers to, when known.
    """

    def __init__(self, message: str = "", *, line_number: Optional[int] = None) -> None:
        self.message = message
        self.line_number = line_number
        super().__init__(message)

    def __str__(self) -> str:
        if self.line_number is not None:
            return f"line {self.line_number}: {self.message}"
        return self.message


class SinkUnavailable(Text2GdsError):
    """Output path could not be opened for writing."""

    def __init__(self, path, reason: str = "") -> None:
        self.path = path
        msg = f"cannot open output {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class SourceUnavailable(Text2GdsError):
    """Input path could not be opened for reading."""

    def __init__(self, path, reason: str = "") -> None:
        self.path = path
        msg = f"cannot find file: {path}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class OddCoordinateCount(Text2GdsError):
    def __init__(self, count: int, *, line_number: Optional[int] = None) -> None:
        self.count = count
        super().__init__(
            f"{count} coordinates is not an even number of coordinates",
            line_number=line_number,
        )


class TooManyVertices(Text2GdsError):
    def __init__(self, pairs: int, limit: int, *, line_number: Optional[int] = None) -> None:
        self.pairs = pairs
        self.limit = limit
        super().__init__(
            f"shape has {pairs} coordinate pairs, MAX = {limit}",
            line_number=line_number,
        )


class EmptyPolygon(Text2GdsError):
    """A row holds delimiters but no coordinates."""

    def __init__(self, *, line_number: Optional[int] = None) -> None:
        super().__init__("row has no coordinates", line_number=line_number)


class InvalidCoordinate(Text2GdsError):
    """A token is not a decimal integer or does not fit a signed 32-bit field."""

    def __init__(self, token, *, line_number: Optional[int] = None) -> None:
        self.token = token
        super().__init__(f"invalid coordinate {token!r}", line_number=line_number)


class EncodingOverflow(Text2GdsError):
    """Record byte count does not fit (or is not valid for) the 16-bit length field."""

    def __init__(self, byte_count: int, *, line_number: Optional[int] = None) -> None:
        self.byte_count = byte_count
        super().__init__(
            f"record byte count {byte_count} is odd or exceeds 65535",
            line_number=line_number,
        )


class InvalidState(Text2GdsError):
    def __init__(self, state, operation: str) -> None:
        self.state = state
        self.operation = operation
        super().__init__(f"cannot {operation} a stream in state {getattr(state, 'name', state)}")


class MalformedStream(Text2GdsError):
    def __init__(self, offset: int, reason: str) -> None:
        self.offset = offset
        super().__init__(f"malformed record at 0x{offset:X}: {reason}")


class ConversionFailed(Text2GdsError):
    """One or more input lines were rejected; the output was discarded.

    Attributes:
        errors: The per-line errors, in input order.
        polygons_written: Blocks accepted before the first error.
    """

    def __init__(self, errors: Sequence[Text2GdsError], polygons_written: int) -> None:
        self.errors = list(errors)
        self.polygons_written = polygons_written
        first = self.errors[0] if self.errors else None
        msg = f"{len(self.errors)} invalid line(s)"
        if first is not None:
            msg += f", first: {first}"
        super().__init__(msg)

    @property
    def line_numbers(self) -> list[int]:
        return [e.line_number for e in self.errors if e.line_number is not None]

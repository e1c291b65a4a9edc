# src/text2gds/writer.py
import enum
import logging
import os
import pathlib
from typing import BinaryIO, Optional, Union

from .constants import LIBRARY_PREAMBLE, LIBRARY_POSTAMBLE
from .exceptions import InvalidState, SinkUnavailable

log = logging.getLogger(__name__)

PART_SUFFIX = ".part"


class WriterState(enum.Enum):
    UNOPENED = "unopened"
    PREAMBLED = "preambled"
    WRITING = "writing"
    CLOSED = "closed"


class StreamWriter:
    """
    Sole owner of a GDSII output sink.

    Writes the library preamble on ``open``, BOUNDARY blocks in call order,
    and the postamble on ``close``. For a path target with ``atomic=True``
    the bytes go to ``<target>.part`` and are renamed into place only once the
    postamble is written, so a failed run never leaves a file at *target*.
    A caller-owned binary stream may be passed instead of a path; it is
    written to but never closed.
    """

    def __init__(self, target: Union[str, os.PathLike, BinaryIO], *, atomic: bool = True):
        if hasattr(target, "write"):
            self.path: Optional[pathlib.Path] = None
            self._stream: Optional[BinaryIO] = target
            self._owns_stream = False
        else:
            self.path = pathlib.Path(target)
            self._stream = None
            self._owns_stream = True
        self.atomic = atomic and self.path is not None
        self.state = WriterState.UNOPENED
        self.polygons_written = 0
        self.bytes_written = 0
        self._created = False

    @property
    def part_path(self) -> Optional[pathlib.Path]:
        if self.path is None:
            return None
        if not self.atomic:
            return self.path
        return self.path.with_name(self.path.name + PART_SUFFIX)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def open(self) -> "StreamWriter":
        self._require("open", WriterState.UNOPENED)
        if self._owns_stream:
            if self.path.is_dir():
                self.state = WriterState.CLOSED
                raise SinkUnavailable(self.path, "is a directory")
            try:
                self._stream = open(self.part_path, "wb")
                self._created = True
            except OSError as e:
                self.state = WriterState.CLOSED
                raise SinkUnavailable(self.path, e.strerror or str(e)) from e
            log.debug("Opened %s", self.part_path)
        self._write(LIBRARY_PREAMBLE)
        self.state = WriterState.PREAMBLED
        return self

    def write_polygon(self, block: bytes) -> None:
        self._require("write to", WriterState.PREAMBLED, WriterState.WRITING)
        self._write(block)
        self.polygons_written += 1
        self.state = WriterState.WRITING

    def close(self) -> None:
        self._require("close", WriterState.PREAMBLED, WriterState.WRITING)
        self._write(LIBRARY_POSTAMBLE)
        try:
            self._release()
        except OSError:
            # buffered data is flushed here, so a full disk usually fails now
            self.abort()
            raise
        if self.atomic:
            try:
                os.replace(self.part_path, self.path)
            except OSError as e:
                self.abort()
                raise SinkUnavailable(self.path, e.strerror or str(e)) from e
        self.state = WriterState.CLOSED
        log.debug("Closed stream: %d polygons, %d bytes", self.polygons_written, self.bytes_written)

    def abort(self) -> None:
        """Drop the stream without a postamble and delete any partial file."""
        if self.state is WriterState.CLOSED:
            return
        self.state = WriterState.CLOSED
        try:
            self._release()
        except OSError as e:
            log.warning("Error closing discarded output %s: %s", self.part_path, e)
        if self._created:
            part = self.part_path
            if part.exists():
                part.unlink()
                log.debug("Discarded partial output %s", part)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _require(self, operation: str, *states: WriterState) -> None:
        if self.state not in states:
            raise InvalidState(self.state, operation)

    def _write(self, data: bytes) -> None:
        try:
            self._stream.write(data)
        except OSError:
            # the format needs a postamble; a half-written stream is useless
            self.abort()
            raise
        self.bytes_written += len(data)

    def _release(self) -> None:
        stream, self._stream = self._stream, None
        if self._owns_stream and stream is not None:
            stream.close()

    def __enter__(self) -> "StreamWriter":
        if self.state is WriterState.UNOPENED:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

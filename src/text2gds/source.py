from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator, Optional, Tuple, Union

from .constants import INT32_MIN, INT32_MAX
from .exceptions import InvalidCoordinate, SourceUnavailable

LOG = logging.getLogger(__name__)

# ────────────────────────────────────────────────────────────────
# Line parsing
# ────────────────────────────────────────────────────────────────

DELIMITER = ","
_INTEGER = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class SourceLine:
    line_number: int
    coords: Tuple[int, ...]


def parse_line(text: str, line_number: Optional[int] = None) -> Tuple[int, ...]:
    """
    Split one CSV row ``x1,y1,x2,y2,...`` into integers.

    Tokens must be plain decimal integers with an optional minus sign; no
    whitespace, ``+`` or ``_``. Empty tokens are skipped, so ``1,2,3,4,``
    parses like ``1,2,3,4``.
    """
    coords = []
    for token in text.rstrip("\r\n").split(DELIMITER):
        if not token:
            continue
        if not _INTEGER.fullmatch(token):
            raise InvalidCoordinate(token, line_number=line_number)
        value = int(token)
        if not INT32_MIN <= value <= INT32_MAX:
            raise InvalidCoordinate(token, line_number=line_number)
        coords.append(value)
    return tuple(coords)


# ────────────────────────────────────────────────────────────────
# Polygon source
# ────────────────────────────────────────────────────────────────

class PolygonSource:
    """
    Lazy reader of polygon rows, one ``SourceLine`` per non-blank line.

    Line numbers count every physical line, blank ones included, so they
    match what an editor shows. ``rewind`` restarts the sequence.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._fp: Optional[IO[str]] = None

    def open(self) -> "PolygonSource":
        try:
            self._fp = open(self.path, "r", encoding="utf-8", errors="replace", newline="")
        except OSError as e:
            raise SourceUnavailable(self.path, e.strerror or str(e)) from e
        LOG.debug("Reading polygons from %s", self.path)
        return self

    def close(self) -> None:
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def rewind(self) -> None:
        if self._fp is None:
            self.open()
        else:
            self._fp.seek(0)

    def iter_lines(self) -> Iterator[Tuple[int, str]]:
        """Raw ``(line_number, text)`` pairs for non-blank lines, unparsed."""
        if self._fp is None:
            self.open()
        for line_number, text in enumerate(self._fp, start=1):
            if not text.strip():
                LOG.debug("Skipping blank line %d", line_number)
                continue
            yield line_number, text

    def __iter__(self) -> Iterator[SourceLine]:
        for line_number, text in self.iter_lines():
            yield SourceLine(line_number, parse_line(text, line_number))

    def __enter__(self) -> "PolygonSource":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

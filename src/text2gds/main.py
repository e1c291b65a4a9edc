#!/usr/bin/env python3
"""
CLI for converting CSV polygon lists into a GDSII stream.

Input: one polygon per line, ``x1,y1,x2,y2,...`` as integers without
whitespace. Boundaries must not be closed in the input; the first vertex is
appended to every row. Polygons are written as BOUNDARY elements of a single
structure, in input order.
"""
import argparse
import logging
import pathlib
import sys
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import List, Optional, Sequence

from tqdm import tqdm

from .encoder import build_block, close_boundary
from .exceptions import (
    ConversionFailed,
    SinkUnavailable,
    SourceUnavailable,
    Text2GdsError,
)
from .source import PolygonSource, parse_line
from .writer import StreamWriter

log = logging.getLogger(__name__)

# ============================================================================
# OPTIONS & RESULT
# ============================================================================

@dataclass(frozen=True)
class ConversionOptions:
    layer: int = 0
    datatype: int = 0
    echo_coordinates: bool = False
    fail_fast: bool = False       # stop at the first bad line instead of reporting all
    progress: bool = False
    report_every: int = 500


@dataclass
class ConversionResult:
    output_path: pathlib.Path
    lines_read: int
    polygons_written: int
    bytes_written: int


# ============================================================================
# CONVERSION
# ============================================================================

def convert(input_path, output_path, options: Optional[ConversionOptions] = None) -> ConversionResult:
    """
    Convert a CSV polygon file into a GDSII stream at *output_path*.

    Each row is parsed, closed and encoded in memory before it reaches the
    writer. After the first rejected row nothing else is written; with
    ``fail_fast`` processing stops there, otherwise the remaining rows are
    still checked so every bad line is reported. On failure the output is
    discarded and ``ConversionFailed`` is raised.
    """
    opts = options or ConversionOptions()
    output_path = pathlib.Path(output_path)
    errors: List[Text2GdsError] = []
    lines_read = 0

    with PolygonSource(input_path) as source, StreamWriter(output_path) as writer:
        with tqdm(source.iter_lines(), desc="Shapes", unit="shape", disable=not opts.progress) as rows:
            for line_number, text in rows:
                lines_read += 1
                try:
                    coords = close_boundary(parse_line(text, line_number))
                    block = build_block(coords, opts.layer, datatype=opts.datatype, line_number=line_number)
                except Text2GdsError as e:
                    if e.line_number is None:
                        e.line_number = line_number
                    log.error("ERROR: %s", e)
                    errors.append(e)
                    if opts.fail_fast:
                        break
                    continue

                if errors:
                    continue

                if opts.echo_coordinates:
                    log.info("Writing shape %d with %d coordinates", line_number, len(coords) // 2)
                writer.write_polygon(block)

                if opts.report_every and lines_read % opts.report_every == 0:
                    log.info("Parsed and processed %d lines", lines_read)

        if errors:
            # leaving the block aborts the writer, so nothing lands at output_path
            raise ConversionFailed(errors, writer.polygons_written)

    log.info("Successfully wrote %d shapes to %s", writer.polygons_written, output_path)
    return ConversionResult(output_path, lines_read, writer.polygons_written, writer.bytes_written)


# ============================================================================
# CLI
# ============================================================================

def init_logging(verbose: bool, log_file: Optional[pathlib.Path] = None):
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    formatter = logging.Formatter("[%(asctime)s][%(levelname)s] %(message)s")
    ch.setFormatter(formatter)
    logger.addHandler(ch)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=3)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert CSV polygon vertex lists to a GDSII stream.")
    parser.add_argument("input", type=pathlib.Path, help="CSV file, one polygon per line")
    parser.add_argument("output", type=pathlib.Path, help="GDSII file to write")
    parser.add_argument("--echo-coordinates", "-echoCoords", dest="echo_coordinates", action="store_true",
                        help="log the vertex count of every shape")
    parser.add_argument("--layer", type=int, default=0, help="GDSII layer number (default 0)")
    parser.add_argument("--fail-fast", action="store_true", help="stop at the first invalid line")
    parser.add_argument("--progress", action="store_true", help="show a progress bar")
    parser.add_argument("--log-file", type=pathlib.Path, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not 0 <= args.layer <= 0xFFFF:
        parser.error(f"--layer must be between 0 and 65535, got {args.layer}")
    init_logging(args.verbose, args.log_file)

    options = ConversionOptions(
        layer=args.layer,
        echo_coordinates=args.echo_coordinates,
        fail_fast=args.fail_fast,
        progress=args.progress,
    )
    try:
        convert(args.input, args.output, options)
    except (SourceUnavailable, SinkUnavailable) as e:
        log.error("%s", e)
        return 2
    except ConversionFailed as e:
        log.error("Conversion failed, %s not written: %s", args.output, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(cli())

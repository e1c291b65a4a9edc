"""Tests for CSV row parsing and PolygonSource."""

from __future__ import annotations

from pathlib import Path

import pytest

from text2gds.exceptions import InvalidCoordinate, SourceUnavailable
from text2gds.source import PolygonSource, SourceLine, parse_line


class TestParseLine:
    def test_plain_row(self) -> None:
        assert parse_line("0,0,10,0,10,10\n") == (0, 0, 10, 0, 10, 10)

    def test_signed_values(self) -> None:
        assert parse_line("-5,6,-2147483648,2147483647") == (-5, 6, -2147483648, 2147483647)

    def test_trailing_comma_and_crlf(self) -> None:
        assert parse_line("1,2,3,4,\r\n") == (1, 2, 3, 4)

    def test_non_integer_token(self) -> None:
        with pytest.raises(InvalidCoordinate) as exc:
            parse_line("1,2,x3,4", line_number=9)
        assert exc.value.token == "x3"
        assert exc.value.line_number == 9

    def test_decimal_rejected(self) -> None:
        with pytest.raises(InvalidCoordinate):
            parse_line("1.5,2")

    def test_out_of_int32_range(self) -> None:
        with pytest.raises(InvalidCoordinate):
            parse_line("0,2147483648")

    @pytest.mark.parametrize("token", ["+5", "1_000", " 2", "2 ", "\t3", "--1", "-"])
    def test_strict_token_grammar(self, token: str) -> None:
        with pytest.raises(InvalidCoordinate) as exc:
            parse_line(f"0,{token},1,1", line_number=4)
        assert exc.value.token == token
        assert exc.value.line_number == 4

    def test_delimiters_only(self) -> None:
        assert parse_line(",,\n") == ()


class TestPolygonSource:
    def test_yields_rows_with_physical_line_numbers(self, write_csv) -> None:
        path = write_csv("1,2,3,4", "", "5,6,7,8")
        with PolygonSource(path) as source:
            rows = list(source)
        assert rows == [SourceLine(1, (1, 2, 3, 4)), SourceLine(3, (5, 6, 7, 8))]

    def test_is_lazy(self, write_csv) -> None:
        path = write_csv("1,2,3,4", "bad")
        with PolygonSource(path) as source:
            it = iter(source)
            assert next(it) == SourceLine(1, (1, 2, 3, 4))
            with pytest.raises(InvalidCoordinate):
                next(it)

    def test_rewind_restarts(self, write_csv) -> None:
        path = write_csv("1,2,3,4", "5,6,7,8")
        with PolygonSource(path) as source:
            first = list(source)
            source.rewind()
            second = list(source)
        assert first == second
        assert len(first) == 2

    def test_iter_lines_is_unparsed(self, write_csv) -> None:
        path = write_csv("1,2,3", "oops")
        with PolygonSource(path) as source:
            assert [n for n, _ in source.iter_lines()] == [1, 2]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SourceUnavailable) as exc:
            PolygonSource(tmp_path / "nope.csv").open()
        assert "nope.csv" in str(exc.value)

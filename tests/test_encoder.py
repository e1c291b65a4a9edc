"""Tests for record framing and BOUNDARY blocks in text2gds.encoder."""

from __future__ import annotations

import pytest

from text2gds.constants import BOUNDARY_OPEN_SIZE, LAYER_BYTE_OFFSET, MAX_VERTEX_PAIRS
from text2gds.encoder import boundary_open, build_block, close_boundary, frame_record, frame_xy
from text2gds.exceptions import EmptyPolygon, EncodingOverflow, OddCoordinateCount, TooManyVertices
from text2gds.gds_struct import decode_coordinates


def _square_ring(pairs: int) -> tuple[int, ...]:
    coords: list[int] = []
    for i in range(pairs):
        coords.extend((i, i * 2))
    return tuple(coords)


class TestFrameRecord:
    def test_header_layout(self) -> None:
        assert frame_record(0x0D, 0x02, b"\x00\x05") == b"\x00\x06\x0d\x02\x00\x05"

    def test_empty_payload(self) -> None:
        assert frame_record(0x11, 0x00) == b"\x00\x04\x11\x00"

    def test_odd_byte_count_rejected(self) -> None:
        with pytest.raises(EncodingOverflow) as exc:
            frame_record(0x10, 0x03, b"abc")
        assert exc.value.byte_count == 7

    def test_largest_even_record(self) -> None:
        record = frame_record(0x10, 0x03, bytes(65530))
        assert record[:2] == b"\xff\xfe"
        assert len(record) == 65534

    def test_over_16_bits_rejected(self) -> None:
        with pytest.raises(EncodingOverflow):
            frame_record(0x10, 0x03, bytes(65532))


class TestFrameXY:
    def test_empty(self) -> None:
        assert frame_xy(()) == b"\x00\x04\x10\x03"

    @pytest.mark.parametrize("count", [0, 2, 8, 100, 512])
    def test_length_field_equals_record_length(self, count: int) -> None:
        record = frame_xy(tuple(range(count)))
        assert int.from_bytes(record[:2], "big") == len(record) == 4 + 4 * count
        assert record[2:4] == b"\x10\x03"

    def test_coordinates_in_order(self) -> None:
        coords = (0, 0, 10, 0, -10, 10)
        assert decode_coordinates(frame_xy(coords)[4:]) == coords

    def test_wire_ceiling(self) -> None:
        assert len(frame_xy((0,) * 16382)) == 65532
        with pytest.raises(EncodingOverflow) as exc:
            frame_xy((0,) * 16383)
        assert exc.value.byte_count == 65536


class TestCloseBoundary:
    def test_appends_first_pair(self) -> None:
        assert close_boundary((0, 0, 10, 0, 10, 10)) == (0, 0, 10, 0, 10, 10, 0, 0)

    def test_always_appends_even_when_already_closed(self) -> None:
        closed = close_boundary((1, 2, 3, 4))
        assert closed == (1, 2, 3, 4, 1, 2)
        reclosed = close_boundary(closed)
        assert len(reclosed) == len(closed) + 2
        assert reclosed[-4:] == (1, 2, 1, 2)

    def test_odd_input_rejected(self) -> None:
        with pytest.raises(OddCoordinateCount):
            close_boundary((1, 2, 3))

    def test_empty(self) -> None:
        assert close_boundary(()) == ()


class TestBoundaryOpen:
    def test_layer_zero_template(self) -> None:
        assert boundary_open(0) == bytes((0, 4, 8, 0, 0, 6, 13, 2, 0, 0, 0, 6, 14, 2, 0, 0))

    def test_layer_substituted_at_offset_nine(self) -> None:
        template = boundary_open(0)
        block = boundary_open(5)
        assert len(block) == BOUNDARY_OPEN_SIZE
        assert block[LAYER_BYTE_OFFSET] == 5
        assert block[:LAYER_BYTE_OFFSET] + block[LAYER_BYTE_OFFSET + 1:] == (
            template[:LAYER_BYTE_OFFSET] + template[LAYER_BYTE_OFFSET + 1:]
        )

    def test_wide_layer_uses_both_bytes(self) -> None:
        assert boundary_open(0x0102)[8:10] == b"\x01\x02"

    @pytest.mark.parametrize("layer", [-1, 65536])
    def test_layer_out_of_range(self, layer: int) -> None:
        with pytest.raises(ValueError):
            boundary_open(layer)


class TestBuildBlock:
    def test_block_structure(self) -> None:
        vertices = (0, 0, 10, 0, 10, 10, 0, 0)
        block = build_block(vertices, 3)
        assert block[:16] == boundary_open(3)
        assert block[16:52] == frame_xy(vertices)
        assert block[52:] == b"\x00\x04\x11\x00"
        assert len(block) == 16 + 36 + 4

    def test_referentially_transparent(self) -> None:
        vertices = (0, 0, 5, 5, 0, 5, 0, 0)
        assert build_block(vertices, 1) == build_block(vertices, 1)

    def test_odd_count_rejected(self) -> None:
        with pytest.raises(OddCoordinateCount) as exc:
            build_block((1, 2, 3), line_number=7)
        assert exc.value.count == 3
        assert exc.value.line_number == 7
        assert str(exc.value).startswith("line 7: ")

    def test_vertex_cap_inclusive(self) -> None:
        block = build_block(_square_ring(MAX_VERTEX_PAIRS))
        assert len(block) == 16 + 4 + 8 * MAX_VERTEX_PAIRS + 4

    def test_too_many_vertices(self) -> None:
        with pytest.raises(TooManyVertices) as exc:
            build_block(_square_ring(MAX_VERTEX_PAIRS + 1), line_number=2)
        assert exc.value.pairs == MAX_VERTEX_PAIRS + 1
        assert exc.value.limit == 256
        assert exc.value.line_number == 2

    def test_empty_rejected(self) -> None:
        with pytest.raises(EmptyPolygon) as exc:
            build_block(close_boundary(()), line_number=4)
        assert exc.value.line_number == 4

"""Tests for marker de-overlap and viewport fitting."""
import pytest

from listing_hub.config import settings
from listing_hub.services.map_service import (
    compute_viewport,
    deoverlap,
    map_markers,
    parse_coordinate,
)
from tests.conftest import make_record


class TestParseCoordinate:
    def test_float(self):
        assert parse_coordinate(25.2) == 25.2

    def test_numeric_string(self):
        assert parse_coordinate(" 55.27 ") == 55.27

    @pytest.mark.parametrize("value", [None, "", "n/a", "nan", "inf", True])
    def test_unmappable(self, value):
        assert parse_coordinate(value) is None


class TestDeoverlap:
    def test_second_marker_on_same_spot_is_offset(self):
        first = make_record("p", lat=25.20, lng=55.27)
        second = make_record("q", lat=25.20, lng=55.27)

        result = deoverlap([first, second])

        assert (result[0].lat, result[0].lng) == (25.20, 55.27)
        assert result[1].lat == pytest.approx(25.2002)
        assert result[1].lng == pytest.approx(55.2702)

    def test_nth_duplicate_shifts_by_n_minus_one_offsets(self):
        records = [make_record(str(i), lat=25.0, lng=55.0) for i in range(4)]
        result = deoverlap(records, offset_distance=0.001)
        assert [r.lat for r in result] == pytest.approx([25.0, 25.001, 25.002, 25.003])

    def test_distinct_coordinates_untouched(self):
        records = [make_record("a", lat=25.1, lng=55.1), make_record("b", lat=25.2, lng=55.2)]
        result = deoverlap(records)
        assert [(r.lat, r.lng) for r in result] == [(25.1, 55.1), (25.2, 55.2)]

    def test_string_coordinates_collide_with_numeric(self):
        records = [make_record("a", lat="25.20", lng="55.27"), make_record("b", lat=25.2, lng=55.27)]
        result = deoverlap(records)
        assert result[0].lat == 25.2
        assert result[1].lat == pytest.approx(25.2 + settings.marker_offset_distance)

    def test_collision_uses_rounded_key(self):
        records = [make_record("a", lat=25.200001, lng=55.27), make_record("b", lat=25.200004, lng=55.27)]
        result = deoverlap(records)
        assert result[1].lat == pytest.approx(25.200004 + settings.marker_offset_distance)

    def test_unparsable_coordinates_pass_through(self):
        records = [
            make_record("a", lat="unknown", lng=55.27),
            make_record("b", lat=None, lng=None),
            make_record("c", lat=25.2, lng=55.27),
        ]
        result = deoverlap(records)
        assert result[0].lat == "unknown"
        assert result[1].lat is None
        assert (result[2].lat, result[2].lng) == (25.2, 55.27)

    def test_length_and_order_preserved(self):
        records = [make_record(str(i), lat=25.0, lng=55.0) for i in range(5)]
        assert [r.id for r in deoverlap(records)] == ["0", "1", "2", "3", "4"]

    def test_deterministic(self):
        records = [make_record(str(i), lat=25.0, lng=55.0) for i in range(3)]
        assert deoverlap(records) == deoverlap(records)

    def test_input_order_decides_which_record_moves(self):
        p = make_record("p", lat=25.20, lng=55.27)
        q = make_record("q", lat=25.20, lng=55.27)

        forward = {r.id: r.lat for r in deoverlap([p, q])}
        backward = {r.id: r.lat for r in deoverlap([q, p])}

        assert forward["p"] == 25.20
        assert forward["q"] == pytest.approx(25.2002)
        assert backward["q"] == 25.20
        assert backward["p"] == pytest.approx(25.2002)

    def test_input_records_unchanged(self):
        records = [make_record("a", lat=25.0, lng=55.0), make_record("b", lat=25.0, lng=55.0)]
        deoverlap(records)
        assert records[1].lat == 25.0

    def test_single_and_empty(self):
        only = make_record("a", lat=25.0, lng=55.0)
        assert deoverlap([]) == []
        assert deoverlap([only]) == [only]


class TestViewport:
    def test_no_markers_uses_default_center(self):
        viewport = compute_viewport([])
        assert (viewport.center_lat, viewport.center_lng) == tuple(settings.default_map_center)
        assert viewport.bounds is None

    def test_single_marker_centers_on_it(self):
        markers = map_markers([make_record("a", lat=25.1, lng=55.3)])
        viewport = compute_viewport(markers)
        assert (viewport.center_lat, viewport.center_lng) == (25.1, 55.3)
        assert viewport.zoom == settings.single_marker_zoom

    def test_several_markers_fit_bounds(self):
        markers = map_markers([
            make_record("a", lat=25.0, lng=55.0),
            make_record("b", lat=25.2, lng=55.4),
        ])
        viewport = compute_viewport(markers)
        assert viewport.bounds.south == 25.0
        assert viewport.bounds.north == 25.2
        assert viewport.bounds.west == 55.0
        assert viewport.bounds.east == 55.4
        assert viewport.center_lat == pytest.approx(25.1)


class TestMapMarkers:
    def test_skips_unmappable_records(self):
        markers = map_markers([make_record("a", lat=None), make_record("b", lat="25.3", lng="55.1")])
        assert [m.id for m in markers] == ["b"]
        assert (markers[0].lat, markers[0].lng) == (25.3, 55.1)

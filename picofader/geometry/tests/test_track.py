import pytest

from picofader.geometry.track import (
    Track, closest_stop_index, compute_stops, gradient_color_at,
    segment_index_at, segment_name_at, stop_index_at,
)


def test_stops_for_630px_track():
    assert compute_stops(630, 30, 7) == (15.0, 115.0, 215.0, 315.0, 415.0, 515.0, 615.0)


@pytest.mark.parametrize("width", [31, 45.5, 100, 333, 630, 1920])
def test_stops_span_the_track(width):
    stops = compute_stops(width, 30, 7)
    assert len(stops) == 7
    assert stops[0] == 15.0
    assert stops[-1] == pytest.approx(width - 15.0)
    assert all(a <= b for a, b in zip(stops, stops[1:]))


def test_degenerate_tracks():
    assert compute_stops(0, 30, 7) == ()
    assert compute_stops(-10, 30, 7) == ()
    assert compute_stops(200, 30, 1) == (100.0,)
    assert compute_stops(30, 30, 3) == (15.0, 15.0, 15.0)


def test_track_narrower_than_handle_keeps_stop_order():
    stops = compute_stops(20, 30, 7)
    assert stops == (15.0,) * 7
    assert all(stops[0] <= s <= stops[-1] for s in stops)


def test_closest_stop_tie_picks_lower_index():
    stops = compute_stops(630)
    assert closest_stop_index(stops, 65) == 0
    assert closest_stop_index(stops, 365) == 3
    assert closest_stop_index(stops, 301) == 3
    assert closest_stop_index(stops, -500) == 0
    assert closest_stop_index(stops, 5000) == 6
    assert closest_stop_index((), 10) is None


def test_stop_index_at_tolerance():
    stops = compute_stops(630)
    assert stop_index_at(stops, 315.0) == 3
    assert stop_index_at(stops, 315.6) == 3
    assert stop_index_at(stops, 316.0) is None
    assert stop_index_at(stops, 200.0) is None


def test_segments():
    assert segment_name_at(0, 630) == "rose"
    assert segment_name_at(100, 630) == "pfirsich"
    assert segment_name_at(315, 630) == "mint"
    assert segment_name_at(629, 630) == "flieder"
    assert segment_name_at(900, 630) == "flieder"
    assert segment_name_at(-5, 630) == "rose"
    assert segment_name_at(100, 0) == ""
    assert segment_index_at(100, 0) is None


def test_gradient_endpoints():
    assert gradient_color_at(0.0) == (255, 191, 204)
    assert gradient_color_at(1.0) == (204, 159, 227)
    assert gradient_color_at(2.0) == (204, 159, 227)
    assert gradient_color_at(0.5) == (153, 250, 153)


def test_track_clamp_and_normalize():
    t = Track(630)
    assert t.valid
    assert t.clamp(0) == 15.0
    assert t.clamp(1000) == 615.0
    assert t.normalize(315) == 0.5
    assert Track(0).normalize(10) == 0.0
    assert not Track(0).valid

from __future__ import annotations

import json

import pytest

from bike_hotels.errors import InvalidQueryError
from bike_hotels.geo import BoundingBox, convert_external_box, haversine_km, haversine_m, narrow_box, wide_box


def test_haversine_known_distance():
    # Chicago Loop to O'Hare is roughly 25 km.
    distance = haversine_km(41.8781, -87.6298, 41.9742, -87.9073)
    assert 24.0 < distance < 26.0
    assert haversine_m(41.0, -87.0, 41.0, -87.0) == 0.0


@pytest.mark.parametrize("lat,lng", [(41.878, -87.629), (0.0, 0.0), (-33.87, 151.21), (64.1, -21.9)])
def test_narrow_box_is_strictly_inside_wide_box(lat, lng):
    narrow = narrow_box(lat, lng)
    wide = wide_box(lat, lng)

    assert wide.min_lat < narrow.min_lat < narrow.max_lat < wide.max_lat
    assert wide.min_lng < narrow.min_lng < narrow.max_lng < wide.max_lng
    assert narrow.center == wide.center == (lat, lng)


def test_synthesized_box_corner_order():
    box = wide_box(40.0, -74.0)
    sw, nw, ne, se = box.corners
    assert sw == pytest.approx((39.9, -74.1))
    assert nw == pytest.approx((40.1, -74.1))
    assert ne == pytest.approx((40.1, -73.9))
    assert se == pytest.approx((39.9, -73.9))


def test_convert_external_box_uses_sw_nw_ne_se_lat_lng_order():
    box = convert_external_box([-87.94, 41.644, -87.523, 42.023], (41.878, -87.629))

    assert box.corners == (
        (41.644, -87.94),
        (42.023, -87.94),
        (42.023, -87.523),
        (41.644, -87.523),
    )
    assert box.center == (41.878, -87.629)
    assert box.contains(41.878, -87.629)
    assert not box.contains(41.5, -87.629)


def test_convert_external_box_rejects_bad_input():
    with pytest.raises(InvalidQueryError):
        convert_external_box([1.0, 2.0, 3.0], (0.0, 0.0))
    with pytest.raises(InvalidQueryError):
        convert_external_box([10.0, 10.0, 0.0, 0.0], (0.0, 0.0))


def test_canonical_json_matches_upstream_shape_and_parses_back():
    box = narrow_box(41.878, -87.629)
    payload = json.loads(box.to_json())

    assert list(payload) == ["coords", "center"]
    assert payload["center"] == {"lat": 41.878, "lng": -87.629}
    assert len(payload["coords"]) == 4
    assert " " not in box.to_json()
    assert BoundingBox.from_json(box.to_json()) == box
    assert BoundingBox.from_json(box.to_json()).cache_key == box.cache_key


def test_from_json_rejects_malformed_boxes():
    with pytest.raises(InvalidQueryError):
        BoundingBox.from_json("not json")
    with pytest.raises(InvalidQueryError):
        BoundingBox.from_json('{"coords": [[1, 2]], "center": {"lat": 1, "lng": 2}}')
    with pytest.raises(InvalidQueryError):
        BoundingBox.from_json('{"coords": [[1, 2], [1, 2], [1, 2], [1, "x"]], "center": {"lat": 1, "lng": 2}}')

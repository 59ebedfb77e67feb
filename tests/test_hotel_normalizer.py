from __future__ import annotations

import logging

import pytest

from bike_hotels.hotels import build_client_hotel, loyalty_program_for, transform_hotels


def _raw_hotel(**overrides):
    hotel = {
        "id": 181,
        "google_place_id": "ChIJW877xLstDogRK84dPcaVscE",
        "name": "Club Quarters Hotel Central Loop, Chicago",
        "latitude": "41.879266",
        "longitude": "-87.6311861",
        "has_bikes_fitness_center": 1,
        "has_bikes_rooms": 0,
        "total_bikes": 1,
        "brand_name": "Club Quarters",
        "distance": 229.29,
        "website": "https://clubquarters.com/chicago",
        "phone": "+1 312-214-6400",
        "bike_features": [
            {"name": "Bike weights", "has": True},
            {"name": "Clip-in pedals", "has": False},
        ],
    }
    hotel.update(overrides)
    return hotel


def test_build_client_hotel_normalises_upstream_record():
    hotel = build_client_hotel(_raw_hotel())

    assert hotel is not None
    assert hotel.id == 181
    assert hotel.place_id == "ChIJW877xLstDogRK84dPcaVscE"
    assert hotel.lat == pytest.approx(41.879266)
    assert hotel.lng == pytest.approx(-87.6311861)
    assert hotel.distance_m == pytest.approx(229.29)
    assert hotel.brand == "Club Quarters"
    assert hotel.loyalty_program == "Other"
    assert hotel.total_bikes == 1
    assert hotel.in_gym is True
    assert hotel.in_room is False
    assert hotel.bike_features == ("Bike weights",)
    assert hotel.url == "https://clubquarters.com/chicago"
    assert hotel.tel == "+1 312-214-6400"
    assert hotel.has_bikes


def test_location_flags_do_not_depend_on_bike_count():
    hotel = build_client_hotel(
        _raw_hotel(total_bikes=0, has_bikes_fitness_center="1", has_bikes_rooms=1)
    )

    assert hotel is not None
    assert hotel.total_bikes == 0
    assert hotel.in_gym is True
    assert hotel.in_room is True
    assert not hotel.has_bikes


def test_bike_features_keep_only_available_names_in_order():
    hotel = build_client_hotel(
        _raw_hotel(
            bike_features=[
                {"name": "A", "has": True},
                {"name": "B", "has": False},
                {"name": "C", "has": True},
                "junk",
            ]
        )
    )
    assert hotel is not None
    assert hotel.bike_features == ("A", "C")


def test_missing_brand_maps_to_other_with_empty_brand():
    hotel = build_client_hotel(_raw_hotel(brand_name=None, bike_features=None, website=None))

    assert hotel is not None
    assert hotel.brand == ""
    assert hotel.loyalty_program == "Other"
    assert hotel.bike_features == ()
    assert hotel.url is None


@pytest.mark.parametrize(
    "brand,expected",
    [
        ("Hampton Inn & Suites", "Hilton Honors"),
        ("  hampton inn & suites ", "Hilton Honors"),
        ("Marriott", "Marriott Bonvoy"),
        ("Acme Lodge", "Other"),
        ("", "Other"),
        (None, "Other"),
    ],
)
def test_loyalty_program_lookup(brand, expected):
    assert loyalty_program_for(brand) == expected


def test_transform_hotels_tolerates_non_list_payloads():
    assert transform_hotels(None) == []
    assert transform_hotels({"hotels": []}) == []
    assert transform_hotels([]) == []


def test_transform_hotels_skips_unusable_records(caplog):
    raw = [
        _raw_hotel(),
        _raw_hotel(id=182, latitude="not-a-number"),
        _raw_hotel(id=None),
        "not a hotel",
        _raw_hotel(id=183, name="Second"),
    ]

    with caplog.at_level(logging.WARNING, logger="bike_hotels.hotels.normalizer"):
        hotels = transform_hotels(raw)

    assert [hotel.id for hotel in hotels] == [181, 183]
    assert "Skipping hotel record" in caplog.text


def test_client_hotel_wire_format_round_trip():
    hotel = build_client_hotel(_raw_hotel())
    assert hotel is not None

    payload = hotel.to_dict()

    assert payload["loyaltyProgram"] == "Other"
    assert payload["bike_features"] == ["Bike weights"]
    assert type(hotel).from_dict(payload) == hotel


@pytest.mark.parametrize(
    "gym,room,expected",
    [
        (True, False, (True, False)),
        (False, True, (False, True)),
        ("1", 0, (True, False)),
        (None, "0", (False, False)),
    ],
)
def test_location_flags_accept_booleans_and_numeric_strings(gym, room, expected):
    hotel = build_client_hotel(_raw_hotel(has_bikes_fitness_center=gym, has_bikes_rooms=room))

    assert hotel is not None
    assert (hotel.in_gym, hotel.in_room) == expected

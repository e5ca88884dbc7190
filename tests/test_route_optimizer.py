import math

import pytest

from dispatch_router.models.domain import Location
from dispatch_router.services.geospatial import haversine_miles
from dispatch_router.services.routing.maps_url import build_google_maps_url
from dispatch_router.services.routing.optimizer import (
    RouteOptimizerConfig,
    estimate_minutes,
    format_duration,
    optimize_route,
)


def _location(lid: str, lat: float | None = None, lng: float | None = None, zip_code: str | None = "77002") -> Location:
    return Location(
        id=lid,
        address=f"{lid} Main St",
        city="Houston",
        zip=zip_code,
        lat=lat,
        lng=lng,
    )


def _ids(route) -> list[str]:
    return [location.id for location in route.ordered_locations]


def test_empty_input_returns_zero_route():
    route = optimize_route([])

    assert route.ordered_locations == []
    assert route.total_distance_miles == 0
    assert route.estimated_minutes == 0
    assert route.google_maps_url == ""
    assert route.skipped_location_ids == []


def test_single_geocoded_location():
    route = optimize_route([_location("A", 29.76, -95.37)])

    assert _ids(route) == ["A"]
    assert route.total_distance_miles == 0
    assert route.estimated_minutes == 5
    assert route.google_maps_url == (
        "https://www.google.com/maps/dir/?api=1&destination=A%20Main%20St%2C%20Houston%2C%20TX%2077002"
    )


def test_no_coordinates_keeps_input_order():
    locations = [_location("C"), _location("A"), _location("B", zip_code=None)]

    route = optimize_route(locations)

    assert route.ordered_locations == locations
    assert route.total_distance_miles == 0
    assert route.estimated_minutes == 0
    assert route.skipped_location_ids == []
    assert "origin=C%20Main%20St" in route.google_maps_url
    assert "waypoints=A%20Main%20St" in route.google_maps_url
    assert "destination=B%20Main%20St%2C%20Houston%2C%20TX%20" in route.google_maps_url


def test_nearest_neighbor_visits_closer_stop_first():
    a, b, c = _location("A", 0.0, 0.0), _location("B", 0.0, 1.0), _location("C", 0.0, 10.0)

    route = optimize_route([a, c, b])

    assert _ids(route) == ["A", "B", "C"]
    expected = haversine_miles(0, 0, 0, 1) + haversine_miles(0, 1, 0, 10)
    wrong = haversine_miles(0, 0, 0, 10) + haversine_miles(0, 10, 0, 1)
    assert route.total_distance_miles == round(expected, 1)
    assert route.total_distance_miles != round(wrong, 1)


def test_estimate_uses_speed_and_dwell():
    a, b, c = _location("A", 0.0, 0.0), _location("B", 0.0, 1.0), _location("C", 0.0, 10.0)

    route = optimize_route([a, b, c])

    raw_distance = haversine_miles(0, 0, 0, 1) + haversine_miles(0, 1, 0, 10)
    assert route.estimated_minutes == math.floor(raw_distance / 25 * 60 + 3 * 5 + 0.5)


def test_equidistant_candidates_keep_input_order():
    origin = _location("O", 0.0, 0.0)
    first = _location("first", 0.0, 1.0)
    second = _location("second", 0.0, 1.0)

    forward = optimize_route([origin, first, second])
    again = optimize_route([origin, first, second])
    swapped = optimize_route([origin, second, first])

    assert _ids(forward) == ["O", "first", "second"]
    assert _ids(again) == _ids(forward)
    assert _ids(swapped) == ["O", "second", "first"]


def test_mirrored_candidates_tie_break_on_input_order():
    east, west = _location("east", 0.0, 1.0), _location("west", 0.0, -1.0)

    route = optimize_route([east, west], start_lat=0.0, start_lng=0.0)

    assert _ids(route)[0] == "east"


def test_start_coordinate_adds_first_leg_but_no_stop():
    b, c = _location("B", 0.0, 2.0), _location("C", 0.0, 1.0)

    route = optimize_route([b, c], start_lat=0.0, start_lng=0.0)

    assert _ids(route) == ["C", "B"]
    raw_distance = haversine_miles(0, 0, 0, 1) + haversine_miles(0, 1, 0, 2)
    assert route.total_distance_miles == round(raw_distance, 1)
    assert route.estimated_minutes == math.floor(raw_distance / 25 * 60 + 2 * 5 + 0.5)
    assert route.google_maps_url.startswith("https://www.google.com/maps/dir/?api=1&origin=C%20Main%20St")


def test_partial_start_coordinate_is_ignored():
    b, c = _location("B", 0.0, 2.0), _location("C", 0.0, 1.0)

    route = optimize_route([b, c], start_lat=0.0)

    assert _ids(route) == ["B", "C"]


def test_ungeocoded_stops_dropped_by_default():
    a, lost, b = _location("A", 0.0, 0.0), _location("lost"), _location("B", 0.0, 1.0)

    route = optimize_route([a, lost, b])

    assert _ids(route) == ["A", "B"]
    assert route.skipped_location_ids == ["lost"]
    assert "lost%20Main%20St" not in route.google_maps_url


def test_ungeocoded_stops_appended_when_configured():
    a, lost, b = _location("A", 0.0, 0.0), _location("lost"), _location("B", 0.0, 1.0)
    config = RouteOptimizerConfig(unlocatable_policy="append")

    route = optimize_route([a, lost, b], config=config)

    assert _ids(route) == ["A", "B", "lost"]
    assert route.skipped_location_ids == []
    raw_distance = haversine_miles(0, 0, 0, 1)
    assert route.total_distance_miles == round(raw_distance, 1)
    assert route.estimated_minutes == math.floor(raw_distance / 25 * 60 + 3 * 5 + 0.5)
    assert "destination=lost%20Main%20St" in route.google_maps_url


def test_nan_coordinates_are_not_geocoded():
    a, broken, b = _location("A", 0.0, 0.0), _location("broken", float("nan"), 1.0), _location("B", 0.0, 1.0)

    route = optimize_route([a, broken, b])

    assert _ids(route) == ["A", "B"]
    assert route.skipped_location_ids == ["broken"]
    assert not math.isnan(route.total_distance_miles)


def test_only_nan_coordinates_falls_back_to_input_order():
    locations = [_location("X", float("nan"), float("nan")), _location("Y")]

    route = optimize_route(locations)

    assert route.ordered_locations == locations
    assert route.total_distance_miles == 0
    assert route.estimated_minutes == 0


def test_custom_speed_and_dwell():
    config = RouteOptimizerConfig(average_speed_mph=40.0, dwell_minutes_per_stop=10)

    route = optimize_route([_location("A", 29.76, -95.37)], config=config)

    assert route.estimated_minutes == 10


def test_estimate_minutes_for_dwell_only():
    assert estimate_minutes(0.0, 4, RouteOptimizerConfig()) == 20


@pytest.mark.parametrize(
    "overrides",
    [
        {"average_speed_mph": 0},
        {"average_speed_mph": -5},
        {"dwell_minutes_per_stop": -1},
        {"unlocatable_policy": "ignore"},
    ],
)
def test_invalid_config_rejected(overrides):
    with pytest.raises(ValueError):
        RouteOptimizerConfig(**overrides)


def test_optimizer_does_not_mutate_input():
    locations = [_location("A", 0.0, 0.0), _location("lost"), _location("B", 0.0, 1.0)]
    snapshot = list(locations)

    optimize_route(locations)

    assert locations == snapshot


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [(0, "0 min"), (45, "45 min"), (59, "59 min"), (60, "1h"), (90, "1h 30m"), (125, "2h 5m"), (180, "3h")],
)
def test_format_duration(minutes, expected):
    assert format_duration(minutes) == expected


def test_route_url_matches_builder_output():
    locations = [_location("A", 0.0, 0.0), _location("B", 0.0, 1.0), _location("C", 0.0, 2.0)]

    route = optimize_route(locations)

    assert route.google_maps_url == build_google_maps_url(route.ordered_locations)

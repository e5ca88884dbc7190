from dispatch_router.models.domain import Location
from dispatch_router.services.routing.maps_url import build_google_maps_url, format_stop_address


def _location(lid: str, address: str, zip_code: str | None = None) -> Location:
    return Location(id=lid, address=address, city="Houston", zip=zip_code)


def test_format_stop_address_with_and_without_zip():
    assert format_stop_address(_location("1", "12 Oak St", "77002")) == "12 Oak St, Houston, TX 77002"
    assert format_stop_address(_location("2", "12 Oak St")) == "12 Oak St, Houston, TX "
    assert format_stop_address(_location("3", "12 Oak St", "73301"), state="OK") == "12 Oak St, Houston, OK 73301"


def test_empty_sequence_has_no_url():
    assert build_google_maps_url([]) == ""


def test_two_stops_have_no_waypoints():
    url = build_google_maps_url([_location("1", "1 A St", "77001"), _location("2", "2 B St", "77002")])

    assert url == (
        "https://www.google.com/maps/dir/?api=1"
        "&origin=1%20A%20St%2C%20Houston%2C%20TX%2077001"
        "&destination=2%20B%20St%2C%20Houston%2C%20TX%2077002"
    )


def test_waypoints_are_pipe_separated_in_order():
    stops = [_location(str(i), f"{i} Elm St") for i in range(1, 5)]

    url = build_google_maps_url(stops)

    assert url.endswith(
        "&waypoints=2%20Elm%20St%2C%20Houston%2C%20TX%20|3%20Elm%20St%2C%20Houston%2C%20TX%20"
    )
    assert "&destination=4%20Elm%20St" in url


def test_encoding_matches_uri_component_rules():
    url = build_google_maps_url([_location("1", "Suite #5/B & Co (rear)'s")])

    assert url.endswith("destination=Suite%20%235%2FB%20%26%20Co%20(rear)'s%2C%20Houston%2C%20TX%20")


def test_url_building_is_repeatable():
    stops = [_location("1", "1 A St"), _location("2", "2 B St"), _location("3", "3 C St")]

    assert build_google_maps_url(stops) == build_google_maps_url(stops)

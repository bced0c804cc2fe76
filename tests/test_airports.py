"""Tests for airport search ranking."""

import pytest

from sunside.airports import build_search_index, search_airports
from sunside.models import Airport, GeoPoint


def _airport(airport_id, name, city, iata=None, icao=None, ident=None, country="US"):
    return Airport(
        id=airport_id,
        name=name,
        city=city,
        country=country,
        location=GeoPoint(0, 0),
        time_zone="Etc/UTC",
        iata=iata,
        icao=icao,
        ident=ident,
    )


AIRPORTS = [
    _airport(1, "Los Angeles International", "Los Angeles", "LAX", "KLAX", "KLAX"),
    _airport(2, "John F Kennedy International", "New York", "JFK", "KJFK", "KJFK"),
    _airport(3, "LaGuardia", "New York", "LGA", "KLGA", "KLGA"),
    _airport(4, "Guarulhos", "São Paulo", "GRU", "SBGR", "SBGR", country="BR"),
    _airport(5, "Heathrow", "London", "LHR", "EGLL", "EGLL", country="GB"),
    _airport(6, "Long Beach", "Long Beach", "LGB", "KLGB", "KLGB"),
    _airport(7, "Lakeside Strip", "New York", None, None, "NY99"),
    _airport(8, "Unnamed Field", None, None, None, "XX01"),
]


@pytest.fixture(scope="module")
def index():
    return build_search_index(AIRPORTS)


def _ids(results):
    return [a.id for a in results]


def test_exact_iata_wins(index) -> None:
    assert _ids(search_airports(index, "lax"))[0] == 1
    assert _ids(search_airports(index, "JFK"))[0] == 2


def test_exact_icao_matches(index) -> None:
    assert _ids(search_airports(index, "KJFK"))[0] == 2
    assert _ids(search_airports(index, "egll")) == [5]


def test_accents_are_ignored(index) -> None:
    assert _ids(search_airports(index, "sao paulo")) == [4]
    assert _ids(search_airports(index, "São")) == [4]


def test_city_matches_prefer_airports_with_iata(index) -> None:
    results = _ids(search_airports(index, "new york"))
    assert set(results) == {2, 3, 7}
    assert results[-1] == 7
    assert results[:2] == [2, 3]


def test_all_tokens_must_match(index) -> None:
    assert _ids(search_airports(index, "new york kennedy")) == [2]
    assert search_airports(index, "kennedy london") == []


def test_city_prefix_beats_substring(index) -> None:
    results = _ids(search_airports(index, "lon"))
    assert results[:2] == [6, 5]


def test_airport_without_city_is_searchable(index) -> None:
    assert _ids(search_airports(index, "xx01")) == [8]
    assert _ids(search_airports(index, "unnamed")) == [8]


def test_empty_query_and_limit(index) -> None:
    assert search_airports(index, "") == []
    assert search_airports(index, "  --  ") == []
    assert len(search_airports(index, "new york", limit=1)) == 1
    assert search_airports(index, "zzz") == []

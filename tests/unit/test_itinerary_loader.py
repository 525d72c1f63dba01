"""
Unit tests for the itinerary loader.
"""

import json

from fjordguide.services.itinerary_loader import load_itinerary, parse_itinerary


def test_bundled_itinerary_loads():
    activities = load_itinerary()
    assert len(activities) >= 3
    assert any(a.end is not None for a in activities)
    assert len({a.id for a in activities}) == len(activities)


def test_parse_accepts_plain_list():
    activities = parse_itinerary(
        [{"id": "1", "title": "Stop", "start": {"lat": 1, "lng": 2}}]
    )
    assert [a.title for a in activities] == ["Stop"]


def test_parse_skips_invalid_entries():
    activities = parse_itinerary(
        {
            "activities": [
                {"id": "1", "title": "No start"},
                "not a dict",
                {"id": "3", "title": "Ok", "start": {"lat": 1, "lng": 2}},
            ]
        }
    )
    assert [a.id for a in activities] == ["3"]


def test_parse_rejects_non_list():
    assert parse_itinerary(42) == []


def test_load_missing_file(tmp_path):
    assert load_itinerary(tmp_path / "missing.json") == []


def test_load_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{oops", encoding="utf-8")
    assert load_itinerary(path) == []


def test_load_custom_file(tmp_path):
    path = tmp_path / "trip.json"
    path.write_text(
        json.dumps([{"id": "a", "title": "Ferry", "start": {"lat": 60, "lng": 7}}]),
        encoding="utf-8",
    )
    assert [a.title for a in load_itinerary(path)] == ["Ferry"]

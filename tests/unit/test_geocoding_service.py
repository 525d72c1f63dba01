"""
Unit tests for the geocoding client and its worker.
"""

from unittest.mock import MagicMock

import pytest
import requests

from fjordguide.core.exceptions import NetworkError
from fjordguide.core.geo import Coordinate
from fjordguide.services.geocoding_service import GeocodingClient, GeocodingWorker

NOMINATIM_PAYLOAD = [
    {
        "place_id": 101,
        "lat": "60.8631",
        "lon": "7.1136",
        "display_name": "Flåm, Aurland, Vestland, Norway",
    },
    {
        "place_id": 102,
        "lat": "60.9080",
        "lon": "7.2090",
        "display_name": "Stegastein, Aurland, Vestland, Norway",
    },
]


def make_session(payload=None, exc=None, status_exc=None, json_exc=None):
    session = MagicMock()
    if exc is not None:
        session.get.side_effect = exc
        return session
    response = MagicMock()
    if status_exc is not None:
        response.raise_for_status.side_effect = status_exc
    if json_exc is not None:
        response.json.side_effect = json_exc
    else:
        response.json.return_value = payload
    session.get.return_value = response
    return session


@pytest.fixture
def client_factory():
    def factory(**kwargs):
        return GeocodingClient(
            url="https://geo.example/search", user_agent="TestAgent/1.0", **kwargs
        )

    return factory


def test_search_sends_bounded_query(client_factory):
    session = make_session(NOMINATIM_PAYLOAD)
    client = client_factory(session=session)

    results = client.search("  Flåm ")

    session.get.assert_called_once()
    args, kwargs = session.get.call_args
    assert args[0] == "https://geo.example/search"
    assert kwargs["params"] == {
        "format": "json",
        "q": "Flåm",
        "viewbox": "6.70,61.00,7.30,60.60",
        "bounded": 1,
        "limit": 5,
    }
    assert kwargs["headers"]["User-Agent"] == "TestAgent/1.0"
    assert [r.short_name for r in results] == ["Flåm", "Stegastein"]
    assert results[0].id == "101"
    assert results[0].coordinate == Coordinate(60.8631, 7.1136)


def test_blank_query_does_not_hit_network(client_factory):
    session = make_session([])
    client = client_factory(session=session)
    assert client.search("   ") == []
    session.get.assert_not_called()


def test_results_capped_at_limit(client_factory):
    payload = NOMINATIM_PAYLOAD * 4
    client = client_factory(session=make_session(payload), limit=3)
    assert len(client.search("Aurland")) == 3


def test_malformed_entries_are_skipped(client_factory):
    payload = [{"place_id": 1, "lat": "x", "lon": "7"}] + NOMINATIM_PAYLOAD[:1]
    client = client_factory(session=make_session(payload))
    results = client.search("Flåm")
    assert len(results) == 1


def test_connection_error_becomes_network_error(client_factory):
    session = make_session(exc=requests.exceptions.ConnectionError("offline"))
    client = client_factory(session=session)
    with pytest.raises(NetworkError):
        client.search("Flåm")


def test_http_error_becomes_network_error(client_factory):
    session = make_session(status_exc=requests.exceptions.HTTPError("503"))
    client = client_factory(session=session)
    with pytest.raises(NetworkError):
        client.search("Flåm")


def test_invalid_json_becomes_network_error(client_factory):
    client = client_factory(session=make_session(json_exc=ValueError("bad json")))
    with pytest.raises(NetworkError):
        client.search("Flåm")


def test_non_list_payload_becomes_network_error(client_factory):
    client = client_factory(session=make_session({"error": "nope"}))
    with pytest.raises(NetworkError):
        client.search("Flåm")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FJORDGUIDE_GEOCODER_URL", "https://env.example/search")
    monkeypatch.setenv("FJORDGUIDE_SEARCH_LIMIT", "2")
    monkeypatch.setenv("FJORDGUIDE_HTTP_TIMEOUT", "not-a-number")
    client = GeocodingClient(session=MagicMock())
    assert client.url == "https://env.example/search"
    assert client.limit == 2
    assert client.timeout == 10.0


def test_worker_emits_results_with_token(qtbot, client_factory):
    worker = GeocodingWorker(client_factory(session=make_session(NOMINATIM_PAYLOAD)))
    with qtbot.waitSignal(worker.results_ready) as blocker:
        worker.run_search(7, "Flåm")
    token, results = blocker.args
    assert token == 7
    assert len(results) == 2


def test_worker_reports_failure_and_empty_results(qtbot, client_factory):
    session = make_session(exc=requests.exceptions.Timeout("slow"))
    worker = GeocodingWorker(client_factory(session=session))
    with qtbot.waitSignals(
        [(worker.results_ready, "results_ready"), (worker.search_failed, "search_failed")],
        order="strict",
    ) as blocker:
        worker.run_search(3, "Flåm")
    results_args = blocker.all_signals_and_args[0].args
    failed_args = blocker.all_signals_and_args[1].args
    assert list(results_args) == [3, []]
    assert list(failed_args)[0] == 3

"""
Unit tests for the location service.
"""

from unittest.mock import MagicMock, patch

import pytest

from fjordguide.core.geo import Coordinate
from fjordguide.services.location_service import LocationService, parse_location_arg


def test_parse_location_arg():
    assert parse_location_arg("60.86, 7.11") == Coordinate(60.86, 7.11)


@pytest.mark.parametrize("text", ["60.86", "a,b", "95,7", "1,2,3"])
def test_parse_location_arg_rejects_bad_input(text):
    with pytest.raises(ValueError):
        parse_location_arg(text)


def test_fixed_location_is_published(qtbot, qapp):
    service = LocationService(fixed_location=Coordinate(60.86, 7.11))
    with qtbot.waitSignal(service.location_changed) as blocker:
        assert service.start() is True
    assert blocker.args == [Coordinate(60.86, 7.11)]
    assert service.location == Coordinate(60.86, 7.11)


def test_no_positioning_backend(qapp):
    with patch(
        "fjordguide.services.location_service.QGeoPositionInfoSource"
    ) as source_cls:
        source_cls.createDefaultSource.return_value = None
        service = LocationService()
        assert service.start() is False
    assert service.location is None


def test_backend_source_is_started_and_stopped(qapp):
    source = MagicMock()
    with patch(
        "fjordguide.services.location_service.QGeoPositionInfoSource"
    ) as source_cls:
        source_cls.createDefaultSource.return_value = source
        service = LocationService()
        assert service.start() is True
    source.startUpdates.assert_called_once()
    service.stop()
    source.stopUpdates.assert_called_once()


def test_position_error_clears_location(qtbot, qapp):
    service = LocationService(fixed_location=Coordinate(60.86, 7.11))
    service.start()
    with qtbot.waitSignal(service.location_changed) as blocker:
        service._on_error(MagicMock())
    assert blocker.args == [None]
    assert service.location is None


def test_duplicate_positions_are_not_republished(qtbot, qapp):
    service = LocationService()
    service._publish(Coordinate(1, 2))
    with qtbot.assertNotEmitted(service.location_changed):
        service._publish(Coordinate(1, 2))

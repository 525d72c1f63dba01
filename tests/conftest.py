import os
import pathlib
import sys

import pytest

# Widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Ensure project root is in sys.path
repo_root = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

from PySide6.QtWidgets import QApplication  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """
    Ensure QApplication is instantiated only once.
    """
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


class MockQSettings:
    """
    In-memory mock for QSettings to prevent tests from overwriting real config.
    """

    _storage = {}  # Class-level storage to persist across instances

    class Format:
        NativeFormat = 0
        IniFormat = 1

    def __init__(self, *args, **kwargs):
        self.organization = args[0] if len(args) > 0 else "MockOrg"
        self.application = args[1] if len(args) > 1 else "MockApp"

    def _full_key(self, key):
        return f"{self.organization}/{self.application}/{key}"

    def setValue(self, key, value):
        self._storage[self._full_key(key)] = value

    def value(self, key, default=None, type=None):
        val = self._storage.get(self._full_key(key), default)
        if type is not None and val is not None:
            try:
                if type == bool and isinstance(val, str):
                    return val.lower() == "true"
                return type(val)
            except (ValueError, TypeError):
                return default
        return val

    def remove(self, key):
        self._storage.pop(self._full_key(key), None)

    def contains(self, key):
        return self._full_key(key) in self._storage

    def clear(self):
        prefix = f"{self.organization}/{self.application}/"
        for full_key in [k for k in self._storage if k.startswith(prefix)]:
            del self._storage[full_key]

    def sync(self):
        pass


@pytest.fixture(autouse=True, scope="session")
def mock_qsettings_global():
    """
    Globally patches QSettings for the entire test session.
    Protects user's real settings from being overwritten by tests.
    """
    from unittest.mock import patch

    # Modules import QSettings inside functions, so patching the attribute
    # on PySide6.QtCore is enough.
    patcher = patch("PySide6.QtCore.QSettings", MockQSettings)
    mock_class = patcher.start()

    yield mock_class

    patcher.stop()


@pytest.fixture(autouse=True)
def clear_settings_storage():
    """Starts every test with empty settings."""
    MockQSettings._storage.clear()
    yield
    MockQSettings._storage.clear()


@pytest.fixture
def settings():
    """Provides an isolated in-memory settings slot."""
    return MockQSettings("TestOrg", "TestApp")


@pytest.fixture
def sample_gpx():
    """A small GPX document with three track points."""
    return """<?xml version="1.0"?>
<gpx version="1.1" xmlns="http://www.topografix.com/GPX/1/1">
  <trk><trkseg>
    <trkpt lat="60.8631" lon="7.1136"/>
    <trkpt lat="60.8337" lon="7.1302"/>
    <trkpt lat="60.7353" lon="7.1226"/>
  </trkseg></trk>
</gpx>
"""

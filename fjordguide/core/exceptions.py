"""
Exceptions Module.

Defines the error taxonomy of the map subsystem. Every error here is
recoverable: it disables one feature (track line, search results, stored
POIs) while the rest of the map keeps working.
"""


class FjordGuideError(Exception):
    """Base class for all application errors."""


class MalformedTrackError(FjordGuideError):
    """Raised when no coordinate can be extracted from a track file."""


class PersistenceCorruptionError(FjordGuideError):
    """Raised when the stored POI collection cannot be decoded."""


class ValidationError(FjordGuideError):
    """Raised when user input is rejected (e.g. an empty POI title)."""


class NetworkError(FjordGuideError):
    """Raised when a remote service call fails or returns garbage."""

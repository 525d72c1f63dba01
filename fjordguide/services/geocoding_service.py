"""
Geocoding Service Module.

Text search against a Nominatim-compatible geocoder, restricted to a fixed
bounding box so results stay within the fjord region. The HTTP client is
synchronous; GeocodingWorker runs it on a worker thread.
"""

import logging
import os
from typing import Any, List, Optional

import requests
from PySide6.QtCore import QObject, Signal, Slot

from fjordguide.app.constants import (
    DEFAULT_GEOCODER_URL,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_USER_AGENT,
    ENV_GEOCODER_URL,
    ENV_HTTP_TIMEOUT,
    ENV_SEARCH_LIMIT,
    ENV_USER_AGENT,
)
from fjordguide.core.exceptions import NetworkError
from fjordguide.core.geo import FJORD_REGION, BoundingBox, Coordinate, SearchResult

logger = logging.getLogger(__name__)


def _env_number(name: str, default: float, cast: type) -> Any:
    """Reads a numeric environment override, falling back on bad input."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


class GeocodingClient:
    """
    Bounded-region text search client.

    Results are returned in the service's relevance order and capped at
    ``limit`` entries.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        user_agent: Optional[str] = None,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
        bounds: BoundingBox = FJORD_REGION,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the geocoding client.

        Args:
            url: Search endpoint. Defaults to FJORDGUIDE_GEOCODER_URL or
                the public Nominatim instance.
            user_agent: Identifying User-Agent required by Nominatim.
            limit: Maximum number of results (default 5).
            timeout: Request timeout in seconds.
            bounds: Region results are restricted to.
            session: Optional requests session (connection reuse, tests).
        """
        self.url = url or os.getenv(ENV_GEOCODER_URL, DEFAULT_GEOCODER_URL)
        self.user_agent = user_agent or os.getenv(ENV_USER_AGENT, DEFAULT_USER_AGENT)
        self.limit = (
            limit
            if limit is not None
            else _env_number(ENV_SEARCH_LIMIT, DEFAULT_SEARCH_LIMIT, int)
        )
        self.timeout = (
            timeout
            if timeout is not None
            else _env_number(ENV_HTTP_TIMEOUT, DEFAULT_HTTP_TIMEOUT, float)
        )
        self.bounds = bounds
        self._session = session or requests.Session()

        logger.info(f"GeocodingClient initialized: {self.url} (limit={self.limit})")

    def search(
        self,
        query: str,
        bounds: Optional[BoundingBox] = None,
        limit: Optional[int] = None,
    ) -> List[SearchResult]:
        """
        Searches for places matching a free-text query.

        Args:
            query: Free text; blank queries return immediately.
            bounds: Region override. Defaults to the client's bounds.
            limit: Result cap override.

        Returns:
            List[SearchResult]: Ranked results, possibly empty.

        Raises:
            NetworkError: If the request fails or the response is unusable.
        """
        if not query or not query.strip():
            return []

        bounds = bounds or self.bounds
        limit = limit if limit is not None else self.limit
        params = {
            "format": "json",
            "q": query.strip(),
            "viewbox": bounds.to_viewbox(),
            "bounded": 1,
            "limit": limit,
        }
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}

        logger.debug(f"Geocoding query {query!r}")
        try:
            response = self._session.get(
                self.url, params=params, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Geocoder request failed: {e}") from e
        except ValueError as e:
            raise NetworkError(f"Geocoder returned invalid JSON: {e}") from e

        results = self._parse_results(payload)
        logger.info(f"Geocoding {query!r} returned {len(results)} result(s)")
        return results[:limit]

    @staticmethod
    def _parse_results(payload: Any) -> List[SearchResult]:
        """
        Converts the geocoder payload into SearchResults.

        Raises:
            NetworkError: If the payload is not a list.
        """
        if not isinstance(payload, list):
            raise NetworkError(
                f"Unexpected geocoder payload: {type(payload).__name__}"
            )

        results = []
        for entry in payload:
            try:
                coordinate = Coordinate(float(entry["lat"]), float(entry["lon"]))
                result = SearchResult(
                    id=str(entry.get("place_id", "")),
                    coordinate=coordinate,
                    display_name=str(entry.get("display_name", "")),
                )
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed geocoder entry: {e}")
                continue
            results.append(result)
        return results


class GeocodingWorker(QObject):
    """
    Worker object that runs geocoding requests off the UI thread.

    Every request carries the caller's token so stale responses can be
    recognised on arrival. Failures never propagate; they are reported as
    an empty result list plus ``search_failed``.
    """

    results_ready = Signal(int, list)  # token, List[SearchResult]
    search_failed = Signal(int, str)  # token, message

    def __init__(self, client: GeocodingClient) -> None:
        """
        Initializes the worker.

        Args:
            client: The client used to execute searches.
        """
        super().__init__()
        self.client = client

    @Slot(int, str)
    def run_search(self, token: int, query: str) -> None:
        """
        Executes one search and reports the outcome.

        Args:
            token: Request token issued by the caller.
            query: Free-text query.
        """
        try:
            results = self.client.search(query)
        except NetworkError as e:
            logger.error(f"Search #{token} failed: {e}")
            self.results_ready.emit(token, [])
            self.search_failed.emit(token, str(e))
            return
        self.results_ready.emit(token, results)

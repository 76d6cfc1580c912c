"""aiohttp backed implementation of :class:`~pis.core.protocols.StationSource`.

This module is the **only** place in the codebase that talks HTTP.  All
aiohttp exceptions are caught here and re-raised as
:class:`~pis.exceptions.FetchFailedError`: nothing raw escapes the
infrastructure boundary.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any

from pis.exceptions import EnvironmentError, FetchFailedError

logger = logging.getLogger(__name__)


def _load_aiohttp() -> Any:
    """Return the ``aiohttp`` module or raise ``EnvironmentError``."""
    try:
        import aiohttp
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "aiohttp is not installed. Install with: pip install aiohttp",
        ) from exc
    return aiohttp


class StadaClient:
    """Concrete :class:`StationSource` for the DB Stada REST API.

    Usage::

        client = StadaClient(settings.stada_url, timeout=30)
        payload = client.fetch_stations(client_id, api_key)

    Parameters
    ----------
    url:
        Stations endpoint.
    timeout:
        Total request timeout in seconds.
    session_factory:
        Callable returning an ``aiohttp.ClientSession``-compatible async
        context manager.  Defaults to ``aiohttp.ClientSession``.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        session_factory: Callable[..., Any] | None = None,
    ) -> None:
        self._url: str = url
        self._timeout: float = timeout
        self._session_factory: Callable[..., Any] | None = session_factory

    @staticmethod
    def build_headers(client_id: str, api_key: str) -> dict[str, str]:
        """Return the authentication headers expected by the API."""
        return {
            "DB-Client-Id": client_id,
            "DB-Api-Key": api_key,
            "Accept": "application/json",
        }

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def fetch_stations(self, client_id: str, api_key: str) -> dict[str, Any]:
        """Synchronous wrapper around :meth:`fetch_stations_async`."""
        return asyncio.run(self.fetch_stations_async(client_id, api_key))

    async def fetch_stations_async(self, client_id: str, api_key: str) -> dict[str, Any]:
        """Download the raw station payload.

        Raises
        ------
        FetchFailedError
            On HTTP errors, transport failures, timeouts or a body that is
            not a JSON object.
        """
        aiohttp = _load_aiohttp()
        factory = self._session_factory or aiohttp.ClientSession
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        headers = self.build_headers(client_id, api_key)

        logger.debug("GET %s (timeout=%ss)", self._url, self._timeout)
        try:
            async with factory(timeout=timeout, headers=headers) as session:
                async with session.get(self._url) as response:
                    self._check_status(response.status)
                    payload: Any = await response.json(content_type=None)
        except FetchFailedError:
            raise
        except asyncio.TimeoutError as exc:
            raise FetchFailedError(
                f"Request to {self._url} timed out after {self._timeout}s.",
                hint="Raise PIS_HTTP_TIMEOUT or retry later.",
            ) from exc
        except aiohttp.ClientError as exc:
            raise FetchFailedError(
                f"Request to {self._url} failed: {exc}",
                hint="Check your network connection.",
            ) from exc
        except ValueError as exc:
            raise FetchFailedError(f"Response is not valid JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise FetchFailedError("Station API returned an unexpected data structure.")
        return payload

    # ------------------------------------------------------------------
    # Status mapping
    # ------------------------------------------------------------------

    def _check_status(self, status: int) -> None:
        if status < HTTPStatus.BAD_REQUEST:
            return
        if status in (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN):
            raise FetchFailedError(
                f"Station API rejected the credentials (HTTP {status}).",
                hint="Check your DB API marketplace client id and api key.",
            )
        raise FetchFailedError(f"Station API answered with HTTP {status}.")

"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations.
"""

from __future__ import annotations

from typing import Any, Protocol


class StationSource(Protocol):
    """Contract for remote station data backends.

    Any object that implements :meth:`fetch_stations` with the correct
    signature satisfies this protocol structurally (no explicit
    inheritance required).
    """

    def fetch_stations(self, client_id: str, api_key: str) -> dict[str, Any]:
        """Fetch the raw station payload.

        The returned dict must contain a ``"result"`` list of raw
        station dicts.

        Raises
        ------
        FetchFailedError
            When the backend cannot be queried or answers with an error.
        """
        ...  # pragma: no cover


class StationSink(Protocol):
    """Contract for writing rendered station files."""

    def write_file(self, directory: str | None, name: str, content: str) -> None:
        """Write *content* to *name* inside *directory*.

        *directory* may be ``None`` for the current working directory.
        Missing parent directories are created.

        Raises
        ------
        StorageError
            When the file cannot be written.
        """
        ...  # pragma: no cover

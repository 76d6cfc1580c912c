"""Core download service: orchestrates the station download pipeline.

This service delegates fetching to a
:class:`~pis.core.protocols.StationSource` and writing to a
:class:`~pis.core.protocols.StationSink`, both injected at construction
time.  The pipeline runs sequentially:

1. **Fetch**: raw payload from the source.
2. **Parse**: pull the ``result`` list out of the payload.
3. **Map**: convert each record; failures are collected, not fatal.
4. **Write**: one file per station, or a single array file.  A station
   whose file name would be empty or already taken is reported as a
   failure instead of overwriting another file.

Guarantees
----------
* No direct I/O: everything goes through the injected collaborators.
* Only :class:`~pis.exceptions.PisError` subclasses escape.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from pis.core.models import DownloadReport, ItemFailure, Station
from pis.core.protocols import StationSink, StationSource
from pis.core.station_mapper import map_station, station_key
from pis.exceptions import (
    FetchFailedError,
    MissingCredentialsError,
    PisError,
    StationParseError,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]
"""``(index, total, station_name)``: called after each written station."""

StageCallback = Callable[[str], None]
"""Called with a short description whenever a new stage begins."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def render_json(payload: Any) -> str:
    """Serialize *payload* the way station files are stored on disk."""
    return json.dumps(payload, indent="\t", ensure_ascii=False)


class StationDownloadService:
    """Drives the fetch → parse → map → write pipeline.

    Parameters
    ----------
    source:
        Any object satisfying the :class:`StationSource` protocol.
    sink:
        Any object satisfying the :class:`StationSink` protocol.
    source_url:
        URL recorded in every station's ``sources`` entry.
    clock:
        Returns the retrieval time; injectable for deterministic tests.
    """

    def __init__(
        self,
        source: StationSource,
        sink: StationSink,
        *,
        source_url: str,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._source: StationSource = source
        self._sink: StationSink = sink
        self._source_url: str = source_url
        self._clock: Callable[[], datetime] = clock

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def writes_single_file(target: str | None) -> bool:
        """Whether *target* names one ``.json`` file rather than a directory."""
        return bool(target) and target.lower().endswith(".json")

    def download(
        self,
        client_id: str,
        api_key: str,
        target: str | None = None,
        *,
        on_stage: StageCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> DownloadReport:
        """Download every station and write it below *target*.

        Parameters
        ----------
        client_id, api_key:
            DB API marketplace credentials.
        target:
            ``*.json`` for a single array file, otherwise a directory for
            one ``<id>.json`` per station (``None`` = current directory).

        Raises
        ------
        MissingCredentialsError
            If either credential is empty.
        FetchFailedError
            If the source cannot deliver a payload.
        StationParseError
            If the payload has no ``result`` list.
        StorageError
            If a file cannot be written.
        """
        if not client_id or not api_key:
            raise MissingCredentialsError(
                "Require client-id and api-key as arguments!",
                hint="Pass them on the command line or set PIS_DB_CLIENT_ID and PIS_DB_API_KEY.",
            )

        stage = on_stage or (lambda _message: None)

        stage(f"Downloading stations from {self._source_url}")
        payload = self._fetch(client_id, api_key)

        stage("Parsing stations")
        records = self._extract_records(payload)
        timestamp = self._clock().isoformat()

        single_file = self.writes_single_file(target)
        collected: list[Station] = []
        failures: list[ItemFailure] = []
        file_owners: dict[str, str] = {}
        skipped = 0
        written = 0

        for index, raw in enumerate(records, start=1):
            if not isinstance(raw, Mapping):
                failures.append(ItemFailure(f"#{index}", "record is not an object"))
                continue
            try:
                station = map_station(raw, source_url=self._source_url, timestamp=timestamp)
            except StationParseError as exc:
                logger.debug("Skipping malformed record %s: %s", station_key(raw), exc)
                failures.append(ItemFailure(station_key(raw), str(exc)))
                continue
            if station is None:
                skipped += 1
                continue

            if single_file:
                collected.append(station)
            else:
                clash = self._file_name_clash(station, file_owners)
                if clash is not None:
                    logger.debug("Not writing %s: %s", station_key(raw), clash)
                    failures.append(ItemFailure(station_key(raw), clash))
                    continue
                file_owners[station.id] = station.name
                self._sink.write_file(
                    target or None,
                    f"{station.id}.json",
                    render_json(station.to_dict()),
                )
            written += 1
            if on_progress is not None:
                on_progress(index, len(records), station.name)

        if single_file:
            self._sink.write_file(
                None,
                str(target),
                render_json([station.to_dict() for station in collected]),
            )

        logger.debug(
            "Download finished: %d written, %d skipped, %d failed",
            written,
            skipped,
            len(failures),
        )
        return DownloadReport(
            total=len(records),
            written=written,
            skipped=skipped,
            failures=tuple(failures),
        )

    # ------------------------------------------------------------------
    # Stages (safe boundary)
    # ------------------------------------------------------------------

    def _fetch(self, client_id: str, api_key: str) -> dict[str, Any]:
        """Call the source and ensure only our exceptions escape."""
        try:
            return self._source.fetch_stations(client_id, api_key)
        except PisError:
            raise
        except Exception as exc:
            raise FetchFailedError(f"Unexpected source error: {exc}") from exc

    @staticmethod
    def _file_name_clash(station: Station, owners: Mapping[str, str]) -> str | None:
        """Why *station* cannot get its own ``<id>.json``, or ``None``."""
        if not station.id:
            return f"name {station.name!r} yields an empty file name"
        owner = owners.get(station.id)
        if owner is not None:
            return f"id {station.id!r} already written for {owner!r}"
        return None

    @staticmethod
    def _extract_records(payload: Any) -> list[Any]:
        records = payload.get("result") if isinstance(payload, Mapping) else None
        if not isinstance(records, list):
            raise StationParseError(
                "Station payload has no 'result' list.",
                hint="The API response format may have changed.",
            )
        return records

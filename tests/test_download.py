"""Tests for the station download pipeline (core/download_service.py).

The :class:`StationSource` and :class:`StationSink` are mocked: no
network and no filesystem access.

Coverage:
* Credential validation.
* Single-file vs. one-file-per-station output.
* Per-item failures collected without aborting the batch.
* Exception wrapping (source errors → FetchFailedError).
* Stage and progress callbacks.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock, call

import pytest

from pis.core.download_service import StationDownloadService, render_json
from pis.exceptions import (
    FetchFailedError,
    MissingCredentialsError,
    StationParseError,
    StorageError,
)

URL = "https://example.invalid/stations"


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def _raw(number: int, name: str, **overrides: Any) -> dict[str, Any]:
    defaults: dict[str, Any] = {
        "number": number,
        "name": name,
        "category": 3,
        "federalState": "Hessen",
        "mailingAddress": {"city": "X", "zipcode": "1", "street": "Bahnhofstr. 1"},
        "evaNumbers": [
            {
                "number": 8000000 + number,
                "geographicCoordinates": {"coordinates": [8.0, 50.0]},
            },
        ],
        "ril100Identifiers": [],
    }
    defaults.update(overrides)
    return defaults


def _service(payload: Any) -> tuple[StationDownloadService, MagicMock, MagicMock]:
    source = MagicMock()
    source.fetch_stations.return_value = payload
    sink = MagicMock()
    svc = StationDownloadService(
        source,
        sink,
        source_url=URL,
        clock=lambda: datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )
    return svc, source, sink


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------

class TestCredentials:
    @pytest.mark.parametrize(("client_id", "api_key"), [("", "key"), ("id", ""), ("", "")])
    def test_missing_credentials_raise(self, client_id: str, api_key: str) -> None:
        svc, source, _ = _service({"result": []})
        with pytest.raises(MissingCredentialsError):
            svc.download(client_id, api_key)
        source.fetch_stations.assert_not_called()

    def test_credentials_forwarded(self) -> None:
        svc, source, _ = _service({"result": []})
        svc.download("id", "key")
        source.fetch_stations.assert_called_once_with("id", "key")


# ---------------------------------------------------------------------------
# Output modes
# ---------------------------------------------------------------------------

class TestOutputModes:
    @pytest.mark.parametrize(
        ("target", "expected"),
        [("out.json", True), ("dir/OUT.JSON", True), ("stations", False), (None, False), ("", False)],
    )
    def test_writes_single_file(self, target: str | None, expected: bool) -> None:
        assert StationDownloadService.writes_single_file(target) is expected

    def test_directory_target_writes_one_file_per_station(self) -> None:
        svc, _, sink = _service({"result": [_raw(1, "Frankfurt Süd"), _raw(2, "Mainz")]})
        report = svc.download("id", "key", "stations")

        names = [c.args[1] for c in sink.write_file.call_args_list]
        assert names == ["frankfurt_sued.json", "mainz.json"]
        assert all(c.args[0] == "stations" for c in sink.write_file.call_args_list)
        assert report.written == 2

    def test_no_target_writes_into_current_directory(self) -> None:
        svc, _, sink = _service({"result": [_raw(1, "Mainz")]})
        svc.download("id", "key")
        sink.write_file.assert_called_once()
        assert sink.write_file.call_args.args[0] is None
        assert sink.write_file.call_args.args[1] == "mainz.json"

    def test_json_target_writes_one_array(self) -> None:
        svc, _, sink = _service({"result": [_raw(1, "Mainz"), _raw(2, "Wiesbaden")]})
        svc.download("id", "key", "out/stations.json")

        sink.write_file.assert_called_once()
        directory, name, content = sink.write_file.call_args.args
        assert directory is None
        assert name == "out/stations.json"
        data = json.loads(content)
        assert [entry["id"] for entry in data] == ["mainz", "wiesbaden"]

    def test_files_are_tab_indented(self) -> None:
        svc, _, sink = _service({"result": [_raw(1, "Mainz")]})
        svc.download("id", "key", "dir")
        content = sink.write_file.call_args.args[2]
        assert '\n\t"id": "mainz"' in content

    def test_station_content(self) -> None:
        svc, _, sink = _service({"result": [_raw(1, "Mainz")]})
        svc.download("id", "key", "dir")
        data = json.loads(sink.write_file.call_args.args[2])
        assert data["address"]["street"] == "Bahnhofstraße 1"
        assert data["sources"] == [
            {"name": "DB Stada", "url": URL, "timestamp": "2024-05-01T12:00:00+00:00"},
        ]

    def test_render_json_keeps_umlauts(self) -> None:
        assert render_json({"name": "Köln"}) == '{\n\t"name": "Köln"\n}'


# ---------------------------------------------------------------------------
# Per-item handling
# ---------------------------------------------------------------------------

class TestPerItem:
    def test_stations_without_eva_are_skipped(self) -> None:
        svc, _, sink = _service({"result": [_raw(1, "Mainz"), _raw(2, "Depot", evaNumbers=[])]})
        report = svc.download("id", "key", "dir")

        assert report.total == 2
        assert report.written == 1
        assert report.skipped == 1
        assert report.failures == ()
        sink.write_file.assert_called_once()

    def test_malformed_station_is_collected_and_batch_continues(self) -> None:
        broken = _raw(2, "Broken")
        del broken["mailingAddress"]
        svc, _, sink = _service({"result": [_raw(1, "Mainz"), broken, _raw(3, "Worms")]})
        report = svc.download("id", "key", "dir")

        assert report.written == 2
        assert len(report.failures) == 1
        assert report.failures[0].key == "2"
        assert not report.ok
        assert sink.write_file.call_count == 2

    def test_non_object_record_is_collected(self) -> None:
        svc, _, _ = _service({"result": ["oops", _raw(1, "Mainz")]})
        report = svc.download("id", "key", "dir")
        assert report.failures[0].key == "#1"
        assert report.written == 1

    def test_duplicate_id_is_not_overwritten(self) -> None:
        svc, _, sink = _service({"result": [_raw(1, "Halle (Saale)"), _raw(2, "Halle-Saale")]})
        report = svc.download("id", "key", "dir")

        assert report.written == 1
        sink.write_file.assert_called_once()
        assert sink.write_file.call_args.args[1] == "halle_saale.json"
        assert json.loads(sink.write_file.call_args.args[2])["name"] == "Halle (Saale)"
        assert report.failures[0].key == "2"
        assert "halle_saale" in report.failures[0].reason

    def test_symbol_only_name_is_not_written(self) -> None:
        svc, _, sink = _service({"result": [_raw(1, "???"), _raw(2, "Mainz")]})
        report = svc.download("id", "key", "dir")

        assert report.written == 1
        sink.write_file.assert_called_once()
        assert sink.write_file.call_args.args[1] == "mainz.json"
        assert "empty file name" in report.failures[0].reason

    def test_duplicate_ids_share_a_single_file(self) -> None:
        svc, _, sink = _service({"result": [_raw(1, "Halle (Saale)"), _raw(2, "Halle-Saale")]})
        report = svc.download("id", "key", "all.json")

        assert report.written == 2
        assert report.failures == ()
        assert len(json.loads(sink.write_file.call_args.args[2])) == 2

    def test_missing_result_list_raises(self) -> None:
        svc, _, _ = _service({"total": 0})
        with pytest.raises(StationParseError, match="result"):
            svc.download("id", "key")

    def test_empty_result(self) -> None:
        svc, _, sink = _service({"result": []})
        report = svc.download("id", "key", "all.json")
        assert report.total == 0
        sink.write_file.assert_called_once_with(None, "all.json", "[]")


# ---------------------------------------------------------------------------
# Exception mapping
# ---------------------------------------------------------------------------

class TestExceptions:
    def test_fetch_failed_error_propagates(self) -> None:
        svc, source, _ = _service({})
        source.fetch_stations.side_effect = FetchFailedError("HTTP 500")
        with pytest.raises(FetchFailedError, match="HTTP 500"):
            svc.download("id", "key")

    def test_unexpected_error_wrapped_and_chained(self) -> None:
        svc, source, _ = _service({})
        original = RuntimeError("root cause")
        source.fetch_stations.side_effect = original
        with pytest.raises(FetchFailedError, match="Unexpected") as exc_info:
            svc.download("id", "key")
        assert exc_info.value.__cause__ is original

    def test_storage_error_aborts(self) -> None:
        svc, _, sink = _service({"result": [_raw(1, "Mainz")]})
        sink.write_file.side_effect = StorageError("disk full")
        with pytest.raises(StorageError):
            svc.download("id", "key", "dir")


# ---------------------------------------------------------------------------
# Callbacks
# ---------------------------------------------------------------------------

class TestCallbacks:
    def test_stage_messages(self) -> None:
        svc, _, _ = _service({"result": []})
        on_stage = MagicMock()
        svc.download("id", "key", on_stage=on_stage)
        assert on_stage.call_args_list == [
            call(f"Downloading stations from {URL}"),
            call("Parsing stations"),
        ]

    def test_progress_per_written_station(self) -> None:
        svc, _, _ = _service({"result": [_raw(1, "Mainz"), _raw(2, "Depot", evaNumbers=[]), _raw(3, "Worms")]})
        on_progress = MagicMock()
        svc.download("id", "key", "dir", on_progress=on_progress)
        assert on_progress.call_args_list == [call(1, 3, "Mainz"), call(3, 3, "Worms")]

"""Tests for domain models (core/models.py).

All models are frozen dataclasses: these tests verify immutability and
the JSON shape written to station files.
"""

from __future__ import annotations

import dataclasses

import pytest

from pis.core.models import (
    Address,
    DownloadReport,
    ItemFailure,
    Location,
    Source,
    Station,
    StationIds,
)


def _make_station(**overrides: object) -> Station:
    defaults: dict[str, object] = {
        "id": "karlsruhe_hbf",
        "name": "Karlsruhe Hbf",
        "score": 1,
        "location": Location(latitude=48.99, longitude=8.40),
        "address": Address(
            street="Bahnhofplatz 1",
            zipcode="76137",
            city="Karlsruhe",
            federal_state="Baden-Württemberg",
            country="Deutschland",
        ),
        "opening_hours": {"monday": "06:00 - 22:00"},
        "services": {"parking": True, "barrierFree": False},
        "ids": StationIds(eva=8000191, ril=("RK",), stada=3144),
        "sources": (Source("DB Stada", "https://example.invalid", "2024-01-01T00:00:00+00:00"),),
    }
    defaults.update(overrides)
    return Station(**defaults)  # type: ignore[arg-type]


class TestStation:
    def test_frozen(self) -> None:
        station = _make_station()
        with pytest.raises(dataclasses.FrozenInstanceError):
            station.name = "Other"  # type: ignore[misc]

    def test_to_dict_shape(self) -> None:
        data = _make_station().to_dict()
        assert data == {
            "id": "karlsruhe_hbf",
            "name": "Karlsruhe Hbf",
            "score": 1,
            "location": {"latitude": 48.99, "longitude": 8.40},
            "address": {
                "street": "Bahnhofplatz 1",
                "zipcode": "76137",
                "city": "Karlsruhe",
                "federalState": "Baden-Württemberg",
                "country": "Deutschland",
            },
            "open": {"monday": "06:00 - 22:00"},
            "services": {"parking": True, "barrierFree": False},
            "ids": {"eva": 8000191, "ril": ["RK"], "stada": 3144},
            "sources": [
                {
                    "name": "DB Stada",
                    "url": "https://example.invalid",
                    "timestamp": "2024-01-01T00:00:00+00:00",
                },
            ],
        }

    def test_to_dict_without_location_or_ids(self) -> None:
        data = _make_station(location=None, ids=None).to_dict()
        assert data["location"] == {}
        assert data["ids"] == {}


class TestDownloadReport:
    def test_ok_without_failures(self) -> None:
        assert DownloadReport(total=2, written=2, skipped=0).ok

    def test_not_ok_with_failures(self) -> None:
        report = DownloadReport(
            total=2, written=1, skipped=0, failures=(ItemFailure("7", "bad"),),
        )
        assert not report.ok

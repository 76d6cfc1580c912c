"""Domain models for pis.

All models are **frozen** dataclasses: immutable value objects with no
behaviour beyond data access and JSON rendering.  They carry zero I/O
and zero dependencies on external packages.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Station parts
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Location:
    """WGS84 coordinates of a station."""

    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class Address:
    """Postal address of a station."""

    street: str
    zipcode: str
    city: str
    federal_state: str
    country: str


@dataclass(frozen=True, slots=True)
class StationIds:
    """External identifiers of a station."""

    eva: int
    """Primary EVA number."""

    ril: tuple[str, ...]
    """RIL100 identifiers (e.g. ``"RK"``)."""

    stada: int
    """Station number in the Stada register."""


@dataclass(frozen=True, slots=True)
class Source:
    """Where a record was obtained from, and when."""

    name: str
    url: str
    timestamp: str
    """ISO-8601 retrieval time."""


# ---------------------------------------------------------------------------
# Station record
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Station:
    """One station as written to disk by the download command."""

    id: str
    """Stable identifier, ``normalize(name, "_")``."""

    name: str
    score: int
    location: Location | None
    address: Address
    opening_hours: Mapping[str, str] = field(default_factory=dict)
    """Weekday → ``"HH:MM - HH:MM"``; days without staff are absent."""

    services: Mapping[str, bool] = field(default_factory=dict)
    ids: StationIds | None = None
    sources: tuple[Source, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase JSON shape used by the station files."""
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "location": (
                {}
                if self.location is None
                else {
                    "latitude": self.location.latitude,
                    "longitude": self.location.longitude,
                }
            ),
            "address": {
                "street": self.address.street,
                "zipcode": self.address.zipcode,
                "city": self.address.city,
                "federalState": self.address.federal_state,
                "country": self.address.country,
            },
            "open": dict(self.opening_hours),
            "services": dict(self.services),
            "ids": (
                {}
                if self.ids is None
                else {
                    "eva": self.ids.eva,
                    "ril": list(self.ids.ril),
                    "stada": self.ids.stada,
                }
            ),
            "sources": [
                {"name": src.name, "url": src.url, "timestamp": src.timestamp}
                for src in self.sources
            ],
        }


# ---------------------------------------------------------------------------
# Pipeline results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ItemFailure:
    """A single record that could not be converted."""

    key: str
    """Best available identifier of the raw record."""

    reason: str


@dataclass(frozen=True, slots=True)
class DownloadReport:
    """Summary of one download run."""

    total: int
    """Number of raw records received."""

    written: int
    skipped: int
    """Records ignored on purpose (e.g. no EVA number)."""

    failures: tuple[ItemFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures

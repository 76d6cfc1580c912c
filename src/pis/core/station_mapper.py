"""Pure conversion of raw DB Stada station dicts into :class:`Station`.

Raw → domain-model parsing only: no I/O, no network.  A record that
lacks a mandatory field raises :class:`StationParseError`; the caller
decides whether that aborts the batch.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pis.core.models import Address, Location, Source, Station, StationIds
from pis.core.search import normalize
from pis.exceptions import StationParseError

SOURCE_NAME: str = "DB Stada"
COUNTRY: str = "Deutschland"

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# Output service name → Stada flag.
_SERVICE_FLAGS: tuple[tuple[str, str], ...] = (
    ("parking", "hasParking"),
    ("bicycleParking", "hasBicycleParking"),
    ("localPublicTransport", "hasLocalPublicTransport"),
    ("carRental", "hasCarRental"),
    ("taxi", "hasTaxiRank"),
    ("publicFacilities", "hasPublicFacilities"),
    ("travelNecessities", "hasTravelNecessities"),
    ("locker", "hasLockerSystem"),
    ("wifi", "hasWiFi"),
    ("information", "hasTravelCenter"),
    ("railwayMission", "hasRailwayMission"),
    ("lostAndFound", "hasLostAndFound"),
    ("mobilityService", "hasMobilityService"),
)

_NEGATIVE_FLAGS: frozenset[str] = frozenset({"", "no", "nein", "false"})


def station_key(raw: Mapping[str, Any]) -> str:
    """Best-effort label for a raw record, used in failure reports."""
    for key in ("number", "name"):
        value = raw.get(key)
        if value not in (None, ""):
            return str(value)
    return "<unknown>"


def map_station(
    raw: Mapping[str, Any],
    *,
    source_url: str,
    timestamp: str,
) -> Station | None:
    """Convert one raw Stada record.

    Returns ``None`` for stations without an EVA number: those are not
    passenger stations and are skipped on purpose.

    Raises
    ------
    StationParseError
        If a mandatory field is missing or has the wrong shape.
    """
    eva_numbers = raw.get("evaNumbers") or []
    if not eva_numbers:
        return None

    try:
        name = str(raw["name"])
        eva = eva_numbers[0]
        longitude, latitude = eva["geographicCoordinates"]["coordinates"][:2]
        mailing = raw["mailingAddress"]
        station = Station(
            id=normalize(name, "_"),
            name=name,
            score=int(raw["category"]),
            location=Location(latitude=float(latitude), longitude=float(longitude)),
            address=Address(
                street=_expand_street(_text(mailing.get("street"))),
                zipcode=_text(mailing.get("zipcode")),
                city=_text(mailing.get("city")),
                federal_state=_text(raw.get("federalState")),
                country=COUNTRY,
            ),
            opening_hours=_opening_hours(raw.get("localServiceStaff")),
            services=_services(raw),
            ids=StationIds(
                eva=int(eva["number"]),
                ril=tuple(
                    str(entry["rilIdentifier"])
                    for entry in raw.get("ril100Identifiers") or []
                ),
                stada=int(raw["number"]),
            ),
            sources=(Source(SOURCE_NAME, source_url, timestamp),),
        )
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise StationParseError(
            f"Failed to parse station {station_key(raw)} ({type(exc).__name__}: {exc})",
        ) from exc
    return station


# ---------------------------------------------------------------------------
# Field helpers (pure)
# ---------------------------------------------------------------------------

def _text(value: Any) -> str:
    """Render an optional text field; JSON ``null`` becomes ``""``."""
    return "" if value is None else str(value)


def _expand_street(street: str) -> str:
    """Spell out the first ``str.`` abbreviation and drop one double space."""
    return street.replace("str.", "straße", 1).replace("  ", " ", 1)


def _opening_hours(staff: Any) -> dict[str, str]:
    """Map ``localServiceStaff.availability`` to ``weekday → "from - to"``."""
    if not isinstance(staff, Mapping):
        return {}
    availability = staff.get("availability")
    if not isinstance(availability, Mapping):
        return {}
    hours: dict[str, str] = {}
    for day in WEEKDAYS:
        slot = availability.get(day)
        if slot:
            hours[day] = f"{slot['fromTime']} - {slot['toTime']}"
    return hours


def _flag(value: Any) -> bool:
    """Interpret a Stada service flag, which may be a bool or free text."""
    if isinstance(value, str):
        return value.strip().lower() not in _NEGATIVE_FLAGS
    return value is True


def _services(raw: Mapping[str, Any]) -> dict[str, bool]:
    services = {name: _flag(raw.get(flag)) for name, flag in _SERVICE_FLAGS}
    # "partial" stepless access does not count as barrier free.
    stepless = raw.get("hasSteplessAccess")
    services["barrierFree"] = stepless is True or stepless == "yes"
    return services

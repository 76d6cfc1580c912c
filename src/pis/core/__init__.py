"""Core / service layer: pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from pis.core.commands import (
    Branch,
    CommandNode,
    Failure,
    FailureKind,
    HelpEntry,
    HelpPrinted,
    Invoked,
    Leaf,
    Outcome,
    dispatch,
    flatten_help,
)
from pis.core.download_service import StationDownloadService
from pis.core.models import DownloadReport, ItemFailure, Station
from pis.core.protocols import StationSink, StationSource
from pis.core.search import NamedScoredItem, Relevance, compare_relevance, normalize, rank

__all__: list[str] = [
    "Branch",
    "CommandNode",
    "DownloadReport",
    "Failure",
    "FailureKind",
    "HelpEntry",
    "HelpPrinted",
    "Invoked",
    "ItemFailure",
    "Leaf",
    "NamedScoredItem",
    "Outcome",
    "Relevance",
    "Station",
    "StationDownloadService",
    "StationSink",
    "StationSource",
    "compare_relevance",
    "dispatch",
    "flatten_help",
    "normalize",
    "rank",
]

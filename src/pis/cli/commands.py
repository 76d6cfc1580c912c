"""Command tree and leaf handlers for the ``pis`` executable.

The tree is declared once by :func:`build_command_tree`; its declaration
order is the order ``pis help`` lists the commands in.  Handlers are
bound to an :class:`~pis.cli.context.AppContext` and may raise any
:class:`~pis.exceptions.PisError`: the error boundary in
:mod:`pis.cli.app` renders it.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Sequence
from functools import cmp_to_key
from typing import Any

from pis.cli.console import console, out
from pis.cli.context import AppContext
from pis.cli.progress import ProgressLogger
from pis.core.commands import Branch, Leaf
from pis.core.download_service import StationDownloadService
from pis.core.search import NamedScoredItem, compare_relevance, normalize
from pis.core.selftest import DEFAULT_WARMUP_CYCLES, default_cases, run_self_tests
from pis.exceptions import SelfTestFailedError, StorageError, UsageError

logger = logging.getLogger(__name__)


class CommandHandlers:
    """Leaf handlers sharing one :class:`AppContext`."""

    def __init__(self, context: AppContext) -> None:
        self._context: AppContext = context

    # ------------------------------------------------------------------
    # download DB/Stada
    # ------------------------------------------------------------------

    def download_stada(self, args: Sequence[str]) -> None:
        """Download all stations from the DB Stada API.

        ``args`` is ``[client-id] [api-key] [path|file]``; missing
        credentials fall back to the configured ones.
        """
        if len(args) > 3:
            raise UsageError(
                "Too many arguments for download DB/Stada.",
                hint="Usage: download DB/Stada <client-id> <api-key> [path|file]",
            )
        settings = self._context.settings
        client_id = args[0] if len(args) > 0 else settings.db_client_id
        api_key = args[1] if len(args) > 1 else settings.db_api_key
        target = args[2] if len(args) > 2 else None

        service = StationDownloadService(
            self._context.station_source(),
            self._context.file_store,
            source_url=settings.stada_url,
        )
        with ProgressLogger("DB/Stada", "stations") as progress:
            report = service.download(
                client_id or "",
                api_key or "",
                target,
                on_stage=progress.loading,
                on_progress=progress.progress,
            )
            for failure in report.failures:
                progress.warn(f"Failed to parse {failure.key} ({failure.reason})")
            progress.finish(report.written)

        if report.skipped:
            logger.info("Skipped %d stations without EVA number", report.skipped)

    # ------------------------------------------------------------------
    # search
    # ------------------------------------------------------------------

    def search(self, args: Sequence[str]) -> None:
        """Rank the stations in a downloaded file against a search term."""
        if len(args) < 2:
            raise UsageError(
                "search requires a station file and a search term.",
                hint="Usage: search <file> <term...>",
            )
        path, words = args[0], args[1:]
        term = normalize(" ".join(words), " ")
        if not term:
            raise UsageError(f"Search term {' '.join(words)!r} is empty after normalization.")

        stations = self._load_stations(path)
        matches: list[tuple[NamedScoredItem, dict[str, Any]]] = []
        for station in stations:
            item = NamedScoredItem(
                search_name=normalize(str(station.get("name", "")), " "),
                score=_score(station.get("score")),
            )
            if term in item.search_name:
                matches.append((item, station))

        matches.sort(key=cmp_to_key(lambda a, b: compare_relevance(term, a[0], b[0])))
        logger.debug("%d of %d stations match %r", len(matches), len(stations), term)

        if not matches:
            console.print(f"[yellow]No station matches[/yellow] {term!r}")
            return
        for item, station in matches[: self._context.settings.search_limit]:
            out.plain(f"{station.get('name', '')}\t{station.get('id', '')}\t{item.score:g}")

    def _load_stations(self, path: str) -> list[dict[str, Any]]:
        content = self._context.file_store.read_file(None, path)
        try:
            payload = json.loads(content)
        except ValueError as exc:
            raise StorageError(f"{path} is not valid JSON: {exc}") from exc
        if not isinstance(payload, list):
            raise StorageError(
                f"{path} does not contain a station list.",
                hint="Download with a *.json target: download DB/Stada <client-id> <api-key> stations.json",
            )
        return [entry for entry in payload if isinstance(entry, dict)]

    # ------------------------------------------------------------------
    # test
    # ------------------------------------------------------------------

    def self_test(self, args: Sequence[str]) -> None:
        """Run the built-in normalization and ranking checks."""
        cycles = self._context.settings.selftest_cycles
        results = run_self_tests(
            default_cases(),
            warmup=min(DEFAULT_WARMUP_CYCLES, cycles),
            cycles=cycles,
        )
        failed = 0
        for result in results:
            timing = f"({result.average_us:.3f}µs)"
            if result.passed:
                console.print(f"[green]TEST PASSED:[/green] {result.name} {timing}")
                continue
            failed += 1
            console.print(f"[red]TEST FAILED:[/red] {result.name} {timing}")
            console.print(f"\tExpected: [cyan]{result.expected!r}[/cyan]")
            console.print(f"\tResult: [red]{result.actual!r}[/red]")

        passed = len(results) - failed
        console.print(
            f"[green]{passed}[/green] tests passed, [red]{failed}[/red] tests failed!"
        )
        if failed:
            raise SelfTestFailedError(f"{failed} self-test case(s) failed.")


def _score(value: Any) -> float:
    """Read a stored score; anything that is not a finite number counts as 0."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    return score if math.isfinite(score) else 0.0


# ---------------------------------------------------------------------------
# Tree
# ---------------------------------------------------------------------------

def build_command_tree(context: AppContext) -> Branch:
    """Return the command tree with handlers bound to *context*."""
    handlers = CommandHandlers(context)
    return Branch({
        "download": Branch({
            "DB/Stada": Leaf(
                handler=handlers.download_stada,
                usage="download DB/Stada <client-id> <api-key> [path|file]",
                description="Downloads stations from the DB Stada API to multiple files or a single file",
            ),
        }),
        "search": Leaf(
            handler=handlers.search,
            usage="search <file> <term...>",
            description="Ranks the stations of a downloaded station file by relevance",
        ),
        "test": Leaf(
            handler=handlers.self_test,
            usage="test",
            description="Runs all tests",
        ),
    })

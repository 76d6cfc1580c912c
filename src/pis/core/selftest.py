"""Built-in self test with micro-benchmark timings.

Backs the ``pis test`` command: each case is checked once for
correctness, then re-run to report an average execution time.  Pure
apart from the injected clock.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from pis.core.search import NamedScoredItem, Relevance, compare_relevance, normalize

DEFAULT_WARMUP_CYCLES: int = 100
DEFAULT_EXECUTION_CYCLES: int = 10_000

_SAMPLE_NAME = "Fäßchen/Brücken-Straße (Brötchen)Compañía"
_HBF = NamedScoredItem("karlsruhe hbf", 0)
_LEIPZIG = NamedScoredItem("leipzig karlsruher strasse", 0)


@dataclass(frozen=True, slots=True)
class SelfTestCase:
    name: str
    execute: Callable[[], Any]
    expect: Any


@dataclass(frozen=True, slots=True)
class SelfTestResult:
    name: str
    passed: bool
    expected: Any
    actual: Any
    average_us: float
    """Mean execution time in microseconds."""


def default_cases() -> list[SelfTestCase]:
    """The normalization and ranking checks shipped with the tool."""
    return [
        SelfTestCase(
            "normalize() should return without separator",
            lambda: normalize(_SAMPLE_NAME),
            "faesschenbrueckenstrassebroetchencompania",
        ),
        SelfTestCase(
            "normalize() should return with blank separator",
            lambda: normalize(_SAMPLE_NAME, " "),
            "faesschen bruecken strasse broetchen compania",
        ),
        SelfTestCase(
            "normalize() should return with underscore separator",
            lambda: normalize(_SAMPLE_NAME, "_"),
            "faesschen_bruecken_strasse_broetchen_compania",
        ),
        SelfTestCase(
            "compare_relevance() should rank prefix match first",
            lambda: compare_relevance("karlsruhe", _HBF, _LEIPZIG),
            Relevance.AHEAD,
        ),
        SelfTestCase(
            "compare_relevance() should rank prefix match second",
            lambda: compare_relevance("karlsruhe", _LEIPZIG, _HBF),
            Relevance.BEHIND,
        ),
        SelfTestCase(
            "compare_relevance() should prefer prefix over score",
            lambda: compare_relevance(
                "karlsruhe", _LEIPZIG, NamedScoredItem("karlsruhe hbf", -1),
            ),
            Relevance.BEHIND,
        ),
        SelfTestCase(
            "compare_relevance() should rank higher score first",
            lambda: compare_relevance(
                "berlin", NamedScoredItem("karlsruhe hbf", 1), _LEIPZIG,
            ),
            Relevance.AHEAD,
        ),
        SelfTestCase(
            "compare_relevance() should tie on equal score",
            lambda: compare_relevance("berlin", _HBF, _LEIPZIG),
            Relevance.TIED,
        ),
    ]


def run_self_tests(
    cases: Iterable[SelfTestCase],
    *,
    warmup: int = DEFAULT_WARMUP_CYCLES,
    cycles: int = DEFAULT_EXECUTION_CYCLES,
    clock: Callable[[], float] = time.perf_counter,
) -> list[SelfTestResult]:
    """Run every case; *clock* returns seconds."""
    results: list[SelfTestResult] = []
    for case in cases:
        actual = case.execute()
        for _ in range(warmup):
            case.execute()
        durations: list[float] = []
        for _ in range(cycles):
            start = clock()
            case.execute()
            durations.append((clock() - start) * 1e6)
        results.append(
            SelfTestResult(
                name=case.name,
                passed=actual == case.expect,
                expected=case.expect,
                actual=actual,
                average_us=_mean(durations),
            )
        )
    return results


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0

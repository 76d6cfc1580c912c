"""Name normalization and relevance ranking.

Every function in this module is a **pure** transformation: no I/O,
no side effects, fully deterministic.

:func:`normalize` folds a Latin-script place name into a canonical
lowercase token stream; :func:`compare_relevance` orders two candidates
against a term already folded into that same space.
"""

from __future__ import annotations

import enum
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass
from functools import cmp_to_key


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------

# Checked before NFD: decomposing "ä" would drop the phonetic "e".
_DIGRAPHS: dict[str, str] = {
    "ä": "ae",
    "ö": "oe",
    "ü": "ue",
    "ß": "ss",
    "Ä": "ae",
    "Ö": "oe",
    "Ü": "ue",
    "ẞ": "ss",
}

_SEPARATORS: frozenset[str] = frozenset(" /-()")

_ALNUM: frozenset[str] = frozenset("abcdefghijklmnopqrstuvwxyz0123456789")

_ASCII_FOLD: dict[int, int] = {code: code + 32 for code in range(ord("A"), ord("Z") + 1)}


def _fold(char: str) -> str:
    """Lowercase ``A``–``Z`` only; every other codepoint is unchanged."""
    return char.translate(_ASCII_FOLD)


def _base_letter(char: str) -> str | None:
    """Return the ASCII base of a precomposed letter, or ``None``.

    ``"ñ"`` decomposes to ``"n"`` + a combining tilde and yields ``"n"``;
    symbols that do not decompose yield ``None``.
    """
    decomposed = unicodedata.normalize("NFD", char)
    if decomposed == char:
        return None
    base = _fold(decomposed[0])
    return base if base in _ALNUM else None


def normalize(name: str, separator: str | None = None) -> str:
    """Fold *name* into lowercase ASCII letters, digits and separators.

    Runs of space, ``/``, ``-``, ``(`` and ``)`` collapse into a single
    *separator* (or nothing when *separator* is ``None`` or empty).  A
    separator is only written between two emitted characters, never at
    either end of the result.

    Examples
    --------
    >>> normalize("Brücken-Straße (Süd)", "_")
    'bruecken_strasse_sued'
    """
    out: list[str] = []
    gap = False

    def emit(text: str) -> None:
        nonlocal gap
        if gap and separator:
            out.append(separator)
        gap = False
        out.append(text)

    for raw in name:
        char = _fold(raw)
        digraph = _DIGRAPHS.get(char)
        if digraph is not None:
            emit(digraph)
        elif char in _SEPARATORS:
            gap = bool(out)
        elif char in _ALNUM:
            emit(char)
        elif ord(char) > 127:
            base = _base_letter(char)
            if base is not None:
                emit(base)
    return "".join(out)


# ---------------------------------------------------------------------------
# Relevance ranking
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class NamedScoredItem:
    """A search candidate: its normalized name and a popularity score."""

    search_name: str
    score: float


class Relevance(enum.IntEnum):
    """Three-way ranking result, usable as a ``cmp_to_key`` return value."""

    AHEAD = -1
    TIED = 0
    BEHIND = 1


def compare_relevance(
    term: str,
    a: NamedScoredItem,
    b: NamedScoredItem,
) -> Relevance:
    """Rank *a* against *b* for the already-normalized *term*.

    A name starting with *term* always beats one that does not; among
    equals the strictly higher score wins and equal scores tie.
    """
    a_prefix = a.search_name.startswith(term)
    b_prefix = b.search_name.startswith(term)
    if a_prefix != b_prefix:
        return Relevance.AHEAD if a_prefix else Relevance.BEHIND
    if a.score > b.score:
        return Relevance.AHEAD
    if a.score < b.score:
        return Relevance.BEHIND
    return Relevance.TIED


def rank(term: str, items: Iterable[NamedScoredItem]) -> list[NamedScoredItem]:
    """Return *items* best match first; ties keep their input order."""
    key = cmp_to_key(lambda a, b: compare_relevance(term, a, b))
    return sorted(items, key=key)

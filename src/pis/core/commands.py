"""Command tree and dispatcher.

The tree is an explicit tagged variant: every node is either a
:class:`Branch` (named children, no behaviour) or a :class:`Leaf`
(handler plus help metadata).  It is built once at startup and never
mutated afterwards.

:func:`dispatch` walks the tree with the raw argument list and returns
an :data:`Outcome`: it never prints and never exits the process, so
the CLI boundary alone decides how a failure is surfaced.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

logger = logging.getLogger(__name__)

HELP_TOKEN: str = "help"
"""Reserved token that lists every command below the current branch."""

Handler = Callable[[Sequence[str]], None]


# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Leaf:
    """Executable command bound to a handler."""

    handler: Handler
    usage: str
    description: str


@dataclass(frozen=True, slots=True)
class Branch:
    """Named group of child commands.

    *children* keeps declaration order; it is copied into a read-only
    mapping so the tree cannot change once built.
    """

    children: Mapping[str, CommandNode] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", MappingProxyType(dict(self.children)))

    @property
    def names(self) -> tuple[str, ...]:
        """Child names in declaration order."""
        return tuple(self.children)


CommandNode = Branch | Leaf


@dataclass(frozen=True, slots=True)
class HelpEntry:
    """One line of help output."""

    usage: str
    description: str


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

class FailureKind(enum.Enum):
    """Why a dispatch could not reach a leaf."""

    MISSING_ARGUMENT = "missing-argument"
    UNKNOWN_COMMAND = "unknown-command"


@dataclass(frozen=True, slots=True)
class Invoked:
    """A leaf handler ran with *args*."""

    args: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class HelpPrinted:
    """``help`` was requested; *entries* must be rendered by the caller."""

    entries: tuple[HelpEntry, ...]


@dataclass(frozen=True, slots=True)
class Failure:
    """Dispatch stopped at a branch.

    Attributes
    ----------
    kind:
        The failure category.
    detail:
        The offending token for ``UNKNOWN_COMMAND``, empty otherwise.
    choices:
        Valid child names at the branch where dispatch stopped.
    """

    kind: FailureKind
    detail: str
    choices: tuple[str, ...]

    @property
    def message(self) -> str:
        """Single-line, user-facing description of the failure."""
        if self.kind is FailureKind.MISSING_ARGUMENT:
            return f"Not enough arguments! Possible arguments: {', '.join(self.choices)}"
        return f'Command branch "{self.detail}" doesn\'t exist!'


Outcome = Invoked | HelpPrinted | Failure


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def dispatch(tree: CommandNode, args: Sequence[str]) -> Outcome:
    """Resolve *args* against *tree* and run the matching leaf.

    Descent is iterative: each branch consumes one token.  ``help`` is
    only intercepted while still inside a branch: once a leaf is
    reached every remaining token, ``help`` included, belongs to it.
    """
    node: CommandNode = tree
    remaining: tuple[str, ...] = tuple(args)

    while isinstance(node, Branch):
        if not remaining:
            return Failure(FailureKind.MISSING_ARGUMENT, "", node.names)

        token = remaining[0]
        if token == HELP_TOKEN:
            return HelpPrinted(flatten_help(node))

        child = node.children.get(token)
        if child is None:
            return Failure(FailureKind.UNKNOWN_COMMAND, token, node.names)

        logger.debug("Descending into %r", token)
        node = child
        remaining = remaining[1:]

    logger.debug("Invoking %r with %d argument(s)", node.usage, len(remaining))
    node.handler(remaining)
    return Invoked(remaining)


def flatten_help(node: CommandNode) -> tuple[HelpEntry, ...]:
    """Collect every leaf below *node*, depth-first in declaration order."""
    if isinstance(node, Leaf):
        return (HelpEntry(node.usage, node.description),)
    entries: list[HelpEntry] = []
    for child in node.children.values():
        entries.extend(flatten_help(child))
    return tuple(entries)


def render_help(entries: Sequence[HelpEntry]) -> list[str]:
    """Format help entries as ``usage<TAB><TAB>description`` lines."""
    return [f"{entry.usage}\t\t{entry.description}" for entry in entries]

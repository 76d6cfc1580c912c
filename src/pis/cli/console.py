"""CLI console helpers built on Rich.

Rich is imported lazily so that importing the CLI package never fails
on its own; a missing Rich surfaces as a clean
:class:`~pis.exceptions.EnvironmentError` at first use.

Two proxies are exposed: :data:`console` (stderr: diagnostics, errors,
progress) and :data:`out` (stdout: command results and help).
"""

from __future__ import annotations

from typing import Any

from pis.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = True) -> Any:
	"""Create a Rich console instance targeting stderr (or stdout)."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy that resolves the stream late.

	A fresh Rich console is built per call so that redirected
	``sys.stdout``/``sys.stderr`` (e.g. under pytest) are honoured.
	"""

	def __init__(self, *, stderr: bool) -> None:
		self._stderr = stderr

	def print(self, *objects: object, **kwargs: Any) -> None:
		"""Render *objects* with Rich markup."""
		get_rich_console(stderr=self._stderr).print(*objects, **kwargs)

	def plain(self, line: str) -> None:
		"""Print *line* verbatim: no markup, highlighting or wrapping."""
		get_rich_console(stderr=self._stderr).print(
			line,
			markup=False,
			highlight=False,
			soft_wrap=True,
		)


console = _ConsoleProxy(stderr=True)
out = _ConsoleProxy(stderr=False)


def escape(text: object) -> str:
	"""Escape Rich markup in user-supplied *text*."""
	try:
		from rich.markup import escape as rich_escape
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return rich_escape(str(text))

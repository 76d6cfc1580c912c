"""Local file access used by the command handlers.

Implements :class:`~pis.core.protocols.StationSink`.  ``OSError`` is
mapped to :class:`~pis.exceptions.StorageError`; no user-facing output.
"""

from __future__ import annotations

from pathlib import Path

from pis.exceptions import StorageError


class FileStore:
    """UTF-8 text files below an optional directory."""

    @staticmethod
    def resolve(directory: str | None, name: str) -> Path:
        """Join *directory* and *name*; ``None`` means *name* as given."""
        return Path(directory) / name if directory else Path(name)

    def read_file(self, directory: str | None, name: str) -> str:
        path = self.resolve(directory, name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise StorageError(f"File not found: {path}") from exc
        except OSError as exc:
            raise StorageError(f"Cannot read {path}: {exc}") from exc

    def write_file(self, directory: str | None, name: str, content: str) -> None:
        """Write *content*, creating missing parent directories."""
        path = self.resolve(directory, name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise StorageError(
                f"Cannot write {path}: {exc}",
                hint="Check that the target directory is writable.",
            ) from exc

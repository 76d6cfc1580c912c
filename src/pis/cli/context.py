"""Process-scoped dependencies handed to every command handler.

Built once in :func:`pis.cli.app.main` and threaded explicitly through
the command tree: there are no module-level service singletons.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from pis.config import Settings
from pis.core.protocols import StationSource
from pis.infra.file_store import FileStore
from pis.infra.stada_client import StadaClient


def _default_source(settings: Settings) -> StationSource:
    return StadaClient(settings.stada_url, timeout=settings.http_timeout)


@dataclass(frozen=True, slots=True)
class AppContext:
    """Settings plus the infrastructure adapters the handlers need."""

    settings: Settings
    file_store: FileStore = field(default_factory=FileStore)
    source_factory: Callable[[Settings], StationSource] = _default_source

    def station_source(self) -> StationSource:
        return self.source_factory(self.settings)

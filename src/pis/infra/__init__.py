"""Infrastructure layer: external system integration.

This layer wraps all interaction with the DB Stada API and the local
filesystem.  Every raw third-party exception must be caught here and
re-raised as a :class:`~pis.exceptions.PisError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from pis.infra.file_store import FileStore
from pis.infra.stada_client import StadaClient

__all__: list[str] = [
    "FileStore",
    "StadaClient",
]

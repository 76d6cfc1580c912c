"""pis: station data command-line tool.

Dispatches nested subcommands and builds stable, searchable identifiers
for human-readable place names.
"""

from pis.version import __version__

__all__: list[str] = ["__version__"]

"""Custom exception hierarchy for pis.

All exceptions that cross layer boundaries must inherit from
:class:`PisError`.  Raw third-party exceptions (e.g. from aiohttp or the
OS) must NEVER propagate beyond the infrastructure layer: they must be
caught and re-raised as a typed subclass defined here.

Hierarchy
---------
PisError
├── UsageError
├── ConfigError
├── MissingCredentialsError
├── FetchFailedError
├── StationParseError
├── StorageError
├── SelfTestFailedError
└── EnvironmentError
"""

from __future__ import annotations


class PisError(Exception):
    """Base exception for all pis errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command line ------------------------------------------------------------

class UsageError(PisError):
    """Raised when a leaf handler receives arguments it cannot use."""


class ConfigError(PisError):
    """Raised when an environment setting holds an invalid value."""


class MissingCredentialsError(PisError):
    """Raised when API credentials are neither passed nor configured."""


# --- Remote data -------------------------------------------------------------

class FetchFailedError(PisError):
    """Raised when the remote station API cannot be queried."""


class StationParseError(PisError):
    """Raised when a raw station record lacks a mandatory field."""


# --- Local storage -----------------------------------------------------------

class StorageError(PisError):
    """Raised when reading or writing a local file fails."""


# --- Self test ---------------------------------------------------------------

class SelfTestFailedError(PisError):
    """Raised when at least one built-in self-test case fails."""


# --- Environment / tooling ---------------------------------------------------

class EnvironmentError(PisError):
    """Raised when a required runtime dependency is not available."""

"""Shared pytest fixtures and configuration for the pis test suite.

Guidelines
----------
* No internet access in any test.
* The station API is replaced at the ``StationSource`` boundary.
* Core tests must be pure: no side effects.
* Filesystem tests only touch ``tmp_path``.
"""

from __future__ import annotations

import pytest

from pis.config import Settings


@pytest.fixture
def settings() -> Settings:
    """Settings with a short self test so CLI tests stay fast."""
    return Settings(selftest_cycles=5, search_limit=3)

"""Pytest configuration and shared fixtures.

This module provides:
- Settings/caches reset between tests
- Fixed dates used across the scheduling and streak tests
"""

from datetime import date

import pytest

from core.cache import clear_summary_cache
from core.config import clear_settings_cache
from tests.factories import TODAY


@pytest.fixture(autouse=True)
def _reset_state():
    """Start every test with fresh settings and an empty summary cache."""
    clear_settings_cache()
    clear_summary_cache()
    yield
    clear_settings_cache()
    clear_summary_cache()


@pytest.fixture
def today() -> date:
    return TODAY

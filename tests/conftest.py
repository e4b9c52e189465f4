"""Shared fixtures."""

import pytest

from hisaab.config import get_settings


@pytest.fixture(autouse=True)
def rules_only_environment(monkeypatch):
    """Run every test without a Gemini key and with freshly loaded settings."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

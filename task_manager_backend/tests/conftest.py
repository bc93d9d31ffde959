from __future__ import annotations

import pytest

from src.api.repositories import reset_repository
from src.api.routers.sync import reset_sync_monitor


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch):
    """Every test gets an empty repository, a new sync monitor and auth switched off."""
    monkeypatch.delenv("ENABLE_BASIC_AUTH", raising=False)
    reset_repository()
    reset_sync_monitor()
    yield
    reset_repository()
    reset_sync_monitor()

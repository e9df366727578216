# tests/conftest.py
from __future__ import annotations

import pytest

from lucaslehmer import runtime
from lucaslehmer.known import known_mersenne_exponents


@pytest.fixture(autouse=True)
def workspace(tmp_path, monkeypatch):
    """Every test gets a fresh, empty workspace and default runtime settings."""
    home = tmp_path / "ws"
    monkeypatch.setenv("LUCASLEHMER_HOME", str(home))
    runtime.reset()
    known_mersenne_exponents.cache_clear()
    yield home
    known_mersenne_exponents.cache_clear()

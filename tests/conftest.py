"""
Shared test fixtures for the picksift test suite.

Provides temporary history databases and settings files that use real
file I/O (no mocking of the filesystem), a fixed clock, and a factory
for app candidates.
"""

import pytest
import toml
from loguru import logger

from picksift.search.candidates import AppCandidate
from picksift.services.history import MemoryHistoryStore

NOW = 1_700_000_000.0
DAY = 24 * 3600


@pytest.fixture
def now():
    """Fixed reference time so frecency is reproducible."""
    return NOW


@pytest.fixture
def tmp_db(tmp_path):
    """Path for a fresh history database (created on first open)."""
    return tmp_path / "data" / "history.db"


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with all sections."""
    settings_path = tmp_path / "config.toml"
    data = {
        "general": {"prefix_depth": 2, "match_mode": "fuzzy"},
        "frecency": {"half_life_days": 7.0, "weight": 50.0},
        "dmenu": {"delimiter": ":", "match_nth": [2], "with_nth": [], "accept_nth": [1]},
        "history": {"path": str(tmp_path / "history.db")},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path


@pytest.fixture
def memory_history():
    return MemoryHistoryStore(namespace="apps")


@pytest.fixture
def make_app():
    """Factory for AppCandidates; command defaults to the id's stem."""
    def _make(app_id, name, **kwargs):
        kwargs.setdefault("command", app_id.removesuffix(".desktop"))
        return AppCandidate(app_id=app_id, name=name, **kwargs)
    return _make


@pytest.fixture
def caplog(caplog):
    """Route loguru records into pytest's caplog."""
    handler_id = logger.add(caplog.handler, format="{message}", level="DEBUG")
    yield caplog
    logger.remove(handler_id)

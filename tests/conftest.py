"""Shared pytest fixtures for cidrcalc tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator
from unittest.mock import Mock

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cidrcalc.meta.cache import MetaCache  # noqa: E402
from cidrcalc.ranges.models import RangeEntryStore  # noqa: E402
from tests.fixtures.meta_fixtures import build_sample_store  # noqa: E402
from tests.fixtures.mock_meta_server import MockMetaServer  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep CIDRCALC_* variables and the real user cache out of every test."""
    for suffix in ("ENDPOINT_URL", "CACHE_DIR", "DISABLE_CACHE", "TIMEOUT", "THRESHOLD"):
        monkeypatch.delenv(f"CIDRCALC_{suffix}", raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
    for key in ("NO_PROXY", "no_proxy"):
        monkeypatch.setenv(key, "127.0.0.1,localhost")


@pytest.fixture
def sample_store() -> RangeEntryStore:
    """Store with hooks, api, web and pages entries, including overlaps."""
    return build_sample_store()


@pytest.fixture
def meta_cache(tmp_path: Path) -> MetaCache:
    """Meta cache rooted in a temporary directory."""
    return MetaCache(base_dir=tmp_path / "meta-cache")


@pytest.fixture
def mock_session() -> Mock:
    """Mock requests.Session; configure ``get.return_value`` or ``get.side_effect``."""
    return Mock()


@pytest.fixture
def meta_server() -> Iterator[MockMetaServer]:
    """Running local meta endpoint."""
    with MockMetaServer() as server:
        yield server

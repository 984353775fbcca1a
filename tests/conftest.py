"""Root test configuration: session-level cleanup of runtime artifacts"""

import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["mdforge.db", "test.db"]
_CLEANUP_DIRS = ["out"]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep developer MDFORGE_* variables from leaking into tests."""
    for name in ("MDFORGE_DB_URL", "MDFORGE_DOMAIN", "MDFORGE_OUT_DIR", "MDFORGE_AUTHORS_DB"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files and output directories created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)

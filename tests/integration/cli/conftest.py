"""Fixtures for CLI integration tests"""

import pytest


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    """Run each command from tmp_path with no MDIMPORT_* settings leaking in."""
    monkeypatch.chdir(tmp_path)
    for name in ("POSTS_DIR", "SANITY_PROJECT_ID", "SANITY_DATASET", "SANITY_TOKEN", "DB_URL",
                 "MAX_RETRIES", "RETRY_BASE_DELAY"):
        monkeypatch.delenv(f"MDIMPORT_{name}", raising=False)

"""Pytest configuration and shared fixtures for tf-prism tests."""

import pytest

from tf_prism.io import logging_setup


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep every test away from the real config dir, log dir and terminal hints."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("TF_PRISM_LOG_FILE", str(tmp_path / "logs" / "test.log"))
    for name in ("TF_PRISM_LOG_LEVEL", "TF_PRISM_LOG_DIR", "TF_PRISM_THEME", "COLORFGBG"):
        monkeypatch.delenv(name, raising=False)
    yield
    logging_setup.reset()


# ---------------------------------------------------------------------------
# Plan text fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def plan_file(tmp_path):
    """Factory: write plan text to a file and return its path as a string."""

    def _write(text, name="plan.txt"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write

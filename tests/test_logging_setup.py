"""Tests for the logging bootstrap (tf_prism.io.logging_setup)."""

import logging
from logging.handlers import RotatingFileHandler

from tf_prism.io import logging_setup


def _handlers():
    return logging.getLogger(logging_setup.LOGGER_NAME).handlers


def test_configure_uses_env_level_and_file(tmp_path, monkeypatch):
    log_file = tmp_path / "nested" / "run.log"
    monkeypatch.setenv("TF_PRISM_LOG_FILE", str(log_file))
    monkeypatch.setenv("TF_PRISM_LOG_LEVEL", "debug")

    runtime = logging_setup.configure()

    assert runtime.level_name == "DEBUG"
    assert runtime.level == logging.DEBUG
    assert runtime.file_path == str(log_file)
    assert log_file.parent.is_dir()
    assert len(_handlers()) == 2
    assert any(isinstance(h, RotatingFileHandler) for h in _handlers())

    logging.getLogger("tf_prism.core.plan_parser").debug("parsed %d resources", 4)
    for handler in _handlers():
        handler.flush()
    assert "parsed 4 resources" in log_file.read_text()


def test_unknown_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("TF_PRISM_LOG_LEVEL", "chatty")
    assert logging_setup.configure().level == logging.INFO


def test_configure_is_idempotent():
    first = logging_setup.configure()
    assert logging_setup.configure("other") is first
    assert logging_setup.get_runtime() is first
    assert len(_handlers()) == 2


def test_default_path_uses_log_dir_and_safe_session_name(tmp_path, monkeypatch):
    monkeypatch.delenv("TF_PRISM_LOG_FILE", raising=False)
    monkeypatch.setenv("TF_PRISM_LOG_DIR", str(tmp_path))

    runtime = logging_setup.configure("my plan!")

    assert runtime.file_path.startswith(str(tmp_path / "my-plan-"))
    assert runtime.file_path.endswith(".log")


def test_console_suspended_detaches_stream_handler_only():
    logging_setup.configure()
    before = list(_handlers())

    with logging_setup.console_suspended():
        inside = list(_handlers())

    assert len(inside) == 1
    assert isinstance(inside[0], RotatingFileHandler)
    assert set(_handlers()) == set(before)


def test_console_suspended_without_configure_is_a_no_op():
    assert logging_setup.get_runtime() is None
    with logging_setup.console_suspended():
        pass
    assert _handlers() == []

from __future__ import annotations

import logging
from collections.abc import Iterator
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from nanogen.adapters import observability


@pytest.fixture
def _restore_root_logger(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    httpx_level = logging.getLogger("httpx").level
    monkeypatch.setattr(observability, "_active_settings", None)
    for name in ("NANOGEN_LOG_LEVEL", "NANOGEN_LOG_PATH", "NANOGEN_HTTP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


@pytest.mark.usefixtures("_restore_root_logger")
def test_configure_runtime_logging_reads_env(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    log_path = tmp_path / "logs" / "nanogen.log"
    monkeypatch.setenv("NANOGEN_LOG_PATH", str(log_path))
    monkeypatch.setenv("NANOGEN_LOG_LEVEL", "debug")
    monkeypatch.setenv("NANOGEN_LOG_BACKUP_COUNT", "not-a-number")

    settings = observability.configure_runtime_logging()

    assert settings.log_path == log_path
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].backupCount == observability.DEFAULT_LOG_BACKUP_COUNT
    assert logging.getLogger("httpx").level == logging.WARNING

    logging.getLogger("nanogen.test").info("corpus.load path=x sentences=1")
    file_handlers[0].flush()
    assert "corpus.load path=x" in log_path.read_text(encoding="utf-8")


@pytest.mark.usefixtures("_restore_root_logger")
def test_explicit_level_and_path_override_env(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("NANOGEN_LOG_PATH", str(tmp_path / "env.log"))
    monkeypatch.setenv("NANOGEN_LOG_LEVEL", "DEBUG")
    flag_path = tmp_path / "flag" / "run.log"

    settings = observability.configure_runtime_logging(level="warning", log_path=str(flag_path))

    assert settings.level == logging.WARNING
    assert settings.log_path == flag_path
    assert logging.getLogger().level == logging.WARNING
    assert flag_path.parent.is_dir()
    assert not (tmp_path / "env.log").exists()


def test_resolve_ignores_blank_and_unknown_overrides(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("NANOGEN_LOG_PATH", str(tmp_path / "env.log"))
    monkeypatch.setenv("NANOGEN_LOG_LEVEL", "error")

    blank = observability.LoggingSettings.resolve(level="", log_path="  ")
    assert blank.level == logging.ERROR
    assert blank.log_path == tmp_path / "env.log"

    unknown = observability.LoggingSettings.resolve(level="chatty")
    assert unknown.level == logging.INFO


@pytest.mark.usefixtures("_restore_root_logger")
def test_configure_runtime_logging_runs_once(tmp_path: Path) -> None:
    first = observability.configure_runtime_logging(log_path=str(tmp_path / "once.log"))
    handlers = list(logging.getLogger().handlers)
    second = observability.configure_runtime_logging(log_path=str(tmp_path / "twice.log"))
    assert second is first
    assert logging.getLogger().handlers == handlers

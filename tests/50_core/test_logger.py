# tests/50_core/test_logger.py
"""Tests for the assembler logger."""

import pytest

import build_assembler.logs as mod_logs


def test_info_goes_to_stdout_warning_to_stderr(
    capsys: pytest.CaptureFixture[str],
    direct_logger: mod_logs.AppLogger,
) -> None:
    direct_logger.info("hello out")
    direct_logger.warning("hello err")
    captured = capsys.readouterr()
    assert "hello out" in captured.out
    assert "hello err" not in captured.out
    assert "⚠️" in captured.err
    assert "hello err" in captured.err


def test_trace_level_is_tagged(
    capsys: pytest.CaptureFixture[str],
    direct_logger: mod_logs.AppLogger,
) -> None:
    direct_logger.trace("deep detail")
    assert "[TRACE] deep detail" in capsys.readouterr().out


def test_use_level_restores_previous_level(
    capsys: pytest.CaptureFixture[str],
    direct_logger: mod_logs.AppLogger,
) -> None:
    direct_logger.setLevel("info")
    with direct_logger.use_level("error"):
        direct_logger.warning("hidden")
    direct_logger.warning("shown")
    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err
    assert direct_logger.level_name == "INFO"


def test_silent_suppresses_everything(
    capsys: pytest.CaptureFixture[str],
    direct_logger: mod_logs.AppLogger,
) -> None:
    direct_logger.setLevel("silent")
    direct_logger.critical("nope")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_determine_log_level_precedence(
    monkeypatch: pytest.MonkeyPatch,
    direct_logger: mod_logs.AppLogger,
) -> None:
    assert direct_logger.determine_log_level() == "INFO"
    assert direct_logger.determine_log_level(root_log_level="error") == "ERROR"

    monkeypatch.setenv("LOG_LEVEL", "warning")
    assert direct_logger.determine_log_level(root_log_level="error") == "WARNING"

    monkeypatch.setenv("BUILD_ASSEMBLER_LOG_LEVEL", "debug")
    assert direct_logger.determine_log_level() == "DEBUG"

    args = type("Args", (), {"log_level": "trace"})()
    assert direct_logger.determine_log_level(args=args) == "TRACE"  # type: ignore[arg-type]


def test_module_logger_replaces_get_logger(
    module_logger: mod_logs.AppLogger,
) -> None:
    assert mod_logs.get_logger() is module_logger

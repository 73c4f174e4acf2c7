# tests/50_core/test_thrift_library_builder.py
"""Tests for ThriftLibraryBuilder."""

from pathlib import Path

import pytest

import build_assembler.logs as mod_logs
from build_assembler.thrift import ThriftLibraryBuilder
from tests.utils import python_command


def _writer(name: str) -> str:
    return python_command(
        "import pathlib; "
        "pathlib.Path('gen').mkdir(exist_ok=True); "
        f"pathlib.Path('gen/{name}.py').write_text('# {name}')"
    )


def test_runs_every_command_from_working_root(
    tmp_path: Path,
    module_logger: mod_logs.AppLogger,
    capsys: pytest.CaptureFixture[str],
) -> None:
    builder = ThriftLibraryBuilder(max_workers=2, progress_interval=2, logger=module_logger)
    builder.build_all([_writer(n) for n in ("a", "b", "c", "d")], tmp_path)

    for name in ("a", "b", "c", "d"):
        assert (tmp_path / "gen" / f"{name}.py").read_text() == f"# {name}"
    out = capsys.readouterr().out
    assert "Building 4 thrift libraries..." in out
    assert "Built 2/4 thrift libraries." in out
    assert "Built 4/4 thrift libraries." in out
    assert "Built 1/4" not in out
    assert "Built thrift libraries in" in out


def test_failure_is_logged_and_siblings_still_run(
    tmp_path: Path,
    module_logger: mod_logs.AppLogger,
    capsys: pytest.CaptureFixture[str],
) -> None:
    failing = python_command("import sys; sys.exit('no idl')")
    builder = ThriftLibraryBuilder(logger=module_logger)
    builder.build_all([failing, _writer("ok")], tmp_path)

    assert (tmp_path / "gen" / "ok.py").exists()
    err = capsys.readouterr().err
    assert "Python code generation failed" in err
    assert "no idl" in err


def test_only_typed_stub_variant_runs(
    tmp_path: Path,
    module_logger: mod_logs.AppLogger,
) -> None:
    # each command records the generator flag it was given
    def record(flag: str) -> str:
        return python_command(
            "import pathlib, sys; "
            "pathlib.Path(sys.argv[1].replace(':', '_')).write_text('x')",
        ) + f" {flag}"

    builder = ThriftLibraryBuilder(logger=module_logger)
    builder.build_all([record("py:json"), record("mstch_pyi:json")], tmp_path)

    assert (tmp_path / "mstch_pyi_json").exists()
    assert not (tmp_path / "py_json").exists()


def test_nothing_to_do_logs_nothing(
    tmp_path: Path,
    module_logger: mod_logs.AppLogger,
    capsys: pytest.CaptureFixture[str],
) -> None:
    ThriftLibraryBuilder(logger=module_logger).build_all([], tmp_path)
    assert capsys.readouterr().out == ""


def test_undecodable_failure_still_counts_toward_progress(
    tmp_path: Path,
    module_logger: mod_logs.AppLogger,
    capsys: pytest.CaptureFixture[str],
) -> None:
    failing = python_command(
        "import sys; sys.stdout.buffer.write(bytes([0xff, 0xfe])); sys.exit(3)"
    )
    builder = ThriftLibraryBuilder(progress_interval=1, logger=module_logger)
    builder.build_all([failing], tmp_path)

    captured = capsys.readouterr()
    assert "Built 1/1 thrift libraries." in captured.out
    assert "Python code generation failed" in captured.err
    assert "Unexpected failure" not in captured.err

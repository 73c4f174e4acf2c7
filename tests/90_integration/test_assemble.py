# tests/90_integration/test_assemble.py
"""End-to-end runs of BuildTargetsAssembler.assemble()."""

import shlex
import sys
from pathlib import Path

import httpx
import pytest

import build_assembler.logs as mod_logs
import build_assembler.swig as mod_swig
from build_assembler.assembler import BuildTargetsAssembler
from build_assembler.config import make_config
from build_assembler.constants import PLACEHOLDER_STUB_CONTENT
from tests.utils import make_wheel, mock_client, python_command


@pytest.fixture
def layout(tmp_path: Path) -> tuple[Path, Path]:
    root = tmp_path / "repo"
    out = tmp_path / "out"
    root.mkdir()
    out.mkdir()
    return root, out


def _wheel_client(files: dict[str, str]) -> httpx.Client:
    data = make_wheel(files)
    return mock_client(lambda _request: httpx.Response(200, content=data))


def test_link_wheel_and_stub(
    layout: tuple[Path, Path], module_logger: mod_logs.AppLogger
) -> None:
    root, out = layout
    (root / "a.py").write_text("a = 1\n")
    assembler = BuildTargetsAssembler(
        root, out, http_client=_wheel_client({"b.py": "b = 2\n"}), logger=module_logger
    )
    assembler.add_source_mapping(root / "a.py", out / "a.py")
    assembler.add_python_wheel_url("https://pkgs.example/b-1.0-py3-none-any.whl")
    assembler.add_unsupported_generated_source(out / "c.py")

    report = assembler.assemble()

    assert (out / "a.py").is_symlink()
    assert (out / "a.py").resolve() == (root / "a.py").resolve()
    assert (out / "b.py").read_text() == "b = 2\n"
    assert (out / "c.py").read_text() == PLACEHOLDER_STUB_CONTENT
    assert report.unsupported_files == frozenset({"c.py"})
    assert report.conflicting_files == frozenset()


def test_conflicting_mapping_keeps_first(
    layout: tuple[Path, Path], module_logger: mod_logs.AppLogger
) -> None:
    root, out = layout
    (root / "a.py").write_text("first\n")
    (root / "b.py").write_text("second\n")
    assembler = BuildTargetsAssembler(root, out, logger=module_logger)
    assembler.add_source_mapping(root / "a.py", out / "x.py")
    assembler.add_source_mapping(root / "b.py", out / "x.py")

    report = assembler.assemble()

    assert (out / "x.py").read_text() == "first\n"
    assert report.conflicting_files == frozenset({"x.py"})


def test_generated_files_are_not_stubbed(
    layout: tuple[Path, Path], module_logger: mod_logs.AppLogger
) -> None:
    root, out = layout
    generate = python_command(
        "import pathlib, sys; "
        "target = pathlib.Path(sys.argv[1]); "
        "target.parent.mkdir(parents=True, exist_ok=True); "
        "target.write_text('def real() -> None: ...')"
    )
    assembler = BuildTargetsAssembler(root, out, logger=module_logger)
    # thrift writes the typed stub, so the .py needs no placeholder
    assembler.add_thrift_library_build_command(
        f"{generate} {shlex.quote(str(out / 'svc' / 'ttypes.pyi'))}"
    )
    assembler.add_unsupported_generated_source(out / "svc" / "ttypes.py")
    assembler.add_unsupported_generated_source(out / "svc" / "missing.py")

    report = assembler.assemble()

    assert not (out / "svc" / "ttypes.py").exists()
    assert (out / "svc" / "ttypes.pyi").read_text() == "def real() -> None: ..."
    assert report.unsupported_files == frozenset({"svc/missing.py"})


def test_wheel_file_colliding_with_linked_source(
    layout: tuple[Path, Path], module_logger: mod_logs.AppLogger
) -> None:
    root, out = layout
    (root / "shared.py").write_text("from source\n")
    assembler = BuildTargetsAssembler(
        root,
        out,
        http_client=_wheel_client({"shared.py": "from wheel\n", "extra.py": ""}),
        logger=module_logger,
    )
    assembler.add_source_mapping(root / "shared.py", out / "shared.py")
    assembler.add_python_wheel_url("https://pkgs.example/shared.whl")

    report = assembler.assemble()

    assert (out / "shared.py").is_symlink()
    assert (out / "shared.py").read_text() == "from source\n"
    assert (out / "extra.py").exists()
    assert report.conflicting_files == frozenset({"shared.py"})


def test_failures_never_escape(
    layout: tuple[Path, Path],
    monkeypatch: pytest.MonkeyPatch,
    module_logger: mod_logs.AppLogger,
    capsys: pytest.CaptureFixture[str],
) -> None:
    root, out = layout
    monkeypatch.setattr(
        mod_swig, "resolve_built_target_executable", lambda *_a, **_k: sys.executable
    )
    client = mock_client(lambda _request: httpx.Response(500))
    assembler = BuildTargetsAssembler(root, out, http_client=client, logger=module_logger)
    assembler.add_thrift_library_build_command(python_command("raise SystemExit(1)"))
    assembler.add_swig_library_build_command(
        python_command("raise SystemExit(2)", with_interpreter=False)
    )
    assembler.add_python_wheel_url("https://pkgs.example/broken.whl")
    assembler.add_unsupported_generated_source("gap.py")

    report = assembler.assemble()

    assert report.unsupported_files == frozenset({"gap.py"})
    err = capsys.readouterr().err
    assert err.count("Python code generation failed") == 2
    assert "Exhausted retries" in err


def test_assemble_runs_once(
    layout: tuple[Path, Path], module_logger: mod_logs.AppLogger
) -> None:
    root, out = layout
    assembler = BuildTargetsAssembler(root, out, logger=module_logger)
    assembler.assemble()
    with pytest.raises(RuntimeError, match="only run once"):
        assembler.assemble()


def test_from_config(
    layout: tuple[Path, Path], module_logger: mod_logs.AppLogger
) -> None:
    root, out = layout
    config = make_config(root, out, max_workers=3, fetch_attempts=5)
    assembler = BuildTargetsAssembler.from_config(config, logger=module_logger)
    assert assembler.buck_root == root.resolve()
    assert assembler.output_directory == out.resolve()
    assert assembler.max_workers == 3

# tests/90_integration/test_cli.py
"""Tests for the build-assembler command line."""

import json
from pathlib import Path

import pytest

import build_assembler.cli as mod_cli
import build_assembler.logs as mod_logs
from build_assembler.constants import PLACEHOLDER_STUB_CONTENT
from tests.utils import make_wheel


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A build root with two sources, a local wheel and a manifest."""
    monkeypatch.chdir(tmp_path)
    repo = tmp_path / "repo"
    (repo / "lib").mkdir(parents=True)
    (repo / "lib" / "a.py").write_text("a = 1\n")
    (repo / "lib" / "b.py").write_text("b = 2\n")
    wheel = tmp_path / "dist" / "dep-1.0-py3-none-any.whl"
    wheel.parent.mkdir()
    wheel.write_bytes(make_wheel({"dep/__init__.py": "", "a.py": "from wheel"}))
    (tmp_path / "manifest.jsonc").write_text(
        json.dumps(
            {
                "sources": {"a.py": "lib/a.py", "pkg/b.py": "lib/b.py"},
                "python_wheel_urls": [wheel.as_uri()],
                "unsupported_generated_sources": ["gen/c.py"],
            }
        )
    )
    return tmp_path


def test_assembles_and_writes_report(
    project: Path,
    module_logger: mod_logs.AppLogger,  # noqa: ARG001
    capsys: pytest.CaptureFixture[str],
) -> None:
    code = mod_cli.main(
        [
            "manifest.jsonc",
            "--buck-root",
            "repo",
            "-o",
            "out",
            "--report",
            "reports/report.json",
        ]
    )

    assert code == 0
    out = project / "out"
    assert (out / "a.py").is_symlink()
    assert (out / "pkg" / "b.py").read_text() == "b = 2\n"
    assert (out / "dep" / "__init__.py").exists()
    assert (out / "gen" / "c.py").read_text() == PLACEHOLDER_STUB_CONTENT
    report = json.loads((project / "reports" / "report.json").read_text())
    assert report == {"conflicting_files": ["a.py"], "unsupported_files": ["gen/c.py"]}
    assert "🎉 Assembly complete" in capsys.readouterr().out


def test_report_goes_to_stdout_when_quiet(
    project: Path,  # noqa: ARG001
    module_logger: mod_logs.AppLogger,  # noqa: ARG001
    capsys: pytest.CaptureFixture[str],
) -> None:
    code = mod_cli.main(["manifest.jsonc", "--buck-root", "repo", "-o", "out", "-q"])

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["unsupported_files"] == ["gen/c.py"]


def test_settings_from_config_file(
    project: Path,
    module_logger: mod_logs.AppLogger,  # noqa: ARG001
) -> None:
    (project / ".build_assembler.jsonc").write_text(
        '{\n  "buck_root": "repo", // build root\n  "output_directory": "cfg_out",\n}\n'
    )
    assert mod_cli.main(["manifest.jsonc", "-q"]) == 0
    assert (project / "cfg_out" / "pkg" / "b.py").exists()


def test_missing_manifest_is_a_usage_error(
    project: Path,  # noqa: ARG001
    module_logger: mod_logs.AppLogger,  # noqa: ARG001
    capsys: pytest.CaptureFixture[str],
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        mod_cli.main(["--buck-root", "repo", "-o", "out"])
    assert excinfo.value.code == 2
    assert "MANIFEST" in capsys.readouterr().err


def test_typo_gets_a_hint(
    project: Path,  # noqa: ARG001
    module_logger: mod_logs.AppLogger,  # noqa: ARG001
    capsys: pytest.CaptureFixture[str],
) -> None:
    with pytest.raises(SystemExit):
        mod_cli.main(["manifest.jsonc", "--ouput-directory", "out"])
    assert "did you mean --output-directory?" in capsys.readouterr().err


def test_version(
    module_logger: mod_logs.AppLogger,  # noqa: ARG001
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert mod_cli.main(["--version"]) == 0
    assert "Build Assembler" in capsys.readouterr().out


def test_bad_manifest_returns_one(
    project: Path,
    module_logger: mod_logs.AppLogger,  # noqa: ARG001
    capsys: pytest.CaptureFixture[str],
) -> None:
    (project / "bad.json").write_text('{"wheels": []}')
    code = mod_cli.main(["bad.json", "--buck-root", "repo", "-o", "out"])
    assert code == 1
    assert "Unknown manifest key" in capsys.readouterr().err


def test_missing_output_directory_returns_one(
    project: Path,  # noqa: ARG001
    module_logger: mod_logs.AppLogger,  # noqa: ARG001
    capsys: pytest.CaptureFixture[str],
) -> None:
    assert mod_cli.main(["manifest.jsonc", "--buck-root", "repo"]) == 1
    assert "output_directory" in capsys.readouterr().err

# src/build_assembler/cli.py

import argparse
import platform
import sys
from dataclasses import dataclass
from difflib import get_close_matches
from pathlib import Path

from .assembler import BuildTargetsAssembler
from .config import find_config, load_config, resolve_config
from .config_types import AssemblerConfig, AssemblerConfigResolved, ConfigOrigin
from .logs import LEVEL_ORDER, get_logger, safe_log
from .manifest import load_manifest, register_manifest
from .meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT, get_metadata
from .report import AssemblyReport


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        known_opts: list[str] = []
        for action in self._actions:
            known_opts.extend([s for s in action.option_strings if s])

        hint_lines: list[str] = []
        # "unrecognized arguments: --ouput-directory ..."
        if "unrecognized arguments:" in message:
            bad = message.split("unrecognized arguments:", 1)[1].strip()
            bad_args = [tok for tok in bad.split() if tok.startswith("-")]
            for arg in bad_args:
                close = get_close_matches(arg, known_opts, n=1, cutoff=0.6)
                if close:
                    hint_lines.append(f"Hint: did you mean {close[0]}?")

        self.print_usage(sys.stderr)
        full = f"{self.prog}: error: {message}"
        if hint_lines:
            full += "\n" + "\n".join(hint_lines)
        self.exit(2, full + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(
        prog=PROGRAM_SCRIPT,
        description=(
            "Assemble a flat python source tree from resolved build facts: "
            "generated thrift/swig libraries, linked sources, unpacked wheels "
            "and placeholder stubs."
        ),
    )

    parser.add_argument(
        "manifest",
        nargs="?",
        metavar="MANIFEST",
        help="JSON/JSONC file with the facts to assemble.",
    )
    parser.add_argument(
        "--buck-root",
        help="Build root; generator commands run from here.",
    )
    parser.add_argument(
        "-o",
        "--output-directory",
        help="Directory to assemble into (created if missing).",
    )
    parser.add_argument("-c", "--config", help="Path to a settings file.")
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=None,
        help="Worker threads per phase (default: config or executor default).",
    )
    parser.add_argument(
        "--report",
        metavar="PATH",
        help="Write the JSON report here instead of stdout.",
    )

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Version and verbosity ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    return parser


# --------------------------------------------------------------------------- #
# Main entry helpers
# --------------------------------------------------------------------------- #


@dataclass
class _LoadedConfig:
    """Container for loaded and resolved configuration data."""

    config_path: Path | None
    resolved: AssemblerConfigResolved
    cwd: Path


def _initialize_logger(args: argparse.Namespace) -> None:
    """Initialize logger with CLI args, env vars, and defaults."""
    logger = get_logger()
    logger.setLevel(logger.determine_log_level(args=args))
    if args.use_color is not None:
        logger.enable_color = args.use_color
        logger.handlers.clear()  # rebuilt with the new color setting
    logger.trace("[BOOT] log-level initialized: %s", logger.level_name)

    logger.debug(
        "Runtime: Python %s (%s)\n    %s",
        platform.python_version(),
        platform.python_implementation(),
        sys.version.replace("\n", " "),
    )


def _load_and_resolve_config(args: argparse.Namespace) -> _LoadedConfig:
    logger = get_logger()
    cwd = Path.cwd().resolve()

    config_path = find_config(args, cwd)
    raw: AssemblerConfig = {}
    origin: ConfigOrigin = "default"
    if config_path is not None:
        raw, origin = load_config(config_path)
    resolved = resolve_config(
        raw, args, cwd=cwd, config_path=config_path, origin=origin
    )

    # config file may set the level when CLI and env did not
    logger.setLevel(resolved["log_level"])
    logger.trace("[CONFIG] log-level re-resolved from config: %s", logger.level_name)
    return _LoadedConfig(config_path=config_path, resolved=resolved, cwd=cwd)


def _write_report(report: AssemblyReport, destination: str | None) -> None:
    logger = get_logger()
    text = report.to_json(indent=2)
    if destination:
        path = Path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n", encoding="utf-8")
        logger.info("📝 Report written to %s", path)
    else:
        print(text)


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    logger = get_logger()  # init (use env + defaults)

    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)

        _initialize_logger(args)

        if args.version:
            meta = get_metadata()
            logger.info("%s %s", PROGRAM_DISPLAY, meta.version)
            return 0

        if not args.manifest:
            parser.error("the following arguments are required: MANIFEST")

        config = _load_and_resolve_config(args)
        resolved = config.resolved

        if config.config_path:
            logger.info("🔧 Using config: %s", config.config_path.name)
        logger.info("📁 Buck root: %s", resolved["buck_root"])
        logger.info("📂 Output directory: %s", resolved["output_directory"])

        manifest = load_manifest(
            (config.cwd / args.manifest).resolve(),
            buck_root=resolved["buck_root"],
            output_directory=resolved["output_directory"],
        )

        resolved["output_directory"].mkdir(parents=True, exist_ok=True)
        assembler = BuildTargetsAssembler.from_config(resolved)
        register_manifest(assembler, manifest)
        report = assembler.assemble()

        logger.info(
            "🎉 Assembly complete: %d conflicting, %d unsupported file(s).",
            len(report.conflicting_files),
            len(report.unsupported_files),
        )
        _write_report(report, args.report)

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination
        try:
            logger.error_if_not_debug(str(e))
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    except Exception as e:  # noqa: BLE001
        # unexpected internal error
        try:
            logger.critical_if_not_debug("Unexpected internal error: %s", e)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    else:
        return 0

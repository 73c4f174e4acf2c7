# src/build_assembler/config.py
"""Locate, load, validate and resolve assembler settings.

Precedence for every setting: CLI → environment (log level only) →
config file → built-in default.
"""

import argparse
from pathlib import Path
from typing import Any, cast

from .config_types import AssemblerConfig, AssemblerConfigResolved, ConfigOrigin
from .constants import (
    DEFAULT_BUILD_TOOL,
    DEFAULT_FETCH_ATTEMPTS,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_WORKERS,
    DEFAULT_PROGRESS_INTERVAL,
    DEFAULT_SWIG_BUILDER_TARGET,
)
from .errors import ConfigError
from .logs import get_logger
from .meta import PROGRAM_CONFIG
from .utils import load_jsonc, load_toml


PYPROJECT_TABLE = PROGRAM_CONFIG

# key -> accepted python types (bool is rejected separately for numbers)
CONFIG_SCHEMA: dict[str, tuple[type, ...]] = {
    "buck_root": (str,),
    "output_directory": (str,),
    "max_workers": (int, type(None)),
    "progress_interval": (int,),
    "fetch_attempts": (int,),
    "fetch_timeout": (int, float),
    "build_tool": (str,),
    "swig_builder_target": (str,),
    "log_level": (str,),
}

POSITIVE_KEYS = {"max_workers", "progress_interval", "fetch_attempts", "fetch_timeout"}


def find_config(args: argparse.Namespace, cwd: Path) -> Path | None:
    """Locate a configuration file.

    Search order:
      1. Explicit path from CLI (--config)
      2. .build_assembler.jsonc / .build_assembler.json in cwd or its parents
      3. pyproject.toml in cwd, if it has a [tool.build_assembler] table

    Returns the first matching path, or None if no config was found.
    """
    logger = get_logger()

    if getattr(args, "config", None):
        config = Path(args.config).expanduser().resolve()
        logger.trace(f"[find_config] Checking explicit path: {config}")
        if not config.exists():
            xmsg = f"Specified config file not found: {config}"
            raise FileNotFoundError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ConfigError(xmsg)
        return config

    candidate_names = [f".{PROGRAM_CONFIG}.jsonc", f".{PROGRAM_CONFIG}.json"]
    current = cwd
    while True:
        found = [current / name for name in candidate_names if (current / name).exists()]
        if found:
            if len(found) > 1:
                logger.warning(
                    "Multiple config files detected (%s); using %s.",
                    ", ".join(p.name for p in found),
                    found[0].name,
                )
            return found[0]
        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent

    pyproject = cwd / "pyproject.toml"
    if pyproject.is_file() and PYPROJECT_TABLE in load_toml(pyproject).get("tool", {}):
        return pyproject

    logger.trace(f"[find_config] No config file found in {cwd} or parents")
    return None


def load_config(config_path: Path) -> tuple[AssemblerConfig, ConfigOrigin]:
    """Load raw settings from a JSON/JSONC file or a pyproject.toml table."""
    logger = get_logger()
    logger.trace(f"[load_config] Loading from {config_path}")

    if config_path.name == "pyproject.toml":
        table = load_toml(config_path).get("tool", {}).get(PYPROJECT_TABLE, {})
        validate_config(table, config_path)
        return cast("AssemblerConfig", table), "pyproject"

    try:
        data = load_jsonc(config_path)
    except ValueError as e:
        raise ConfigError(str(e)) from e
    if data is None:
        return {}, "config"
    validate_config(data, config_path)
    return cast("AssemblerConfig", data), "config"


def validate_config(data: Any, config_path: Path | None = None) -> None:
    """Reject unknown keys, wrong types and non-positive numbers."""
    where = f" in {config_path.name}" if config_path else ""
    if not isinstance(data, dict):
        xmsg = f"Config{where} must be an object, not {type(data).__name__}"
        raise ConfigError(xmsg)

    unknown = sorted(set(data) - set(CONFIG_SCHEMA))
    if unknown:
        xmsg = f"Unknown config key(s){where}: {', '.join(unknown)}"
        raise ConfigError(xmsg)

    for key, value in data.items():
        expected = CONFIG_SCHEMA[key]
        if isinstance(value, bool) or not isinstance(value, expected):
            names = " or ".join(
                "null" if t is type(None) else t.__name__ for t in expected
            )
            xmsg = (
                f"Config key {key!r}{where} must be {names},"
                f" not {type(value).__name__}"
            )
            raise ConfigError(xmsg)
        if key in POSITIVE_KEYS and value is not None and value <= 0:
            xmsg = f"Config key {key!r}{where} must be positive, got {value}"
            raise ConfigError(xmsg)


def _resolve_path(
    cli_value: str | None,
    config_value: str | None,
    *,
    key: str,
    cwd: Path,
    config_dir: Path,
) -> Path:
    if cli_value:
        return (cwd / cli_value).resolve()
    if config_value:
        return (config_dir / config_value).resolve()
    xmsg = f"Missing required setting {key!r} (use --{key.replace('_', '-')})"
    raise ConfigError(xmsg)


def resolve_config(
    raw: AssemblerConfig,
    args: argparse.Namespace,
    *,
    cwd: Path,
    config_path: Path | None = None,
    origin: ConfigOrigin = "default",
) -> AssemblerConfigResolved:
    """Merge CLI args, the loaded config and defaults into final settings."""
    logger = get_logger()
    config_dir = config_path.parent if config_path else cwd

    jobs = getattr(args, "jobs", None)
    if jobs is not None and jobs <= 0:
        xmsg = f"--jobs must be positive, got {jobs}"
        raise ConfigError(xmsg)

    resolved: AssemblerConfigResolved = {
        "buck_root": _resolve_path(
            getattr(args, "buck_root", None),
            raw.get("buck_root"),
            key="buck_root",
            cwd=cwd,
            config_dir=config_dir,
        ),
        "output_directory": _resolve_path(
            getattr(args, "output_directory", None),
            raw.get("output_directory"),
            key="output_directory",
            cwd=cwd,
            config_dir=config_dir,
        ),
        "max_workers": jobs
        if jobs is not None
        else raw.get("max_workers", DEFAULT_MAX_WORKERS),
        "progress_interval": raw.get("progress_interval", DEFAULT_PROGRESS_INTERVAL),
        "fetch_attempts": raw.get("fetch_attempts", DEFAULT_FETCH_ATTEMPTS),
        "fetch_timeout": float(raw.get("fetch_timeout", DEFAULT_FETCH_TIMEOUT)),
        "build_tool": raw.get("build_tool", DEFAULT_BUILD_TOOL),
        "swig_builder_target": raw.get(
            "swig_builder_target", DEFAULT_SWIG_BUILDER_TARGET
        ),
        "log_level": logger.determine_log_level(
            args=args, root_log_level=raw.get("log_level")
        ).lower(),
        "__meta__": {"config_path": config_path, "origin": origin, "cwd": cwd},
    }
    logger.trace("[resolve_config] %s", resolved)
    return resolved


def make_config(
    buck_root: Path | str,
    output_directory: Path | str,
    **overrides: Any,
) -> AssemblerConfigResolved:
    """Build resolved settings in code, without a config file or CLI."""
    validate_config(
        {k: v for k, v in overrides.items() if k not in ("buck_root", "output_directory")}
    )
    raw = cast("AssemblerConfig", dict(overrides))
    args = argparse.Namespace(
        buck_root=str(buck_root), output_directory=str(output_directory)
    )
    return resolve_config(raw, args, cwd=Path.cwd())

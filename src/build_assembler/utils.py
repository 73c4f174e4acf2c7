# src/build_assembler/utils.py

import json
import os
import re
from pathlib import Path
from typing import Any, cast

from .logs import get_logger


def output_relative_path(path: Path | str, output_root: Path | str) -> str:
    """Return ``path`` relative to ``output_root``, lexically normalized.

    Neither path is resolved against the filesystem, so symlinks inside the
    output tree are reported under their own names.
    """
    return os.path.normpath(os.path.relpath(os.fspath(path), os.fspath(output_root)))


def path_lexists(path: Path | str) -> bool:
    """Like ``Path.exists`` but also True for dangling symlinks."""
    return os.path.lexists(os.fspath(path))


# --- config file formats -----------------------------------------------------


def _strip_jsonc_comments(text: str) -> str:  # noqa: PLR0912
    """Strip comments from JSONC while preserving string contents.

    Handles //, # and /* */ comments without modifying content inside strings.
    """
    result: list[str] = []
    quote: str | None = None  # the quote char that opened the current string
    in_escape = False
    i = 0
    while i < len(text):
        ch = text[i]

        if quote is not None:
            result.append(ch)
            if in_escape:
                in_escape = False
            elif ch == "\\":
                in_escape = True
            elif ch == quote:
                quote = None
            i += 1
            continue

        if ch in ('"', "'"):
            quote = ch
            result.append(ch)
            i += 1
            continue

        # Line comments: // and #
        if (ch == "/" and text[i + 1 : i + 2] == "/") or ch == "#":
            while i < len(text) and text[i] != "\n":
                i += 1
            continue

        # Block comments /* ... */
        if ch == "/" and text[i + 1 : i + 2] == "*":
            end = text.find("*/", i + 2)
            i = len(text) if end == -1 else end + 2
            continue

        result.append(ch)
        i += 1

    return "".join(result)


def load_jsonc(path: Path) -> dict[str, Any] | list[Any] | None:
    """Load JSONC (JSON with comments and trailing commas)."""
    logger = get_logger()
    logger.trace(f"[load_jsonc] Loading from {path}")

    if not path.exists():
        xmsg = f"JSONC file not found: {path}"
        raise FileNotFoundError(xmsg)

    if not path.is_file():
        xmsg = f"Expected a file: {path}"
        raise ValueError(xmsg)

    text = path.read_text(encoding="utf-8")
    text = _strip_jsonc_comments(text)

    # Remove trailing commas before } or ]
    text = re.sub(r",(?=\s*[}\]])", "", text)

    text = text.strip()

    if not text:
        # Empty or only comments → interpret as "nothing"
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = (
            f"Invalid JSONC syntax in {path}:"
            f" {e.msg} (line {e.lineno}, column {e.colno})"
        )
        raise ValueError(xmsg) from e

    # Guard against scalar roots
    if not isinstance(data, (dict, list)):
        xmsg = f"Invalid JSONC root type: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004

    return cast("dict[str, Any] | list[Any]", data)


def load_toml(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file with ``tomllib`` (3.11+) or ``tomli`` (3.10).

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file cannot be parsed
    """
    if not path.exists():
        xmsg = f"TOML file not found: {path}"
        raise FileNotFoundError(xmsg)

    try:
        import tomllib  # noqa: PLC0415
    except ImportError:  # Python 3.10
        import tomli as tomllib  # type: ignore[no-redef] # noqa: PLC0415

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        xmsg = f"Invalid TOML in {path}: {e}"
        raise ValueError(xmsg) from e

# src/build_assembler/manifest.py
"""Registration facts read from a file.

The build-graph walker that discovers these facts is a separate tool; it
writes a JSON (or JSONC) manifest that this module replays into a
``BuildTargetsAssembler``.
"""

from pathlib import Path
from typing import Any

from .assembler import BuildTargetsAssembler
from .config_types import ManifestResolved
from .errors import ManifestError
from .logs import get_logger
from .utils import load_jsonc


LIST_KEYS = (
    "thrift_library_build_commands",
    "swig_library_build_commands",
    "python_wheel_urls",
    "unsupported_generated_sources",
)
MANIFEST_KEYS = {"sources", *LIST_KEYS}


def _string_list(data: dict[str, Any], key: str, path: Path) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        xmsg = f"Manifest key {key!r} in {path.name} must be a list of strings"
        raise ManifestError(xmsg)
    return value


def _source_pairs(data: dict[str, Any], path: Path) -> list[tuple[str, str]]:
    """Return (source, output) pairs in file order."""
    value = data.get("sources", [])
    if isinstance(value, dict):
        pairs = [(source, output) for output, source in value.items()]
    elif isinstance(value, list):
        pairs = []
        for i, entry in enumerate(value):
            if not isinstance(entry, dict) or set(entry) != {"source", "output"}:
                xmsg = (
                    f"Manifest sources[{i}] in {path.name} must be an object"
                    " with exactly 'source' and 'output'"
                )
                raise ManifestError(xmsg)
            pairs.append((entry["source"], entry["output"]))
    else:
        xmsg = f"Manifest key 'sources' in {path.name} must be a list or an object"
        raise ManifestError(xmsg)

    if not all(isinstance(s, str) and isinstance(o, str) for s, o in pairs):
        xmsg = f"Manifest sources in {path.name} must map strings to strings"
        raise ManifestError(xmsg)
    return pairs


def load_manifest(
    path: Path, *, buck_root: Path, output_directory: Path
) -> ManifestResolved:
    """Load and validate a manifest, anchoring relative paths.

    Relative sources resolve against ``buck_root``; relative outputs and
    unsupported sources against ``output_directory``.
    """
    logger = get_logger()
    try:
        data = load_jsonc(path)
    except ValueError as e:
        raise ManifestError(str(e)) from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        xmsg = f"Manifest {path.name} must be an object, not {type(data).__name__}"
        raise ManifestError(xmsg)

    unknown = sorted(set(data) - MANIFEST_KEYS)
    if unknown:
        xmsg = f"Unknown manifest key(s) in {path.name}: {', '.join(unknown)}"
        raise ManifestError(xmsg)

    manifest: ManifestResolved = {
        "sources": [
            (buck_root / source, output_directory / output)
            for source, output in _source_pairs(data, path)
        ],
        "thrift_library_build_commands": _string_list(
            data, "thrift_library_build_commands", path
        ),
        "swig_library_build_commands": _string_list(
            data, "swig_library_build_commands", path
        ),
        "python_wheel_urls": _string_list(data, "python_wheel_urls", path),
        "unsupported_generated_sources": [
            output_directory / p
            for p in _string_list(data, "unsupported_generated_sources", path)
        ],
    }
    logger.debug(
        "Loaded manifest %s: %d sources, %d thrift, %d swig, %d wheels,"
        " %d unsupported",
        path.name,
        len(manifest["sources"]),
        len(manifest["thrift_library_build_commands"]),
        len(manifest["swig_library_build_commands"]),
        len(manifest["python_wheel_urls"]),
        len(manifest["unsupported_generated_sources"]),
    )
    return manifest


def register_manifest(
    assembler: BuildTargetsAssembler, manifest: ManifestResolved
) -> None:
    for source, output in manifest["sources"]:
        assembler.add_source_mapping(source, output)
    for command in manifest["thrift_library_build_commands"]:
        assembler.add_thrift_library_build_command(command)
    for command in manifest["swig_library_build_commands"]:
        assembler.add_swig_library_build_command(command)
    for url in manifest["python_wheel_urls"]:
        assembler.add_python_wheel_url(url)
    for generated in manifest["unsupported_generated_sources"]:
        assembler.add_unsupported_generated_source(generated)

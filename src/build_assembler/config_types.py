# src/build_assembler/config_types.py

from pathlib import Path
from typing import Literal, TypedDict

from typing_extensions import NotRequired


ConfigOrigin = Literal["cli", "config", "pyproject", "default"]


# --- settings ----------------------------------------------------------------


class AssemblerConfig(TypedDict, total=False):
    """Settings as written in a config file (all optional)."""

    buck_root: str
    output_directory: str
    max_workers: int | None
    progress_interval: int
    fetch_attempts: int
    fetch_timeout: float
    build_tool: str
    swig_builder_target: str
    log_level: str


class MetaConfigResolved(TypedDict):
    config_path: Path | None
    origin: ConfigOrigin
    cwd: Path


# Resolved types - all fields are guaranteed to be present with final values
class AssemblerConfigResolved(TypedDict):
    buck_root: Path
    output_directory: Path
    max_workers: int | None
    progress_interval: int
    fetch_attempts: int
    fetch_timeout: float
    build_tool: str
    swig_builder_target: str
    log_level: str
    __meta__: NotRequired[MetaConfigResolved]


# --- registration manifest ---------------------------------------------------


class SourceEntry(TypedDict):
    source: str
    output: str


class Manifest(TypedDict, total=False):
    sources: list[SourceEntry] | dict[str, str]  # list, or output -> source
    thrift_library_build_commands: list[str]
    swig_library_build_commands: list[str]
    python_wheel_urls: list[str]
    unsupported_generated_sources: list[str]


class ManifestResolved(TypedDict):
    sources: list[tuple[Path, Path]]  # (source, output), absolute
    thrift_library_build_commands: list[str]
    swig_library_build_commands: list[str]
    python_wheel_urls: list[str]
    unsupported_generated_sources: list[Path]

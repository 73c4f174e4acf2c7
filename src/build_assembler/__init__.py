# src/build_assembler/__init__.py

"""Build Assembler: materialize a flat python source tree from build facts.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use or custom integrations.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - BuildTargetsAssembler → register facts, then assemble()
    - AssemblyReport        → conflicting / unsupported output paths
    - main()                → CLI entrypoint
    - make_config()         → resolved settings without a config file
"""

from .assembler import BuildTargetsAssembler
from .cli import main
from .config import (
    find_config,
    load_config,
    make_config,
    resolve_config,
    validate_config,
)
from .config_types import (
    AssemblerConfig,
    AssemblerConfigResolved,
    Manifest,
    ManifestResolved,
)
from .constants import (
    DEFAULT_FETCH_ATTEMPTS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PROGRESS_INTERVAL,
    PLACEHOLDER_STUB_CONTENT,
)
from .errors import (
    AssemblerError,
    CodeGenerationError,
    ConfigError,
    ExecutableResolutionError,
    ManifestError,
    RetryExhaustedError,
    WheelFetchError,
)
from .logs import AppLogger, get_logger
from .manifest import load_manifest, register_manifest
from .meta import PROGRAM_DISPLAY, PROGRAM_PACKAGE, PROGRAM_SCRIPT, get_metadata
from .report import AssemblyReport
from .retry import RetryPolicy
from .runner import resolve_built_target_executable, run_generator_command
from .sources import SourceMappingRegistry, add_symbolic_link
from .stubs import StubGenerator
from .swig import SwigLibraryBuilder
from .thrift import ThriftLibraryBuilder, dedupe_thrift_commands
from .wheels import WheelFetcher, download_archive, unpack_wheel
from .workers import AtomicCounter, ConcurrentPathSet, run_parallel


__all__ = [  # noqa: RUF022
    # assembler
    "BuildTargetsAssembler",
    # cli
    "main",
    # config
    "find_config",
    "load_config",
    "make_config",
    "resolve_config",
    "validate_config",
    # config_types
    "AssemblerConfig",
    "AssemblerConfigResolved",
    "Manifest",
    "ManifestResolved",
    # constants
    "DEFAULT_FETCH_ATTEMPTS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PROGRESS_INTERVAL",
    "PLACEHOLDER_STUB_CONTENT",
    # errors
    "AssemblerError",
    "CodeGenerationError",
    "ConfigError",
    "ExecutableResolutionError",
    "ManifestError",
    "RetryExhaustedError",
    "WheelFetchError",
    # logs
    "AppLogger",
    "get_logger",
    # manifest
    "load_manifest",
    "register_manifest",
    # meta
    "PROGRAM_DISPLAY",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "get_metadata",
    # report
    "AssemblyReport",
    # retry
    "RetryPolicy",
    # runner
    "resolve_built_target_executable",
    "run_generator_command",
    # sources
    "SourceMappingRegistry",
    "add_symbolic_link",
    # stubs
    "StubGenerator",
    # swig
    "SwigLibraryBuilder",
    # thrift
    "ThriftLibraryBuilder",
    "dedupe_thrift_commands",
    # wheels
    "WheelFetcher",
    "download_archive",
    "unpack_wheel",
    # workers
    "AtomicCounter",
    "ConcurrentPathSet",
    "run_parallel",
]

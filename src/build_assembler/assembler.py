# src/build_assembler/assembler.py
"""Assemble one flat output tree from resolved build facts.

Usage is two-step: a build-graph walker registers facts through the
``add_*`` methods (single-threaded, no I/O), then ``assemble()`` runs the
production phases in a fixed order:

1. thrift libraries
2. swig libraries
3. python source links
4. python wheels
5. placeholder stubs for anything still missing

Each phase fans out over a worker pool and finishes before the next starts.
Generators run first so their files exist before the stub phase looks for
gaps, and stubs run last so they only fill what every other producer left.
"""

from collections.abc import Callable
from pathlib import Path

import httpx

from .config_types import AssemblerConfigResolved
from .constants import (
    DEFAULT_BUILD_TOOL,
    DEFAULT_FETCH_ATTEMPTS,
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_PROGRESS_INTERVAL,
    DEFAULT_SWIG_BUILDER_TARGET,
)
from .errors import WheelFetchError
from .logs import AppLogger, get_logger
from .report import AssemblyReport
from .retry import RetryPolicy
from .sources import SourceMappingRegistry
from .stubs import StubGenerator
from .swig import SwigLibraryBuilder
from .thrift import ThriftLibraryBuilder
from .wheels import WheelFetcher
from .workers import ConcurrentPathSet


class BuildTargetsAssembler:
    """Owns the registered facts and the diagnostics of one assembly run."""

    def __init__(  # noqa: PLR0913
        self,
        buck_root: Path | str,
        output_directory: Path | str,
        *,
        max_workers: int | None = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        fetch_attempts: int = DEFAULT_FETCH_ATTEMPTS,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        build_tool: str = DEFAULT_BUILD_TOOL,
        swig_builder_target: str = DEFAULT_SWIG_BUILDER_TARGET,
        http_client: httpx.Client | None = None,
        logger: AppLogger | None = None,
    ) -> None:
        self.buck_root = Path(buck_root)
        self.output_directory = Path(output_directory)
        self.max_workers = max_workers
        self._logger = logger or get_logger()

        self.conflicting_files = ConcurrentPathSet()
        self.unsupported_files = ConcurrentPathSet()

        self.sources = SourceMappingRegistry(
            self.output_directory, self.conflicting_files, logger=self._logger
        )
        self.unsupported_generated_sources: set[str] = set()
        self.python_wheel_urls: set[str] = set()
        self.thrift_library_build_commands: set[str] = set()
        self.swig_library_build_commands: set[str] = set()

        self._thrift = ThriftLibraryBuilder(
            max_workers=max_workers,
            progress_interval=progress_interval,
            logger=self._logger,
        )
        self._swig = SwigLibraryBuilder(
            builder_target=swig_builder_target,
            build_tool=build_tool,
            max_workers=max_workers,
            logger=self._logger,
        )
        self._wheels = WheelFetcher(
            self.conflicting_files,
            retry_policy=RetryPolicy(
                attempts=fetch_attempts, retry_on=(WheelFetchError,)
            ),
            client=http_client,
            timeout=fetch_timeout,
            max_workers=max_workers,
            logger=self._logger,
        )
        self._stubs = StubGenerator(
            self.unsupported_files, max_workers=max_workers, logger=self._logger
        )
        self._assembled = False

    @classmethod
    def from_config(
        cls,
        config: AssemblerConfigResolved,
        *,
        http_client: httpx.Client | None = None,
        logger: AppLogger | None = None,
    ) -> "BuildTargetsAssembler":
        return cls(
            config["buck_root"],
            config["output_directory"],
            max_workers=config["max_workers"],
            progress_interval=config["progress_interval"],
            fetch_attempts=config["fetch_attempts"],
            fetch_timeout=config["fetch_timeout"],
            build_tool=config["build_tool"],
            swig_builder_target=config["swig_builder_target"],
            http_client=http_client,
            logger=logger,
        )

    # --- registration ---------------------------------------------------------

    def add_source_mapping(self, source: Path | str, output: Path | str) -> None:
        self.sources.register(source, output)

    def add_unsupported_generated_source(self, generated_source: Path | str) -> None:
        self.unsupported_generated_sources.add(str(generated_source))

    def add_python_wheel_url(self, url: str) -> None:
        self.python_wheel_urls.add(url)

    def add_thrift_library_build_command(self, command: str) -> None:
        self.thrift_library_build_commands.add(command)

    def add_swig_library_build_command(self, command: str) -> None:
        self.swig_library_build_commands.add(command)

    # --- execution ------------------------------------------------------------

    def _run_phase(self, name: str, phase: Callable[[], None]) -> None:
        self._logger.trace("[assemble] phase %s", name)
        try:
            phase()
        except Exception as e:  # noqa: BLE001
            self._logger.error_if_not_debug("Phase %s failed: %s", name, e)

    def assemble(self) -> AssemblyReport:
        """Run every phase and return the diagnostics.

        Never raises for failures inside a phase; they are logged and the
        remaining phases still run.

        Raises:
            RuntimeError: this instance has already assembled once.
        """
        if self._assembled:
            xmsg = "BuildTargetsAssembler.assemble() can only run once"
            raise RuntimeError(xmsg)
        self._assembled = True

        self._run_phase(
            "thrift",
            lambda: self._thrift.build_all(
                self.thrift_library_build_commands, self.buck_root
            ),
        )
        self._run_phase(
            "swig",
            lambda: self._swig.build_all(
                self.swig_library_build_commands, self.buck_root
            ),
        )
        self._run_phase(
            "sources", lambda: self.sources.materialize(max_workers=self.max_workers)
        )
        self._run_phase(
            "wheels",
            lambda: self._wheels.fetch_all(
                self.python_wheel_urls, self.output_directory
            ),
        )
        self._run_phase(
            "stubs",
            lambda: self._stubs.fill_gaps(
                self.unsupported_generated_sources, self.output_directory
            ),
        )

        return AssemblyReport(
            conflicting_files=self.conflicting_files.snapshot(),
            unsupported_files=self.unsupported_files.snapshot(),
        )

# src/build_assembler/swig.py
"""Swig library generation.

Every swig command needs the swig binary, which is itself a build target.
It is built once per run; without it no swig library can be generated, so a
failed resolution skips the whole phase.
"""

import shlex
from collections.abc import Iterable
from pathlib import Path

from .constants import DEFAULT_BUILD_TOOL, DEFAULT_SWIG_BUILDER_TARGET
from .errors import CodeGenerationError
from .logs import AppLogger, get_logger
from .runner import resolve_built_target_executable, run_generator_command
from .workers import Stopwatch, run_parallel


class SwigLibraryBuilder:
    def __init__(
        self,
        *,
        builder_target: str = DEFAULT_SWIG_BUILDER_TARGET,
        build_tool: str = DEFAULT_BUILD_TOOL,
        max_workers: int | None = None,
        logger: AppLogger | None = None,
    ) -> None:
        self.builder_target = builder_target
        self.build_tool = build_tool
        self.max_workers = max_workers
        self._logger = logger or get_logger()

    def resolve_executable(self, working_root: Path) -> str:
        """Return the swig binary path.

        Raises:
            ExecutableResolutionError: the binary could not be built or found.
        """
        return resolve_built_target_executable(
            self.builder_target,
            working_root,
            build_tool=self.build_tool,
            logger=self._logger,
        )

    def build_all(self, commands: Iterable[str], working_root: Path) -> None:
        to_build = set(commands)
        if not to_build:
            return

        self._logger.info("Building %d swig libraries...", len(to_build))
        try:
            executable = self.resolve_executable(working_root)
        except CodeGenerationError as e:
            self._logger.critical(
                "Unable to build any swig libraries because its builder "
                "is not found: %s",
                e,
            )
            return
        self._logger.debug("Using swig builder at %s", executable)

        stopwatch = Stopwatch()
        prefix = shlex.quote(executable)

        def build_one(command: str) -> None:
            try:
                run_generator_command(
                    f"{prefix} {command.strip()}", working_root, logger=self._logger
                )
            except CodeGenerationError as e:
                self._logger.warning("Python code generation failed: %s", e)

        run_parallel(
            to_build,
            build_one,
            max_workers=self.max_workers,
            description="swig command",
            logger=self._logger,
        )
        self._logger.info("Built swig libraries in %dms.", stopwatch.elapsed_ms)

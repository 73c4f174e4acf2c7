# src/build_assembler/thrift.py
"""Thrift library generation.

The thrift compiler is invoked once per library. The same library can be
requested with the plain python generator (``py:``) and with the typed stub
generator (``mstch_pyi:``); the latter writes the same modules plus ``.pyi``
stubs, so only it is kept when both are registered.
"""

from collections.abc import Iterable
from pathlib import Path

from .constants import (
    DEFAULT_PROGRESS_INTERVAL,
    THRIFT_PLAIN_MARKER,
    THRIFT_TYPED_STUB_MARKER,
)
from .errors import CodeGenerationError
from .logs import AppLogger, get_logger
from .runner import run_generator_command
from .workers import AtomicCounter, Stopwatch, run_parallel


def dedupe_thrift_commands(commands: Iterable[str]) -> set[str]:
    """Drop plain commands whose typed-stub variant is also present."""
    command_set = set(commands)
    return {
        command
        for command in command_set
        if not (
            THRIFT_PLAIN_MARKER in command
            and command.replace(THRIFT_PLAIN_MARKER, THRIFT_TYPED_STUB_MARKER)
            in command_set
        )
    }


class ThriftLibraryBuilder:
    def __init__(
        self,
        *,
        max_workers: int | None = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        logger: AppLogger | None = None,
    ) -> None:
        self.max_workers = max_workers
        self.progress_interval = progress_interval
        self._logger = logger or get_logger()

    def build_all(self, commands: Iterable[str], working_root: Path) -> None:
        """Run every deduplicated command; failures never stop siblings."""
        to_build = dedupe_thrift_commands(commands)
        if not to_build:
            return

        total = len(to_build)
        self._logger.info("Building %d thrift libraries...", total)
        built = AtomicCounter()
        stopwatch = Stopwatch()

        def build_one(command: str) -> None:
            try:
                run_generator_command(command, working_root, logger=self._logger)
            except CodeGenerationError as e:
                self._logger.warning(
                    "Python code generation failed: %s", e
                )
            built_so_far = built.increment()
            if built_so_far % self.progress_interval == 0:
                self._logger.info(
                    "Built %d/%d thrift libraries.", built_so_far, total
                )

        run_parallel(
            to_build,
            build_one,
            max_workers=self.max_workers,
            description="thrift command",
            logger=self._logger,
        )
        self._logger.info("Built thrift libraries in %dms.", stopwatch.elapsed_ms)

# src/build_assembler/stubs.py

from collections.abc import Iterable
from pathlib import Path

from .constants import (
    PLACEHOLDER_STUB_CONTENT,
    PYTHON_SOURCE_SUFFIX,
    STUB_INTERFACE_SUFFIX,
)
from .logs import AppLogger, get_logger
from .utils import output_relative_path, path_lexists
from .workers import ConcurrentPathSet, Stopwatch, run_parallel


class StubGenerator:
    """Write placeholder stubs for generated sources nobody produced."""

    def __init__(
        self,
        unsupported_files: ConcurrentPathSet,
        *,
        max_workers: int | None = None,
        logger: AppLogger | None = None,
    ) -> None:
        self.unsupported_files = unsupported_files
        self.max_workers = max_workers
        self._logger = logger or get_logger()

    def _fill(self, source: Path, output_root: Path) -> None:
        output_file = source if source.is_absolute() else output_root / source
        if path_lexists(output_file):
            # already produced by an earlier phase
            return
        if str(output_file).endswith(PYTHON_SOURCE_SUFFIX) and path_lexists(
            f"{output_file}{STUB_INTERFACE_SUFFIX}"
        ):
            # a real .pyi wins over a placeholder
            return

        self.unsupported_files.add(output_relative_path(output_file, output_root))
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(PLACEHOLDER_STUB_CONTENT, encoding="utf-8")
        except OSError as e:
            self._logger.warning("Cannot write placeholder stub %s: %s", output_file, e)

    def fill_gaps(
        self, unsupported_sources: Iterable[Path | str], output_root: Path
    ) -> None:
        self._logger.info("Generating empty stubs...")
        stopwatch = Stopwatch()
        run_parallel(
            {Path(source) for source in unsupported_sources},
            lambda source: self._fill(source, output_root),
            max_workers=self.max_workers,
            description="unsupported source",
            logger=self._logger,
        )
        self._logger.info("Generated empty stubs in %dms.", stopwatch.elapsed_ms)

# src/build_assembler/sources.py

import os
from pathlib import Path

from .logs import AppLogger, get_logger
from .utils import output_relative_path
from .workers import ConcurrentPathSet, Stopwatch, run_parallel


def add_symbolic_link(link_path: Path, actual_path: Path) -> None:
    """Create ``link_path`` pointing at ``actual_path``, parents included.

    Raises:
        OSError: the link cannot be created (for instance, ``link_path``
            already exists).
    """
    link_path.parent.mkdir(parents=True, exist_ok=True)
    os.symlink(actual_path, link_path)


class SourceMappingRegistry:
    """Output → source link table with first-writer-wins conflict bookkeeping."""

    def __init__(
        self,
        output_directory: Path,
        conflicting_files: ConcurrentPathSet,
        *,
        logger: AppLogger | None = None,
    ) -> None:
        self.output_directory = output_directory
        self.conflicting_files = conflicting_files
        self._logger = logger or get_logger()
        self._sources: dict[Path, Path] = {}

    @property
    def sources(self) -> dict[Path, Path]:
        """Registered mappings keyed by output path (a copy)."""
        return dict(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def register(self, source: Path | str, output: Path | str) -> None:
        source_path = Path(source)
        output_path = Path(output)
        existing = self._sources.get(output_path)
        if existing is not None and existing != source_path:
            relative = output_relative_path(output_path, self.output_directory)
            self._logger.trace(
                "[SOURCES] %s already maps to %s, ignoring %s",
                relative,
                existing,
                source_path,
            )
            self.conflicting_files.add(relative)
            return
        self._sources[output_path] = source_path

    def _link(self, mapping: tuple[Path, Path]) -> None:
        output_path, source_path = mapping
        try:
            add_symbolic_link(output_path, source_path)
        except OSError as e:
            self._logger.warning(
                "Cannot link %s to %s: %s", output_path, source_path, e
            )

    def materialize(self, *, max_workers: int | None = None) -> None:
        self._logger.info("Building %d python sources...", len(self._sources))
        stopwatch = Stopwatch()
        run_parallel(
            self._sources.items(),
            self._link,
            max_workers=max_workers,
            description="source mapping",
            logger=self._logger,
        )
        self._logger.info("Built python sources in %dms.", stopwatch.elapsed_ms)

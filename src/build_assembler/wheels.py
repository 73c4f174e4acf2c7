# src/build_assembler/wheels.py
"""Fetch remote python wheels and unpack them into the output directory.

A wheel is a zip archive whose entries are already laid out as an import
tree, so unpacking it at the output root makes its modules importable there.
"""

import io
import os
import shutil
import zipfile
import zlib
from collections.abc import Iterable
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from .constants import DEFAULT_FETCH_TIMEOUT
from .errors import RetryExhaustedError, WheelFetchError
from .logs import AppLogger, get_logger
from .retry import RetryPolicy
from .utils import path_lexists
from .workers import ConcurrentPathSet, Stopwatch, run_parallel


def _local_archive_path(url: str) -> Path | None:
    """Return the filesystem path for ``file://`` URLs and bare paths."""
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    if not parsed.scheme or len(parsed.scheme) == 1:  # "C:" drive letters
        return Path(url)
    return None


def download_archive(url: str, client: httpx.Client) -> bytes:
    """Return the archive bytes behind ``url``.

    Raises:
        WheelFetchError: the archive cannot be read or downloaded.
    """
    local = _local_archive_path(url)
    try:
        if local is not None:
            return local.read_bytes()
        response = client.get(url)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
        xmsg = f"Cannot download {url}: {e}"
        raise WheelFetchError(xmsg) from e
    return response.content


def unpack_wheel(
    data: bytes, output_root: Path, *, logger: AppLogger | None = None
) -> set[str]:
    """Extract the archive in ``data`` under ``output_root``.

    Existing paths are never overwritten; their archive names are returned
    as conflicts instead. When extraction fails part way, the files this
    call created are removed before the error propagates.

    Returns:
        Archive-relative names of entries that collided with existing paths.

    Raises:
        WheelFetchError: the archive is corrupt or a file cannot be written.
    """
    logger = logger or get_logger()
    root = output_root.resolve()
    conflicts: set[str] = set()
    created: list[Path] = []
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            for entry in archive.infolist():
                # lexical only: links made by the source phase must not be followed
                target = Path(os.path.normpath(root / entry.filename))
                if target == root or not target.is_relative_to(root):
                    logger.warning(
                        "Skipping archive entry outside the output directory: %s",
                        entry.filename,
                    )
                    continue
                if entry.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                name = target.relative_to(root).as_posix()
                if path_lexists(target):
                    conflicts.add(name)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                try:
                    # exclusive create: a concurrent writer yields a conflict
                    with archive.open(entry) as src, target.open("xb") as dst:
                        created.append(target)
                        shutil.copyfileobj(src, dst)
                except FileExistsError:
                    conflicts.add(name)
    except (
        zipfile.BadZipFile,
        zlib.error,
        EOFError,
        NotImplementedError,  # unsupported compression method
        RuntimeError,  # encrypted entry
        OSError,
    ) as e:
        for path in created:
            path.unlink(missing_ok=True)
        xmsg = f"Cannot unpack archive into {output_root}: {e}"
        raise WheelFetchError(xmsg) from e
    return conflicts


class WheelFetcher:
    def __init__(
        self,
        conflicting_files: ConcurrentPathSet,
        *,
        retry_policy: RetryPolicy | None = None,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        max_workers: int | None = None,
        logger: AppLogger | None = None,
    ) -> None:
        self.conflicting_files = conflicting_files
        self.retry_policy = retry_policy or RetryPolicy(retry_on=(WheelFetchError,))
        self.timeout = timeout
        self.max_workers = max_workers
        self._client = client
        self._logger = logger or get_logger()

    def fetch(self, url: str, output_root: Path, client: httpx.Client) -> set[str]:
        """Download and unpack one wheel; returns its conflicting paths."""
        data = download_archive(url, client)
        return unpack_wheel(data, output_root, logger=self._logger)

    def fetch_all(self, urls: Iterable[str], output_root: Path) -> None:
        to_fetch = set(urls)
        self._logger.info("Building %d python wheels...", len(to_fetch))
        stopwatch = Stopwatch()

        client = self._client or httpx.Client(
            timeout=self.timeout, follow_redirects=True
        )

        def fetch_one(url: str) -> None:
            try:
                conflicts = self.retry_policy.call(
                    lambda: self.fetch(url, output_root, client),
                    label=f"fetching {url}",
                    logger=self._logger,
                )
            except RetryExhaustedError as e:
                self._logger.warning(
                    "Exhausted retries fetching remote python dependency "
                    "at `%s` (%d attempts).",
                    url,
                    len(e.failures),
                )
                for attempt, failure in enumerate(e.failures, 1):
                    self._logger.warning("Failure %d: %s", attempt, failure)
                return
            if conflicts:
                self._logger.debug(
                    "%d file(s) from %s already existed", len(conflicts), url
                )
            self.conflicting_files.update(conflicts)

        try:
            run_parallel(
                to_fetch,
                fetch_one,
                max_workers=self.max_workers,
                description="wheel",
                logger=self._logger,
            )
        finally:
            if self._client is None:
                client.close()

        self._logger.info("Built python wheels in %dms.", stopwatch.elapsed_ms)

"""Parallel subtree traversal on a shared worker pool.

Each directory listing, together with the lstat of every child, is one job
on a fixed-size thread pool. The walk itself is a generator driven by the
caller: it keeps a frontier of pending listing jobs, yields entries as jobs
complete and submits a new job for every subdirectory it discovers. The
traversal is iterative, so stack usage does not grow with tree depth.
"""

import logging
import os
import stat
from collections.abc import Iterator
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import Final, Self

import psutil

from disk_scan.types.models import WalkEntry

logger = logging.getLogger(__name__)

WORKER_THREAD_PREFIX: Final[str] = "du-walk"


def available_parallelism() -> int:
    """Return the number of CPUs this process may run on.

    Honors CPU affinity masks (containers, taskset) where the platform
    exposes them and falls back to the logical CPU count elsewhere.

    Returns:
        Number of usable CPUs, at least 1
    """
    try:
        affinity: list[int] = psutil.Process().cpu_affinity()  # pyright: ignore[reportUnknownMemberType]
        if affinity:
            return len(affinity)
    except (AttributeError, psutil.Error, OSError):
        # cpu_affinity is not available on macOS
        pass

    return psutil.cpu_count(logical=True) or 1


@dataclass(slots=True)
class DirectoryListing:
    """Children of one directory with their lstat metadata."""

    entries: list[WalkEntry] = field(default_factory=list)
    errors: int = 0


@dataclass(slots=True)
class WalkStats:
    """Counters collected by one walk."""

    entries: int = 0
    errors: int = 0


def list_directory(path: Path, depth: int) -> DirectoryListing:
    """List one directory without following symbolic links.

    Children whose metadata cannot be read are left out and counted as
    errors. A directory that cannot be opened yields an empty listing with
    one error.

    Args:
        path: Directory to list
        depth: Depth assigned to the children

    Returns:
        Listing of readable children
    """
    listing = DirectoryListing()

    try:
        with os.scandir(path) as iterator:
            for dir_entry in iterator:
                try:
                    metadata = dir_entry.stat(follow_symlinks=False)
                except OSError:
                    # Removed during the walk, permission denied, etc.
                    listing.errors += 1
                    continue
                listing.entries.append(
                    WalkEntry(path=Path(dir_entry.path), metadata=metadata, depth=depth)
                )
    except OSError:
        listing.errors += 1

    return listing


class WalkerPool:
    """Fixed-size thread pool shared by every subtree walk of a run.

    Bounds the number of OS threads used for traversal regardless of how many
    root entries are scanned concurrently. Worker threads keep the default
    stack size: each job lists a single directory and the walk keeps its
    frontier on the heap, so stack use per worker is constant whatever the
    depth of the tree.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        """Initialize the worker pool.

        Args:
            max_workers: Number of worker threads (None for available CPUs)
        """
        if max_workers is not None and max_workers <= 0:
            msg = "max_workers must be greater than zero"
            raise ValueError(msg)

        self.max_workers: int = max_workers or available_parallelism()
        self._executor: ThreadPoolExecutor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix=WORKER_THREAD_PREFIX,
        )
        logger.debug("Walker pool started", extra={"max_workers": self.max_workers})

    def list_directory(self, path: Path, depth: int) -> Future[DirectoryListing]:
        """Schedule a listing job for one directory."""
        return self._executor.submit(list_directory, path, depth)

    def shutdown(self) -> None:
        """Wait for outstanding jobs and stop the worker threads."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.shutdown()


class SubtreeWalker:
    """Best-effort parallel walker over one subtree.

    Traversal policy:
    - Symbolic links are reported but never followed
    - Hidden entries are included
    - No ordering guarantee between entries
    - Unreadable entries are skipped silently (counted in WalkStats)
    """

    def __init__(self, pool: WalkerPool) -> None:
        """Initialize the walker.

        Args:
            pool: Shared worker pool that runs directory listing jobs
        """
        self._pool: WalkerPool = pool

    def walk(self, path: Path, stats: WalkStats | None = None) -> Iterator[WalkEntry]:
        """Yield every entry reachable from path, path itself included.

        Args:
            path: Starting point of the walk (file or directory)
            stats: Optional counters updated while walking

        Yields:
            WalkEntry objects in completion order
        """
        if stats is None:
            stats = WalkStats()

        try:
            root_metadata = os.lstat(path)
        except OSError:
            stats.errors += 1
            return

        stats.entries += 1
        yield WalkEntry(path=path, metadata=root_metadata, depth=0)

        if not stat.S_ISDIR(root_metadata.st_mode):
            return

        pending: set[Future[DirectoryListing]] = {self._pool.list_directory(path, 1)}
        try:
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    listing = future.result()
                    stats.errors += listing.errors

                    # Fan out before yielding so workers stay busy while the caller consumes
                    for entry in listing.entries:
                        if stat.S_ISDIR(entry.metadata.st_mode):
                            pending.add(self._pool.list_directory(entry.path, entry.depth + 1))

                    for entry in listing.entries:
                        stats.entries += 1
                        yield entry
        finally:
            for future in pending:
                _ = future.cancel()

"""ROM hash utilities - streaming MD5 of files from a few KB to many GB.

The digest is the join key against the catalog, so it must not depend on how
the file is read: buffer sizes only change throughput.
"""

import hashlib
import logging
import os
import stat
import time
from typing import Callable, Optional, Tuple

from ..exceptions import HashTimeoutError, ReadFailedError, StatFailedError

logger = logging.getLogger(__name__)

KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB

HASH_TIMEOUT_SECONDS = 30 * 60

DEFAULT_BUFFER_SIZE = 64 * KIB
MAX_BUFFER_SIZE = 16 * MIB

# (file size strictly above, buffer size), largest first
_BUFFER_STEPS: Tuple[Tuple[int, int], ...] = (
    (4 * GIB, 16 * MIB),   # dual-layer DVD images
    (2 * GIB, 12 * MIB),
    (1 * GIB, 8 * MIB),    # DVD images, large .rvz
    (500 * MIB, 4 * MIB),
    (100 * MIB, 2 * MIB),
    (10 * MIB, 1 * MIB),
)

PROGRESS_FRACTION = 0.05
PROGRESS_QUANTUM_BYTES = 100 * MIB

ProgressCallback = Callable[[float, int, int], None]


def select_buffer_size(file_size: int) -> int:
    """Read buffer for a file of ``file_size`` bytes (monotonic step function)."""
    for threshold, buffer_size in _BUFFER_STEPS:
        if file_size > threshold:
            return buffer_size
    return DEFAULT_BUFFER_SIZE


class HashProgressThrottle:
    """Decides when a progress update is due.

    An update is due once at least ``min(5% of total, 100 MiB)`` bytes were
    read since the previous one, or when the whole file has been read.
    Reported percentages never decrease and never exceed 100.
    """

    def __init__(self, total_bytes: int, fraction: float = PROGRESS_FRACTION,
                 quantum: int = PROGRESS_QUANTUM_BYTES):
        self.total_bytes = max(0, int(total_bytes))
        self.interval = min(self.total_bytes * fraction, quantum)
        self.last_reported_bytes = 0
        self.last_percent = 0.0

    def percent(self, bytes_read: int) -> float:
        if self.total_bytes <= 0:
            return 100.0
        return min(100.0, bytes_read / self.total_bytes * 100.0)

    def update(self, bytes_read: int) -> Optional[float]:
        """Percentage to report for ``bytes_read``, or None if not due yet."""
        if self.total_bytes <= 0:
            return None
        due = (bytes_read - self.last_reported_bytes >= self.interval
               or bytes_read >= self.total_bytes)
        if not due:
            return None
        self.last_reported_bytes = bytes_read
        self.last_percent = max(self.last_percent, self.percent(bytes_read))
        return self.last_percent

    @property
    def completed(self) -> bool:
        return self.last_percent >= 100.0


def hash_file(
    file_path: str,
    on_progress: Optional[ProgressCallback] = None,
    *,
    timeout: float = HASH_TIMEOUT_SECONDS,
    clock: Callable[[], float] = time.monotonic,
) -> str:
    """Calculate the MD5 digest of a file as 32 lowercase hex characters.

    Args:
        file_path: File to hash. Read sequentially from start to EOF.
        on_progress: Optional ``(percent, bytes_read, total_bytes)`` callback,
            throttled by :class:`HashProgressThrottle` and always called once
            with 100.0 on completion.
        timeout: Wall-clock ceiling in seconds, checked whenever a read
            returns (including the final empty read at EOF). A read that
            blocks forever, e.g. on a hung network share, cannot be
            interrupted from this thread; callers needing a hard stop run
            the hash in an executor and abandon it.
        clock: Monotonic time source.

    Raises:
        StatFailedError: the file size could not be determined up front.
        ReadFailedError: the file could not be opened or a read failed.
        HashTimeoutError: hashing took longer than ``timeout``.
    """
    started = clock()
    deadline = started + timeout

    try:
        file_stat = os.stat(file_path)
    except OSError as e:
        raise StatFailedError(f"Cannot read file stats: {e}", file_path) from e
    if stat.S_ISDIR(file_stat.st_mode):
        raise ReadFailedError(f"Failed to hash file: {file_path} is a directory", file_path)

    file_size = int(file_stat.st_size)
    buffer_size = select_buffer_size(file_size)
    throttle = HashProgressThrottle(file_size)
    md5 = hashlib.md5(usedforsecurity=False)
    bytes_read = 0

    try:
        with open(file_path, 'rb') as f:
            while True:
                try:
                    chunk = f.read(buffer_size)
                except OSError as e:
                    raise ReadFailedError(
                        f"Failed to read file stream: {e} (code: {e.errno})", file_path
                    ) from e
                if clock() > deadline:
                    raise HashTimeoutError(
                        f"Timeout: File hashing exceeded {timeout / 60:g} minutes for {file_path}",
                        file_path, timeout,
                    )
                if not chunk:
                    break
                md5.update(chunk)
                bytes_read += len(chunk)

                if on_progress is not None:
                    percent = throttle.update(bytes_read)
                    if percent is not None:
                        on_progress(percent, bytes_read, file_size)
    except OSError as e:
        raise ReadFailedError(f"Failed to hash file: {e}", file_path) from e

    if on_progress is not None and not throttle.completed:
        on_progress(100.0, bytes_read, file_size)

    digest = md5.hexdigest().lower()
    logger.debug(
        "Hashed %s (%.2f MB) in %.2fs",
        os.path.basename(file_path), file_size / MIB, clock() - started,
    )
    return digest

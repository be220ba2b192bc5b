"""Scratch directories: per-archive staging space for extracted ROMs."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import PurePosixPath
from typing import List, Optional, Set

from ..core.models import SCRATCH_PREFIX

logger = logging.getLogger(__name__)


def create_scratch_dir(scratch_root: Optional[str] = None, prefix: str = SCRATCH_PREFIX) -> str:
    """Create a fresh, empty scratch directory and return its path."""
    if scratch_root:
        os.makedirs(scratch_root, exist_ok=True)
    path = tempfile.mkdtemp(prefix=prefix, dir=scratch_root or None)
    logger.debug("Created scratch directory %s", path)
    return path


def remove_scratch_dir(path: Optional[str]) -> bool:
    """Recursively delete a scratch directory. Returns False if it is still on disk."""
    if not path:
        return True
    if not os.path.exists(path):
        return True
    try:
        shutil.rmtree(path)
    except OSError as e:
        logger.warning("Failed to clean up temp directory %s: %s", path, e)
        return False
    logger.debug("Cleaned up temp directory: %s", path)
    return True


def member_basename(name: str) -> str:
    """Leaf filename of an in-archive path; both '/' and '\\' separate components."""
    return PurePosixPath(str(name).replace("\\", "/")).name


def is_safe_member_name(name: str) -> bool:
    """Reject member names that cannot be staged as a plain file."""
    if not name or "\x00" in name:
        return False
    leaf = member_basename(name)
    return leaf not in ("", ".", "..")


class ScratchTracker:
    """Scratch directories created during one scan, released exactly once."""

    def __init__(self) -> None:
        self._active: Set[str] = set()
        self._order: List[str] = []

    def track(self, path: Optional[str]) -> None:
        if path and path not in self._active:
            self._active.add(path)
            self._order.append(path)

    def release(self, path: Optional[str]) -> None:
        if not path or path not in self._active:
            return
        remove_scratch_dir(path)
        self._active.discard(path)
        self._order.remove(path)

    def release_all(self) -> None:
        for path in list(self._order):
            self.release(path)

    @property
    def active(self) -> List[str]:
        return list(self._order)

    def __len__(self) -> int:
        return len(self._order)

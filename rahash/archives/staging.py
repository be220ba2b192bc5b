"""Staging of ROM members into a per-archive scratch directory.

Shared by every archive adapter. The scratch directory is created on the first
ROM member only, and deleted again if anything fails before the caller gets
the staged files back.
"""

from __future__ import annotations

import logging
import os
import tempfile
from typing import Dict, List, Optional

from ..core.extensions import is_rom_file
from ..core.models import ArchiveMember, ExtractedRom
from ..exceptions import ArchiveError, ExtractionError
from .scratch import SCRATCH_PREFIX, create_scratch_dir, is_safe_member_name, member_basename, remove_scratch_dir

logger = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 1024 * 1024


def is_rom_member(member: ArchiveMember) -> bool:
    """Non-directory member with a ROM extension and a usable leaf name."""
    return (not member.is_directory
            and is_safe_member_name(member.name)
            and is_rom_file(member.name))


class RomStager:
    """Collects staged ROM files for one archive.

    Use as a context manager: on an ``Exception`` the scratch directory is
    removed and the error re-raised as :class:`ExtractionError` (archive
    errors pass through unchanged); on a ``BaseException`` such as
    ``KeyboardInterrupt`` the directory is removed and the exception propagates.
    """

    def __init__(self, archive_path: str, format_name: str,
                 scratch_root: Optional[str] = None, prefix: str = SCRATCH_PREFIX):
        self.archive_path = str(archive_path)
        self.format_name = format_name
        self.scratch_root = scratch_root
        self.prefix = prefix
        self.scratch_dir: Optional[str] = None
        self._staged: List[ExtractedRom] = []
        self._index_by_name: Dict[str, int] = {}

    def __enter__(self) -> "RomStager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_val is None:
            return False
        self.discard()
        if isinstance(exc_val, ArchiveError) or not isinstance(exc_val, Exception):
            return False
        logger.error("Failed to extract %s archive %s: %s", self.format_name, self.archive_path, exc_val)
        raise ExtractionError(
            f"Failed to extract {self.format_name} archive: {exc_val}", self.archive_path
        ) from exc_val

    def ensure_scratch_dir(self) -> str:
        if self.scratch_dir is None:
            self.scratch_dir = create_scratch_dir(self.scratch_root, self.prefix)
        return self.scratch_dir

    def make_staging_dir(self) -> str:
        """Private subfolder for formats that extract with their own directory layout."""
        return tempfile.mkdtemp(prefix=".extract-", dir=self.ensure_scratch_dir())

    def target_for(self, member_name: str) -> str:
        """Path the member's bytes should be written to."""
        return os.path.join(self.ensure_scratch_dir(), member_basename(member_name))

    def commit(self, member_name: str) -> ExtractedRom:
        """Record a member whose bytes are now at :meth:`target_for`.

        Members reducing to the same base name overwrite each other on disk;
        the later one wins and the earlier record is dropped.
        """
        name = member_basename(member_name)
        rom = ExtractedRom(
            name=name,
            staged_path=self.target_for(member_name),
            source_archive_path=self.archive_path,
            scratch_dir=self.ensure_scratch_dir(),
        )
        previous = self._index_by_name.pop(name, None)
        if previous is not None:
            logger.warning("Archive %s has several members named %s; keeping the last one (%s)",
                           self.archive_path, name, member_name)
            del self._staged[previous]
            self._index_by_name = {rom_.name: i for i, rom_ in enumerate(self._staged)}
        self._index_by_name[name] = len(self._staged)
        self._staged.append(rom)
        return rom

    def results(self) -> List[ExtractedRom]:
        """Staged ROMs; drops the scratch directory when nothing was staged."""
        if not self._staged:
            self.discard()
        return list(self._staged)

    def discard(self) -> None:
        if self.scratch_dir is not None:
            remove_scratch_dir(self.scratch_dir)
            self.scratch_dir = None
        self._staged.clear()
        self._index_by_name.clear()

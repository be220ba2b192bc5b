"""7z archive adapter (py7zr)."""

from __future__ import annotations

import logging
import lzma
import os
import shutil
import struct
from typing import List, Optional

import py7zr

from ..core.models import ArchiveMember, ExtractedRom
from ..exceptions import ExtractionError
from .scratch import SCRATCH_PREFIX
from .staging import RomStager, is_rom_member

logger = logging.getLogger(__name__)

FORMAT_NAME = "7Z"

# what py7zr raises for damaged or truncated archives
_OPEN_ERRORS = (py7zr.exceptions.ArchiveError, OSError, EOFError, ValueError,
                struct.error, lzma.LZMAError)


def _member(info) -> ArchiveMember:
    return ArchiveMember(name=info.filename, is_directory=bool(info.is_directory))


def list_members(archive_path: str) -> List[ArchiveMember]:
    """Table of contents of a 7z file; a malformed archive lists as empty."""
    try:
        with py7zr.SevenZipFile(archive_path, mode='r') as archive:
            return [_member(info) for info in archive.list()]
    except _OPEN_ERRORS as e:
        logger.warning("Could not list contents of %s: %s", archive_path, e)
        return []


def extract_matching(archive_path: str, scratch_root: Optional[str] = None,
                     prefix: str = SCRATCH_PREFIX) -> List[ExtractedRom]:
    """Extract the ROM members of a 7z file into a fresh scratch directory.

    py7zr writes members with their in-archive directories, so they are
    extracted into a private staging folder first and then moved to their
    base names.
    """
    try:
        archive = py7zr.SevenZipFile(archive_path, mode='r')
    except _OPEN_ERRORS as e:
        raise ExtractionError(f"Failed to open 7Z archive: {e}", archive_path) from e

    with archive, RomStager(archive_path, FORMAT_NAME, scratch_root, prefix) as stager:
        members = [m for m in (_member(info) for info in archive.list()) if is_rom_member(m)]
        if not members:
            return []

        staging = stager.make_staging_dir()
        archive.extract(path=staging, targets=[m.name for m in members])

        for member in members:
            extracted = os.path.join(staging, *member.name.replace("\\", "/").split("/"))
            if not os.path.isfile(extracted):
                logger.warning("Member %s of %s was not extracted", member.name, archive_path)
                continue
            os.replace(extracted, stager.target_for(member.name))
            stager.commit(member.name)

        shutil.rmtree(staging)
        return stager.results()

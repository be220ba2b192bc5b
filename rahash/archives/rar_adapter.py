"""RAR archive adapter (rarfile).

Listing works on any RAR file; decompressing members needs one of the
external tools rarfile knows about (unrar, unar, 7z or bsdtar).
"""

from __future__ import annotations

import logging
import shutil
from typing import List, Optional

import rarfile

from ..core.models import ArchiveMember, ExtractedRom
from ..exceptions import ExtractionError
from .scratch import SCRATCH_PREFIX
from .staging import COPY_BUFFER_SIZE, RomStager, is_rom_member

logger = logging.getLogger(__name__)

FORMAT_NAME = "RAR"


def is_rar_tool_available() -> bool:
    """Whether rarfile found an external tool able to decompress members."""
    try:
        rarfile.tool_setup()
    except rarfile.RarCannotExec:
        return False
    return True


def _member(info: rarfile.RarInfo) -> ArchiveMember:
    return ArchiveMember(name=info.filename, is_directory=info.is_dir())


def list_members(archive_path: str) -> List[ArchiveMember]:
    """Table of contents of a RAR file; a malformed archive lists as empty."""
    try:
        with rarfile.RarFile(archive_path, 'r') as rf:
            return [_member(info) for info in rf.infolist()]
    except (rarfile.Error, OSError) as e:
        logger.warning("Could not list contents of %s: %s", archive_path, e)
        return []


def extract_matching(archive_path: str, scratch_root: Optional[str] = None,
                     prefix: str = SCRATCH_PREFIX) -> List[ExtractedRom]:
    """Stream every ROM member of a RAR file into a fresh scratch directory."""
    try:
        rf = rarfile.RarFile(archive_path, 'r')
    except (rarfile.Error, OSError) as e:
        raise ExtractionError(f"Failed to open RAR archive: {e}", archive_path) from e

    with rf, RomStager(archive_path, FORMAT_NAME, scratch_root, prefix) as stager:
        for info in rf.infolist():
            if not is_rom_member(_member(info)):
                continue
            target = stager.target_for(info.filename)
            with rf.open(info) as source, open(target, 'wb') as dest:
                shutil.copyfileobj(source, dest, COPY_BUFFER_SIZE)
            stager.commit(info.filename)
        return stager.results()

"""ZIP archive adapter (standard library zipfile)."""

from __future__ import annotations

import logging
import shutil
import zipfile
from typing import List, Optional

from ..core.models import ArchiveMember, ExtractedRom
from ..exceptions import ExtractionError
from .scratch import SCRATCH_PREFIX
from .staging import COPY_BUFFER_SIZE, RomStager, is_rom_member

logger = logging.getLogger(__name__)

FORMAT_NAME = "ZIP"


def _member(info: zipfile.ZipInfo) -> ArchiveMember:
    return ArchiveMember(name=info.filename, is_directory=info.is_dir())


def list_members(archive_path: str) -> List[ArchiveMember]:
    """Table of contents of a ZIP file; a malformed archive lists as empty."""
    try:
        with zipfile.ZipFile(archive_path, 'r') as zf:
            return [_member(info) for info in zf.infolist()]
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as e:
        logger.warning("Could not list contents of %s: %s", archive_path, e)
        return []


def extract_matching(archive_path: str, scratch_root: Optional[str] = None,
                     prefix: str = SCRATCH_PREFIX) -> List[ExtractedRom]:
    """Stream every ROM member of a ZIP file into a fresh scratch directory."""
    try:
        zf = zipfile.ZipFile(archive_path, 'r')
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as e:
        raise ExtractionError(f"Failed to open ZIP archive: {e}", archive_path) from e

    with zf, RomStager(archive_path, FORMAT_NAME, scratch_root, prefix) as stager:
        for info in zf.infolist():
            if not is_rom_member(_member(info)):
                continue
            target = stager.target_for(info.filename)
            with zf.open(info, 'r') as source, open(target, 'wb') as dest:
                shutil.copyfileobj(source, dest, COPY_BUFFER_SIZE)
            stager.commit(info.filename)
        return stager.results()

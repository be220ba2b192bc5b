#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""ra-hash archive adapters.

Every supported format is described by an :class:`ArchiveAdapter` record and
registered under its extension in :data:`ADAPTERS`. Callers normally use the
module-level :func:`list_members` and :func:`extract_matching`, which dispatch
on the archive's extension.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..core.extensions import file_extension
from ..core.models import ArchiveMember, ExtractedRom
from ..exceptions import UnsupportedFormatError
from . import rar_adapter, sevenzip_adapter, zip_adapter
from .rar_adapter import is_rar_tool_available
from .scratch import SCRATCH_PREFIX, ScratchTracker, create_scratch_dir, remove_scratch_dir
from .staging import is_rom_member


@dataclass(frozen=True)
class ArchiveAdapter:
    """Capabilities of one archive format."""

    format_name: str
    list_members: Callable[[str], List[ArchiveMember]]
    extract_matching: Callable[..., List[ExtractedRom]]


ADAPTERS: Dict[str, ArchiveAdapter] = {
    ".zip": ArchiveAdapter(zip_adapter.FORMAT_NAME, zip_adapter.list_members,
                           zip_adapter.extract_matching),
    ".7z": ArchiveAdapter(sevenzip_adapter.FORMAT_NAME, sevenzip_adapter.list_members,
                          sevenzip_adapter.extract_matching),
    ".rar": ArchiveAdapter(rar_adapter.FORMAT_NAME, rar_adapter.list_members,
                           rar_adapter.extract_matching),
}


def get_adapter(archive_path: str) -> ArchiveAdapter:
    extension = file_extension(str(archive_path))
    adapter = ADAPTERS.get(extension)
    if adapter is None:
        raise UnsupportedFormatError(extension, str(archive_path))
    return adapter


def list_members(archive_path: str) -> List[ArchiveMember]:
    return get_adapter(archive_path).list_members(str(archive_path))


def list_rom_members(archive_path: str) -> List[str]:
    """Names of the members that would be extracted by :func:`extract_matching`."""
    return [member.name for member in list_members(archive_path) if is_rom_member(member)]


def extract_matching(archive_path: str, scratch_root: Optional[str] = None,
                     prefix: str = SCRATCH_PREFIX) -> List[ExtractedRom]:
    return get_adapter(archive_path).extract_matching(str(archive_path), scratch_root, prefix)


__all__ = [
    "ADAPTERS",
    "ArchiveAdapter",
    "SCRATCH_PREFIX",
    "ScratchTracker",
    "create_scratch_dir",
    "extract_matching",
    "get_adapter",
    "is_rar_tool_available",
    "is_rom_member",
    "list_members",
    "list_rom_members",
    "remove_scratch_dir",
]

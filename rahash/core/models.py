#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
ra-hash - Data Models

Plain records passed between the walker, the archive adapters, the hashing
engine and the callers of a scan.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

# name prefix of every per-archive scratch directory
SCRATCH_PREFIX = "ra-hash-"


@dataclass(frozen=True)
class FileEntry:
    """A ROM or archive found directly on disk."""

    filename: str
    absolute_path: str
    relative_path: str  # rooted at the scan directory, '/'-separated


@dataclass(frozen=True)
class ArchiveMember:
    """Raw table-of-contents entry of an archive."""

    name: str
    is_directory: bool = False


@dataclass(frozen=True)
class ExtractedRom:
    """A ROM member staged inside a scratch directory."""

    name: str
    staged_path: str
    source_archive_path: str
    scratch_dir: str


@dataclass(frozen=True)
class ScanResult:
    """One line of scan output.

    Exactly one of ``hash`` and ``error`` is set. For ROMs that came out of an
    archive, ``source_path`` points at the archive and ``archive_name`` /
    ``member_name`` say where inside it the ROM was found.
    """

    display_name: str
    source_path: str
    hash: Optional[str] = None
    size: Optional[int] = None
    error: Optional[str] = None
    archive_name: Optional[str] = None
    member_name: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.hash is None) == (self.error is None):
            raise ValueError(
                f"ScanResult for {self.display_name!r} needs exactly one of hash or error"
            )

    @classmethod
    def success(cls, display_name: str, source_path: str, digest: str, size: int,
                archive_name: Optional[str] = None,
                member_name: Optional[str] = None) -> "ScanResult":
        return cls(display_name=display_name, source_path=source_path, hash=digest,
                   size=size, archive_name=archive_name, member_name=member_name)

    @classmethod
    def failure(cls, display_name: str, source_path: str, error: str,
                archive_name: Optional[str] = None,
                member_name: Optional[str] = None) -> "ScanResult":
        return cls(display_name=display_name, source_path=source_path, error=error or "Unknown error",
                   archive_name=archive_name, member_name=member_name)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def from_archive(self) -> bool:
        return self.archive_name is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PlatformCandidate:
    """Platform entry supplied by the catalog collaborator."""

    id: Any
    name: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PlatformCandidate":
        platform_id = data.get("id", data.get("ID"))
        name = data.get("name", data.get("Name"))
        if platform_id is None or not name:
            raise ValueError(f"Platform entry needs an id and a name: {dict(data)!r}")
        return cls(id=platform_id, name=str(name))


class ScanState(Enum):
    VALIDATING = "validating"
    DISCOVERING = "discovering"
    PROCESSING_ROMS = "processing_roms"
    PROCESSING_ARCHIVES = "processing_archives"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"

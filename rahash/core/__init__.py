#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
ra-hash - Core Package

Extension tables, directory walking, hashing, platform inference and the
records shared by all of them.
"""

from .catalog import CatalogEntry, MatchedResult, filter_game_platforms, match_results
from .extensions import (
    ARCHIVE_EXTENSIONS,
    EXTENSION_TABLE_VERSION,
    ROM_EXTENSIONS,
    FileKind,
    classify,
    file_extension,
    is_archive_file,
    is_rom_file,
    is_rom_or_archive_file,
)
from .hashing import HASH_TIMEOUT_SECONDS, HashProgressThrottle, hash_file, select_buffer_size
from .models import (
    ArchiveMember,
    ExtractedRom,
    FileEntry,
    PlatformCandidate,
    ScanResult,
    ScanState,
)
from .platform_heuristics import suggest_platform
from .walker import walk

__all__ = [
    "ARCHIVE_EXTENSIONS",
    "ArchiveMember",
    "CatalogEntry",
    "EXTENSION_TABLE_VERSION",
    "ExtractedRom",
    "FileEntry",
    "FileKind",
    "HASH_TIMEOUT_SECONDS",
    "HashProgressThrottle",
    "MatchedResult",
    "PlatformCandidate",
    "ROM_EXTENSIONS",
    "ScanResult",
    "ScanState",
    "classify",
    "file_extension",
    "filter_game_platforms",
    "hash_file",
    "is_archive_file",
    "is_rom_file",
    "is_rom_or_archive_file",
    "match_results",
    "select_buffer_size",
    "suggest_platform",
    "walk",
]

#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
ra-hash - Scan Orchestrator

Walks a directory tree, extracts ROMs from archives into scratch space and
hashes every ROM found, one file at a time: plain ROMs first in discovery
order, then archives in discovery order, then each archive's members.

Only an unusable root aborts a scan. Every other problem is recorded as an
error ScanResult and the scan moves on. Every scratch directory created
during a scan is gone when the scan returns, whatever happened.
"""

from __future__ import annotations

import logging
import os
import stat
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from ..archives import extract_matching, list_rom_members
from ..archives.scratch import ScratchTracker, member_basename
from ..config.models import ScanSettings
from ..core.extensions import file_extension, is_archive_file, is_rom_file
from ..core.hashing import ProgressCallback, hash_file
from ..core.models import FileEntry, ScanResult, ScanState
from ..core.walker import resolve_root, walk
from ..exceptions import ArchiveError, EmptyArchiveError, RaHashError, ValidationError
from ..logging_config import LoggingTimer

logger = logging.getLogger(__name__)

FileStartCallback = Callable[[str, int], None]
FileCompleteCallback = Callable[[str, str], None]
ScanProgressCallback = Callable[[str, float, int, int], None]

PathLike = Union[str, Path]


@dataclass(frozen=True)
class ScanSummary:
    total: int
    hashed: int
    failed: int
    from_archives: int
    total_bytes: int


class Scanner:
    """Runs one scan at a time and exposes where it currently is.

    Callbacks are called synchronously from the scanning thread:
    ``on_file_start(display_name, size)``, ``on_progress(display_name,
    percent, bytes_read, total)`` and ``on_file_complete(display_name, digest)``.
    """

    def __init__(self, settings: Optional[ScanSettings] = None, *,
                 on_file_start: Optional[FileStartCallback] = None,
                 on_file_complete: Optional[FileCompleteCallback] = None,
                 on_progress: Optional[ScanProgressCallback] = None):
        self.settings = settings or ScanSettings()
        self.on_file_start = on_file_start
        self.on_file_complete = on_file_complete
        self.on_progress = on_progress
        self.state = ScanState.VALIDATING
        self.scratch = ScratchTracker()

    def scan(self, root_dir: PathLike) -> List[ScanResult]:
        self.state = ScanState.VALIDATING
        try:
            root = resolve_root(root_dir)
        except ValidationError:
            self.state = ScanState.FAILED
            raise

        results: List[ScanResult] = []
        failed = True
        try:
            with LoggingTimer(f"Scan of {root}", logger):
                self.state = ScanState.DISCOVERING
                entries = walk(root)
                roms = [e for e in entries if is_rom_file(e.filename)]
                archives = [e for e in entries if is_archive_file(e.filename)]
                total = len(roms) + len(archives)
                logger.info("Found %d ROM file(s) and %d archive file(s) to process",
                            len(roms), len(archives))

                self.state = ScanState.PROCESSING_ROMS
                for index, entry in enumerate(roms, 1):
                    logger.info("[%d/%d] Processing: %s", index, total, entry.relative_path)
                    results.append(self._process_rom(entry))

                self.state = ScanState.PROCESSING_ARCHIVES
                for index, entry in enumerate(archives, len(roms) + 1):
                    logger.info("[%d/%d] Processing archive: %s", index, total, entry.relative_path)
                    results.extend(self._process_archive(entry))
            failed = False
        finally:
            self.state = ScanState.CLEANING_UP
            self.scratch.release_all()
            self.state = ScanState.FAILED if failed else ScanState.DONE

        summary = summarize(results)
        logger.info("Scan complete: %d hashed, %d failed", summary.hashed, summary.failed)
        return results

    # ------------------------------------------------------------------ ROMs

    def _process_rom(self, entry: FileEntry) -> ScanResult:
        display_name = entry.relative_path
        try:
            file_stat = os.stat(entry.absolute_path)
        except OSError as e:
            logger.error("Cannot stat file %s: %s", entry.absolute_path, e)
            return ScanResult.failure(display_name, entry.absolute_path, f"Cannot stat file: {e}")
        if not stat.S_ISREG(file_stat.st_mode):
            logger.warning("Skipping non-file: %s", entry.absolute_path)
            return ScanResult.failure(display_name, entry.absolute_path, "Not a regular file")
        return self._hash_one(display_name, entry.absolute_path, entry.absolute_path, file_stat.st_size)

    # -------------------------------------------------------------- archives

    def _process_archive(self, entry: FileEntry) -> List[ScanResult]:
        display_name = entry.relative_path
        archive_path = entry.absolute_path
        archive_label = f"{display_name} (archive)"

        try:
            archive_stat = os.stat(archive_path)
        except OSError as e:
            logger.error("Cannot stat archive %s: %s", archive_path, e)
            return [ScanResult.failure(archive_label, archive_path, f"Cannot stat archive: {e}")]
        if not stat.S_ISREG(archive_stat.st_mode):
            logger.warning("Skipping non-file archive: %s", archive_path)
            return [ScanResult.failure(archive_label, archive_path, "Not a regular file")]

        try:
            extracted = extract_matching(archive_path, self.settings.scratch_root,
                                         self.settings.scratch_prefix)
        except ArchiveError as e:
            logger.error("Error processing archive %s: %s", display_name, e)
            return [ScanResult.failure(archive_label, archive_path, str(e))]
        except Exception as e:
            logger.exception("Unexpected error extracting %s", display_name)
            return [ScanResult.failure(archive_label, archive_path, str(e))]

        if not extracted:
            logger.warning("No ROM files found in archive: %s", display_name)
            return [ScanResult.failure(archive_label, archive_path, str(EmptyArchiveError(archive_path)))]

        scratch_dirs = []
        for rom in extracted:
            if rom.scratch_dir not in scratch_dirs:
                scratch_dirs.append(rom.scratch_dir)
                self.scratch.track(rom.scratch_dir)
        logger.info("Found %d ROM file(s) in archive", len(extracted))

        results: List[ScanResult] = []
        try:
            for rom in extracted:
                member_display = f"{display_name}/{rom.name}"
                logger.info("Processing: %s", member_display)
                try:
                    size = os.stat(rom.staged_path).st_size
                except OSError as e:
                    logger.error("Cannot stat extracted ROM %s: %s", rom.staged_path, e)
                    results.append(ScanResult.failure(
                        member_display, archive_path, f"Cannot stat extracted ROM: {e}",
                        archive_name=entry.filename, member_name=rom.name,
                    ))
                    continue
                results.append(self._hash_one(
                    member_display, rom.staged_path, archive_path, size,
                    archive_name=entry.filename, member_name=rom.name,
                ))
        finally:
            for scratch_dir in scratch_dirs:
                self.scratch.release(scratch_dir)
        return results

    # --------------------------------------------------------------- hashing

    def _progress_hook(self, display_name: str, size: int) -> Optional[ProgressCallback]:
        log_progress = self.settings.debug and size > self.settings.progress_log_min_bytes
        if self.on_progress is None and not log_progress:
            return None
        started = time.monotonic()

        def hook(percent: float, bytes_read: int, total: int) -> None:
            if log_progress:
                logger.debug("%s: %.0f%% (%.1fs)", display_name, percent, time.monotonic() - started)
            if self.on_progress is not None:
                self.on_progress(display_name, percent, bytes_read, total)

        return hook

    def _hash_one(self, display_name: str, hash_path: str, source_path: str, size: int,
                  archive_name: Optional[str] = None,
                  member_name: Optional[str] = None) -> ScanResult:
        if self.on_file_start is not None:
            self.on_file_start(display_name, size)
        try:
            digest = hash_file(hash_path, self._progress_hook(display_name, size),
                               timeout=self.settings.hash_timeout_seconds)
        except RaHashError as e:
            logger.error("Error processing %s: %s", display_name, e)
            return ScanResult.failure(display_name, source_path, str(e),
                                      archive_name=archive_name, member_name=member_name)
        except Exception as e:
            logger.exception("Unexpected error hashing %s", display_name)
            return ScanResult.failure(display_name, source_path, str(e),
                                      archive_name=archive_name, member_name=member_name)

        if self.on_file_complete is not None:
            self.on_file_complete(display_name, digest)
        logger.debug("%s: %s", display_name, digest)
        return ScanResult.success(display_name, source_path, digest, size,
                                  archive_name=archive_name, member_name=member_name)


def scan_directory(root_dir: PathLike, settings: Optional[ScanSettings] = None, *,
                   on_file_start: Optional[FileStartCallback] = None,
                   on_file_complete: Optional[FileCompleteCallback] = None,
                   on_progress: Optional[ScanProgressCallback] = None) -> List[ScanResult]:
    """Scan ``root_dir`` and hash every ROM in it, including ROMs inside archives.

    Raises:
        ValidationError: ``root_dir`` is missing or not a directory.
    """
    scanner = Scanner(settings, on_file_start=on_file_start,
                      on_file_complete=on_file_complete, on_progress=on_progress)
    return scanner.scan(root_dir)


def list_rom_files(root_dir: PathLike) -> List[str]:
    """ROM names a scan would report, without extracting or hashing anything."""
    try:
        entries = walk(root_dir)
    except ValidationError:
        return []

    names = [e.relative_path for e in entries if is_rom_file(e.filename)]
    for entry in entries:
        if not is_archive_file(entry.filename):
            continue
        for member in list_rom_members(entry.absolute_path):
            names.append(f"{entry.relative_path}/{member_basename(member)}")
    return names


def has_archive_files(root_dir: PathLike, extension: str = ".7z") -> bool:
    """Whether the tree holds at least one archive with ``extension``."""
    wanted = extension.lower() if extension.startswith(".") else f".{extension.lower()}"
    try:
        entries = walk(root_dir)
    except ValidationError:
        return False
    return any(file_extension(e.filename) == wanted for e in entries)


def summarize(results: Iterable[ScanResult]) -> ScanSummary:
    results = list(results)
    failed = sum(1 for r in results if r.is_error)
    return ScanSummary(
        total=len(results),
        hashed=len(results) - failed,
        failed=failed,
        from_archives=sum(1 for r in results if r.from_archive),
        total_bytes=sum(r.size or 0 for r in results if not r.is_error),
    )


def format_size(num_bytes: int) -> str:
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 ** 2:
        return f"{num_bytes / 1024:.1f} KB"
    if num_bytes < 1024 ** 3:
        return f"{num_bytes / 1024 ** 2:.1f} MB"
    return f"{num_bytes / 1024 ** 3:.1f} GB"

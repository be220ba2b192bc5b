#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""ra-hash scanning package.

Primary entry point: scan_directory().
"""

from .progress_streams import ProgressEvent, scan_stream
from .scanner import (
    Scanner,
    ScanSummary,
    format_size,
    has_archive_files,
    list_rom_files,
    scan_directory,
    summarize,
)

__all__ = [
    "ProgressEvent",
    "ScanSummary",
    "Scanner",
    "format_size",
    "has_archive_files",
    "list_rom_files",
    "scan_directory",
    "scan_stream",
    "summarize",
]

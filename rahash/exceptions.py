#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
ra-hash - Consolidated Exception Classes

All exception classes used by the scanner, the archive adapters and the
hashing engine live here. Only ValidationError aborts a scan; every other
error is recorded on a single ScanResult.
"""

from datetime import datetime
from typing import Dict, Any, Optional


class RaHashError(Exception):
    """Base class for all project-specific errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code or "ERROR"
        self.details = details or {}
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Converts the exception to a dictionary for structured logging."""
        return {
            'error_code': self.error_code,
            'message': str(self),
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }


# =====================================================================================================
# Scan root validation (fatal)
# =====================================================================================================

class ValidationError(RaHashError):
    """Raised when the scan root cannot be used. Aborts the whole scan."""

    def __init__(self, message: str, path: Optional[str] = None,
                 error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        path_details = details or {}
        if path:
            path_details['path'] = str(path)
        super().__init__(message, error_code or "VALIDATION_ERROR", path_details)


class RootNotFoundError(ValidationError):
    """Raised when the scan root does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Directory not found: {path}", path, "NOT_FOUND")


class RootNotADirectoryError(ValidationError):
    """Raised when the scan root exists but is not a directory."""

    def __init__(self, path: str):
        super().__init__(f"Not a directory: {path}", path, "NOT_A_DIRECTORY")


# =====================================================================================================
# Configuration errors
# =====================================================================================================

class ConfigurationError(RaHashError):
    """Raised when a configuration file or value is invalid."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        config_details = details or {}
        if file_path:
            config_details['file_path'] = str(file_path)
        super().__init__(message, "CONFIG_ERROR", config_details)


# =====================================================================================================
# Per-file I/O and hashing errors
# =====================================================================================================

class FileAccessError(RaHashError):
    """Base class for stat/read failures on a single file."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        file_details = details or {}
        if file_path:
            file_details['file_path'] = str(file_path)
        super().__init__(message, error_code or "IO_ERROR", file_details)


class StatFailedError(FileAccessError):
    """Raised when the size of a file cannot be determined up front."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, file_path, "STAT_FAILED")


class ReadFailedError(FileAccessError):
    """Raised when a file cannot be opened or its stream fails mid-read."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, file_path, "READ_FAILED")


class HashTimeoutError(RaHashError):
    """Raised when hashing a single file exceeds the wall-clock ceiling."""

    def __init__(self, message: str, file_path: Optional[str] = None,
                 timeout: Optional[float] = None):
        timeout_details: Dict[str, Any] = {}
        if file_path:
            timeout_details['file_path'] = str(file_path)
        if timeout is not None:
            timeout_details['timeout_seconds'] = timeout
        super().__init__(message, "TIMEOUT", timeout_details)


# =====================================================================================================
# Archive errors
# =====================================================================================================

class ArchiveError(RaHashError):
    """Base class for errors raised by the archive adapters."""

    def __init__(self, message: str, archive_path: Optional[str] = None,
                 error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        archive_details = details or {}
        if archive_path:
            archive_details['archive_path'] = str(archive_path)
        super().__init__(message, error_code or "ARCHIVE_ERROR", archive_details)


class UnsupportedFormatError(ArchiveError):
    """Raised when no adapter handles an archive extension."""

    def __init__(self, extension: str, archive_path: Optional[str] = None):
        super().__init__(f"Unsupported archive format: {extension or '(none)'}",
                         archive_path, "UNSUPPORTED_FORMAT", {'extension': extension})


class ExtractionError(ArchiveError):
    """Raised when an archive cannot be opened, parsed or written out."""

    def __init__(self, message: str, archive_path: Optional[str] = None,
                 member: Optional[str] = None):
        member_details: Dict[str, Any] = {}
        if member:
            member_details['member'] = member
        super().__init__(message, archive_path, "EXTRACTION_ERROR", member_details)


class EmptyArchiveError(ArchiveError):
    """The archive was readable but held no ROM members."""

    def __init__(self, archive_path: Optional[str] = None):
        super().__init__("No ROM files found in archive", archive_path, "EMPTY_ARCHIVE")

"""ra-hash: find ROMs on disk, fingerprint them and match them against a catalog."""

from .core import (
    CatalogEntry,
    PlatformCandidate,
    ScanResult,
    classify,
    hash_file,
    match_results,
    suggest_platform,
)
from .scanning import list_rom_files, scan_directory

__version__ = "1.0.0"

__all__ = [
    "CatalogEntry",
    "PlatformCandidate",
    "ScanResult",
    "__version__",
    "classify",
    "hash_file",
    "list_rom_files",
    "match_results",
    "scan_directory",
    "suggest_platform",
]

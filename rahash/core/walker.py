"""Directory walker: recursive discovery of ROM and archive files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Union

from ..exceptions import RootNotADirectoryError, RootNotFoundError
from .extensions import FileKind, classify
from .models import FileEntry

logger = logging.getLogger(__name__)


def resolve_root(root_dir: Union[str, Path]) -> Path:
    """Absolute scan root, or a ValidationError subclass when it is unusable."""
    root = Path(os.path.abspath(str(root_dir)))
    if not root.exists():
        raise RootNotFoundError(str(root))
    if not root.is_dir():
        raise RootNotADirectoryError(str(root))
    return root


def walk(root_dir: Union[str, Path]) -> List[FileEntry]:
    """Return every ROM and archive below ``root_dir`` in enumeration order.

    Directories that cannot be opened and entries whose type cannot be read
    are skipped; one bad entry never loses the rest of the tree. Symlinked
    directories are not descended into.
    """
    root = resolve_root(root_dir)
    results: List[FileEntry] = []
    _walk_into(str(root), "", results)
    return results


def _walk_into(directory: str, relative_base: str, results: List[FileEntry]) -> None:
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                relative_path = f"{relative_base}/{entry.name}" if relative_base else entry.name
                try:
                    if entry.is_dir(follow_symlinks=False):
                        _walk_into(entry.path, relative_path, results)
                    elif entry.is_file():
                        if classify(entry.name) is not FileKind.IGNORED:
                            results.append(FileEntry(
                                filename=entry.name,
                                absolute_path=entry.path,
                                relative_path=relative_path,
                            ))
                except OSError as e:
                    logger.debug("Skipping %s: %s", entry.path, e)
    except OSError as e:
        logger.debug("Cannot read directory %s: %s", directory, e)

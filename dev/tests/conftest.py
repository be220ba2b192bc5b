from __future__ import annotations

import sys
import zipfile
from pathlib import Path
from typing import Callable, Dict

import pytest

# Ensure repo root on path
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    """Private parent for scratch directories so tests can check for leftovers."""
    root = tmp_path / "scratch"
    root.mkdir()
    return root


@pytest.fixture
def make_zip() -> Callable[[Path, Dict[str, bytes]], Path]:
    def _make(path: Path, members: Dict[str, bytes]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as zf:
            for name, payload in members.items():
                zf.writestr(name, payload)
        return path

    return _make


@pytest.fixture
def make_7z(tmp_path: Path) -> Callable[[Path, Dict[str, bytes]], Path]:
    py7zr = pytest.importorskip("py7zr")

    def _make(path: Path, members: Dict[str, bytes]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        staging = tmp_path / f"_7z_src_{path.stem}"
        with py7zr.SevenZipFile(path, "w") as archive:
            for name, payload in members.items():
                source = staging / name
                source.parent.mkdir(parents=True, exist_ok=True)
                source.write_bytes(payload)
                archive.write(source, arcname=name)
        return path

    return _make

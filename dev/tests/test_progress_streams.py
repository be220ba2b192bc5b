from __future__ import annotations

import asyncio
import hashlib

import pytest

from rahash.config import ScanSettings
from rahash.exceptions import RootNotFoundError
from rahash.scanning.progress_streams import scan_stream


async def _consume(async_iter):
    items = []
    async for event in async_iter:
        items.append(event)
    return items


def test_scan_stream_end_to_end(tmp_path, make_zip, scratch_root):
    root = tmp_path / "roms"
    root.mkdir()
    (root / "game.nes").write_bytes(b"data")
    make_zip(root / "pack.zip", {"inner.gb": b"inner"})

    events = asyncio.run(_consume(scan_stream(str(root), ScanSettings(scratch_root=str(scratch_root)))))

    kinds = [e.kind for e in events]
    assert kinds[-1] == "result"
    assert kinds.count("file_start") == 2
    assert kinds.count("file_complete") == 2
    assert kinds.index("file_start") < kinds.index("progress") < kinds.index("file_complete")

    completed = {e.name: e.digest for e in events if e.kind == "file_complete"}
    assert completed["game.nes"] == hashlib.md5(b"data").hexdigest()

    progress = [e.percent for e in events if e.kind == "progress" and e.name == "game.nes"]
    assert progress[-1] == 100.0

    results = events[-1].result
    assert [r.display_name for r in results] == ["game.nes", "pack.zip/inner.gb"]


def test_scan_stream_raises_for_missing_root(tmp_path):
    with pytest.raises(RootNotFoundError):
        asyncio.run(_consume(scan_stream(str(tmp_path / "missing"))))

import io
import os
from types import SimpleNamespace

import pytest

rarfile = pytest.importorskip("rarfile")

from rahash.archives import rar_adapter  # noqa: E402
from rahash.exceptions import ExtractionError  # noqa: E402


class _FakeInfo(SimpleNamespace):
    def is_dir(self):
        return self.directory


class _FakeRarFile:
    """Stands in for rarfile.RarFile so no unrar tool is needed."""

    members = {}

    def __init__(self, path, mode="r"):
        self.path = path

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def infolist(self):
        return [_FakeInfo(filename=name, directory=payload is None)
                for name, payload in self.members.items()]

    def open(self, info):
        return io.BytesIO(self.members[info.filename])


@pytest.fixture
def fake_rar(monkeypatch):
    monkeypatch.setattr(rar_adapter.rarfile, "RarFile", _FakeRarFile)
    return _FakeRarFile


def test_list_members_reports_directories(fake_rar):
    fake_rar.members = {"roms/": None, "roms/kirby.gb": b"K"}

    members = rar_adapter.list_members("pack.rar")

    assert [(m.name, m.is_directory) for m in members] == [("roms/", True), ("roms/kirby.gb", False)]


def test_extract_matching_streams_rom_members(fake_rar, scratch_root):
    fake_rar.members = {"roms/": None, "roms/kirby.gb": b"K" * 64, "notes.txt": b"n"}

    roms = rar_adapter.extract_matching("pack.rar", str(scratch_root))

    assert [r.name for r in roms] == ["kirby.gb"]
    with open(roms[0].staged_path, "rb") as f:
        assert f.read() == b"K" * 64


def test_extract_matching_without_roms(fake_rar, scratch_root):
    fake_rar.members = {"notes.txt": b"n"}

    assert rar_adapter.extract_matching("pack.rar", str(scratch_root)) == []
    assert os.listdir(scratch_root) == []


def test_corrupt_rar_raises_extraction_error(tmp_path, scratch_root):
    archive = tmp_path / "broken.rar"
    archive.write_bytes(b"this is not a rar archive")

    with pytest.raises(ExtractionError) as exc:
        rar_adapter.extract_matching(str(archive), str(scratch_root))

    assert "Failed to open RAR archive" in str(exc.value)
    assert os.listdir(scratch_root) == []


def test_corrupt_rar_lists_as_empty(tmp_path):
    archive = tmp_path / "broken.rar"
    archive.write_bytes(b"not a rar")

    assert rar_adapter.list_members(str(archive)) == []


def test_tool_availability_is_a_bool():
    assert isinstance(rar_adapter.is_rar_tool_available(), bool)

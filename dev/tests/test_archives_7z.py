import os

import pytest

py7zr = pytest.importorskip("py7zr")

from rahash.archives import sevenzip_adapter  # noqa: E402
from rahash.exceptions import ExtractionError  # noqa: E402

pytestmark = pytest.mark.integration


def test_list_members(tmp_path, make_7z):
    archive = make_7z(tmp_path / "pack.7z", {"game.nes": b"N", "info.txt": b"i"})

    names = sorted(m.name for m in sevenzip_adapter.list_members(str(archive)))

    assert names == ["game.nes", "info.txt"]


def test_extract_nested_member_to_base_name(tmp_path, make_7z, scratch_root):
    archive = make_7z(tmp_path / "set.7z", {
        "roms/usa/metroid.gba": b"M" * 300,
        "roms/readme.txt": b"r",
    })

    roms = sevenzip_adapter.extract_matching(str(archive), str(scratch_root))

    assert [r.name for r in roms] == ["metroid.gba"]
    with open(roms[0].staged_path, "rb") as f:
        assert f.read() == b"M" * 300
    # the private staging folder is gone, only the ROM remains
    assert os.listdir(roms[0].scratch_dir) == ["metroid.gba"]


def test_no_rom_members_creates_no_scratch_dir(tmp_path, make_7z, scratch_root):
    archive = make_7z(tmp_path / "docs.7z", {"manual.txt": b"m"})

    assert sevenzip_adapter.extract_matching(str(archive), str(scratch_root)) == []
    assert os.listdir(scratch_root) == []


def test_corrupt_header_raises_and_leaves_nothing(tmp_path, scratch_root):
    archive = tmp_path / "broken.7z"
    archive.write_bytes(b"this is not a 7z archive")

    with pytest.raises(ExtractionError) as exc:
        sevenzip_adapter.extract_matching(str(archive), str(scratch_root))

    assert "7Z" in str(exc.value)
    assert os.listdir(scratch_root) == []


def test_corrupt_archive_lists_as_empty(tmp_path):
    archive = tmp_path / "broken.7z"
    archive.write_bytes(b"definitely not seven zip")

    assert sevenzip_adapter.list_members(str(archive)) == []


def test_name_collision_last_member_wins(tmp_path, make_7z, scratch_root, caplog):
    archive = make_7z(tmp_path / "dupes.7z", {
        "usa/game.sfc": b"first",
        "eur/game.sfc": b"second",
    })

    roms = sevenzip_adapter.extract_matching(str(archive), str(scratch_root))

    assert [r.name for r in roms] == ["game.sfc"]
    with open(roms[0].staged_path, "rb") as f:
        assert f.read() == b"second"
    assert os.listdir(roms[0].scratch_dir) == ["game.sfc"]
    assert "keeping the last one" in caplog.text

import hashlib
import os

import pytest

from rahash.config import ScanSettings
from rahash.core.models import ScanState
from rahash.exceptions import ExtractionError, RootNotFoundError
from rahash.scanning import scanner as scanner_module
from rahash.scanning.scanner import (
    Scanner,
    format_size,
    has_archive_files,
    list_rom_files,
    scan_directory,
    summarize,
)

pytestmark = pytest.mark.integration


def _md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


@pytest.fixture
def settings(scratch_root):
    return ScanSettings(scratch_root=str(scratch_root))


def test_mario_and_zelda(tmp_path, make_zip, settings, scratch_root):
    root = tmp_path / "roms"
    root.mkdir()
    (root / "mario.sfc").write_bytes(b"X" * 1000)
    make_zip(root / "zelda.zip", {"zelda.sfc": b"Y" * 2000, "readme.txt": b"not a rom"})

    results = scan_directory(root, settings)

    assert len(results) == 2
    mario, zelda = results
    assert mario.display_name == "mario.sfc"
    assert mario.hash == _md5(b"X" * 1000)
    assert mario.error is None
    assert mario.size == 1000
    assert not mario.from_archive

    assert zelda.display_name.endswith("zelda.sfc")
    assert zelda.display_name == "zelda.zip/zelda.sfc"
    assert zelda.archive_name == "zelda.zip"
    assert zelda.member_name == "zelda.sfc"
    assert zelda.hash == _md5(b"Y" * 2000)
    assert zelda.source_path == str(root / "zelda.zip")
    assert all("readme" not in r.display_name for r in results)
    assert os.listdir(scratch_root) == []


def test_corrupt_7z_yields_one_error_and_no_scratch(tmp_path, settings, scratch_root):
    root = tmp_path / "roms"
    root.mkdir()
    (root / "broken.7z").write_bytes(b"7z but not really")

    results = scan_directory(root, settings)

    assert len(results) == 1
    assert results[0].hash is None
    assert results[0].error
    assert results[0].display_name == "broken.7z (archive)"
    assert os.listdir(scratch_root) == []


def test_archive_without_roms_is_reported(tmp_path, make_zip, settings):
    root = tmp_path / "roms"
    make_zip(root / "sub" / "docs.zip", {"manual.txt": b"m"})

    results = scan_directory(root, settings)

    assert [(r.display_name, r.error) for r in results] == [
        ("sub/docs.zip (archive)", "No ROM files found in archive")
    ]


def test_roms_before_archives_in_discovery_order(tmp_path, make_zip, settings):
    root = tmp_path / "roms"
    make_zip(root / "a.zip", {"inner.nes": b"i"})
    (root / "z.gb").write_bytes(b"z")

    names = [r.display_name for r in scan_directory(root, settings)]

    assert names == ["z.gb", "a.zip/inner.nes"]


def test_missing_root_is_fatal(tmp_path):
    scanner = Scanner()
    with pytest.raises(RootNotFoundError):
        scanner.scan(tmp_path / "nope")
    assert scanner.state is ScanState.FAILED


def test_state_ends_done(tmp_path, settings):
    scanner = Scanner(settings)
    scanner.scan(tmp_path)
    assert scanner.state is ScanState.DONE


def test_callbacks_fire_per_file(tmp_path, make_zip, settings):
    root = tmp_path / "roms"
    root.mkdir()
    (root / "a.nes").write_bytes(b"A" * 10)
    make_zip(root / "b.zip", {"b.gba": b"B" * 20})
    started, completed, progress = [], [], []

    scan_directory(
        root, settings,
        on_file_start=lambda name, size: started.append((name, size)),
        on_file_complete=lambda name, digest: completed.append((name, digest)),
        on_progress=lambda name, pct, done, total: progress.append((name, pct)),
    )

    assert started == [("a.nes", 10), ("b.zip/b.gba", 20)]
    assert completed == [("a.nes", _md5(b"A" * 10)), ("b.zip/b.gba", _md5(b"B" * 20))]
    assert ("a.nes", 100.0) in progress
    assert ("b.zip/b.gba", 100.0) in progress


def test_hash_failure_is_recorded_and_scan_continues(tmp_path, make_zip, settings, scratch_root, monkeypatch):
    root = tmp_path / "roms"
    root.mkdir()
    (root / "good.nes").write_bytes(b"good")
    make_zip(root / "pack.zip", {"one.nes": b"1", "two.nes": b"2"})
    real_hash = scanner_module.hash_file
    seen = []

    def flaky_hash(path, on_progress=None, **kwargs):
        seen.append(os.path.basename(path))
        if os.path.basename(path) == "one.nes":
            # scratch dir must still exist while its members are hashed
            assert os.listdir(scratch_root)
            raise OSError("boom")
        return real_hash(path, on_progress, **kwargs)

    monkeypatch.setattr(scanner_module, "hash_file", flaky_hash)

    results = scan_directory(root, settings)

    by_name = {r.display_name: r for r in results}
    assert by_name["pack.zip/one.nes"].error == "boom"
    assert by_name["pack.zip/two.nes"].hash == _md5(b"2")
    assert by_name["good.nes"].hash == _md5(b"good")
    assert os.listdir(scratch_root) == []


def test_extraction_failure_is_per_archive(tmp_path, make_zip, settings, scratch_root, monkeypatch):
    root = tmp_path / "roms"
    make_zip(root / "bad.zip", {"x.nes": b"x"})
    make_zip(root / "good.zip", {"y.nes": b"y"})
    real_extract = scanner_module.extract_matching

    def flaky_extract(path, *args, **kwargs):
        if path.endswith("bad.zip"):
            raise ExtractionError("Failed to extract ZIP archive: injected", path)
        return real_extract(path, *args, **kwargs)

    monkeypatch.setattr(scanner_module, "extract_matching", flaky_extract)

    results = scan_directory(root, settings)

    by_name = {r.display_name: r for r in results}
    assert by_name["bad.zip (archive)"].error == "Failed to extract ZIP archive: injected"
    assert by_name["good.zip/y.nes"].hash == _md5(b"y")
    assert os.listdir(scratch_root) == []


def test_interrupt_mid_scan_still_cleans_up(tmp_path, make_zip, settings, scratch_root, monkeypatch):
    root = tmp_path / "roms"
    make_zip(root / "pack.zip", {"one.nes": b"1", "two.nes": b"2"})

    def interrupted(path, on_progress=None, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(scanner_module, "hash_file", interrupted)
    scanner = Scanner(settings)

    with pytest.raises(KeyboardInterrupt):
        scanner.scan(root)
    assert os.listdir(scratch_root) == []
    assert scanner.state is ScanState.FAILED


def test_debug_progress_lines(tmp_path, scratch_root, caplog):
    root = tmp_path / "roms"
    root.mkdir()
    (root / "big.iso").write_bytes(b"\0" * 4096)
    settings = ScanSettings(scratch_root=str(scratch_root), debug=True, progress_log_min_bytes=1024)
    caplog.set_level("DEBUG", logger="rahash.scanning.scanner")

    scan_directory(root, settings)

    assert "big.iso: 100%" in caplog.text


def test_list_rom_files_previews_archives(tmp_path, make_zip):
    root = tmp_path / "roms"
    root.mkdir()
    (root / "mario.sfc").write_bytes(b"X")
    make_zip(root / "zelda.zip", {"deep/zelda.sfc": b"Y", "readme.txt": b"r"})

    assert list_rom_files(root) == ["mario.sfc", "zelda.zip/zelda.sfc"]
    assert list_rom_files(tmp_path / "missing") == []


def test_has_archive_files(tmp_path, make_zip):
    make_zip(tmp_path / "a" / "pack.zip", {"x.nes": b"x"})

    assert has_archive_files(tmp_path, ".zip")
    assert has_archive_files(tmp_path, "zip")
    assert not has_archive_files(tmp_path, ".7z")
    assert not has_archive_files(tmp_path / "missing")


def test_summarize_and_format_size(tmp_path, make_zip, settings):
    root = tmp_path / "roms"
    root.mkdir()
    (root / "a.nes").write_bytes(b"a" * 10)
    make_zip(root / "p.zip", {"b.nes": b"b" * 5})
    make_zip(root / "q.zip", {"none.txt": b""})

    summary = summarize(scan_directory(root, settings))

    assert (summary.total, summary.hashed, summary.failed, summary.from_archives) == (3, 2, 1, 1)
    assert summary.total_bytes == 15
    assert format_size(512) == "512 B"
    assert format_size(1536) == "1.5 KB"
    assert format_size(5 * 1024 ** 2) == "5.0 MB"
    assert format_size(3 * 1024 ** 3) == "3.0 GB"

import dataclasses

import pytest

from rahash.core.models import ExtractedRom, FileEntry, PlatformCandidate, ScanResult


def test_scan_result_requires_exactly_one_of_hash_and_error():
    with pytest.raises(ValueError):
        ScanResult("a.nes", "/a.nes")
    with pytest.raises(ValueError):
        ScanResult("a.nes", "/a.nes", hash="0" * 32, error="boom")


def test_success_and_failure_helpers():
    ok = ScanResult.success("zip.zip/a.nes", "/zip.zip", "0" * 32, 4, archive_name="zip.zip", member_name="a.nes")
    bad = ScanResult.failure("b.nes", "/b.nes", "Not a regular file")

    assert ok.from_archive and not ok.is_error
    assert bad.is_error and not bad.from_archive
    assert bad.to_dict() == {
        "display_name": "b.nes",
        "source_path": "/b.nes",
        "hash": None,
        "size": None,
        "error": "Not a regular file",
        "archive_name": None,
        "member_name": None,
    }


def test_records_are_frozen():
    entry = FileEntry("a.nes", "/r/a.nes", "a.nes")
    rom = ExtractedRom("a.nes", "/tmp/ra-hash-x/a.nes", "/r/p.zip", "/tmp/ra-hash-x")
    for record in (entry, rom):
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.name = "other"  # type: ignore[misc]


def test_platform_candidate_from_mapping():
    assert PlatformCandidate.from_mapping({"id": 3, "name": "SNES"}) == PlatformCandidate(3, "SNES")
    assert PlatformCandidate.from_mapping({"ID": 4, "Name": "Game Boy"}).name == "Game Boy"
    with pytest.raises(ValueError):
        PlatformCandidate.from_mapping({"name": "No id"})

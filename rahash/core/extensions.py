#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
ra-hash - Extension Classifier

Static extension tables deciding whether a filename is a ROM, an archive that
may hold ROMs, or something to ignore. The ROM table is a compatibility
surface: catalog matching only sees files classified here.
"""

from enum import Enum
from pathlib import PurePosixPath
from typing import FrozenSet

# Bump whenever extensions are added or removed.
EXTENSION_TABLE_VERSION = 1

ROM_EXTENSIONS: FrozenSet[str] = frozenset({
    # Nintendo
    '.nes',   # NES
    '.fds',   # Famicom Disk System
    '.sfc',   # SNES
    '.smc',   # SNES
    '.gb',    # Game Boy
    '.gbc',   # Game Boy Color
    '.gba',   # Game Boy Advance
    '.nds',   # Nintendo DS
    '.n64',   # Nintendo 64
    '.z64',   # Nintendo 64
    '.v64',   # Nintendo 64
    '.gcm',   # GameCube
    '.gcz',   # GameCube (compressed)
    '.rvz',   # GameCube / Wii (Dolphin)
    '.wbfs',  # Wii
    '.wad',   # WiiWare
    '.wux',   # Wii U
    '.wud',   # Wii U
    '.3ds',   # Nintendo 3DS
    '.cia',   # Nintendo 3DS
    '.nsp',   # Nintendo Switch
    '.xci',   # Nintendo Switch

    # Sega
    '.md',    # Mega Drive / Genesis
    '.smd',   # Mega Drive / Genesis
    '.gen',   # Genesis
    '.bin',   # Generic / Mega Drive / Saturn
    '.gg',    # Game Gear
    '.sms',   # Master System
    '.32x',   # 32X
    '.sg',    # SG-1000
    '.gdi',   # Dreamcast
    '.cdi',   # Dreamcast
    '.chd',   # Compressed disc image

    # Sony
    '.iso',   # PlayStation / PSP / PS2
    '.cue',   # PlayStation / Saturn
    '.img',   # PlayStation 2
    '.cso',   # PSP (compressed)
    '.pbp',   # PSP (EBOOT)
    '.pkg',   # PS3 / PS4
    '.p3t',   # PS3

    # Atari
    '.a26',   # Atari 2600
    '.a78',   # Atari 7800
    '.lnx',   # Atari Lynx
    '.jag',   # Atari Jaguar
    '.j64',   # Atari Jaguar

    # Other
    '.pce',   # PC Engine / TurboGrafx
    '.ngp',   # Neo Geo Pocket
    '.ngc',   # Neo Geo Pocket Color
    '.ws',    # WonderSwan
    '.wsc',   # WonderSwan Color
    '.col',   # ColecoVision
    '.int',   # Intellivision
    '.vec',   # Vectrex
    '.min',   # Pokemon Mini
    '.vb',    # Virtual Boy
    '.rom',   # Generic ROM
})

ARCHIVE_EXTENSIONS: FrozenSet[str] = frozenset({'.zip', '.7z', '.rar'})

assert not (ROM_EXTENSIONS & ARCHIVE_EXTENSIONS), "ROM and archive tables overlap"


class FileKind(Enum):
    ROM = "rom"
    ARCHIVE = "archive"
    IGNORED = "ignored"


def file_extension(filename: str) -> str:
    """Lowercased final extension with its leading dot, or '' when there is none.

    Backslashes count as separators so in-archive names from Windows tools
    classify the same way as on-disk names.
    """
    leaf = PurePosixPath(str(filename).replace('\\', '/')).name
    return PurePosixPath(leaf).suffix.lower()


def classify(filename: str) -> FileKind:
    ext = file_extension(filename)
    if ext in ROM_EXTENSIONS:
        return FileKind.ROM
    if ext in ARCHIVE_EXTENSIONS:
        return FileKind.ARCHIVE
    return FileKind.IGNORED


def is_rom_file(filename: str) -> bool:
    return classify(filename) is FileKind.ROM


def is_archive_file(filename: str) -> bool:
    return classify(filename) is FileKind.ARCHIVE


def is_rom_or_archive_file(filename: str) -> bool:
    return classify(filename) is not FileKind.IGNORED

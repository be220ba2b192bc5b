"""Platform inference heuristic (config-driven, advisory only).

Reads rahash/data/platform_hints.yaml and guesses which of the caller's
platforms a scanned folder belongs to:

1. folder-name phase: the folder name and a platform's display name contain
   one another, or the folder name holds a known keyword pointing at it;
2. extension-majority phase: the most common ROM extension among the scanned
   files is looked up in the extension table and fuzzily matched against the
   display names.

The result is a suggestion for the caller to confirm, never a decision.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import yaml

from ..exceptions import ConfigurationError
from .extensions import file_extension, is_rom_file
from .models import PlatformCandidate

logger = logging.getLogger(__name__)

STEM_LENGTH = 5
MIN_SIGNIFICANT_WORD = 3

PlatformLike = Union[PlatformCandidate, Dict[str, Any]]


@dataclass(frozen=True)
class KeywordHint:
    keyword: str
    aliases: Tuple[str, ...] = ()
    negative: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PlatformHints:
    keywords: Tuple[KeywordHint, ...]
    extensions: Dict[str, Tuple[str, ...]]


def _hints_path() -> Path:
    return Path(__file__).resolve().parents[1] / "data" / "platform_hints.yaml"


def _norm(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip().lower())


def _str_tuple(values: Any) -> Tuple[str, ...]:
    if not isinstance(values, list):
        return ()
    return tuple(_norm(str(v)) for v in values if str(v).strip())


def _parse_hints(data: Any, source: str) -> PlatformHints:
    if not isinstance(data, dict):
        raise ConfigurationError("Platform hints must be a mapping", source)
    raw_keywords = data.get("keywords") or []
    raw_extensions = data.get("extensions") or {}
    if not isinstance(raw_keywords, list) or not isinstance(raw_extensions, dict):
        raise ConfigurationError("Platform hints need a 'keywords' list and an 'extensions' mapping", source)

    keywords: List[KeywordHint] = []
    for idx, entry in enumerate(raw_keywords):
        if not isinstance(entry, dict) or not str(entry.get("keyword") or "").strip():
            raise ConfigurationError(f"Keyword entry {idx} has no keyword", source)
        keywords.append(KeywordHint(
            keyword=_norm(str(entry["keyword"])),
            aliases=_str_tuple(entry.get("aliases")),
            negative=_str_tuple(entry.get("negative")),
        ))

    extensions = {
        str(ext).lower(): tuple(str(name) for name in (names or []))
        for ext, names in raw_extensions.items()
    }
    return PlatformHints(keywords=tuple(keywords), extensions=extensions)


@lru_cache(maxsize=4)
def load_platform_hints(path: Optional[str] = None) -> PlatformHints:
    """Load and cache the hint tables (bundled file unless ``path`` is given)."""
    hints_path = Path(path) if path else _hints_path()
    try:
        raw = hints_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read platform hints: {e}", str(hints_path)) from e
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid platform hints YAML: {e}", str(hints_path)) from e
    hints = _parse_hints(data, str(hints_path))
    logger.debug("Loaded %d keyword hints and %d extension hints from %s",
                 len(hints.keywords), len(hints.extensions), hints_path)
    return hints


def contains_term(haystack: str, term: str) -> bool:
    """Case-insensitive containment anchored at a word start.

    'nes' is not in 'snes', but 'snes' is in 'snesroms'.
    """
    haystack = _norm(haystack)
    term = _norm(term)
    if not term or not haystack:
        return False
    pattern = r"(?<![a-z0-9])" + re.escape(term)
    return re.search(pattern, haystack) is not None


def _words(text: str) -> List[str]:
    return [w for w in re.split(r"[^a-z0-9]+", _norm(text)) if w]


def _stems_overlap(a: str, b: str) -> bool:
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    return longer.startswith(shorter[:STEM_LENGTH])


def _word_overlap(source: str, other: str) -> bool:
    significant = [w for w in _words(source) if len(w) >= MIN_SIGNIFICANT_WORD]
    if not significant:
        return False
    other_words = [w for w in _words(other) if len(w) >= MIN_SIGNIFICANT_WORD]
    hits = sum(1 for w in significant if any(_stems_overlap(w, o) for o in other_words))
    return hits * 2 >= len(significant)


def names_match(platform_name: str, candidate_name: str) -> bool:
    """Fuzzy display-name match used by the extension-majority phase."""
    if contains_term(platform_name, candidate_name) or contains_term(candidate_name, platform_name):
        return True
    return _word_overlap(platform_name, candidate_name) or _word_overlap(candidate_name, platform_name)


def _keyword_points_at(hint: KeywordHint, display_name: str) -> bool:
    if any(contains_term(display_name, neg) for neg in hint.negative):
        return False
    for term in (hint.keyword,) + hint.aliases:
        if contains_term(display_name, term):
            return True
    if len(hint.keyword) > 3:
        stem = hint.keyword[:STEM_LENGTH]
        return any(word.startswith(stem) for word in _words(display_name))
    return False


def _folder_leaf(root_dir_name: str) -> str:
    return _norm(PurePosixPath(str(root_dir_name or "").replace("\\", "/").rstrip("/")).name)


def _as_candidates(platforms: Iterable[PlatformLike]) -> List[PlatformCandidate]:
    return [p if isinstance(p, PlatformCandidate) else PlatformCandidate.from_mapping(p)
            for p in platforms]


def _longest_keywords(matched: List[KeywordHint]) -> List[KeywordHint]:
    # 'gba' in a folder also matches 'gb'; keep only the longer keyword.
    return [h for h in matched
            if not any(o.keyword != h.keyword and o.keyword.startswith(h.keyword) for o in matched)]


def match_folder_name(root_dir_name: str, platforms: Sequence[PlatformLike],
                      hints: Optional[PlatformHints] = None) -> Optional[PlatformCandidate]:
    folder = _folder_leaf(root_dir_name)
    if not folder:
        return None
    hints = hints or load_platform_hints()
    folder_keywords = _longest_keywords(
        [h for h in hints.keywords if contains_term(folder, h.keyword)])

    for platform in _as_candidates(platforms):
        name = _norm(platform.name)
        if contains_term(folder, name) or contains_term(name, folder):
            logger.debug("Folder %r matches platform %r by name", folder, platform.name)
            return platform
        for hint in folder_keywords:
            if _keyword_points_at(hint, name):
                logger.debug("Folder %r matches platform %r via keyword %r",
                             folder, platform.name, hint.keyword)
                return platform
    return None


def dominant_extension(filenames: Iterable[str]) -> Optional[str]:
    """Most frequent ROM extension; the first one seen wins a tie."""
    counts = Counter(file_extension(name) for name in filenames if is_rom_file(name))
    if not counts:
        return None
    # Counter keeps insertion order and max() returns the first maximum.
    return max(counts, key=lambda ext: counts[ext])


def match_extension_majority(discovered_filenames: Iterable[str], platforms: Sequence[PlatformLike],
                             hints: Optional[PlatformHints] = None) -> Optional[PlatformCandidate]:
    extension = dominant_extension(discovered_filenames)
    if extension is None:
        return None
    hints = hints or load_platform_hints()
    candidate_names = hints.extensions.get(extension, ())
    for platform in _as_candidates(platforms):
        if any(names_match(platform.name, candidate) for candidate in candidate_names):
            logger.debug("Extension %s suggests platform %r", extension, platform.name)
            return platform
    return None


def suggest_platform(root_dir_name: str, discovered_filenames: Iterable[str],
                     platforms: Sequence[PlatformLike],
                     hints: Optional[PlatformHints] = None) -> Optional[PlatformCandidate]:
    """Best guess among ``platforms`` for a scanned folder, or None."""
    platforms = _as_candidates(platforms)
    if not platforms:
        return None
    found = match_folder_name(root_dir_name, platforms, hints)
    if found is None:
        found = match_extension_majority(discovered_filenames, platforms, hints)
    if found is not None:
        logger.info("Suggested platform: %s (ID: %s)", found.name, found.id)
    return found

#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
ra-hash - Catalog Helpers

Offline helpers around the known-hash catalog: building the digest index from
a game list, pairing scan results with catalog entries and filtering the
platform list. Fetching the catalog is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .models import PlatformCandidate, ScanResult

logger = logging.getLogger(__name__)

NON_GAME_PLATFORM_MARKERS = ("hub", "event")


@dataclass(frozen=True)
class CatalogEntry:
    """Title metadata for one known digest."""

    title: str
    achievement_count: int = 0
    game_id: Optional[Any] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CatalogEntry":
        count = data.get("achievement_count", data.get("numAchievements", 0))
        return cls(
            title=str(data.get("title") or ""),
            achievement_count=int(count or 0),
            game_id=data.get("game_id", data.get("id")),
        )


@dataclass(frozen=True)
class MatchedResult:
    result: ScanResult
    entry: Optional[CatalogEntry] = None

    @property
    def matched(self) -> bool:
        return self.entry is not None


@dataclass(frozen=True)
class MatchSummary:
    matched: int
    unmatched: int
    errors: int

    @property
    def total(self) -> int:
        return self.matched + self.unmatched + self.errors

    @property
    def match_rate(self) -> float:
        """Matched share of all results, in percent."""
        return (self.matched / self.total) * 100 if self.total else 0.0


CatalogLike = Union[CatalogEntry, Mapping[str, Any]]


def _entry(value: CatalogLike) -> CatalogEntry:
    return value if isinstance(value, CatalogEntry) else CatalogEntry.from_mapping(value)


def build_hash_index(games: Iterable[Mapping[str, Any]]) -> Dict[str, CatalogEntry]:
    """Map every lowercase digest listed under a game's ``hashes`` to its entry."""
    index: Dict[str, CatalogEntry] = {}
    for game in games:
        hashes = game.get("hashes")
        if not isinstance(hashes, list):
            continue
        entry = CatalogEntry.from_mapping(game)
        for digest in hashes:
            index[str(digest).lower()] = entry
    logger.debug("Built hash index with %d digests", len(index))
    return index


def match_results(results: Sequence[ScanResult],
                  known_hashes: Mapping[str, CatalogLike]) -> List[MatchedResult]:
    """Pair each scan result with its catalog entry, in scan order."""
    matched: List[MatchedResult] = []
    for result in results:
        if result.is_error:
            matched.append(MatchedResult(result))
            continue
        found = known_hashes.get(result.hash.lower())
        matched.append(MatchedResult(result, _entry(found) if found is not None else None))
    return matched


def summarize_matches(matches: Sequence[MatchedResult]) -> MatchSummary:
    errors = sum(1 for m in matches if m.result.is_error)
    hits = sum(1 for m in matches if m.matched)
    return MatchSummary(matched=hits, unmatched=len(matches) - hits - errors, errors=errors)


def sort_for_display(matches: Sequence[MatchedResult]) -> List[MatchedResult]:
    """Matched results by title first, then everything else by display name."""
    hits = sorted((m for m in matches if m.matched), key=lambda m: m.entry.title.lower())
    misses = sorted((m for m in matches if not m.matched), key=lambda m: m.result.display_name.lower())
    return hits + misses


def filter_game_platforms(platforms: Iterable[Union[PlatformCandidate, Mapping[str, Any]]]) -> List[PlatformCandidate]:
    """Drop hub and event pseudo-platforms and sort the rest by name."""
    candidates = [p if isinstance(p, PlatformCandidate) else PlatformCandidate.from_mapping(p)
                  for p in platforms]
    games = [p for p in candidates
             if not any(marker in p.name.lower() for marker in NON_GAME_PLATFORM_MARKERS)]
    return sorted(games, key=lambda p: p.name.lower())

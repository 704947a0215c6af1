"""Merge, deduplicate, filter and order candidate matches."""

from __future__ import annotations

from collections.abc import Hashable, Mapping, Sequence

from ..concepts import DEFAULT_CONCEPTS, CanonicalConcept
from ..config import DEFAULT_CONFIG, MatchingConfig
from .semantic import CandidateMatch, semantic_matches


def deduplicate(
    candidates: Sequence[tuple[Hashable, CandidateMatch]],
) -> list[CandidateMatch]:
    """Keep the highest-confidence candidate per group key.

    A later candidate replaces an earlier one only when strictly better, and
    takes over its slot so first-seen order is preserved.
    """
    best: dict[Hashable, CandidateMatch] = {}
    for group, candidate in candidates:
        existing = best.get(group)
        if existing is None or candidate.confidence > existing.confidence:
            best[group] = candidate
    return list(best.values())


def reconcile(
    placeholders: Sequence[str],
    preferences: Mapping[str, str],
    concepts: Sequence[CanonicalConcept] = DEFAULT_CONCEPTS,
    config: MatchingConfig = DEFAULT_CONFIG,
) -> list[CandidateMatch]:
    """Propose stored preferences for each placeholder.

    With the ``placeholder`` dedup scope each placeholder position keeps its
    own best candidate per preference key, so two placeholders may both be
    offered the same preference. The ``global`` scope keeps a single best
    candidate per preference key across the whole call.
    """
    grouped: list[tuple[Hashable, CandidateMatch]] = []
    for position, placeholder in enumerate(placeholders):
        for candidate in semantic_matches(placeholder, preferences, concepts, config):
            if config.dedup_scope == "global":
                group: Hashable = candidate.suggested
            else:
                group = (position, candidate.suggested)
            grouped.append((group, candidate))

    unique = deduplicate(grouped)
    confident = [m for m in unique if m.confidence > config.min_confidence]
    return sorted(confident, key=lambda m: m.confidence, reverse=True)

"""Direct and synonym-based candidate generation for one placeholder."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from ..concepts import DEFAULT_CONCEPTS, CanonicalConcept
from ..config import DEFAULT_CONFIG, MatchingConfig
from .similarity import similarity


@dataclass(frozen=True)
class CandidateMatch:
    """A proposed preference for a placeholder."""

    original: str
    suggested: str
    confidence: float

    def to_dict(self) -> dict:
        return {
            "original": self.original,
            "suggested": self.suggested,
            "confidence": self.confidence,
        }


def direct_matches(
    placeholder: str,
    preferences: Mapping[str, str],
    config: MatchingConfig = DEFAULT_CONFIG,
) -> list[CandidateMatch]:
    """Score the placeholder against every preference key by raw closeness."""
    matches = []
    for key in preferences:
        score = similarity(placeholder, key)
        if score > config.direct_threshold:
            matches.append(CandidateMatch(placeholder, key, score))
    return matches


def synonym_matches(
    placeholder: str,
    preferences: Mapping[str, str],
    concepts: Sequence[CanonicalConcept] = DEFAULT_CONCEPTS,
    config: MatchingConfig = DEFAULT_CONFIG,
) -> list[CandidateMatch]:
    """Pair the placeholder with keys that share one of its canonical concepts."""
    matches = []
    for concept in concepts:
        if not concept.is_placeholder_instance(placeholder, config.synonym_threshold):
            continue
        for key in preferences:
            if concept.is_preference_instance(key, config.synonym_threshold):
                matches.append(CandidateMatch(placeholder, key, config.semantic_confidence))
    return matches


def semantic_matches(
    placeholder: str,
    preferences: Mapping[str, str],
    concepts: Sequence[CanonicalConcept] = DEFAULT_CONCEPTS,
    config: MatchingConfig = DEFAULT_CONFIG,
) -> list[CandidateMatch]:
    """Return direct candidates followed by synonym candidates.

    Duplicates across the two passes are kept; the aggregator resolves them.
    """
    return (
        direct_matches(placeholder, preferences, config)
        + synonym_matches(placeholder, preferences, concepts, config)
    )

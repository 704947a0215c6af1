"""Canonical concept table used to bridge naming differences."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .config import SYNONYM_MATCH_THRESHOLD
from .matching.normalizer import normalize
from .matching.similarity import similarity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CanonicalConcept:
    """A semantic category with its known synonymous spellings."""

    concept: str
    synonyms: tuple[str, ...]

    def matches_synonym(self, name: str, threshold: float = SYNONYM_MATCH_THRESHOLD) -> bool:
        """Return True if ``name`` is close enough to one of the synonyms."""
        return any(similarity(name, synonym) > threshold for synonym in self.synonyms)

    def is_placeholder_instance(self, name: str, threshold: float = SYNONYM_MATCH_THRESHOLD) -> bool:
        """Return True if a placeholder name stands for this concept.

        The concept name itself counts as well as any near-synonym, so a
        template using ``{{target_audience}}`` is recognized as the concept.
        """
        return normalize(name) == normalize(self.concept) or self.matches_synonym(name, threshold)

    def is_preference_instance(self, key: str, threshold: float = SYNONYM_MATCH_THRESHOLD) -> bool:
        """Return True if a stored preference key holds a value for this concept.

        The concept name is compared verbatim here, unlike placeholders: a
        stored key only counts as the concept when saved under that exact name.
        """
        return key == self.concept or self.matches_synonym(key, threshold)


DEFAULT_CONCEPTS: tuple[CanonicalConcept, ...] = (
    CanonicalConcept("target_audience", ("audience", "target", "demographic", "customer_segment", "user_group")),
    CanonicalConcept("product_name", ("product", "service", "offering", "solution", "brand")),
    CanonicalConcept("campaign_goal", ("goal", "objective", "purpose", "aim", "target_goal")),
    CanonicalConcept("company_name", ("company", "business", "organization", "brand", "firm")),
    CanonicalConcept("user_name", ("name", "user", "customer_name", "client_name", "person")),
    CanonicalConcept("location", ("place", "city", "region", "area", "geography")),
    CanonicalConcept("industry", ("sector", "field", "domain", "vertical", "market")),
    CanonicalConcept("tone", ("style", "voice", "mood", "approach", "manner")),
    CanonicalConcept("budget", ("cost", "price", "investment", "spend", "allocation")),
    CanonicalConcept("timeline", ("deadline", "timeframe", "schedule", "duration", "period")),
)


def load_concepts(path: Path) -> tuple[CanonicalConcept, ...]:
    """Load a concept table from a JSON object of ``{concept: [synonyms...]}``."""
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Concept file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Concept file {path} must contain a JSON object")

    concepts = []
    for concept, synonyms in data.items():
        if not isinstance(synonyms, list) or not all(isinstance(s, str) for s in synonyms):
            raise ValueError(f"Synonyms for concept {concept!r} must be a list of strings")
        concepts.append(CanonicalConcept(concept, tuple(synonyms)))

    logger.debug("Loaded %d concepts from %s", len(concepts), path)
    return tuple(concepts)

"""Placeholder extraction and prompt filling for ``{{variable}}`` templates."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .concepts import DEFAULT_CONCEPTS, CanonicalConcept
from .config import DEFAULT_CONFIG, MatchingConfig
from .matching.aggregator import reconcile
from .matching.semantic import CandidateMatch

_PLACEHOLDER = re.compile(r"\{\{([^}]+)\}\}")

INSTRUCTIONS = (
    "Instructions:\n"
    "* Stick to the variables in the prompt\n"
    "* Remove any double brackets and use the value of the variable\n\n"
)


@dataclass
class TemplateVariable:
    """One placeholder of a template and the value it will be filled with."""

    name: str
    value: str = ""
    matched: bool = False

    @property
    def filled(self) -> bool:
        return bool(self.name and self.value)


def extract_variables(text: str) -> list[str]:
    """Return placeholder names in first-seen order, without duplicates."""
    names = [m.group(1).strip() for m in _PLACEHOLDER.finditer(text)]
    return list(dict.fromkeys(n for n in names if n))


def apply_matches(
    variables: list[TemplateVariable],
    preferences: Mapping[str, str],
    matches: Sequence[CandidateMatch],
    threshold: float = DEFAULT_CONFIG.auto_apply_threshold,
) -> list[TemplateVariable]:
    """Fill variables from the first suggestion above ``threshold``.

    Matches are expected in confidence order, so the first suggestion found
    for a variable is its best one.
    """
    updated = []
    for var in variables:
        match = next((m for m in matches if m.original == var.name), None)
        if match and match.confidence > threshold:
            updated.append(TemplateVariable(
                name=var.name,
                value=preferences.get(match.suggested) or var.value,
                matched=True,
            ))
        else:
            updated.append(var)
    return updated


def prepare_variables(
    text: str,
    preferences: Mapping[str, str],
    config: MatchingConfig = DEFAULT_CONFIG,
    concepts: Sequence[CanonicalConcept] = DEFAULT_CONCEPTS,
) -> list[TemplateVariable]:
    """Extract a template's variables and prefill them from preferences.

    Exact preference keys win; the remaining variables are reconciled and
    high-confidence suggestions are applied automatically.
    """
    names = extract_variables(text)
    variables = [TemplateVariable(name=n, value=preferences.get(n, "")) for n in names]

    usable = {
        k: v for k, v in preferences.items()
        if not (config.reserved_prefix and k.startswith(config.reserved_prefix))
    }
    if not usable:
        return variables

    unmatched = [n for n in names if not preferences.get(n)]
    if not unmatched:
        return variables

    matches = reconcile(unmatched, usable, concepts, config)
    return apply_matches(variables, usable, matches, config.auto_apply_threshold)


def render_prompt(text: str, variables: Sequence[TemplateVariable]) -> str:
    """Inline filled variables as ``((name:value))`` and add instructions."""
    filled = [v for v in variables if v.filled]
    for var in filled:
        pattern = re.compile(r"\{\{\s*" + re.escape(var.name) + r"\s*\}\}")
        text = pattern.sub(lambda _: f"(({var.name}:{var.value}))", text)

    if filled:
        text = INSTRUCTIONS + text
    return text


def preferences_from_variables(variables: Sequence[TemplateVariable]) -> dict[str, str]:
    """Filled variables as a preference mapping the caller can save."""
    return {v.name: v.value for v in variables if v.filled}

"""Request validation in front of the reconciliation engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .concepts import DEFAULT_CONCEPTS, CanonicalConcept
from .config import DEFAULT_CONFIG, MatchingConfig
from .matching.aggregator import reconcile

logger = logging.getLogger(__name__)


class InvalidRequestError(ValueError):
    """Raised when a match request does not have the expected shape."""


class MatchRequest(BaseModel):
    """A match-variables request as sent by the prompt editor."""

    model_config = ConfigDict(populate_by_name=True)

    extracted_variables: Sequence[str] = Field(alias="extractedVariables")
    user_preferences: Mapping[str, str] = Field(alias="userPreferences")

    def public_preferences(self, reserved_prefix: str) -> dict[str, str]:
        """Preferences without internal settings such as ``__llm_provider``."""
        if not reserved_prefix:
            return dict(self.user_preferences)
        return {
            k: v for k, v in self.user_preferences.items()
            if not k.startswith(reserved_prefix)
        }


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_request(payload: Any) -> MatchRequest:
    """Validate a raw payload, raising ``InvalidRequestError`` on bad shapes."""
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    try:
        return MatchRequest.model_validate(payload)
    except ValidationError as e:
        message = _describe(e)
        logger.warning("Rejected match request: %s", message)
        raise InvalidRequestError(f"Invalid request data: {message}") from e


def match_variables(
    payload: Any,
    config: MatchingConfig = DEFAULT_CONFIG,
    concepts: Sequence[CanonicalConcept] = DEFAULT_CONCEPTS,
) -> list[dict[str, Any]]:
    """Validate a request and return its suggestions as plain dicts."""
    request = parse_request(payload)
    preferences = request.public_preferences(config.reserved_prefix)
    matches = reconcile(request.extracted_variables, preferences, concepts, config)
    logger.debug(
        "Matched %d of %d variables against %d preferences",
        len({m.original for m in matches}),
        len(request.extracted_variables),
        len(preferences),
    )
    return [m.to_dict() for m in matches]

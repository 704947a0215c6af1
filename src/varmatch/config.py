"""Pydantic configuration models."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Empirical tuning knobs carried over from the production matcher.
DIRECT_MATCH_THRESHOLD = 0.6
SYNONYM_MATCH_THRESHOLD = 0.8
SEMANTIC_MATCH_CONFIDENCE = 0.9
MIN_CONFIDENCE = 0.7
AUTO_APPLY_THRESHOLD = 0.8
RESERVED_PREFIX = "__"


class MatchingConfig(BaseModel):
    """Thresholds and scoping rules for the reconciliation engine."""

    model_config = ConfigDict(frozen=True)

    direct_threshold: float = Field(default=DIRECT_MATCH_THRESHOLD, ge=0.0, le=1.0)
    synonym_threshold: float = Field(default=SYNONYM_MATCH_THRESHOLD, ge=0.0, le=1.0)
    semantic_confidence: float = Field(default=SEMANTIC_MATCH_CONFIDENCE, ge=0.0, le=1.0)
    min_confidence: float = Field(default=MIN_CONFIDENCE, ge=0.0, le=1.0)
    auto_apply_threshold: float = Field(default=AUTO_APPLY_THRESHOLD, ge=0.0, le=1.0)
    dedup_scope: Literal["placeholder", "global"] = "placeholder"
    reserved_prefix: str = RESERVED_PREFIX


class RunConfig(BaseModel):
    """Execution settings for a batch run."""

    max_requests: int | None = Field(default=None, ge=1)
    output_dir: Path = Path("results")
    label: str = "batch"


DEFAULT_CONFIG = MatchingConfig()

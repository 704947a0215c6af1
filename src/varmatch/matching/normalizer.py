"""Canonical comparison keys for placeholder and preference names."""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[_\s-]")


def normalize(name: str) -> str:
    """Lower-case a name and drop underscores, hyphens and whitespace."""
    return _SEPARATORS.sub("", name.lower())

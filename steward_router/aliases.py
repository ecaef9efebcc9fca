"""Tier alias resolution, the single source of truth for user-typed tier names.

Used by the explicit tier override, the config loader and the registry file
reader, which still accepts the legacy ``tier1-fast`` style names.
"""

from __future__ import annotations

import difflib

from steward_router.models import Tier

# Alias → canonical tier.
# Keep grouped by tier for readability.
TIER_ALIASES: dict[str, Tier] = {
    "fast": Tier.LOCAL_FAST,
    "local-fast": Tier.LOCAL_FAST,
    "tier1-fast": Tier.LOCAL_FAST,
    "heavy": Tier.LOCAL_HEAVY,
    "local-heavy": Tier.LOCAL_HEAVY,
    "tier2-heavy": Tier.LOCAL_HEAVY,
    "cloud": Tier.CLOUD,
    "tier3-cloud": Tier.CLOUD,
}

# Normalized key → canonical alias key.
# Built once at import time for fast lookup.
_NORMALIZED: dict[str, str] = {}


def _normalize(s: str) -> str:
    """Strip hyphens, underscores, spaces, dots and lowercase."""
    return s.lower().replace("-", "").replace("_", "").replace(" ", "").replace(".", "")


def _build_normalized() -> None:
    """Populate the normalized lookup table."""
    _NORMALIZED.clear()
    for key in TIER_ALIASES:
        _NORMALIZED[_normalize(key)] = key


_build_normalized()


def resolve_tier(raw: str | Tier | None) -> Tier | None:
    """Resolve a tier alias to its canonical ``Tier``, or None if unknown."""
    if isinstance(raw, Tier):
        return raw
    if not raw or not isinstance(raw, str):
        return None

    lowered = raw.strip().lower()
    if lowered in TIER_ALIASES:
        return TIER_ALIASES[lowered]

    normed = _normalize(raw)
    if normed in _NORMALIZED:
        return TIER_ALIASES[_NORMALIZED[normed]]
    return None


def suggest_tier(raw: str) -> str:
    """Build a hint message for an unknown tier alias."""
    candidates = difflib.get_close_matches(_normalize(raw), _NORMALIZED.keys(), n=2, cutoff=0.6)
    if candidates:
        suggestions = [_NORMALIZED[c] for c in candidates]
        return f"Unknown tier '{raw}'. Did you mean: {', '.join(suggestions)}?"
    valid = ", ".join(sorted(TIER_ALIASES))
    return f"Unknown tier '{raw}'. Valid tiers: {valid}"

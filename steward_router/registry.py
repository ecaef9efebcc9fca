"""Model registry: static model metadata keyed by model id.

The registry is read-only while a routing decision is being made.  Iteration
order is the declaration order of the catalogue and is used to break ties.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml
from loguru import logger

from steward_router.aliases import resolve_tier
from steward_router.models import ModelMetadata, PrivacyTier, Tier

# Zero-cost local-fast models, in the order the fallback builder tries them.
GUARANTEED_LOCAL_MODELS: tuple[str, ...] = ("smollm3-1.7b", "smollm3-8b", "smollm3")
DEFAULT_LOCAL_MODEL = GUARANTEED_LOCAL_MODELS[0]

TIER_CONFIG_FIELDS: tuple[str, ...] = ("description", "cost_category", "privacy_level")

DEFAULT_TIER_CONFIG: dict[Tier, dict[str, str]] = {
    Tier.LOCAL_FAST: {
        "description": "Small local models for quick and private tasks",
        "cost_category": "free",
        "privacy_level": "local",
    },
    Tier.LOCAL_HEAVY: {
        "description": "Large local models for specialized and batch work",
        "cost_category": "free",
        "privacy_level": "local",
    },
    Tier.CLOUD: {
        "description": "Paid cloud APIs for complex reasoning",
        "cost_category": "paid",
        "privacy_level": "remote",
    },
}

DEFAULT_MODELS: tuple[ModelMetadata, ...] = (
    ModelMetadata(
        "smollm3-1.7b", Tier.LOCAL_FAST, 0.0,
        frozenset({"route", "quick_query", "sensitive", "fallback", "summarize"}),
        6.0, PrivacyTier.LOCAL,
    ),
    ModelMetadata(
        "smollm3-8b", Tier.LOCAL_FAST, 0.0,
        frozenset({"general", "explain", "write", "sensitive", "fallback"}),
        6.5, PrivacyTier.LOCAL,
    ),
    ModelMetadata(
        "codellama", Tier.LOCAL_HEAVY, 0.0,
        frozenset({"code", "debug"}),
        7.0, PrivacyTier.LOCAL,
    ),
    ModelMetadata(
        "devstral", Tier.LOCAL_HEAVY, 0.0,
        frozenset({"code", "debug", "analyze", "batch", "specialized"}),
        7.5, PrivacyTier.LOCAL,
    ),
    ModelMetadata(
        "mistral", Tier.LOCAL_HEAVY, 0.0,
        frozenset({"write", "summarize", "explain", "batch"}),
        7.0, PrivacyTier.LOCAL,
    ),
    ModelMetadata(
        "gpt-4", Tier.CLOUD, 0.00003,
        frozenset({"debug", "code", "analyze", "write", "complex_reasoning"}),
        9.0, PrivacyTier.REMOTE,
    ),
    ModelMetadata(
        "claude", Tier.CLOUD, 0.000015,
        frozenset({"write", "analyze", "summarize", "explain", "creative", "complex_reasoning"}),
        9.0, PrivacyTier.REMOTE,
    ),
    ModelMetadata(
        "perplexity", Tier.CLOUD, 0.000005,
        frozenset({"research", "explain"}),
        8.0, PrivacyTier.REMOTE,
    ),
)


class ModelRegistry:
    """Read-only lookup over model metadata."""

    def __init__(
        self,
        models: Iterable[ModelMetadata],
        tier_config: dict[Tier, dict[str, Any]] | None = None,
    ):
        self._models: dict[str, ModelMetadata] = {}
        for meta in models:
            self._models[meta.id] = meta
        self._tier_config = dict(tier_config) if tier_config is not None else {}

    @classmethod
    def default(cls) -> "ModelRegistry":
        return cls(DEFAULT_MODELS, DEFAULT_TIER_CONFIG)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ModelRegistry":
        """Build a registry from a ``{models: ..., tier_config: ...}`` mapping.

        Each model entry is keyed by id and carries ``tier``,
        ``cost_per_token``, ``use_cases``, ``performance_rating`` and
        ``privacy_tier``.  Entries with an unknown tier or privacy tier are
        skipped.
        """
        models: list[ModelMetadata] = []
        for model_id, raw in (data.get("models") or {}).items():
            raw = raw or {}
            tier = resolve_tier(raw.get("tier"))
            if tier is None:
                logger.warning(f"Registry: skipping {model_id} (unknown tier {raw.get('tier')!r})")
                continue
            try:
                privacy = PrivacyTier(raw.get("privacy_tier", "local" if tier.is_local else "remote"))
            except ValueError:
                logger.warning(f"Registry: skipping {model_id} (unknown privacy tier {raw.get('privacy_tier')!r})")
                continue
            models.append(ModelMetadata(
                id=model_id,
                tier=tier,
                cost_per_token=float(raw.get("cost_per_token") or 0.0),
                use_cases=frozenset(raw.get("use_cases") or ()),
                performance_rating=float(raw.get("performance_rating") or 0.0),
                privacy_tier=privacy,
            ))

        tier_config: dict[Tier, dict[str, Any]] = {}
        for name, cfg in (data.get("tier_config") or {}).items():
            tier = resolve_tier(name)
            if tier is not None:
                tier_config[tier] = dict(cfg or {})
        return cls(models, tier_config)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ModelRegistry":
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        registry = cls.from_mapping(data)
        logger.info(f"Registry: loaded {len(registry)} models from {path}")
        return registry

    def __len__(self) -> int:
        return len(self._models)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models

    def __iter__(self):
        return iter(self._models.values())

    def get_model_info(self, model_id: str | None) -> ModelMetadata | None:
        if not model_id:
            return None
        return self._models.get(model_id)

    def get_models_by_tier(self, tier: Tier | str | None) -> list[str]:
        resolved = resolve_tier(tier)
        if resolved is None:
            return []
        return [m.id for m in self._models.values() if m.tier is resolved]

    def get_models_by_use_case(self, use_case: str | None) -> list[str]:
        if not use_case:
            return []
        return [m.id for m in self._models.values() if use_case in m.use_cases]

    def tier_config(self, tier: Tier | None) -> dict[str, Any] | None:
        if tier is None:
            return None
        return self._tier_config.get(tier)

    def performance(self, model_id: str) -> float:
        meta = self._models.get(model_id)
        return meta.performance_rating if meta else 0.0

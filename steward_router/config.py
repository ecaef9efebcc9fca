"""Router configuration: pydantic models, YAML loading and loadout overlays."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from steward_router.aliases import resolve_tier, suggest_tier
from steward_router.models import Tier
from steward_router.registry import DEFAULT_LOCAL_MODEL

CONFIG_VERSION = 1


def _coerce_tier(value: Any) -> Tier:
    tier = resolve_tier(value)
    if tier is None:
        raise ValueError(suggest_tier(str(value)))
    return tier


class FallbackBehavior(BaseModel):
    model_config = ConfigDict(extra="allow")
    fallback: str = Field(default=DEFAULT_LOCAL_MODEL)


class CostSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    monthly_budget: float = Field(default=10.0, ge=0)
    cost_awareness: bool = Field(default=False)
    low_budget_threshold: float = Field(default=2.0, ge=0)
    warning_ratio: float = Field(default=0.5, ge=0.0, le=1.0)
    chars_per_token: float = Field(default=4.0, gt=0)
    response_multiplier: float = Field(default=2.5, gt=0)
    min_tokens: int = Field(default=100, ge=1)


class TierPreferences(BaseModel):
    model_config = ConfigDict(extra="allow")
    default_tier: Tier = Field(default=Tier.LOCAL_FAST)
    tier_priorities: list[Tier] = Field(
        default_factory=lambda: [Tier.CLOUD, Tier.LOCAL_HEAVY, Tier.LOCAL_FAST]
    )

    @field_validator("default_tier", mode="before")
    @classmethod
    def _resolve_default_tier(cls, value: Any) -> Tier:
        return _coerce_tier(value)

    @field_validator("tier_priorities", mode="before")
    @classmethod
    def _resolve_priorities(cls, value: Any) -> list[Tier]:
        if isinstance(value, dict):
            # Legacy character sheets nest the list under "performance_first".
            value = value.get("performance_first", [])
        return [_coerce_tier(v) for v in value or []]


class Loadout(BaseModel):
    model_config = ConfigDict(extra="allow")
    name: str = Field(default="default")
    model: str | None = None


class RouterConfig(BaseModel):
    """User configuration ("character sheet") consumed by the router."""
    model_config = ConfigDict(extra="allow")
    version: int = Field(default=CONFIG_VERSION, ge=1)
    task_type_preferences: dict[str, str] = Field(default_factory=dict)
    fallback_behavior: FallbackBehavior = Field(default_factory=FallbackBehavior)
    cost_settings: CostSettings = Field(default_factory=CostSettings)
    tier_preferences: TierPreferences = Field(default_factory=TierPreferences)
    loadout: Loadout | None = None

    @property
    def loadout_name(self) -> str:
        return self.loadout.name if self.loadout else "default"


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_loadout(config: RouterConfig, name: str, overlay: dict[str, Any] | None = None) -> RouterConfig:
    """Return a copy of ``config`` with a named loadout overlay merged in.

    The overlay may override any config section; a top-level ``model`` key is
    taken as the loadout's model override.
    """
    overlay = dict(overlay or {})
    loadout_model = overlay.pop("model", None)
    raw = _deep_merge(config.model_dump(mode="json"), overlay)
    raw["loadout"] = {**(raw.get("loadout") or {}), "name": name}
    if loadout_model:
        raw["loadout"]["model"] = loadout_model
    return RouterConfig.model_validate(raw)


def load_config(path: str | Path) -> RouterConfig:
    yaml_path = Path(path)
    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return RouterConfig.model_validate(raw)
    except Exception as e:
        logger.warning(f"Config validation failed for {yaml_path}: {e}, using defaults")
        return RouterConfig()

"""Tests for config loading and loadout overlays."""

import pytest
from pydantic import ValidationError

from steward_router.config import (
    CostSettings,
    RouterConfig,
    TierPreferences,
    apply_loadout,
    load_config,
)
from steward_router.models import Tier

CONFIG_YAML = """\
task_type_preferences:
  debug: gpt-4
cost_settings:
  monthly_budget: 25
  cost_awareness: true
tier_preferences:
  default_tier: tier2-heavy
loadout:
  name: focus
  model: claude
"""


def test_defaults():
    cfg = RouterConfig()
    assert cfg.fallback_behavior.fallback == "smollm3-1.7b"
    assert cfg.cost_settings.monthly_budget == 10.0
    assert cfg.cost_settings.cost_awareness is False
    assert cfg.tier_preferences.default_tier is Tier.LOCAL_FAST
    assert cfg.tier_preferences.tier_priorities == [Tier.CLOUD, Tier.LOCAL_HEAVY, Tier.LOCAL_FAST]
    assert cfg.loadout_name == "default"


def test_tier_aliases_resolve():
    prefs = TierPreferences(
        default_tier="heavy",
        tier_priorities={"performance_first": ["tier3-cloud", "tier1-fast"]},
    )
    assert prefs.default_tier is Tier.LOCAL_HEAVY
    assert prefs.tier_priorities == [Tier.CLOUD, Tier.LOCAL_FAST]


def test_unknown_tier_suggests_alias():
    with pytest.raises(ValidationError, match="Did you mean"):
        TierPreferences(default_tier="clod")


def test_negative_budget_rejected():
    with pytest.raises(ValidationError):
        CostSettings(monthly_budget=-1)


def test_extra_fields_allowed():
    cfg = RouterConfig.model_validate({"custom_section": {"a": 1}})
    assert cfg.loadout is None


def test_load_config(tmp_path):
    path = tmp_path / "router.yaml"
    path.write_text(CONFIG_YAML)

    cfg = load_config(path)

    assert cfg.task_type_preferences == {"debug": "gpt-4"}
    assert cfg.cost_settings.monthly_budget == 25
    assert cfg.cost_settings.cost_awareness is True
    assert cfg.tier_preferences.default_tier is Tier.LOCAL_HEAVY
    assert cfg.loadout_name == "focus"
    assert cfg.loadout.model == "claude"


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "nope.yaml") == RouterConfig()


def test_invalid_config_falls_back_to_defaults(tmp_path):
    path = tmp_path / "router.yaml"
    path.write_text("tier_preferences:\n  default_tier: warp\n")
    assert load_config(path) == RouterConfig()


def test_malformed_yaml_falls_back_to_defaults(tmp_path):
    path = tmp_path / "router.yaml"
    path.write_text("cost_settings: [unclosed\n")
    assert load_config(path) == RouterConfig()


def test_apply_loadout_overlays_copy():
    base = RouterConfig(cost_settings=CostSettings(cost_awareness=True))

    cfg = apply_loadout(base, "frugal", {"model": "smollm3-8b", "cost_settings": {"monthly_budget": 3}})

    assert cfg.loadout_name == "frugal"
    assert cfg.loadout.model == "smollm3-8b"
    assert cfg.cost_settings.monthly_budget == 3
    assert cfg.cost_settings.cost_awareness is True
    assert cfg.tier_preferences.default_tier is Tier.LOCAL_FAST
    assert base.loadout is None
    assert base.cost_settings.monthly_budget == 10.0

"""Basic structure tests for steward_router."""

import pytest


def test_imports():
    from steward_router import (
        ExecutionEngine, ModelRegistry, RoutingDecision, StewardRouter, TierSelector,
    )


def test_tier_locality():
    from steward_router import Tier
    assert Tier.LOCAL_FAST.is_local
    assert Tier.LOCAL_HEAVY.is_local
    assert not Tier.CLOUD.is_local
    assert Tier("local-heavy") is Tier.LOCAL_HEAVY


def test_privacy_protected_cloud_selection_is_illegal():
    from steward_router import ModelSelection, Tier
    with pytest.raises(ValueError):
        ModelSelection(
            model="gpt-4", reason="x", confidence=1.0, tier=Tier.CLOUD,
            privacy_protection=True,
        )


def test_privacy_protected_local_selection():
    from steward_router import ModelSelection, Tier
    s = ModelSelection(
        model="smollm3-1.7b", reason="x", confidence=0.9, tier=Tier.LOCAL_FAST,
        privacy_protection=True,
    )
    assert s.cost_estimate == 0.0
    assert s.fallbacks == ()


def test_routing_options_as_dict_drops_unset():
    from steward_router import RoutingOptions
    opts = RoutingOptions(prefer_tier="fast", task="hi")
    assert opts.as_dict() == {"prefer_tier": "fast", "task": "hi"}


def test_free_local_fast_metadata():
    from steward_router import ModelMetadata, Tier
    assert ModelMetadata("a", Tier.LOCAL_FAST).is_free_local_fast
    assert not ModelMetadata("b", Tier.LOCAL_FAST, cost_per_token=0.001).is_free_local_fast
    assert not ModelMetadata("c", Tier.LOCAL_HEAVY).is_free_local_fast

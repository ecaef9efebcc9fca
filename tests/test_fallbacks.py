"""Tests for fallback chain construction."""

from steward_router.fallbacks import build_fallback_chain, ensure_terminal
from steward_router.models import ModelMetadata, PrivacyTier, Tier
from steward_router.registry import DEFAULT_LOCAL_MODEL, ModelRegistry

TASK_TYPES = [
    "debug", "summarize", "research", "write", "analyze", "explain",
    "code", "sensitive", "route", "general", "fallback", "batch",
]


def _assert_well_formed(chain, primary, registry):
    assert chain, f"empty chain for {primary}"
    assert len(chain) == len(set(chain))
    assert primary not in chain
    assert registry.get_model_info(chain[-1]).is_free_local_fast


def test_cloud_primary_chain_order(registry):
    chain = build_fallback_chain("gpt-4", "debug", registry)
    assert chain == [
        "claude", "perplexity", "devstral", "codellama", "smollm3-1.7b", "smollm3-8b",
    ]


def test_every_chain_is_well_formed(registry):
    for meta in registry:
        for task_type in TASK_TYPES:
            for fallback in (None, "claude", "smollm3-8b"):
                chain = build_fallback_chain(meta.id, task_type, registry, fallback)
                _assert_well_formed(chain, meta.id, registry)


def test_cloud_fallback_model_is_not_last(registry):
    chain = build_fallback_chain("smollm3-8b", "general", registry, "claude")
    assert chain == ["claude", "smollm3-1.7b"]


def test_unknown_primary_falls_to_local(registry):
    chain = build_fallback_chain("mystery", "summarize", registry)
    assert chain[0] == "smollm3-1.7b"
    assert registry.get_model_info(chain[-1]).is_free_local_fast


def test_ensure_terminal_dedupes_and_drops_primary(registry):
    chain = ensure_terminal(["claude", "gpt-4", "claude", "smollm3-8b"], "gpt-4", registry)
    assert chain == ["claude", "smollm3-8b"]


def test_sole_free_model_is_primary():
    reg = ModelRegistry([
        ModelMetadata("tiny", Tier.LOCAL_FAST),
        ModelMetadata("big", Tier.CLOUD, 0.01, privacy_tier=PrivacyTier.REMOTE),
    ])
    assert ensure_terminal(["big"], "tiny", reg) == ["big", "tiny"]


def test_registry_without_local_models():
    reg = ModelRegistry([ModelMetadata("big", Tier.CLOUD, 0.01, privacy_tier=PrivacyTier.REMOTE)])
    assert ensure_terminal([], "big", reg) == [DEFAULT_LOCAL_MODEL]

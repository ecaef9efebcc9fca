from steward_router.aliases import resolve_tier, suggest_tier
from steward_router.models import Tier


def test_short_aliases():
    assert resolve_tier("fast") is Tier.LOCAL_FAST
    assert resolve_tier("heavy") is Tier.LOCAL_HEAVY
    assert resolve_tier("cloud") is Tier.CLOUD


def test_legacy_tier_names():
    assert resolve_tier("tier1-fast") is Tier.LOCAL_FAST
    assert resolve_tier("tier2-heavy") is Tier.LOCAL_HEAVY
    assert resolve_tier("tier3-cloud") is Tier.CLOUD


def test_normalized_match():
    assert resolve_tier("Local_Heavy") is Tier.LOCAL_HEAVY
    assert resolve_tier(" CLOUD ") is Tier.CLOUD


def test_passthrough_and_unknown():
    assert resolve_tier(Tier.CLOUD) is Tier.CLOUD
    assert resolve_tier(None) is None
    assert resolve_tier("") is None
    assert resolve_tier("turbo") is None


def test_suggestion_for_typo():
    msg = suggest_tier("clod")
    assert "Did you mean" in msg
    assert "cloud" in msg


def test_suggestion_lists_valid_tiers():
    msg = suggest_tier("zzzzzz")
    assert "Valid tiers" in msg
    assert "local-fast" in msg

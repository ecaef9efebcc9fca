"""Post-assembly sanity checks on a routing decision.

Warnings never block execution.  Errors mean the caller should not spend a
model call on the decision; the only error condition is a tier whose
configuration entry is present but incomplete.
"""

from steward_router.heuristics import SENSITIVE_TASK_TYPES, is_privacy_sensitive
from steward_router.models import PrivacyTier, RoutingDecision, Tier, ValidationResult
from steward_router.registry import TIER_CONFIG_FIELDS, ModelRegistry

LOW_CONFIDENCE = 0.3


def validate_decision(decision: RoutingDecision, registry: ModelRegistry) -> ValidationResult:
    result = ValidationResult()
    selection = decision.selection
    info = registry.get_model_info(selection.model)

    if info is None:
        result.warnings.append(f"Model {selection.model} not found in metadata")

    if decision.classification.confidence < LOW_CONFIDENCE:
        result.warnings.append(
            f"Low confidence task classification: {decision.classification.confidence}"
        )

    if not selection.fallbacks:
        result.warnings.append("No fallback models available")

    tier = decision.tier_info.selected_tier if decision.tier_info else None
    if tier is None:
        result.warnings.append("No tier information available")

    if info is not None and info.tier is Tier.CLOUD and not decision.tier_info.cost_estimate:
        result.warnings.append("No cost estimate for cloud tier model")

    sensitive = (
        decision.classification.type in SENSITIVE_TASK_TYPES
        or is_privacy_sensitive(decision.task)
    )
    if sensitive and (info is None or info.privacy_tier is not PrivacyTier.LOCAL):
        result.warnings.append("Sensitive task routed to non-local tier")

    if decision.tier_info and decision.tier_info.budget_warning:
        result.warnings.append(decision.tier_info.budget_warning)

    if tier is not None:
        config = registry.tier_config(tier)
        if config is None:
            result.warnings.append(f"Tier configuration issue: Tier {tier.value} not found in configuration")
        else:
            for name in TIER_CONFIG_FIELDS:
                if not config.get(name):
                    result.errors.append(f"Missing {name} in tier {tier.value} configuration")

    result.valid = not result.errors
    return result

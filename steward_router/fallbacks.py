"""Fallback chain construction.

A chain never contains the primary model or duplicates, and always ends with
a zero-cost local-fast model so the executor has a free last option.
"""

from loguru import logger

from steward_router.models import Tier
from steward_router.registry import DEFAULT_LOCAL_MODEL, GUARANTEED_LOCAL_MODELS, ModelRegistry

# Tiers to fall back through, most to least capable.
LOWER_TIERS: dict[Tier | None, tuple[Tier, ...]] = {
    Tier.CLOUD: (Tier.LOCAL_HEAVY, Tier.LOCAL_FAST),
    Tier.LOCAL_HEAVY: (Tier.LOCAL_FAST,),
    Tier.LOCAL_FAST: (),
    None: (Tier.LOCAL_FAST,),
}


def _by_performance(models: list[str], registry: ModelRegistry) -> list[str]:
    # sorted() is stable, so equal ratings keep registry order
    return sorted(models, key=registry.performance, reverse=True)


def _is_terminal(model: str, registry: ModelRegistry) -> bool:
    info = registry.get_model_info(model)
    return info is not None and info.is_free_local_fast


def ensure_terminal(chain: list[str], primary: str, registry: ModelRegistry) -> list[str]:
    """Make ``chain`` end with a zero-cost local-fast model."""
    chain = [m for m in dict.fromkeys(chain) if m != primary]
    if chain and _is_terminal(chain[-1], registry):
        return chain

    for candidate in GUARANTEED_LOCAL_MODELS:
        if candidate != primary and candidate not in chain and _is_terminal(candidate, registry):
            return chain + [candidate]

    for candidate in reversed(chain):
        if _is_terminal(candidate, registry):
            chain.remove(candidate)
            return chain + [candidate]

    for meta in registry:
        if meta.id != primary and meta.is_free_local_fast:
            return chain + [meta.id]

    if _is_terminal(primary, registry):
        # Sole free local model is the primary itself: retry it last.
        return chain + [primary]

    logger.warning(f"Fallbacks: registry has no free local-fast model; ending chain with {DEFAULT_LOCAL_MODEL}")
    if DEFAULT_LOCAL_MODEL not in chain and DEFAULT_LOCAL_MODEL != primary:
        chain.append(DEFAULT_LOCAL_MODEL)
    return chain


def build_fallback_chain(
    primary: str,
    task_type: str,
    registry: ModelRegistry,
    fallback_model: str | None = None,
) -> list[str]:
    """Build the ordered fallback list for ``primary``.

    Order: same-tier alternatives, lower-tier models for the task's use case,
    the configured fallback model, then a guaranteed free local model.
    Each tier group is sorted by performance rating, best first.
    """
    info = registry.get_model_info(primary)
    primary_tier = info.tier if info else None
    chain: list[str] = []

    def extend(models: list[str]) -> None:
        chain.extend(m for m in models if m != primary and m not in chain)

    if primary_tier is not None:
        extend(_by_performance(registry.get_models_by_tier(primary_tier), registry))

    use_case_models = registry.get_models_by_use_case(task_type)
    for tier in LOWER_TIERS.get(primary_tier, (Tier.LOCAL_FAST,)):
        in_tier = [m for m in use_case_models if registry.get_model_info(m).tier is tier]
        extend(_by_performance(in_tier, registry))

    extend([fallback_model or DEFAULT_LOCAL_MODEL])

    for local_model in GUARANTEED_LOCAL_MODELS:
        if local_model != primary and local_model not in chain and _is_terminal(local_model, registry):
            chain.append(local_model)
            break

    return ensure_terminal(chain, primary, registry)

"""Tier and model selection policy.

``TierSelector.select`` walks a fixed, first-match-wins list of stages:

  1. Privacy → local-fast only, zero cost
  2. Explicit tier override
  3. Cost-aware → local tiers only when the remaining budget is low
  4. Explicit use-case override
  5. Intelligent tier from the complexity profile
  6. Character-sheet preference for the task type
  7. Use-case match across all tiers
  8. Global fallback model

Every stage except the forced privacy/budget ones builds its fallbacks with
``build_fallback_chain``; the forced stages keep to local models and only
enforce the free local-fast terminal.
"""

from dataclasses import dataclass

from loguru import logger

from steward_router.aliases import resolve_tier, suggest_tier
from steward_router.budget import DEFAULT_ESTIMATED_TOKENS, BudgetSnapshot, calculate_cost
from steward_router.config import RouterConfig
from steward_router.fallbacks import build_fallback_chain, ensure_terminal
from steward_router.heuristics import SENSITIVE_TASK_TYPES, analyze_complexity, is_privacy_sensitive
from steward_router.models import (
    ComplexityProfile,
    ModelSelection,
    PrivacyTier,
    RoutingOptions,
    Tier,
)
from steward_router.registry import DEFAULT_LOCAL_MODEL, ModelRegistry


@dataclass(frozen=True)
class ModelCheck:
    """Outcome of validating a specific model against privacy and budget."""
    valid: bool
    reason: str = ""
    tier: Tier | None = None
    cost_estimate: float = 0.0


class TierSelector:
    """Chooses a model for a classified task."""

    def __init__(self, registry: ModelRegistry, config: RouterConfig | None = None):
        self._registry = registry
        self._config = config or RouterConfig()

    def select(
        self,
        task_type: str,
        options: RoutingOptions | None = None,
        budget: BudgetSnapshot | None = None,
    ) -> ModelSelection:
        options = options or RoutingOptions()
        budget = budget or BudgetSnapshot(self._config.cost_settings.monthly_budget)

        stages = (
            self._select_private,
            self._select_by_tier,
            self._select_cost_aware,
            self._select_by_use_case_override,
            self._select_intelligent_tier,
            self._select_preference,
            self._select_by_use_case,
        )
        for stage in stages:
            selection = stage(task_type, options, budget)
            if selection is not None:
                logger.debug(f"Selector: {stage.__name__} → {selection.model}")
                return selection
        return self._select_global_fallback(options)

    # --- Shared checks ---

    @staticmethod
    def requires_privacy(task_type: str, options: RoutingOptions) -> bool:
        return (
            options.privacy_mode
            or task_type in SENSITIVE_TASK_TYPES
            or is_privacy_sensitive(options.task)
        )

    def validate_model(
        self,
        model: str,
        options: RoutingOptions,
        budget: BudgetSnapshot,
        *,
        require_local: bool = False,
    ) -> ModelCheck:
        """Check a named model (preference or loadout) against constraints."""
        info = self._registry.get_model_info(model)
        if info is None:
            return ModelCheck(False, "Model not found")

        cost = calculate_cost(model, self._tokens(options), self._registry)
        local_only = options.privacy_mode or require_local
        if local_only and (info.privacy_tier is not PrivacyTier.LOCAL or not info.tier.is_local):
            return ModelCheck(False, "Privacy mode requires local processing")
        if cost > budget.remaining:
            return ModelCheck(False, "Exceeds remaining budget")
        return ModelCheck(True, tier=info.tier, cost_estimate=cost)

    def select_budget_protected(self, task_type: str, budget: BudgetSnapshot) -> ModelSelection:
        """Force a zero-cost local selection regardless of the budget threshold."""
        local = (
            self._registry.get_models_by_tier(Tier.LOCAL_FAST)
            + self._registry.get_models_by_tier(Tier.LOCAL_HEAVY)
        )
        best = self._best_in_tier(local, task_type) if local else DEFAULT_LOCAL_MODEL
        info = self._registry.get_model_info(best)
        return ModelSelection(
            model=best,
            reason=f"Cost optimization - Low budget remaining (${budget.remaining:.2f})",
            confidence=0.8,
            tier=info.tier if info else Tier.LOCAL_FAST,
            cost_estimate=0.0,
            fallbacks=tuple(ensure_terminal([m for m in local if m != best], best, self._registry)),
            budget_protection=True,
        )

    # --- Stages ---

    def _select_private(self, task_type, options, budget) -> ModelSelection | None:
        if not self.requires_privacy(task_type, options):
            return None

        local = self._registry.get_models_by_tier(Tier.LOCAL_FAST)
        best = next(
            (m for m in local
             if {task_type, "sensitive"} & self._registry.get_model_info(m).use_cases),
            local[0] if local else DEFAULT_LOCAL_MODEL,
        )
        return ModelSelection(
            model=best,
            reason="Privacy-sensitive content detected - Local processing only",
            confidence=0.9,
            tier=Tier.LOCAL_FAST,
            cost_estimate=0.0,
            fallbacks=tuple(ensure_terminal([m for m in local if m != best], best, self._registry)),
            privacy_protection=True,
        )

    def _select_by_tier(self, task_type, options, budget) -> ModelSelection | None:
        if not options.prefer_tier:
            return None
        tier = resolve_tier(options.prefer_tier)
        if tier is None:
            logger.warning(f"Selector: {suggest_tier(options.prefer_tier)}")
            return None

        models = self._registry.get_models_by_tier(tier)
        if not models:
            return None
        return self._build(
            self._best_in_tier(models, task_type),
            f"Tier override: {options.prefer_tier} ({tier.value})",
            1.0, task_type, options, tier=tier,
        )

    def _select_cost_aware(self, task_type, options, budget) -> ModelSelection | None:
        settings = self._config.cost_settings
        if not (options.cost_aware or settings.cost_awareness):
            return None
        if budget.remaining >= settings.low_budget_threshold:
            return None
        return self.select_budget_protected(task_type, budget)

    def _select_by_use_case_override(self, task_type, options, budget) -> ModelSelection | None:
        if not options.use_case:
            return None
        models = self._registry.get_models_by_use_case(options.use_case)
        if not models:
            return None
        return self._build(
            models[0], f"Use case override: {options.use_case}", 1.0, options.use_case, options,
        )

    def _select_intelligent_tier(self, task_type, options, budget) -> ModelSelection | None:
        complexity = analyze_complexity(task_type, options.task or "")

        if complexity.level == "high" and complexity.requires_advanced_reasoning:
            tier = Tier.CLOUD
        elif complexity.requires_specialization or complexity.is_batch_processing:
            tier = Tier.LOCAL_HEAVY
        elif complexity.level == "low" or complexity.is_routine:
            tier = Tier.LOCAL_FAST
        else:
            tier = self._config.tier_preferences.default_tier

        models = self._registry.get_models_by_tier(tier)
        if not models:
            return None
        return self._build(
            self._best_in_tier(models, task_type),
            f"Intelligent tier selection: {complexity.level} complexity -> {tier.value}",
            0.7 + complexity.confidence * 0.2,
            task_type, options, tier=tier, complexity=complexity,
        )

    def _select_preference(self, task_type, options, budget) -> ModelSelection | None:
        preferred = self._config.task_type_preferences.get(task_type)
        if not preferred:
            return None
        check = self.validate_model(preferred, options, budget)
        if not check.valid:
            logger.debug(f"Selector: preference {preferred} rejected ({check.reason})")
            return None
        return self._build(
            preferred,
            f"Character sheet preference for {task_type} ({check.tier.value})",
            0.8, task_type, options,
        )

    def _select_by_use_case(self, task_type, options, budget) -> ModelSelection | None:
        priorities = self._config.tier_preferences.tier_priorities

        def rank(model: str) -> tuple[int, float]:
            info = self._registry.get_model_info(model)
            order = priorities.index(info.tier) if info.tier in priorities else len(priorities)
            return order, -info.performance_rating

        models = sorted(self._registry.get_models_by_use_case(task_type), key=rank)
        if not models:
            return None
        best = models[0]
        tier = self._registry.get_model_info(best).tier
        return self._build(best, f"Use case match for {task_type} ({tier.value})", 0.6, task_type, options)

    def _select_global_fallback(self, options: RoutingOptions) -> ModelSelection:
        model = self._config.fallback_behavior.fallback or DEFAULT_LOCAL_MODEL
        return self._build(model, "Three-tier fallback model selection", 0.3, "fallback", options)

    # --- Helpers ---

    @staticmethod
    def _tokens(options: RoutingOptions) -> int:
        return options.estimated_tokens or DEFAULT_ESTIMATED_TOKENS

    def _best_in_tier(self, models: list[str], task_type: str) -> str:
        """Model declaring the task type, else the best rated one."""
        known = [m for m in models if self._registry.get_model_info(m) is not None]
        for model in known:
            if task_type in self._registry.get_model_info(model).use_cases:
                return model
        if not known:
            return models[0]
        return max(known, key=self._registry.performance)

    def _build(
        self,
        model: str,
        reason: str,
        confidence: float,
        task_type: str,
        options: RoutingOptions,
        *,
        tier: Tier | None = None,
        complexity: ComplexityProfile | None = None,
    ) -> ModelSelection:
        info = self._registry.get_model_info(model)
        return ModelSelection(
            model=model,
            reason=reason,
            confidence=confidence,
            tier=tier or (info.tier if info else Tier.LOCAL_FAST),
            cost_estimate=calculate_cost(model, self._tokens(options), self._registry),
            fallbacks=tuple(build_fallback_chain(
                model, task_type, self._registry, self._config.fallback_behavior.fallback,
            )),
            complexity=complexity,
        )

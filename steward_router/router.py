"""StewardRouter: assembles immutable routing decisions and runs them."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable

from loguru import logger

from steward_router.budget import BudgetSnapshot, estimate_tokens, validate_cost
from steward_router.config import RouterConfig
from steward_router.failover import ExecutionEngine
from steward_router.fallbacks import build_fallback_chain, ensure_terminal
from steward_router.heuristics import classify_task
from steward_router.models import (
    ExecutionResult,
    ModelSelection,
    RoutingDecision,
    RoutingOptions,
    TaskClassification,
    TierInfo,
    ValidationResult,
)
from steward_router.registry import ModelRegistry
from steward_router.selector import TierSelector
from steward_router.validation import validate_decision


class DecisionRejected(RuntimeError):
    """Validation reported errors; no model was called."""

    def __init__(self, decision: RoutingDecision, validation: ValidationResult):
        super().__init__("; ".join(validation.errors))
        self.decision = decision
        self.validation = validation


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StewardRouter:
    """Routes a task to a model tier and builds its fallback chain.

    Decision assembly, in order:
      1. Classify the task text
      2. Select a model (see ``TierSelector``)
      3. Loadout override → config loadout model, unless a tier or use case
         was requested explicitly
      4. Budget check → forced zero-cost local model when over budget
      5. Freeze into a ``RoutingDecision``

    The spend figure is read once per decision from ``spend_source`` and
    never written here.
    """

    def __init__(
        self,
        registry: ModelRegistry | None = None,
        config: RouterConfig | None = None,
        *,
        spend_source: Callable[[], float] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._registry = registry or ModelRegistry.default()
        self._config = config or RouterConfig()
        self._selector = TierSelector(self._registry, self._config)
        self._spend_source = spend_source or (lambda: 0.0)
        self._clock = clock or _utcnow

    @property
    def registry(self) -> ModelRegistry:
        return self._registry

    @property
    def config(self) -> RouterConfig:
        return self._config

    def budget_snapshot(self) -> BudgetSnapshot:
        return BudgetSnapshot(
            monthly_budget=self._config.cost_settings.monthly_budget,
            current_spend=float(self._spend_source() or 0.0),
        )

    def decide(self, task: Any, options: RoutingOptions | None = None) -> RoutingDecision:
        timestamp = self._clock()
        options = options or RoutingOptions()

        classification = classify_task(task)
        options = replace(
            options,
            task=task if isinstance(task, str) else None,
            estimated_tokens=options.estimated_tokens
            or estimate_tokens(task, self._config.cost_settings),
        )
        budget = self.budget_snapshot()

        selection = self._selector.select(classification.type, options, budget)
        selection = self._apply_loadout(selection, classification, options, budget)
        selection, budget_warning = self._apply_budget(selection, classification, budget)

        decision = RoutingDecision(
            timestamp=timestamp,
            task=task,
            classification=classification,
            selection=selection,
            loadout=self._config.loadout_name,
            options=options.as_dict(),
            tier_info=TierInfo(
                selected_tier=selection.tier,
                cost_estimate=selection.cost_estimate,
                privacy_protection=selection.privacy_protection,
                budget_protection=selection.budget_protection,
                budget_warning=budget_warning,
            ),
        )
        tier = selection.tier.value if selection.tier else "?"
        logger.info(
            f"Route: {classification.type} ({classification.confidence:.2f}) → "
            f"{selection.model} [{tier}] | {selection.reason} | "
            f"tokens≈{options.estimated_tokens} fallbacks={len(selection.fallbacks)}"
        )
        return decision

    def validate(self, decision: RoutingDecision) -> ValidationResult:
        return validate_decision(decision, self._registry)

    async def route(
        self,
        task: str,
        engine: ExecutionEngine,
        *,
        prompt: str | None = None,
        options: RoutingOptions | None = None,
        no_fallback: bool = False,
    ) -> tuple[RoutingDecision, ExecutionResult]:
        """Decide, validate and execute.  ``prompt`` defaults to the task text."""
        decision = self.decide(task, options)
        validation = self.validate(decision)
        for warning in validation.warnings:
            logger.warning(f"Routing: {warning}")
        if not validation.valid:
            logger.error(f"Routing decision rejected: {validation.errors}")
            raise DecisionRejected(decision, validation)

        result = await engine.execute(
            prompt if prompt is not None else task, decision, no_fallback=no_fallback,
        )
        return decision, result

    # --- Rewrites ---

    def _apply_loadout(
        self,
        selection: ModelSelection,
        classification: TaskClassification,
        options: RoutingOptions,
        budget: BudgetSnapshot,
    ) -> ModelSelection:
        loadout = self._config.loadout
        if not loadout or not loadout.model or options.prefer_tier or options.use_case:
            return selection

        model = loadout.model
        check = self._selector.validate_model(
            model, options, budget, require_local=selection.privacy_protection,
        )
        if not check.valid:
            logger.warning(f"Loadout model {model} validation failed: {check.reason}")
            return selection
        if selection.budget_protection and check.cost_estimate > 0:
            logger.warning(f"Loadout model {model} skipped: low budget requires a zero-cost model")
            return selection

        if selection.privacy_protection or selection.budget_protection:
            # Stay within the local chain already chosen.
            fallbacks = ensure_terminal(
                [selection.model, *selection.fallbacks], model, self._registry,
            )
        else:
            fallbacks = build_fallback_chain(
                model, classification.type, self._registry,
                self._config.fallback_behavior.fallback,
            )
        return replace(
            selection,
            model=model,
            reason=f"Loadout override: {model} ({check.tier.value})",
            confidence=0.9,
            tier=check.tier,
            cost_estimate=check.cost_estimate,
            fallbacks=tuple(fallbacks),
            complexity=None,
        )

    def _apply_budget(
        self,
        selection: ModelSelection,
        classification: TaskClassification,
        budget: BudgetSnapshot,
    ) -> tuple[ModelSelection, str | None]:
        check = validate_cost(selection, budget, self._config.cost_settings)
        if check.valid:
            if check.warning:
                logger.warning(f"Budget: {check.warning}")
            return selection, check.warning

        forced = self._selector.select_budget_protected(classification.type, budget)
        logger.warning(f"Budget: {check.reason} → forcing {forced.model}")
        return replace(
            forced,
            reason=f"{forced.reason} (Cost optimized: {check.reason})",
            privacy_protection=selection.privacy_protection,
        ), None

"""Token/cost estimation and budget checks."""

import math
from dataclasses import dataclass
from typing import Any

from steward_router.config import CostSettings
from steward_router.models import ModelSelection
from steward_router.registry import ModelRegistry

DEFAULT_ESTIMATED_TOKENS = 1000


@dataclass(frozen=True)
class BudgetSnapshot:
    """Spend figures read once per decision; never written by the router."""
    monthly_budget: float
    current_spend: float = 0.0

    @property
    def remaining(self) -> float:
        return self.monthly_budget - self.current_spend


@dataclass(frozen=True)
class CostValidation:
    valid: bool
    reason: str = ""
    warning: str | None = None


def estimate_tokens(text: Any, settings: CostSettings | None = None) -> int:
    """Estimate prompt + response tokens for a task."""
    settings = settings or CostSettings()
    if not text or not isinstance(text, str):
        return settings.min_tokens
    base_tokens = math.ceil(len(text) / settings.chars_per_token)
    return max(math.ceil(base_tokens * settings.response_multiplier), settings.min_tokens)


def calculate_cost(model: str, estimated_tokens: int, registry: ModelRegistry) -> float:
    info = registry.get_model_info(model)
    if info is None or not info.cost_per_token:
        return 0.0
    return info.cost_per_token * estimated_tokens


def calculate_actual_cost(
    model: str,
    prompt: str,
    response: str,
    registry: ModelRegistry,
    settings: CostSettings | None = None,
) -> float:
    """Cost of a completed call, from the prompt and response actually exchanged."""
    info = registry.get_model_info(model)
    if info is None or not info.cost_per_token:
        return 0.0
    settings = settings or CostSettings()
    tokens = (
        math.ceil(len(prompt or "") / settings.chars_per_token)
        + math.ceil(len(response or "") / settings.chars_per_token)
    )
    return info.cost_per_token * tokens


def validate_cost(
    selection: ModelSelection,
    budget: BudgetSnapshot,
    settings: CostSettings | None = None,
) -> CostValidation:
    settings = settings or CostSettings()
    remaining = budget.remaining
    cost = selection.cost_estimate or 0.0

    if cost == 0:
        return CostValidation(True, "No cost for local processing")

    if cost > remaining:
        return CostValidation(
            False,
            f"Estimated cost ${cost:.4f} exceeds remaining budget ${remaining:.2f}",
        )

    if cost > remaining * settings.warning_ratio:
        share = cost / remaining * 100
        return CostValidation(
            True,
            "Within budget constraints",
            warning=f"High cost usage: ${cost:.4f} is {share:.1f}% of remaining budget",
        )

    return CostValidation(True, "Within budget constraints")

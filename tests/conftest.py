"""Shared fixtures for steward_router tests."""

from datetime import datetime, timezone

import pytest

from steward_router.models import (
    ModelCaller,
    ModelSelection,
    RoutingDecision,
    TaskClassification,
    Tier,
    TierInfo,
)
from steward_router.registry import ModelRegistry

FIXED_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class ScriptedCaller(ModelCaller):
    """Answers from a per-model script; exception instances are raised."""

    def __init__(self, script: dict[str, object]):
        self.script = script
        self.calls: list[str] = []

    async def call_model(self, prompt: str, *, model: str) -> str:
        self.calls.append(model)
        outcome = self.script.get(model, ConnectionError(f"{model} unreachable"))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def registry() -> ModelRegistry:
    return ModelRegistry.default()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME


@pytest.fixture
def scripted_caller():
    return ScriptedCaller


@pytest.fixture
def make_decision():
    """Build a minimal decision around a model chain."""

    def _make(
        model: str,
        fallbacks: tuple[str, ...] = (),
        *,
        tier: Tier | None = Tier.CLOUD,
        cost: float = 0.03,
        task: str = "Debug this code",
        task_type: str = "debug",
        confidence: float = 0.8,
    ) -> RoutingDecision:
        selection = ModelSelection(
            model=model, reason="test", confidence=1.0, tier=tier,
            cost_estimate=cost, fallbacks=fallbacks,
        )
        return RoutingDecision(
            timestamp=FIXED_TIME,
            task=task,
            classification=TaskClassification(task_type, confidence, (task_type,)),
            selection=selection,
            loadout="default",
            options={"task": task},
            tier_info=TierInfo(selected_tier=tier, cost_estimate=cost),
        )

    return _make

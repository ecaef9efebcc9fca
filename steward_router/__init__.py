"""steward-router: three-tier model routing with budget, privacy and fallback execution."""

from steward_router.models import (
    ExecutionAttempt,
    ExecutionResult,
    LocalFallback,
    LocalResult,
    ModelCaller,
    ModelMetadata,
    ModelSelection,
    RoutingDecision,
    RoutingOptions,
    TaskClassification,
    Tier,
)
from steward_router.config import RouterConfig, apply_loadout, load_config
from steward_router.registry import ModelRegistry
from steward_router.heuristics import analyze_complexity, classify_task
from steward_router.selector import TierSelector
from steward_router.fallbacks import build_fallback_chain
from steward_router.failover import ExecutionEngine
from steward_router.providers import LocalEndpoint, LocalTiersFallback, ModelDispatcher
from steward_router.router import DecisionRejected, StewardRouter

__all__ = [
    "ExecutionAttempt",
    "ExecutionResult",
    "LocalFallback",
    "LocalResult",
    "ModelCaller",
    "ModelMetadata",
    "ModelSelection",
    "RoutingDecision",
    "RoutingOptions",
    "TaskClassification",
    "Tier",
    "RouterConfig",
    "apply_loadout",
    "load_config",
    "ModelRegistry",
    "analyze_complexity",
    "classify_task",
    "TierSelector",
    "build_fallback_chain",
    "ExecutionEngine",
    "LocalEndpoint",
    "LocalTiersFallback",
    "ModelDispatcher",
    "DecisionRejected",
    "StewardRouter",
]

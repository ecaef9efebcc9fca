"""Core data models for steward-router."""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class Tier(str, Enum):
    """Compute/cost/privacy class a model belongs to."""
    LOCAL_FAST = "local-fast"
    LOCAL_HEAVY = "local-heavy"
    CLOUD = "cloud"

    @property
    def is_local(self) -> bool:
        return self is not Tier.CLOUD


class PrivacyTier(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class ModelMetadata:
    """Static registry entry for a model."""
    id: str
    tier: Tier
    cost_per_token: float = 0.0
    use_cases: frozenset[str] = frozenset()
    performance_rating: float = 0.0
    privacy_tier: PrivacyTier = PrivacyTier.LOCAL

    @property
    def is_free_local_fast(self) -> bool:
        return self.tier is Tier.LOCAL_FAST and self.cost_per_token == 0


@dataclass(frozen=True)
class TaskClassification:
    type: str
    confidence: float
    keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class ComplexityProfile:
    level: str  # "low", "medium", "high"
    confidence: float
    requires_advanced_reasoning: bool = False
    requires_specialization: bool = False
    is_batch_processing: bool = False
    is_routine: bool = False


@dataclass(frozen=True)
class ModelSelection:
    """Result of tier/model selection.

    Rewrites (loadout override, budget re-selection) build a new selection
    with ``dataclasses.replace``; a selection is never patched field by field.
    """
    model: str
    reason: str
    confidence: float
    tier: Tier | None
    cost_estimate: float = 0.0
    fallbacks: tuple[str, ...] = ()
    privacy_protection: bool = False
    budget_protection: bool = False
    complexity: ComplexityProfile | None = None

    def __post_init__(self) -> None:
        if self.privacy_protection and self.tier is Tier.CLOUD:
            raise ValueError(
                f"Privacy-protected selection of {self.model} cannot use the cloud tier"
            )


@dataclass
class RoutingOptions:
    """Per-call routing overrides."""
    privacy_mode: bool = False
    prefer_tier: str | None = None
    use_case: str | None = None
    cost_aware: bool = False
    task: str | None = None
    estimated_tokens: int | None = None

    def as_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v not in (None, False)}


@dataclass(frozen=True)
class TierInfo:
    selected_tier: Tier | None
    cost_estimate: float
    privacy_protection: bool = False
    budget_protection: bool = False
    budget_warning: str | None = None


@dataclass(frozen=True)
class DecisionMetadata:
    version: str = "3.0"
    engine: str = "three-tier-routing-engine"


@dataclass(frozen=True)
class RoutingDecision:
    """Immutable record handed to the execution engine and to loggers."""
    timestamp: datetime
    task: str
    classification: TaskClassification
    selection: ModelSelection
    loadout: str
    options: Mapping[str, Any]
    tier_info: TierInfo
    metadata: DecisionMetadata = field(default_factory=DecisionMetadata)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))


@dataclass
class ValidationResult:
    valid: bool = True
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExecutionAttempt:
    model: str
    is_primary: bool
    success: bool
    error: str | None = None
    response: str | None = None
    tier: str | None = None
    is_docker_fallback: bool = False


@dataclass(frozen=True)
class ExecutionResult:
    success: bool
    model: str | None
    response: str
    attempts: tuple[ExecutionAttempt, ...] = ()
    is_docker_fallback: bool = False
    tier: str | None = None  # tier the decision selected, set on success
    actual_cost: float = 0.0


@dataclass(frozen=True)
class LocalResult:
    """Response from the local-compute last resort."""
    text: str
    model: str


class ModelCaller(ABC):
    """Abstract base class for model-calling collaborators."""

    @abstractmethod
    async def call_model(self, prompt: str, *, model: str) -> str:
        """Send a prompt to ``model``; raise on transport failure."""
        ...

    @property
    def name(self) -> str:
        return self.__class__.__name__


class LocalFallback(ABC):
    """Last-resort local compute, tried once after the chain is exhausted."""

    @abstractmethod
    async def try_local_tiers(self, prompt: str) -> LocalResult | None:
        ...

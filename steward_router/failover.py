"""Sequential execution of a routing decision's model chain."""

import time
from dataclasses import replace
from enum import Enum

from loguru import logger

from steward_router.budget import calculate_actual_cost
from steward_router.models import (
    ExecutionAttempt,
    ExecutionResult,
    LocalFallback,
    ModelCaller,
    RoutingDecision,
)
from steward_router.registry import ModelRegistry

EXHAUSTED_RESPONSE = "[All models failed to provide a valid response]"
LOCAL_FALLBACK_MODEL = "docker-local"


class ExecutionState(str, Enum):
    TRYING_CHAIN = "trying_chain"
    DOCKER_FALLBACK = "docker_fallback"
    DONE = "done"


class EmptyResponseError(RuntimeError):
    """Model returned nothing usable."""


def _accept(response: object) -> str:
    if not isinstance(response, str) or not response.strip():
        raise EmptyResponseError("Empty or invalid model response")
    return response


class ExecutionEngine:
    """Try the primary model, then each fallback in order, then local compute.

    States: TRYING_CHAIN → (DOCKER_FALLBACK) → DONE.  Attempts are strictly
    sequential and recorded in an append-only log.  ``execute`` never raises
    for model failures; total exhaustion is reported as an unsuccessful
    ``ExecutionResult``.
    """

    def __init__(
        self,
        caller: ModelCaller,
        local_fallback: LocalFallback | None = None,
        registry: ModelRegistry | None = None,
    ) -> None:
        self._caller = caller
        self._local_fallback = local_fallback
        self._registry = registry

    async def execute(
        self,
        prompt: str,
        decision: RoutingDecision,
        *,
        no_fallback: bool = False,
    ) -> ExecutionResult:
        attempts: list[ExecutionAttempt] = []
        state = ExecutionState.TRYING_CHAIN

        while state is not ExecutionState.DONE:
            if state is ExecutionState.TRYING_CHAIN:
                result = await self._try_chain(prompt, decision, attempts, no_fallback)
                if result is not None:
                    return self._account(result, prompt, decision)
                if no_fallback or self._local_fallback is None:
                    state = ExecutionState.DONE
                else:
                    state = ExecutionState.DOCKER_FALLBACK
            else:
                result = await self._try_local(prompt, attempts)
                if result is not None:
                    return self._account(result, prompt, decision)
                state = ExecutionState.DONE

        logger.error(f"All {len(attempts)} attempts failed for {decision.selection.model}")
        return ExecutionResult(
            success=False, model=None, response=EXHAUSTED_RESPONSE, attempts=tuple(attempts),
        )

    async def _try_chain(
        self,
        prompt: str,
        decision: RoutingDecision,
        attempts: list[ExecutionAttempt],
        no_fallback: bool,
    ) -> ExecutionResult | None:
        chain = [decision.selection.model, *decision.selection.fallbacks]

        for index, model in enumerate(chain):
            is_primary = index == 0
            logger.info(f"Calling {model}..." if is_primary else f"Fallback to {model}...")
            start = time.monotonic()
            try:
                response = _accept(await self._caller.call_model(prompt, model=model))
            except Exception as e:
                latency_ms = int((time.monotonic() - start) * 1000)
                attempts.append(ExecutionAttempt(
                    model=model, is_primary=is_primary, success=False,
                    error=str(e) or e.__class__.__name__, tier=self._tier_of(model),
                ))
                logger.warning(f"Model {model} failed in {latency_ms}ms: {e}")
                if no_fallback and is_primary:
                    return None
                continue

            latency_ms = int((time.monotonic() - start) * 1000)
            attempts.append(ExecutionAttempt(
                model=model, is_primary=is_primary, success=True,
                response=response, tier=self._tier_of(model),
            ))
            logger.info(f"Model {model} answered in {latency_ms}ms ({len(attempts)} attempt(s))")
            return ExecutionResult(
                success=True, model=model, response=response, attempts=tuple(attempts),
            )
        return None

    async def _try_local(
        self, prompt: str, attempts: list[ExecutionAttempt],
    ) -> ExecutionResult | None:
        logger.info("Attempting local tiers fallback...")
        try:
            local = await self._local_fallback.try_local_tiers(prompt)
            if local is None:
                raise EmptyResponseError("No local tier responded")
            text = _accept(local.text)
        except Exception as e:
            attempts.append(ExecutionAttempt(
                model=LOCAL_FALLBACK_MODEL, is_primary=False, success=False,
                error=str(e) or e.__class__.__name__, is_docker_fallback=True,
            ))
            logger.warning(f"Local tiers fallback failed: {e}")
            return None

        model = local.model or LOCAL_FALLBACK_MODEL
        attempts.append(ExecutionAttempt(
            model=model, is_primary=False, success=True, response=text,
            tier=self._tier_of(model), is_docker_fallback=True,
        ))
        return ExecutionResult(
            success=True, model=model, response=text,
            attempts=tuple(attempts), is_docker_fallback=True,
        )

    def _account(
        self, result: ExecutionResult, prompt: str, decision: RoutingDecision,
    ) -> ExecutionResult:
        tier = decision.selection.tier
        cost = (
            calculate_actual_cost(result.model, prompt, result.response, self._registry)
            if self._registry else 0.0
        )
        if cost:
            logger.info(f"Model {result.model} cost ${cost:.6f}")
        return replace(result, tier=tier.value if tier else None, actual_cost=cost)

    def _tier_of(self, model: str) -> str | None:
        info = self._registry.get_model_info(model) if self._registry else None
        return info.tier.value if info else None

"""Model-calling collaborators: per-family dispatch and the local-tiers last resort."""

import time
from dataclasses import dataclass

from loguru import logger

from steward_router.models import LocalFallback, LocalResult, ModelCaller


class UnknownModelError(LookupError):
    """No caller is registered for a model id."""


class ModelDispatcher(ModelCaller):
    """Routes each call to the caller registered for the model's family.

    Lookup is by exact model id first, then by the longest registered prefix
    (e.g. ``"smollm3"`` serves ``"smollm3-1.7b"``).  Callers raise on
    transport failure; the dispatcher does not catch.
    """

    def __init__(self, callers: dict[str, ModelCaller] | None = None):
        self._callers: dict[str, ModelCaller] = dict(callers or {})

    def register(self, prefix: str, caller: ModelCaller) -> None:
        self._callers[prefix] = caller
        logger.debug(f"Dispatcher: {prefix} → {caller.name}")

    def resolve(self, model: str) -> ModelCaller:
        if model in self._callers:
            return self._callers[model]
        matches = [p for p in self._callers if model.startswith(p)]
        if not matches:
            raise UnknownModelError(f"No caller registered for model '{model}'")
        return self._callers[max(matches, key=len)]

    async def call_model(self, prompt: str, *, model: str) -> str:
        return await self.resolve(model).call_model(prompt, model=model)


@dataclass
class LocalEndpoint:
    """A local model served by some caller (container, subprocess, ...)."""

    model: str
    caller: ModelCaller
    enabled: bool = True


class LocalTiersFallback(LocalFallback):
    """Tries each enabled local endpoint in order; first non-empty answer wins."""

    def __init__(self, endpoints: list[LocalEndpoint]):
        self.endpoints = [e for e in endpoints if e.enabled]

    async def try_local_tiers(self, prompt: str) -> LocalResult | None:
        for endpoint in self.endpoints:
            t0 = time.monotonic()
            try:
                response = await endpoint.caller.call_model(prompt, model=endpoint.model)
            except Exception as e:
                elapsed_ms = int((time.monotonic() - t0) * 1000)
                logger.warning(f"Local model {endpoint.model} failed ({elapsed_ms}ms): {e}")
                continue

            if isinstance(response, str) and response.strip():
                return LocalResult(text=response, model=endpoint.model)
            logger.warning(f"Local model {endpoint.model} returned an empty response")

        # All local endpoints failed; the engine records the exhaustion.
        return None

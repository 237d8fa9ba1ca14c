"""Model fallback policy for quota and rate-limit failures.

A request starts in ``PRIMARY`` on the caller's model. When the pro model is
rejected with one of ``RETRYABLE_STATUS_CODES`` the policy moves to
``RETRIED`` and the same request is reissued once on the flash model. Every
other failure, and any failure once ``RETRIED``, is terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import FLASH_MODEL, ModelRegistry

RETRYABLE_STATUS_CODES = frozenset({429, 403, 402})


class FallbackState(str, Enum):
    PRIMARY = "primary"
    RETRIED = "retried"


@dataclass(frozen=True)
class FallbackDecision:
    state: FallbackState
    model: str
    requested_model: str

    @property
    def fallback(self) -> bool:
        return self.state is FallbackState.RETRIED


class FallbackPolicy:
    def __init__(
        self,
        registry: ModelRegistry | None = None,
        retry_model: str = FLASH_MODEL,
        retryable_statuses: frozenset[int] = RETRYABLE_STATUS_CODES,
    ) -> None:
        self._registry = registry or ModelRegistry()
        self.retry_model = retry_model
        self.retryable_statuses = frozenset(retryable_statuses)

    def start(self, model: str) -> FallbackDecision:
        return FallbackDecision(state=FallbackState.PRIMARY, model=model, requested_model=model)

    def on_failure(self, decision: FallbackDecision, status: int) -> FallbackDecision | None:
        """Return the next attempt for a failed status, or None when terminal."""
        if decision.state is not FallbackState.PRIMARY:
            return None
        if status not in self.retryable_statuses:
            return None
        if not self._registry.is_pro(decision.requested_model):
            return None
        return FallbackDecision(
            state=FallbackState.RETRIED,
            model=self.retry_model,
            requested_model=decision.requested_model,
        )

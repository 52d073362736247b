"""
Generation call wrapper and it does:
- Sends the prompt pair to the selected model
- Retries rate-limit / server-error / overload failures with backoff + jitter
- Gives up after a fixed attempt ceiling or when the time budget runs out

Main purpose:
Central retry policy for all generation calls.
"""


import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Protocol

from learnpath.core.config import Settings
from learnpath.core.errors import TransientUpstreamError
from learnpath.core.logging import get_logger

log = get_logger("llm.router")


class Generator(Protocol):
    async def generate(self, model: str, system: str, user: str) -> str: ...


@dataclass
class RetryPolicy:
    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 8.0
    jitter: float = 0.5
    budget_seconds: float = 120.0
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    clock: Callable[[], float] = time.monotonic
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def from_settings(cls, s: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=s.GENERATION_MAX_ATTEMPTS,
            base_delay=s.BACKOFF_BASE_SECONDS,
            max_delay=s.BACKOFF_MAX_SECONDS,
            jitter=s.BACKOFF_JITTER_SECONDS,
            budget_seconds=s.GENERATION_BUDGET_SECONDS,
        )

    def delay(self, attempt: int) -> float:
        """Backoff before attempt `attempt + 1` (attempt counts from 1)."""
        backoff = min(self.max_delay, self.base_delay * (2 ** (attempt - 1)))
        return backoff + self.rng.uniform(0, self.jitter) if self.jitter > 0 else backoff


async def generate_with_retry(
    client: Generator,
    model: str,
    system: str,
    user: str,
    policy: RetryPolicy,
) -> str:
    """
    Returns the raw model text.
    Raises the last TransientUpstreamError once retries are exhausted;
    non-retryable UpstreamError propagates on first sight.
    """
    started = policy.clock()
    attempts = max(1, policy.max_attempts)
    last_err: TransientUpstreamError | None = None

    for attempt in range(1, attempts + 1):
        try:
            return await client.generate(model, system, user)
        except TransientUpstreamError as e:
            last_err = e
            if attempt == attempts:
                break
            backoff = policy.delay(attempt)
            elapsed = policy.clock() - started
            if elapsed + backoff > policy.budget_seconds:
                log.warning(f"{e.message}. time budget spent after attempt {attempt}/{attempts}, giving up")
                break
            log.warning(f"{e.message}. retrying in {backoff:.1f}s (attempt {attempt}/{attempts})")
            await policy.sleep(backoff)

    log.error(f"Generation failed after {attempt} attempt(s): {last_err}")
    raise last_err

"""
Summarization service: lazy backend selection shared across pipelines.

One service owns the loaded backend. Candidates are tried in priority order
the first time a summary is requested; concurrent first callers all await the
same load. Every call then goes through a circuit breaker, a tenacity retry
loop and a per-attempt timeout.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

import structlog
from tenacity import AsyncRetrying, stop_after_attempt, wait_fixed

from pagesift.config.config import SummarizationConfig
from pagesift.errors import BackendUnavailableError
from pagesift.protocols import SummarizationBackend, SummarizeParams
from pagesift.recovery.circuit_breaker import CircuitBreaker

logger = structlog.get_logger(__name__)


@dataclass(slots=True, frozen=True)
class BackendDescriptor:
    """A named candidate backend and the coroutine function that loads it."""

    name: str
    load: Callable[[], Awaitable[SummarizationBackend]]


@dataclass(slots=True, frozen=True)
class BackendAttempt:
    """Outcome of loading one candidate."""

    name: str
    ok: bool
    elapsed: float
    error: Optional[str] = None


class SummarizationService:
    """Explicitly injected owner of the summarization backend."""

    def __init__(
        self,
        descriptors: Sequence[BackendDescriptor],
        config: SummarizationConfig,
        breaker: CircuitBreaker | None = None,
    ):
        if not descriptors:
            raise ValueError("at least one backend descriptor is required")
        self.descriptors = list(descriptors)
        self.config = config
        self.breaker = breaker or CircuitBreaker(
            name="summarization",
            failure_threshold=config.circuit_breaker.failure_threshold,
            recovery_timeout=config.circuit_breaker.recovery_timeout_seconds,
        )
        self._backend: Optional[SummarizationBackend] = None
        self._active_name: Optional[str] = None
        self._attempts: List[BackendAttempt] = []
        self._init_task: Optional[asyncio.Future] = None
        self.logger = logger.bind(component="summarization_service")

    @property
    def active_backend_name(self) -> Optional[str]:
        return self._active_name

    @property
    def attempts(self) -> List[BackendAttempt]:
        return list(self._attempts)

    async def initialize(self) -> SummarizationBackend:
        """
        Load the first available backend, once.

        Raises:
            BackendUnavailableError: every candidate failed. The failure is
                kept and re-raised to later callers until ``reset()``.
        """
        if self._backend is not None:
            return self._backend

        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._load_first_available())
        # Shielded so a cancelled waiter does not cancel the shared load
        return await asyncio.shield(self._init_task)

    async def _load_first_available(self) -> SummarizationBackend:
        for descriptor in self.descriptors:
            attempt, backend = await self._try_load(descriptor)
            self._attempts.append(attempt)
            if backend is not None:
                self._backend = backend
                self._active_name = descriptor.name
                self.logger.info("Summarization backend ready", backend=descriptor.name, elapsed=attempt.elapsed)
                return backend
            self.logger.warning("Summarization backend unavailable", backend=descriptor.name, error=attempt.error)
        raise BackendUnavailableError(
            "No summarization backend could be loaded: " + ", ".join(d.name for d in self.descriptors)
        )

    async def _try_load(
        self, descriptor: BackendDescriptor
    ) -> Tuple[BackendAttempt, Optional[SummarizationBackend]]:
        start = time.perf_counter()
        try:
            backend = await asyncio.wait_for(descriptor.load(), timeout=self.config.init_timeout)
        except asyncio.TimeoutError:
            elapsed = time.perf_counter() - start
            return BackendAttempt(descriptor.name, False, elapsed, "timed out"), None
        except Exception as e:
            elapsed = time.perf_counter() - start
            return BackendAttempt(descriptor.name, False, elapsed, f"{type(e).__name__}: {e}"), None
        return BackendAttempt(descriptor.name, True, time.perf_counter() - start), backend

    async def summarize(self, text: str, params: SummarizeParams) -> str:
        """
        Summarize ``text`` with the active backend.

        Raises:
            BackendUnavailableError: no backend could be loaded.
            CircuitOpenError: too many recent failures.
            asyncio.TimeoutError: the last attempt exceeded the per-pass timeout.
        """
        backend = await self.initialize()

        async def attempt_with_retries() -> str:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.config.max_attempts),
                wait=wait_fixed(self.config.retry_wait_seconds),
                reraise=True,
            ):
                with attempt:
                    return await asyncio.wait_for(
                        backend.summarize(text, params), timeout=self.config.pass_timeout
                    )
            raise AssertionError("unreachable")

        return await self.breaker.call(attempt_with_retries)

    async def reset(self) -> None:
        """Forget the loaded backend and close the breaker."""
        self._backend = None
        self._active_name = None
        self._attempts = []
        self._init_task = None
        await self.breaker.reset()

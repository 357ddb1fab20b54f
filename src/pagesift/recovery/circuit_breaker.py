"""
Circuit Breaker Pattern Implementation for Flaky Collaborators

Stops calling a failing dependency (a summarization backend, an embedding
service) after repeated failures and probes it again after a cool-down.
"""

from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import structlog

from pagesift.errors import CircuitOpenError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, bypassing the operation
    HALF_OPEN = "half_open"  # Probing recovery


class CircuitBreaker:
    """
    Three-state guard around an async operation.

    ``failure_threshold`` consecutive failures open the circuit. Once
    ``recovery_timeout`` seconds have passed since the last failure the next
    call is let through as a single probe: success closes the circuit,
    failure opens it again. Other callers are refused while the probe runs.
    """

    def __init__(
        self,
        name: str = "default",
        failure_threshold: int = 5,
        recovery_timeout: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None
        self._last_success_time: Optional[float] = None
        self._half_open_in_flight = False

        self._lock = asyncio.Lock()
        self.logger = logger.bind(circuit=name)

    @property
    def state(self) -> CircuitState:
        return self._state

    async def can_execute(self) -> bool:
        """Check if calls can go through, moving OPEN to HALF_OPEN once the cool-down has elapsed."""
        async with self._lock:
            if self._state == CircuitState.CLOSED:
                return True

            if self._state == CircuitState.OPEN:
                if self._last_failure_time is not None and self._retry_in() <= 0:
                    self.logger.info("Circuit half-open, probing recovery")
                    self._state = CircuitState.HALF_OPEN
                    self._half_open_in_flight = True
                    return True
                return False

            # One probe at a time while half-open
            if self._half_open_in_flight:
                return False
            self._half_open_in_flight = True
            return True

    async def record_success(self) -> None:
        async with self._lock:
            self._last_success_time = self._clock()
            self._half_open_in_flight = False
            if self._state == CircuitState.HALF_OPEN:
                self.logger.info("Circuit closed, dependency recovered")
            self._state = CircuitState.CLOSED
            self._failure_count = 0

    async def record_failure(self) -> None:
        async with self._lock:
            self._last_failure_time = self._clock()
            self._failure_count += 1
            self._half_open_in_flight = False

            if self._state == CircuitState.HALF_OPEN:
                self.logger.warning("Recovery probe failed, circuit re-opened")
                self._state = CircuitState.OPEN
            elif self._state == CircuitState.CLOSED and self._failure_count >= self.failure_threshold:
                self.logger.warning("Circuit opened", failures=self._failure_count)
                self._state = CircuitState.OPEN

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``operation`` through the breaker.

        Raises:
            CircuitOpenError: the circuit is open and the cool-down has not elapsed.
        """
        if not await self.can_execute():
            raise CircuitOpenError(self.name, self._retry_in())
        try:
            result = await operation()
        except asyncio.CancelledError:
            self._half_open_in_flight = False
            raise
        except Exception:
            await self.record_failure()
            raise
        await self.record_success()
        return result

    def get_state(self) -> Dict[str, Any]:
        """Current breaker state for monitoring."""
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "last_failure_time": self._last_failure_time,
            "last_success_time": self._last_success_time,
        }

    async def reset(self) -> None:
        """Return to the closed state and forget all recorded failures."""
        async with self._lock:
            self.logger.info("Circuit breaker reset")
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._last_failure_time = None
            self._last_success_time = None
            self._half_open_in_flight = False

    def _retry_in(self) -> float:
        if self._last_failure_time is None:
            return 0.0
        return max(0.0, self.recovery_timeout - (self._clock() - self._last_failure_time))

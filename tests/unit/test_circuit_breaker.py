"""
Unit tests for the circuit breaker.
"""

import asyncio

import pytest
from pagesift.errors import CircuitOpenError
from pagesift.recovery import CircuitBreaker, CircuitState


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def _ok() -> str:
    return "ok"


async def _boom() -> str:
    raise RuntimeError("boom")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def breaker(clock) -> CircuitBreaker:
    return CircuitBreaker(name="test", failure_threshold=3, recovery_timeout=60.0, clock=clock)


class TestCircuitBreakerTransitions:
    """CLOSED -> OPEN -> HALF_OPEN -> CLOSED/OPEN."""

    @pytest.mark.asyncio
    async def test_starts_closed(self, breaker):
        assert breaker.state is CircuitState.CLOSED
        assert await breaker.can_execute()

    @pytest.mark.asyncio
    async def test_opens_at_threshold(self, breaker):
        for _ in range(2):
            await breaker.record_failure()
        assert breaker.state is CircuitState.CLOSED

        await breaker.record_failure()
        assert breaker.state is CircuitState.OPEN
        assert not await breaker.can_execute()

    @pytest.mark.asyncio
    async def test_success_resets_failure_count(self, breaker):
        await breaker.record_failure()
        await breaker.record_failure()
        await breaker.record_success()
        await breaker.record_failure()
        assert breaker.state is CircuitState.CLOSED
        assert breaker.get_state()["failure_count"] == 1

    @pytest.mark.asyncio
    async def test_half_open_after_cool_down(self, breaker, clock):
        for _ in range(3):
            await breaker.record_failure()

        clock.advance(59)
        assert not await breaker.can_execute()

        clock.advance(2)
        assert await breaker.can_execute()
        assert breaker.state is CircuitState.HALF_OPEN

    @pytest.mark.asyncio
    async def test_successful_probe_closes(self, breaker, clock):
        for _ in range(3):
            await breaker.record_failure()
        clock.advance(61)

        assert await breaker.call(_ok) == "ok"
        assert breaker.state is CircuitState.CLOSED
        assert breaker.get_state()["failure_count"] == 0

    @pytest.mark.asyncio
    async def test_failed_probe_reopens(self, breaker, clock):
        for _ in range(3):
            await breaker.record_failure()
        clock.advance(61)

        with pytest.raises(RuntimeError):
            await breaker.call(_boom)
        assert breaker.state is CircuitState.OPEN
        assert not await breaker.can_execute()

    @pytest.mark.asyncio
    async def test_half_open_admits_one_probe(self, breaker, clock):
        for _ in range(3):
            await breaker.record_failure()
        clock.advance(61)

        admitted = [await breaker.can_execute() for _ in range(3)]
        assert admitted == [True, False, False]
        assert breaker.state is CircuitState.HALF_OPEN

    @pytest.mark.asyncio
    async def test_failed_probe_allows_next_probe_after_cool_down(self, breaker, clock):
        for _ in range(3):
            await breaker.record_failure()
        clock.advance(61)
        assert await breaker.can_execute()
        await breaker.record_failure()

        assert not await breaker.can_execute()
        clock.advance(61)
        assert await breaker.can_execute()
        assert not await breaker.can_execute()

    @pytest.mark.asyncio
    async def test_concurrent_callers_refused_during_probe(self, breaker, clock):
        for _ in range(3):
            await breaker.record_failure()
        clock.advance(61)
        release = asyncio.Event()

        async def slow_ok() -> str:
            await release.wait()
            return "ok"

        probe = asyncio.create_task(breaker.call(slow_ok))
        await asyncio.sleep(0)
        with pytest.raises(CircuitOpenError):
            await breaker.call(_ok)

        release.set()
        assert await probe == "ok"
        assert breaker.state is CircuitState.CLOSED
        assert await breaker.call(_ok) == "ok"

    @pytest.mark.asyncio
    async def test_cancelled_probe_frees_slot(self, breaker, clock):
        for _ in range(3):
            await breaker.record_failure()
        clock.advance(61)

        async def hang() -> str:
            await asyncio.Event().wait()
            return "never"

        probe = asyncio.create_task(breaker.call(hang))
        await asyncio.sleep(0)
        probe.cancel()
        with pytest.raises(asyncio.CancelledError):
            await probe

        assert await breaker.can_execute()


class TestCircuitBreakerCall:
    @pytest.mark.asyncio
    async def test_call_records_failure_and_reraises(self, breaker):
        with pytest.raises(RuntimeError, match="boom"):
            await breaker.call(_boom)
        assert breaker.get_state()["failure_count"] == 1

    @pytest.mark.asyncio
    async def test_open_circuit_refuses_calls(self, breaker):
        for _ in range(3):
            with pytest.raises(RuntimeError):
                await breaker.call(_boom)

        with pytest.raises(CircuitOpenError) as exc_info:
            await breaker.call(_ok)
        assert exc_info.value.name == "test"
        assert exc_info.value.retry_in == pytest.approx(60.0)

    @pytest.mark.asyncio
    async def test_reset(self, breaker):
        for _ in range(3):
            await breaker.record_failure()
        await breaker.reset()

        state = breaker.get_state()
        assert state["state"] == "closed"
        assert state["failure_count"] == 0
        assert state["last_failure_time"] is None
        assert await breaker.call(_ok) == "ok"

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            CircuitBreaker(failure_threshold=0)

"""
Unit tests for SummarizationService: lazy shared loading, fallback order,
retries, timeouts and the circuit breaker.
"""

import asyncio

import pytest
from conftest import FailingBackend, FakeBackend, SlowBackend, descriptor_for
from pagesift.config.config import CircuitBreakerConfig, SummarizationConfig
from pagesift.errors import BackendUnavailableError, CircuitOpenError
from pagesift.protocols import SummarizeParams
from pagesift.recovery.circuit_breaker import CircuitState
from pagesift.summarizer import BackendDescriptor, SummarizationService

PARAMS = SummarizeParams(max_length=5, min_length=1)


@pytest.fixture
def fast_config() -> SummarizationConfig:
    return SummarizationConfig(
        retry_wait_seconds=0,
        init_timeout=0.05,
        pass_timeout=0.05,
        circuit_breaker=CircuitBreakerConfig(failure_threshold=1, recovery_timeout_seconds=60),
    )


class CountingLoader:
    """Descriptor loader that counts invocations and optionally fails."""

    def __init__(self, backend=None, error: Exception | None = None, delay: float = 0.0):
        self.backend = backend or FakeBackend()
        self.error = error
        self.delay = delay
        self.loads = 0

    async def __call__(self):
        self.loads += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.backend


class FlakyBackend:
    """Fails the first call, then answers."""

    def __init__(self):
        self.calls = 0

    async def summarize(self, text: str, params: SummarizeParams) -> str:
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("warming up")
        return "summary"


class TestInitialization:
    def test_requires_descriptors(self, fast_config):
        with pytest.raises(ValueError):
            SummarizationService([], fast_config)

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_load(self, fast_config):
        loader = CountingLoader(delay=0.01)
        service = SummarizationService([BackendDescriptor("fake", loader)], fast_config)

        backends = await asyncio.gather(*(service.initialize() for _ in range(5)))

        assert loader.loads == 1
        assert all(backend is loader.backend for backend in backends)
        assert service.active_backend_name == "fake"

    @pytest.mark.asyncio
    async def test_candidates_tried_in_order(self, fast_config):
        broken = CountingLoader(error=RuntimeError("no weights"))
        working = CountingLoader()
        service = SummarizationService(
            [BackendDescriptor("large", broken), BackendDescriptor("small", working)], fast_config
        )

        assert await service.initialize() is working.backend
        assert service.active_backend_name == "small"
        attempts = service.attempts
        assert [(a.name, a.ok) for a in attempts] == [("large", False), ("small", True)]
        assert attempts[0].error == "RuntimeError: no weights"

    @pytest.mark.asyncio
    async def test_load_timeout_moves_on(self, fast_config):
        slow = CountingLoader(delay=1.0)
        service = SummarizationService(
            [BackendDescriptor("slow", slow), descriptor_for(FakeBackend(), "fast")], fast_config
        )

        await service.initialize()
        assert service.active_backend_name == "fast"
        assert service.attempts[0].error == "timed out"

    @pytest.mark.asyncio
    async def test_failed_load_kept_until_reset(self, fast_config):
        loader = CountingLoader(error=OSError("missing"))
        service = SummarizationService([BackendDescriptor("only", loader)], fast_config)

        with pytest.raises(BackendUnavailableError):
            await service.initialize()
        for _ in range(5):
            with pytest.raises(BackendUnavailableError):
                await service.summarize("text", PARAMS)
        assert loader.loads == 1
        assert len(service.attempts) == 1

        await service.reset()
        with pytest.raises(BackendUnavailableError):
            await service.initialize()
        assert loader.loads == 2


class TestSummarize:
    @pytest.mark.asyncio
    async def test_success(self, fast_config):
        service = SummarizationService([descriptor_for(FakeBackend("short summary"))], fast_config)
        assert await service.summarize("some long text", PARAMS) == "short summary"

    @pytest.mark.asyncio
    async def test_transient_failure_retried(self, fast_config):
        backend = FlakyBackend()
        service = SummarizationService([descriptor_for(backend)], fast_config)

        assert await service.summarize("text", PARAMS) == "summary"
        assert backend.calls == 2
        assert service.breaker.state is CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_per_pass_timeout(self, fast_config):
        service = SummarizationService([descriptor_for(SlowBackend())], fast_config)
        with pytest.raises(asyncio.TimeoutError):
            await service.summarize("text", PARAMS)

    @pytest.mark.asyncio
    async def test_breaker_opens_after_failures(self, fast_config):
        backend = FailingBackend()
        service = SummarizationService([descriptor_for(backend)], fast_config)

        with pytest.raises(RuntimeError):
            await service.summarize("text", PARAMS)
        assert backend.calls == fast_config.max_attempts
        assert service.breaker.state is CircuitState.OPEN

        with pytest.raises(CircuitOpenError):
            await service.summarize("text", PARAMS)
        assert backend.calls == fast_config.max_attempts

    @pytest.mark.asyncio
    async def test_reset_reloads_and_closes(self, fast_config):
        loader = CountingLoader(backend=FailingBackend())
        service = SummarizationService([BackendDescriptor("fake", loader)], fast_config)

        with pytest.raises(RuntimeError):
            await service.summarize("text", PARAMS)
        await service.reset()

        assert service.breaker.state is CircuitState.CLOSED
        assert service.active_backend_name is None
        assert service.attempts == []
        await service.initialize()
        assert loader.loads == 2

"""
Unit tests for notification sinks.
"""

import pytest
from pagesift.notifications import InMemoryNotificationSink, LoggingNotificationSink
from pagesift.protocols import NotificationSink


class TestNotificationSinks:
    @pytest.mark.asyncio
    async def test_in_memory_keeps_order(self):
        sink = InMemoryNotificationSink()
        await sink.notify("first")
        await sink.notify("second")
        assert sink.messages == ["first", "second"]

    @pytest.mark.asyncio
    async def test_logging_sink_does_not_raise(self):
        await LoggingNotificationSink().notify("No readable content found at https://example.com.")

    def test_sinks_satisfy_protocol(self):
        assert isinstance(InMemoryNotificationSink(), NotificationSink)
        assert isinstance(LoggingNotificationSink(), NotificationSink)

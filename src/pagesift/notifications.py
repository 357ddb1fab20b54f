"""
Notification sinks for pages that yielded no readable content.
"""

from __future__ import annotations

from typing import List

import structlog

logger = structlog.get_logger(__name__)


class LoggingNotificationSink:
    """Writes notifications to the structured log."""

    async def notify(self, message: str) -> None:
        logger.info("notification", message=message)


class InMemoryNotificationSink:
    """Keeps notifications in process, in arrival order."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    async def notify(self, message: str) -> None:
        self.messages.append(message)

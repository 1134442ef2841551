"""
Per-Channel In-Flight Guard
===========================

Optional single-flight coordination: at most one response is generated
per channel at a time. Concurrent invocations are otherwise independent.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Set
import logging

from .exceptions import RequestInFlightException

logger = logging.getLogger(__name__)


class InFlightGuard:
    """Tracks channels that currently have a completion request running."""

    def __init__(self):
        self._active: Set[int] = set()
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def claim(self, channel_id: int) -> AsyncIterator[None]:
        """
        Hold the channel for the duration of the block.

        Raises:
            RequestInFlightException: If the channel is already claimed
        """
        async with self._lock:
            if channel_id in self._active:
                logger.debug(f"Channel {channel_id} already has a request in flight")
                raise RequestInFlightException(channel_id)
            self._active.add(channel_id)

        try:
            yield
        finally:
            self._active.discard(channel_id)

    def is_active(self, channel_id: int) -> bool:
        return channel_id in self._active

    @property
    def active_count(self) -> int:
        return len(self._active)

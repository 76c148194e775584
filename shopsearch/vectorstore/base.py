"""
Collection lifecycle shared by VectorStore implementations

The store starts UNINITIALIZED and moves to READY exactly once, the first
time any operation needs the collection. Concurrent first callers wait on a
single lock; only one of them runs the initializer.
"""

import asyncio
from collections.abc import Awaitable, Callable

from shopsearch.core.logging import get_logger
from shopsearch.vectorstore.protocol import StoreState

logger = get_logger(__name__)


class CollectionLifecycle:
    """Two-state lifecycle guarded by one asyncio.Lock."""

    def __init__(self, name: str, initializer: Callable[[], Awaitable[None]]) -> None:
        self.name = name
        self._initializer = initializer
        self._lock = asyncio.Lock()
        self._state = StoreState.UNINITIALIZED

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is StoreState.READY

    async def ensure_ready(self) -> None:
        if self.is_ready:
            return
        async with self._lock:
            if self.is_ready:
                return

            # A failed initializer leaves the state untouched; the next call retries.
            await self._initializer()
            self._state = StoreState.READY
            logger.info("vectorstore_ready", collection=self.name)

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


class WriteSerializer:
    """
    Runs submitted units of work one at a time, in submission order.

    A unit starts only once the previous one has settled. A unit that raises
    hands its exception to its own caller and the queue moves on.
    """

    def __init__(self) -> None:
        # asyncio.Lock wakes waiters first-in first-out
        self._lock = asyncio.Lock()
        self._pending = 0

    @property
    def pending(self) -> int:
        """Units submitted and not yet settled, including the running one."""
        return self._pending

    async def submit(
        self,
        work: Callable[P, Awaitable[T]],
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> T:
        self._pending += 1
        try:
            async with self._lock:
                return await work(*args, **kwargs)
        except Exception as e:
            logger.warning(f"Queued write {getattr(work, '__name__', work)!r} failed: {e}")
            raise
        finally:
            self._pending -= 1

import asyncio
import time
from typing import Protocol


class Clock(Protocol):
    """Time source used by the transport.

    ``monotonic`` orders events and measures waits. ``time`` is wall-clock
    seconds since the epoch, needed only to interpret HTTP dates.
    """

    def monotonic(self) -> float: ...

    def time(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    def monotonic(self) -> float:
        return time.monotonic()

    def time(self) -> float:
        return time.time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

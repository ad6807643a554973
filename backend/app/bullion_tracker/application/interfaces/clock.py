"""Clock interface so schedulers and time-dependent services can be tested."""

import asyncio
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone


class Clock(ABC):
    """Source of the current time and of suspension between ticks."""

    @abstractmethod
    def now(self) -> datetime:
        """Current timezone-aware UTC time."""
        ...

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall clock backed by ``datetime.now`` and ``asyncio.sleep``."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

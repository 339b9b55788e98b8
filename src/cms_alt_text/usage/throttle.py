"""Spacing between consecutive remote calls."""

import asyncio
from abc import ABC, abstractmethod

DEFAULT_REQUEST_DELAY = 0.2


class Throttle(ABC):
    """Pause between consecutive calls against a rate-limited API."""

    @abstractmethod
    async def pause(self) -> None:
        """Suspend the caller until the next call may be made."""
        pass


class FixedDelayThrottle(Throttle):
    """Wait a fixed interval before each subsequent call.

    Example:
        throttle = FixedDelayThrottle(0.2)
        for record in records:
            await throttle.pause()
            ...
    """

    def __init__(self, delay: float = DEFAULT_REQUEST_DELAY):
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.delay = delay

    async def pause(self) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)


class NoThrottle(Throttle):
    """Never waits. Used in tests."""

    async def pause(self) -> None:
        return None

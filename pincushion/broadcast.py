"""One sender, many receivers: periodic ticks plus a one-shot cancellation."""

from __future__ import annotations

import asyncio
import enum


class Signal(enum.Enum):
    TICK = "tick"
    CANCEL = "cancel"


class Subscription:
    """Receiving end held by a single board task.

    Ticks are not queued: several ticks delivered before the receiver looks
    collapse into one. Cancellation wins over a pending tick.
    """

    def __init__(self) -> None:
        self._changed = asyncio.Event()
        self._tick_pending = False
        self._cancelled = False

    def _deliver(self, signal: Signal) -> None:
        if signal is Signal.CANCEL:
            self._cancelled = True
        else:
            self._tick_pending = True
        self._changed.set()

    def drop_pending(self) -> None:
        """Forget ticks that arrived while the receiver was busy."""
        self._tick_pending = False

    async def recv(self) -> Signal:
        while True:
            if self._cancelled:
                return Signal.CANCEL
            if self._tick_pending:
                self._tick_pending = False
                return Signal.TICK
            self._changed.clear()
            await self._changed.wait()


class Broadcaster:
    def __init__(self) -> None:
        self._subscribers: list[Subscription] = []
        self._cancelled = False

    def subscribe(self) -> Subscription:
        sub = Subscription()
        if self._cancelled:
            sub._deliver(Signal.CANCEL)
        self._subscribers.append(sub)
        return sub

    def tick(self) -> None:
        if self._cancelled:
            return
        for sub in self._subscribers:
            sub._deliver(Signal.TICK)

    def cancel(self) -> None:
        """Send the one-shot cancellation; later calls are no-ops."""
        if self._cancelled:
            return
        self._cancelled = True
        for sub in self._subscribers:
            sub._deliver(Signal.CANCEL)

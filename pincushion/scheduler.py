"""Polling scheduler – one task per board driven by a shared interval timer."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence

from .broadcast import Broadcaster, Signal, Subscription

logger = logging.getLogger("pincushion.scheduler")


class Cycle(Protocol):
    """Anything the scheduler can drive; `BoardState` is the real one."""

    @property
    def label(self) -> str: ...

    async def check_and_download(self) -> int: ...


async def _run_cycle(state: Cycle) -> int | None:
    """Run one cycle, reporting instead of raising. Returns None on failure."""
    try:
        return await state.check_and_download()
    except Exception as exc:
        kind = getattr(exc, "kind", type(exc).__name__)
        logger.error("[%s] cycle failed (%s), retrying next time: %s", state.label, kind, exc)
        return None


async def _board_task(state: Cycle, sub: Subscription) -> None:
    while True:
        signal = await sub.recv()
        if signal is Signal.CANCEL:
            break
        await _run_cycle(state)
        sub.drop_pending()
    logger.debug("[%s] cancelling task", state.label)


class SchedulerHandle:
    """Returned by `PollScheduler.start`; `stop()` drains every board task."""

    def __init__(
        self,
        broadcaster: Broadcaster,
        stop_requested: asyncio.Event,
        driver: asyncio.Task,
        tasks: list[asyncio.Task],
    ) -> None:
        self._broadcaster = broadcaster
        self._stop_requested = stop_requested
        self._driver = driver
        self.tasks = tasks

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self.tasks)

    async def stop(self) -> None:
        """Cancel cooperatively and wait until no board task is left running."""
        self._stop_requested.set()
        self._broadcaster.cancel()
        await self._driver
        await asyncio.gather(*self.tasks)


class PollScheduler:
    def __init__(self, interval: float = 60.0) -> None:
        self.interval = interval

    def start(self, states: Sequence[Cycle]) -> SchedulerHandle:
        """Spawn one task per board and the ticking driver. Needs a running loop."""
        broadcaster = Broadcaster()
        tasks = [
            asyncio.create_task(_board_task(state, broadcaster.subscribe()), name=f"board:{state.label}")
            for state in states
        ]
        stop_requested = asyncio.Event()
        driver = asyncio.create_task(self._drive(broadcaster, stop_requested), name="scheduler:driver")
        handle = SchedulerHandle(broadcaster, stop_requested, driver, tasks)
        logger.info("Polling %d boards every %gs", len(tasks), self.interval)
        return handle

    async def _drive(self, broadcaster: Broadcaster, stop_requested: asyncio.Event) -> None:
        while not stop_requested.is_set():
            broadcaster.tick()
            try:
                await asyncio.wait_for(stop_requested.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue
        broadcaster.cancel()

    async def run_once(self, states: Sequence[Cycle]) -> dict[str, int | None]:
        """Run a single cycle for every board concurrently.

        Maps each board label to its download count, or None if the cycle failed.
        """
        results = await asyncio.gather(*(_run_cycle(state) for state in states))
        return {state.label: count for state, count in zip(states, results)}

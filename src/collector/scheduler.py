"""Tick scheduler -- runs both collection flows once or on a fixed interval.

Each tick fans out the price and stats flows concurrently and joins on
both. Ticks never overlap: the next one starts only after the previous one
settles and the interval has elapsed. The first tick runs immediately.
"""

import asyncio
import time
from collections.abc import Callable

import structlog

from collector.flows import CollectionFlow
from collector.logging import get_logger
from collector.models import FlowStatus, TickResult, utc_timestamp_iso

logger = get_logger(__name__)


class CollectorScheduler:
    """Owns the collection loop lifecycle.

    Tests drive ticks directly through run_tick(); start()/stop() wrap it
    in a cancellable loop.

    Args:
        price_flow: On-chain price flow.
        stats_flow: Indexer stats flow.
        interval: Seconds between tick starts in continuous mode.
        clock: Returns the current unix time; injectable for tests.
    """

    def __init__(
        self,
        price_flow: CollectionFlow,
        stats_flow: CollectionFlow,
        interval: float = 300.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._price_flow = price_flow
        self._stats_flow = stats_flow
        self._interval = interval
        self._clock = clock
        self._running = False
        self._stop_event = asyncio.Event()
        self._tick_count = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def tick_count(self) -> int:
        return self._tick_count

    async def run_tick(self) -> TickResult:
        """Run both flows concurrently and wait for both to settle."""
        now = self._clock()
        timestamp_iso = utc_timestamp_iso(now)
        structlog.contextvars.bind_contextvars(tick=timestamp_iso)
        try:
            outcomes = await asyncio.gather(
                self._price_flow.run(now),
                self._stats_flow.run(now),
                return_exceptions=True,
            )
        finally:
            structlog.contextvars.unbind_contextvars("tick")

        price_status, stats_status = (
            self._settle(flow, outcome)
            for flow, outcome in zip((self._price_flow, self._stats_flow), outcomes)
        )
        self._tick_count += 1
        result = TickResult(
            timestamp_iso=timestamp_iso, price=price_status, stats=stats_status
        )
        logger.debug(
            "tick_completed",
            tick=timestamp_iso,
            price=price_status.value,
            stats=stats_status.value,
        )
        return result

    @staticmethod
    def _settle(flow: CollectionFlow, outcome: FlowStatus | BaseException) -> FlowStatus:
        """Map a flow outcome to a status; flows that leak an exception count as failed."""
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            logger.error(
                "flow_raised",
                source=flow.source,
                error=str(outcome),
                exc_info=outcome,
            )
            return FlowStatus.FAILED
        return outcome

    async def run_once(self) -> TickResult:
        """Single-shot mode for externally scheduled invocation."""
        logger.info("collector_single_shot")
        return await self.run_tick()

    async def start(self) -> None:
        """Run ticks every interval until stop() is called."""
        if self._running:
            logger.warning("collector_already_running")
            return
        self._running = True
        self._stop_event.clear()
        logger.info("collector_started", interval=self._interval)

        try:
            while self._running:
                started = self._clock()
                await self.run_tick()
                remaining = self._interval - (self._clock() - started)
                if remaining > 0 and await self._wait_for_stop(remaining):
                    break
        finally:
            self._running = False
            logger.info("collector_stopped", ticks=self._tick_count)

    async def stop(self) -> None:
        """Stop accepting new ticks; an in-flight tick is allowed to finish."""
        logger.info("collector_stopping")
        self._running = False
        self._stop_event.set()

    async def _wait_for_stop(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; return True if stop() was called."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

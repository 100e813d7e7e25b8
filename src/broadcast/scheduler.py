"""Periodic driver that advances the fleet and broadcasts each snapshot."""

import asyncio
import contextlib
import logging

from broadcast.registry import DeliveryReport, SubscriberRegistry
from fleet.simulator import VehicleSimulator
from metrics.prometheus_exporter import record_tick
from sim_logging import log_context

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 180.0
DEFAULT_INITIAL_DELAY_SECONDS = 5.0


class BroadcastScheduler:
    """Ticks the simulator on a fixed period and fans the result out.

    Besides the periodic ticks, one extra tick fires ``initial_delay``
    seconds after ``start`` so subscribers see movement early. Ticks are
    serialized: a tick that comes due while another runs waits for it.
    """

    def __init__(
        self,
        simulator: VehicleSimulator,
        registry: SubscriberRegistry,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        initial_delay: float = DEFAULT_INITIAL_DELAY_SECONDS,
    ) -> None:
        self._simulator = simulator
        self._registry = registry
        self._interval = interval
        self._initial_delay = initial_delay
        self._tick_lock = asyncio.Lock()
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def start(self) -> None:
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._initial_tick(), name="fleet-initial-tick"),
            asyncio.create_task(self._periodic_loop(), name="fleet-periodic-tick"),
        ]
        logger.info(
            f"Fleet updates scheduled every {self._interval:g}s "
            f"(first update in {self._initial_delay:g}s)"
        )

    async def stop(self) -> None:
        """Cancel pending and future ticks and wait for them to unwind."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if tasks:
            logger.info("Fleet update scheduler stopped")

    async def tick(self) -> DeliveryReport:
        """Advance the simulation once and broadcast the new snapshot."""
        async with self._tick_lock:
            snapshot = self._simulator.advance()
            with log_context(tick=snapshot.tick):
                logger.info(f"Updated {len(snapshot)} vehicle positions")
                report = self._registry.broadcast(snapshot)
            record_tick(snapshot, report)
            return report

    async def _initial_tick(self) -> None:
        await asyncio.sleep(self._initial_delay)
        logger.info("Performing initial vehicle position update...")
        await self._run_tick()

    async def _periodic_loop(self) -> None:
        loop = asyncio.get_running_loop()
        next_due = loop.time() + self._interval
        while True:
            await asyncio.sleep(max(0.0, next_due - loop.time()))
            await self._run_tick()
            # A late tick pushes the schedule back instead of firing a burst
            next_due = max(next_due + self._interval, loop.time())

    async def _run_tick(self) -> None:
        try:
            await self.tick()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Error in fleet update tick")

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)


class BaseSubscription(ABC):
    """
    Base class for periodic tasks run by the engine.

    A subscription ticks on its own interval, independently of the other
    subscriptions. Ticks of one subscription never overlap.
    """

    def __init__(self, engine, name: str, tick_interval: float = 1) -> None:
        """
        Initialize the BaseSubscription object.

        Args:
            engine: The vabridge engine instance.
            name (str): Unique name of the subscription, used in logs.
            tick_interval (float, optional): Seconds between the end of a tick and the start of the next.
        """
        self.engine = engine
        self.loop = engine.loop

        self.name = name
        self.tick_interval = tick_interval

        self.keep_going = True  # Initially set to keep going

    async def start(self) -> None:
        """
        Start the subscription.

        In test mode a single tick is run inline, so that its effects can be
        observed as soon as the engine exits.
        """
        logger.debug(f"Starting {self.name}")

        await self.initialize()

        if self.engine.test_mode:
            await self.run_tick()
        else:
            self.loop.create_task(self.poll())

    async def poll(self) -> None:
        """
        Polling loop. Runs `tick` and sleeps `tick_interval` between runs.
        """
        while self.keep_going and not self.engine.shutting_down:
            await self.run_tick()
            await asyncio.sleep(self.tick_interval)

    async def run_tick(self) -> None:
        """Run one tick, containing any error it raises.

        A failing tick is logged and the subscription carries on.
        """
        try:
            await self.tick()
        except Exception as exc:
            logger.exception(f"Error in {self.name} tick: {exc}")

    async def shutdown(self):
        """
        Signal the subscription to stop polling and perform cleanup.
        """
        self.keep_going = False  # Signal to stop polling
        await self.cleanup()
        logger.debug(f"Shutting down subscription {self.name}")

    async def initialize(self) -> None:
        """Perform subscription-specific initialization."""
        pass

    @abstractmethod
    async def tick(self):
        """Perform one unit of work."""

    async def cleanup(self) -> None:
        """Perform any cleanup tasks during shutdown."""
        pass


class DispatchSubscription(BaseSubscription):
    """Runs a synchronous dispatcher call on every tick.

    The call runs on the loop's default thread pool, shared by all
    subscriptions, so that store and broker I/O never blocks other ticks.
    """

    def __init__(
        self, engine, name: str, work: Callable[[], object], tick_interval: float = 1
    ) -> None:
        super().__init__(engine, name, tick_interval)
        self.work = work

    async def tick(self):
        result = await asyncio.to_thread(self.work)
        if not result:
            logger.debug(f"{self.name}: nothing to do")

        return result

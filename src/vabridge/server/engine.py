from __future__ import annotations

import asyncio
import logging
import platform
import signal

from .subscription import DispatchSubscription

logger = logging.getLogger(__name__)

# SIGHUP is not available on Windows
SIGNALS = tuple(
    getattr(signal, name)
    for name in ("SIGHUP", "SIGTERM", "SIGINT")
    if hasattr(signal, name)
)


class Engine:
    """
    The Engine runs the periodic dispatcher subscriptions of an application.
    """

    def __init__(self, app, test_mode: bool = False, debug: bool = False) -> None:
        """
        Initialize the Engine.

        Modes:
        - Test Mode: If set to True, every subscription ticks once and the engine exits.
        - Debug Mode: If set to True, the engine will log additional information.

        Args:
            app (Application): The wired application whose dispatchers are run.
            test_mode (bool, optional): Flag to indicate if the engine is running in test mode. Defaults to False.
            debug (bool, optional): Flag to indicate if debug mode is enabled. Defaults to False.
        """
        self.app = app
        self.test_mode = test_mode
        self.debug = debug
        self.exit_code = 0
        self.shutting_down = False  # Flag to indicate the engine is shutting down

        # Store original signal handlers for cleanup
        self._original_signal_handlers = {}

        if self.debug:
            logger.setLevel(logging.DEBUG)

        # Create a new event loop instead of getting the current one
        # This avoids fragility when the caller already has a running loop
        self.loop = asyncio.new_event_loop()

        polling = app.settings.polling
        va_dispatcher = app.va_dispatcher
        notification_dispatcher = app.notification_dispatcher

        # One subscription per request queue, plus the reminders
        self._subscriptions = {
            name: DispatchSubscription(self, name, work, tick_interval=interval)
            for name, work, interval in (
                ("va-create", va_dispatcher.process_create, polling.create_interval),
                ("va-update", va_dispatcher.process_update, polling.update_interval),
                ("va-delete", va_dispatcher.process_delete, polling.delete_interval),
                (
                    "bill-reminder",
                    notification_dispatcher.process_reminders,
                    polling.reminder_interval,
                ),
            )
        }

    @property
    def subscriptions(self) -> dict[str, DispatchSubscription]:
        return dict(self._subscriptions)

    def _setup_signal_handlers(self):
        """
        Set up signal handlers using the appropriate method based on the platform.

        On Unix-like systems, use asyncio.add_signal_handler for better integration with the event loop.
        On Windows, fall back to signal.signal as add_signal_handler is not available.
        """

        def signal_handler(sig, frame=None):
            """Signal handler for non-asyncio signal handling (Windows)"""
            if not self.shutting_down and self.loop.is_running():
                asyncio.run_coroutine_threadsafe(self.shutdown(signal=sig), self.loop)

        if platform.system() == "Windows" or not hasattr(
            self.loop, "add_signal_handler"
        ):
            for s in SIGNALS:
                try:
                    self._original_signal_handlers[s] = signal.signal(s, signal_handler)
                except (OSError, ValueError) as e:
                    logger.debug(f"Signal {s} not available on this platform: {e}")
        else:
            for s in SIGNALS:
                try:
                    self.loop.add_signal_handler(
                        s, lambda s=s: asyncio.create_task(self.shutdown(signal=s))
                    )
                except (OSError, ValueError, RuntimeError) as e:
                    logger.debug(f"Signal {s} not available on this platform: {e}")

    def _cleanup_signal_handlers(self):
        """
        Clean up signal handlers when shutting down.
        """
        if platform.system() == "Windows" or not hasattr(
            self.loop, "add_signal_handler"
        ):
            for sig, original_handler in self._original_signal_handlers.items():
                try:
                    signal.signal(sig, original_handler)
                except (OSError, ValueError):
                    pass  # Ignore errors during cleanup
        else:
            for s in SIGNALS:
                try:
                    self.loop.remove_signal_handler(s)
                except (OSError, ValueError, RuntimeError):
                    pass  # Ignore errors during cleanup

    async def shutdown(self, signal=None, exit_code=0):
        """
        Cleanup tasks tied to the service's shutdown.

        Args:
            signal (Optional[signal]): The exit signal received. Defaults to None.
            exit_code (int): The exit code to be stored. Defaults to 0.
        """
        self.shutting_down = True

        try:
            msg = (
                f"Received exit signal {signal.name if hasattr(signal, 'name') else signal}. Shutting down..."
                if signal
                else "Shutting down..."
            )
            logger.info(msg)

            self.exit_code = exit_code

            tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]

            subscription_shutdown_tasks = [
                subscription.shutdown()
                for subscription in self._subscriptions.values()
            ]

            # Cancel outstanding tasks
            for task in tasks:
                task.cancel()
            logger.info(f"Cancelling {len(tasks)} outstanding tasks")
            await asyncio.gather(*tasks, return_exceptions=True)

            await asyncio.gather(*subscription_shutdown_tasks, return_exceptions=True)
            logger.info("All subscriptions have been shut down.")

            self._cleanup_signal_handlers()
        finally:
            self.loop.stop()

    def run(self):
        """
        Start the engine and run the subscriptions.
        """
        asyncio.set_event_loop(self.loop)

        logger.debug("Starting vabridge engine...")

        self._setup_signal_handlers()

        def handle_exception(loop, context):
            msg = context.get("exception", context["message"])
            logger.error(f"Caught exception: {msg}")

            if context.get("exception") and loop.is_running() and not self.shutting_down:
                # Set flag immediately to prevent multiple shutdown calls
                self.shutting_down = True
                logger.info("Shutting down...")
                asyncio.create_task(self.shutdown(exit_code=1))

        self.loop.set_exception_handler(handle_exception)

        subscription_tasks = [
            self.loop.create_task(subscription.start())
            for subscription in self._subscriptions.values()
        ]

        try:
            if self.test_mode:
                # If in test mode, run until all tasks complete
                self.loop.run_until_complete(asyncio.gather(*subscription_tasks))
                # Then immediately call and await the shutdown directly
                self.loop.run_until_complete(self.shutdown())
            else:
                logger.info("vabridge engine is running...")
                self.loop.run_forever()
        finally:
            self._cleanup_signal_handlers()
            self.loop.close()
            asyncio.set_event_loop(None)
            logger.info("vabridge engine has stopped.")

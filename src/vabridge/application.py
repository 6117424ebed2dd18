"""Wiring of the dispatchers to their store and broker"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from vabridge.adapters.broker import Brokers
from vabridge.adapters.store import build_store
from vabridge.config import Config, Settings
from vabridge.dispatch import NotificationDispatcher, VirtualAccountDispatcher
from vabridge.entities import Payment
from vabridge.port.store import BaseStore
from vabridge.publisher import MessagePublisher

logger = logging.getLogger(__name__)


class Application:
    """Holds the settings, adapters and dispatchers of one vabridge process.

    The store is built from configuration unless one is passed in, which is how
    a host application plugs in the ledger it already has.
    """

    def __init__(
        self,
        config: dict | Config | Settings | None = None,
        store: BaseStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if isinstance(config, Settings):
            self.settings = config
        else:
            self.settings = Settings.from_config(config)

        self.brokers = Brokers(self.settings.brokers)
        self.brokers._initialize()

        self.store = store if store is not None else build_store(self.settings.store)
        self.publisher = MessagePublisher(self.brokers.default, self.settings.topics)

        self.va_dispatcher = VirtualAccountDispatcher(
            self.store, self.publisher, self.settings
        )
        self.notification_dispatcher = NotificationDispatcher(
            self.store, self.publisher, self.settings, clock=clock or datetime.now
        )

        logger.debug(
            f"Application ready with {self.store.__class__.__name__} "
            f"and {self.brokers.default.__class__.__name__}"
        )

    @classmethod
    def from_path(cls, path: str, **kwargs: Any) -> "Application":
        """Build an application from the configuration file found at or above `path`"""
        return cls(Config.load_from_path(path), **kwargs)

    def notify_payment(self, payment: Payment) -> None:
        """Entry point for whoever records a payment"""
        self.notification_dispatcher.notify_payment(payment)

    def send_bill_response(self, payload: Any) -> bool:
        return self.publisher.send_bill_response(payload)

    def send_payer_response(self, payload: Any) -> bool:
        return self.publisher.send_payer_response(payload)

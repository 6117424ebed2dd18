from __future__ import annotations

import collections.abc
import importlib
import logging
from typing import Iterator

from vabridge.exceptions import ConfigurationError
from vabridge.port.broker import BaseBroker

logger = logging.getLogger(__name__)


BROKER_PROVIDERS = {
    "inline": "vabridge.adapters.broker.inline.InlineBroker",
    "redis": "vabridge.adapters.broker.redis.RedisBroker",
}


class Brokers(collections.abc.MutableMapping[str, BaseBroker]):
    def __init__(self, configured_brokers: dict):
        self.configured_brokers = configured_brokers
        self._brokers: dict[str, BaseBroker] = {}

    def __getitem__(self, key: str) -> BaseBroker:
        return self._brokers[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._brokers)

    def __len__(self) -> int:
        return len(self._brokers)

    def __setitem__(self, key: str, value: BaseBroker) -> None:
        self._brokers[key] = value

    def __delitem__(self, key: str) -> None:
        if key in self._brokers:
            del self._brokers[key]

    def _initialize(self) -> None:
        """Read broker configuration and initialize brokers"""
        broker_objects = {}

        logger.debug("Initializing brokers...")
        if self.configured_brokers and isinstance(
            self.configured_brokers, collections.abc.Mapping
        ):
            if "default" not in self.configured_brokers:
                raise ConfigurationError("You must define a 'default' broker")

            for broker_name, conn_info in self.configured_brokers.items():
                provider = conn_info.get("provider")
                if provider not in BROKER_PROVIDERS:
                    raise ConfigurationError(
                        f"Unknown broker provider `{provider}` for broker `{broker_name}`"
                    )

                broker_module, broker_class = BROKER_PROVIDERS[provider].rsplit(
                    ".", maxsplit=1
                )
                broker_cls = getattr(
                    importlib.import_module(broker_module), broker_class
                )
                broker_objects[broker_name] = broker_cls(broker_name, dict(conn_info))
        else:
            raise ConfigurationError("Configure at least one broker")

        self._brokers = broker_objects

    @property
    def default(self) -> BaseBroker:
        return self._brokers["default"]

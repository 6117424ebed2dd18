import json
import logging
import uuid
from collections import defaultdict
from threading import Lock
from typing import Any, Dict

from vabridge.port.broker import BaseBroker

logger = logging.getLogger(__name__)


class InlineBroker(BaseBroker):
    """In-memory broker, for tests and single-process runs.

    Published messages are kept per stream, in publish order, as
    `(identifier, message)` tuples.
    """

    __broker__ = "inline"

    def __init__(self, name: str, conn_info: Dict[str, str | bool | int]) -> None:
        super().__init__(name, conn_info)

        self._lock = Lock()
        self._messages = defaultdict(list)

    def _publish(self, stream: str, message: str) -> str:
        """Publish a message to the stream"""
        # We always generate a new identifier for inline broker, since
        #   there is no underlying persistence layer to generate identifiers.
        identifier = str(uuid.uuid4())

        with self._lock:
            self._messages[stream].append((identifier, message))

        return identifier

    def messages(self, stream: str) -> list[Any]:
        """Return the decoded payloads published to `stream`"""
        with self._lock:
            return [json.loads(message) for _, message in self._messages[stream]]

    def _ping(self) -> bool:
        return True

    def _health_stats(self) -> dict:
        with self._lock:
            return {
                "streams": len(self._messages),
                "messages": sum(len(items) for items in self._messages.values()),
            }

    def _data_reset(self) -> None:
        with self._lock:
            self._messages = defaultdict(list)

"""Publishing of JSON messages onto the bus"""

from __future__ import annotations

import json
import logging
from typing import Any

from vabridge.config import Topics
from vabridge.exceptions import PublishError
from vabridge.port.broker import BaseBroker

logger = logging.getLogger(__name__)


def to_json(payload: Any) -> str:
    """Serialize a payload to compact JSON text, keeping non-ASCII characters as-is"""
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


class MessagePublisher:
    """Thin sink over a broker.

    `publish` does not wait for any confirmation beyond the broker call itself.
    Failures surface as `PublishError`, so that the dispatcher that invoked it
    can log them and leave its state untouched for the next tick.
    """

    def __init__(self, broker: BaseBroker, topics: Topics) -> None:
        self.broker = broker
        self.topics = topics

    def publish(self, topic: str, payload: Any) -> None:
        try:
            message = to_json(payload)
        except (TypeError, ValueError) as exc:
            raise PublishError(f"Unable to serialize message for {topic}: {exc}") from exc

        try:
            self.broker.publish(topic, message)
        except Exception as exc:
            raise PublishError(f"Unable to publish message to {topic}: {exc}") from exc

        logger.debug(f"Message to {topic}: {message}")

    def send_bill_response(self, payload: Any) -> bool:
        """Forward an upstream bill status response as-is"""
        return self.forward(self.topics.bill_response, payload)

    def send_payer_response(self, payload: Any) -> bool:
        """Forward an upstream payer response as-is"""
        return self.forward(self.topics.payer_response, payload)

    def forward(self, topic: str, payload: Any) -> bool:
        """Best-effort publish; failures are logged and reported as False"""
        try:
            self.publish(topic, payload)
        except PublishError as exc:
            logger.warning(str(exc), exc_info=True)
            return False

        return True

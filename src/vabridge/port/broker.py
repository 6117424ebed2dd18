from __future__ import annotations

import logging
import time
from abc import ABCMeta, abstractmethod

from vabridge.exceptions import ValidationError

logger = logging.getLogger(__name__)


class BaseBroker(metaclass=ABCMeta):
    """This class outlines the base broker functions, to be satisfied by all implementing brokers.

    Brokers are publish-only sinks here: messages are JSON text handed over to a
    named stream, and nothing is read back by vabridge itself."""

    def __init__(self, name: str, conn_info: dict[str, str | bool | int]) -> None:
        self.name = name
        self.conn_info = conn_info

        self._last_ping_time = None
        self._last_ping_success = None
        self._start_time = time.time()

    def publish(self, stream: str, message: str) -> str:
        """Publish a message to the broker.

        Args:
            stream (str): The stream to which the message should be published
            message (str): The serialized message payload

        Returns:
            str: The identifier of the message. The content of the identifier is broker-specific.

        Raises:
            ValidationError: If message is empty
        """
        if not message:
            raise ValidationError({"message": ["Message cannot be empty"]})

        try:
            identifier = self._publish(stream, message)
        except Exception as e:
            # Check if this is a connection-related error and attempt recovery
            if self._is_connection_error(e):
                logger.warning(f"Connection error during publish: {e}")
                if self._ensure_connection():
                    # Retry the operation once after reconnection
                    identifier = self._publish(stream, message)
                else:
                    raise
            else:
                raise

        logger.debug(f"Published {identifier} to {stream} via {self.name}")
        return identifier

    def ping(self) -> bool:
        """Test broker connectivity.

        Returns:
            bool: True if broker is reachable and responsive, False otherwise
        """
        try:
            start_time = time.time()
            result = self._ping()
            self._last_ping_time = time.time() - start_time
            self._last_ping_success = result
            return result
        except Exception as e:
            logger.debug(f"Ping failed for broker {self.name}: {e}")
            self._last_ping_time = None
            self._last_ping_success = False
            return False

    def health_stats(self) -> dict:
        """Get health statistics for the broker.

        Returns:
            dict: {'status', 'connected', 'last_ping_ms', 'uptime_seconds', 'details'}
        """
        connected = self.ping()
        last_ping_ms = (
            round(self._last_ping_time * 1000, 2)
            if self._last_ping_time is not None
            else None
        )

        return {
            "status": "healthy" if connected else "unhealthy",
            "connected": connected,
            "last_ping_ms": last_ping_ms,
            "uptime_seconds": time.time() - self._start_time,
            "details": self._health_stats(),
        }

    def _is_connection_error(self, error: Exception) -> bool:
        """Whether `error` indicates a lost connection. Override in brokers with connections."""
        return False

    def _ensure_connection(self) -> bool:
        """Re-establish the connection. Override in brokers with connections."""
        return False

    def _health_stats(self) -> dict:
        return {}

    @abstractmethod
    def _publish(self, stream: str, message: str) -> str:
        """Hand the message over to the stream and return its identifier"""

    @abstractmethod
    def _ping(self) -> bool:
        """Test basic connectivity to the broker"""

    @abstractmethod
    def _data_reset(self) -> None:
        """Flush all data in broker instance.

        Useful for clearing cache and running tests.
        """

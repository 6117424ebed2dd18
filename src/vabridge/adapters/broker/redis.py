import logging
from typing import Dict

import redis

from vabridge.port.broker import BaseBroker

logger = logging.getLogger(__name__)

# Constants
DATA_FIELD = "data"


class RedisBroker(BaseBroker):
    """Redis Streams as the Message Broker.

    Every message is appended with `XADD` as a single `data` field holding the
    JSON text. Consumers read the streams with their own consumer groups.
    """

    __broker__ = "redis"

    def __init__(self, name: str, conn_info: Dict) -> None:
        super().__init__(name, conn_info)

        self.redis_instance = redis.Redis.from_url(conn_info["URI"])
        # Approximate cap on stream length, unbounded when not configured
        self._maxlen = conn_info.get("maxlen")

    def _publish(self, stream: str, message: str) -> str:
        """Publish a message to Redis Stream using XADD"""
        redis_stream_id = self.redis_instance.xadd(
            stream,
            {DATA_FIELD: message.encode("utf-8")},
            maxlen=self._maxlen,
            approximate=True,
        )
        return self._decode_if_bytes(redis_stream_id)

    def _ping(self) -> bool:
        """Test basic connectivity to Redis broker"""
        try:
            return self.redis_instance.ping()
        except Exception as e:
            logger.debug(f"Redis ping failed: {e}")
            return False

    def _is_connection_error(self, error: Exception) -> bool:
        return isinstance(error, (redis.ConnectionError, redis.TimeoutError))

    def _ensure_connection(self) -> bool:
        """Drop pooled connections and check that Redis answers again"""
        try:
            self.redis_instance.connection_pool.disconnect()
            return bool(self.redis_instance.ping())
        except Exception as e:
            logger.error(f"Failed to re-establish Redis connection: {e}")
            return False

    def _health_stats(self) -> dict:
        try:
            info = self.redis_instance.info()
        except Exception as e:
            logger.debug(f"Unable to fetch Redis info: {e}")
            return {}

        return {
            "redis_version": info.get("redis_version"),
            "connected_clients": info.get("connected_clients"),
            "used_memory_human": info.get("used_memory_human"),
        }

    def _data_reset(self) -> None:
        """Flush all data in the Redis database"""
        self.redis_instance.flushall()

    @staticmethod
    def _decode_if_bytes(value) -> str:
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

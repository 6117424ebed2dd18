import importlib
import logging

from vabridge.exceptions import ConfigurationError
from vabridge.port.store import BaseStore

logger = logging.getLogger(__name__)


STORE_PROVIDERS = {
    "memory": "vabridge.adapters.store.memory.MemoryStore",
}


def build_store(conn_info: dict) -> BaseStore:
    """Initialize the store configured in `conn_info`"""
    provider = conn_info.get("provider", "memory")
    if provider not in STORE_PROVIDERS:
        raise ConfigurationError(f"Unknown store provider `{provider}`")

    store_module, store_class = STORE_PROVIDERS[provider].rsplit(".", maxsplit=1)
    store_cls = getattr(importlib.import_module(store_module), store_class)

    logger.debug(f"Using {store_cls.__name__} as store")
    return store_cls(provider, dict(conn_info))

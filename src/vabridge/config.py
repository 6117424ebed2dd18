import logging
import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

import tomllib

from vabridge.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILES = [".vabridge.toml", "vabridge.toml", "pyproject.toml"]


def _default_config():
    """Return the default configuration for vabridge.

    This is placed in a separate function because we want to be absolutely
    sure that we are using a copy of the defaults when we manipulate config
    directly in tests.
    """
    return {
        "debug": False,
        "log_level": "INFO",
        "topics": {
            "va_request": "va-request",
            "notification_request": "notification-request",
            "bill_payment": "bill-payment",
            "bill_response": "bill-response",
            "payer_response": "payer-response",
            "va_dead_letter": "va-request-dead-letter",
        },
        "polling": {
            "create_interval": 1.0,
            "update_interval": 1.0,
            "delete_interval": 1.0,
            "reminder_interval": 60.0,
        },
        "notification": {
            "batch_size": 50,
            "delay_minutes": 60,
            "reminder_template": "tagihan",
            "payment_template": "pembayaran",
            "contact_info": "",
            "contact_info_full": "",
            "finance_email": None,
            "send_finance_email": False,
            "it_email": None,
            "send_it_email": False,
        },
        "guard": {
            "max_attempts": 10,
        },
        "brokers": {"default": {"provider": "inline"}},
        "store": {"provider": "memory"},
    }


class Config(dict):
    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    @classmethod
    def load_from_dict(cls, config: dict | None = None):
        """Load configuration from a dictionary."""
        config = cls._normalize_config(config or {})
        return cls(**cls._load_env_vars(config))

    @classmethod
    def load_from_path(cls, path: str):
        def find_config_file(directory: str):
            for config_file in CONFIG_FILES:
                config_file_path = os.path.join(directory, config_file)
                if os.path.exists(config_file_path):
                    return config_file_path
            return None

        if os.path.isfile(path):
            config_file_name = path
        else:
            # Start checking from the provided path up to 2 parent directories
            current_dir = os.path.abspath(path)
            config_file_name = None

            for _ in range(3):
                config_file_name = find_config_file(current_dir)
                if config_file_name:
                    break

                current_dir = os.path.dirname(current_dir)

        if not config_file_name:
            raise ConfigurationError(f"No configuration file found in {path}")

        logger.debug(f"Loading configuration from {config_file_name}")
        with open(config_file_name, "rb") as f:
            config = tomllib.load(f)

        # If pyproject.toml, extract vabridge configuration
        #   from the 'tool.vabridge' section
        if config_file_name.endswith("pyproject.toml"):
            config = config.get("tool", {}).get("vabridge", {})

        return cls.load_from_dict(config)

    @classmethod
    def _normalize_config(cls, config):
        """Normalize configuration values.

        Known keys are merged over the defaults, then the section named after
        the `VABRIDGE_ENV` environment variable, if any, is merged on top.
        """
        environment = os.environ.get("VABRIDGE_ENV") or None

        keys = _default_config().keys()
        finalized_config = {key: value for key, value in config.items() if key in keys}

        finalized_config = cls._deep_merge(_default_config(), finalized_config)

        if environment and environment in config:
            environment_config = config[environment]
            finalized_config = cls._deep_merge(finalized_config, environment_config)

        return finalized_config

    @classmethod
    def _deep_merge(cls, dict1: dict, dict2: dict):
        result = dict1.copy()
        for key, value in dict2.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = cls._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @classmethod
    def _load_env_vars(cls, config):
        if isinstance(config, dict):
            for key, value in config.items():
                if isinstance(value, str):
                    config[key] = cls._replace_env_var(value)
                elif isinstance(value, dict):
                    config[key] = cls._load_env_vars(value)
                elif isinstance(value, list):
                    config[key] = [
                        cls._replace_env_var(item) if isinstance(item, str) else item
                        for item in value
                    ]
        return config

    @classmethod
    def _replace_env_var(cls, value):
        """Replace environment variables in a string.

        Cases:
        1. String does not have an environment variable. E.g. "attr-value" - Use as is
        2. String has an environment variable. E.g. "${ENV_VAR}" - Replace with value
        3. String has an environment variable with a default value. E.g. "${ENV_VAR|default-value}"
            - Replace with value or default value
        4. String has a mix of environment variables and static values. E.g. "attr-${ENV_VAR1|default}"
            - Replace all environment variables
        """
        match = cls.ENV_VAR_PATTERN.search(value)
        while match:
            matched_string = match.group(1)

            if "|" in matched_string:
                env_var, default_value = matched_string.split("|", 1)
                env_value = os.getenv(env_var, default_value)
            else:
                env_var = matched_string
                env_value = os.getenv(env_var)
                if env_value is None:
                    raise ConfigurationError(
                        f"Environment variable {env_var} is not set"
                    )

            value = value.replace(f"${{{matched_string}}}", env_value)
            match = cls.ENV_VAR_PATTERN.search(value)

        return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class Topics:
    va_request: str
    notification_request: str
    bill_payment: str
    bill_response: str
    payer_response: str
    va_dead_letter: str


@dataclass(frozen=True)
class PollingIntervals:
    create_interval: float
    update_interval: float
    delete_interval: float
    reminder_interval: float


@dataclass(frozen=True)
class NotificationSettings:
    batch_size: int
    delay_minutes: int
    reminder_template: str
    payment_template: str
    contact_info: str = ""
    contact_info_full: str = ""
    finance_email: str | None = None
    send_finance_email: bool = False
    it_email: str | None = None
    send_it_email: bool = False


@dataclass(frozen=True)
class GuardSettings:
    max_attempts: int


@dataclass(frozen=True)
class Settings:
    """Immutable view of the configuration, handed to dispatchers at construction"""

    topics: Topics
    polling: PollingIntervals
    notification: NotificationSettings
    guard: GuardSettings
    brokers: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    store: Mapping[str, Any] = field(default_factory=dict)
    log_level: str = "INFO"
    debug: bool = False

    @classmethod
    def from_config(cls, config: dict | None = None) -> "Settings":
        if not isinstance(config, Config):
            config = Config.load_from_dict(config or {})

        notification = dict(config["notification"])
        for flag in ("send_finance_email", "send_it_email"):
            notification[flag] = _as_bool(notification[flag])
        notification["batch_size"] = int(notification["batch_size"])
        notification["delay_minutes"] = int(notification["delay_minutes"])

        try:
            return cls._build(config, notification)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    @classmethod
    def _build(cls, config: "Config", notification: dict) -> "Settings":
        return cls(
            topics=Topics(**config["topics"]),
            polling=PollingIntervals(
                **{key: float(value) for key, value in config["polling"].items()}
            ),
            notification=NotificationSettings(**notification),
            guard=GuardSettings(max_attempts=int(config["guard"]["max_attempts"])),
            brokers=MappingProxyType(
                {
                    name: MappingProxyType(dict(conn_info))
                    for name, conn_info in config["brokers"].items()
                }
            ),
            store=MappingProxyType(dict(config["store"])),
            log_level=str(config["log_level"]).upper(),
            debug=_as_bool(config["debug"]),
        )

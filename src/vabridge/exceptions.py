"""
Custom vabridge exception classes
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class VABridgeException(Exception):
    """Base class for all Exceptions raised within vabridge"""


class VABridgeExceptionWithMessage(VABridgeException):
    def __init__(self, messages: dict[str, list[str]]) -> None:
        logger.debug(f"Exception:: {messages}")

        self.messages = messages

        super().__init__(messages)

    def __str__(self) -> str:
        return f"{dict(self.messages)}"

    def __reduce__(self) -> tuple[Any, tuple[Any]]:
        return (self.__class__, (self.messages,))


class ConfigurationError(VABridgeException):
    """Improper Configuration encountered like:
    * A configuration file could not be found
    * The `default` broker is missing
    * An unknown broker or store provider is referenced
    """


class ValidationError(VABridgeExceptionWithMessage):
    """Raised when input data is invalid, like an empty broker message or a
    virtual account number that is too short to strip the bank prefix from.

    :param messages: A dictionary of error messages where key is the field name
        and value is a list of errors
    """


class InvalidStateError(VABridgeException):
    """Object is in invalid state for the given operation

    Equivalent to 409 (Conflict)"""


class PublishError(VABridgeException):
    """Raised when a payload could not be serialized or handed over to the broker."""

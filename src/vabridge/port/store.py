from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Iterable

from vabridge.entities import Bill, VaStatus, VirtualAccount


class BaseStore(metaclass=ABCMeta):
    """Query and command contracts the dispatchers rely on.

    The ledger itself lives elsewhere; implementations adapt it to these calls.
    Each call is atomic on its own. Records returned are detached copies, so
    changes only take effect once saved back.
    """

    def __init__(self, name: str, conn_info: dict) -> None:
        self.name = name
        self.conn_info = conn_info

    @abstractmethod
    def find_pending_va(
        self, status: VaStatus, exclude: Iterable[str] = ()
    ) -> VirtualAccount | None:
        """Return the oldest VA with `status`, skipping the identifiers in `exclude`"""

    @abstractmethod
    def save_va(self, va: VirtualAccount) -> VirtualAccount:
        """Insert or update a VA"""

    @abstractmethod
    def get_va(self, identifier: str) -> VirtualAccount | None:
        """Return the VA with `identifier`, or None if it no longer exists"""

    @abstractmethod
    def find_vas_for_bill(self, bill: Bill) -> list[VirtualAccount]:
        """Return all VAs provisioned for `bill`, whatever their status"""

    def find_active_vas_for_bill(self, bill: Bill) -> list[VirtualAccount]:
        return [
            va for va in self.find_vas_for_bill(bill) if va.status == VaStatus.ACTIVE
        ]

    @abstractmethod
    def find_unsent_bills(self, limit: int) -> list[Bill]:
        """Return up to `limit` bills whose notification is NOT_SENT, oldest `updated_at` first"""

    @abstractmethod
    def save_bill(self, bill: Bill) -> Bill:
        """Insert or update a bill"""

    @abstractmethod
    def _data_reset(self) -> None:
        """Flush all data in the store. Useful for running tests."""

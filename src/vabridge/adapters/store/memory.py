"""Implementation of a dictionary based store"""

import copy
from threading import Lock
from typing import Iterable

from vabridge.entities import Bill, NotificationStatus, VaStatus, VirtualAccount
from vabridge.port.store import BaseStore


class MemoryStore(BaseStore):
    """Keeps bills and VAs in dictionaries, in insertion order.

    Records go in and come out as deep copies, so a caller mutating an
    entity does not change the store until it saves the entity back.
    """

    __store__ = "memory"

    def __init__(self, name: str = "memory", conn_info: dict | None = None) -> None:
        super().__init__(name, conn_info or {"provider": "memory"})

        self._lock = Lock()
        self._bills: dict[str, Bill] = {}
        self._vas: dict[str, VirtualAccount] = {}

    def find_pending_va(
        self, status: VaStatus, exclude: Iterable[str] = ()
    ) -> VirtualAccount | None:
        excluded = set(exclude)
        with self._lock:
            for va in self._vas.values():
                if va.status == status and va.id not in excluded:
                    return self._detach(va)

        return None

    def save_va(self, va: VirtualAccount) -> VirtualAccount:
        with self._lock:
            self._vas[va.id] = copy.deepcopy(va)

        return va

    def find_vas_for_bill(self, bill: Bill) -> list[VirtualAccount]:
        with self._lock:
            return [self._detach(va) for va in self._vas.values() if va.bill.id == bill.id]

    def find_unsent_bills(self, limit: int) -> list[Bill]:
        with self._lock:
            unsent = [
                bill
                for bill in self._bills.values()
                if bill.notification_status == NotificationStatus.NOT_SENT
            ]
            unsent.sort(key=lambda bill: bill.updated_at)

            return [copy.deepcopy(bill) for bill in unsent[:limit]]

    def save_bill(self, bill: Bill) -> Bill:
        with self._lock:
            self._bills[bill.id] = copy.deepcopy(bill)

        return bill

    def get_va(self, identifier: str) -> VirtualAccount | None:
        with self._lock:
            va = self._vas.get(identifier)
            return self._detach(va) if va else None

    def get_bill(self, identifier: str) -> Bill | None:
        with self._lock:
            bill = self._bills.get(identifier)
            return copy.deepcopy(bill) if bill else None

    def _detach(self, va: VirtualAccount) -> VirtualAccount:
        """Copy a VA, pointing it at the latest saved version of its bill"""
        detached = copy.deepcopy(va)
        if va.bill.id in self._bills:
            detached.bill = copy.deepcopy(self._bills[va.bill.id])

        return detached

    def _data_reset(self) -> None:
        with self._lock:
            self._bills = {}
            self._vas = {}

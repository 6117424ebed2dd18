"""Ledger entities consumed by the dispatchers.

These are plain data classes. Persistence belongs to the store, which hands
out copies; state changes only take effect once saved back through it.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from vabridge.exceptions import InvalidStateError


def _identity() -> str:
    return str(uuid4())


class VaStatus(Enum):
    CREATE = "CREATE"
    IN_FLIGHT = "SEDANG_PROSES"
    ACTIVE = "AKTIF"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


# Statuses that have a pending request for the bank
REQUEST_STATUSES = (VaStatus.CREATE, VaStatus.UPDATE, VaStatus.DELETE)


class NotificationStatus(Enum):
    NOT_SENT = "BELUM_TERKIRIM"
    SENT = "SUDAH_TERKIRIM"


class BillStatus(Enum):
    ACTIVE = "AKTIF"
    INACTIVE = "NONAKTIF"
    PAID = "LUNAS"


@dataclass
class Bank:
    code: str
    name: str
    account_number: str = ""
    account_name: str = ""
    va_digits: int = 0
    prefix_digits: int = 0
    id: str = field(default_factory=_identity)


@dataclass
class Payer:
    number: str
    name: str
    email: Optional[str] = None
    mobile: Optional[str] = None
    id: str = field(default_factory=_identity)


@dataclass
class BillType:
    code: str
    name: str
    payment_type: str = "CLOSED"
    id: str = field(default_factory=_identity)


@dataclass
class Bill:
    number: str
    payer: Payer
    bill_type: BillType
    amount: Decimal
    bill_date: date
    due_date: date
    description: str = ""
    amount_paid: Decimal = Decimal("0")
    status: BillStatus = BillStatus.ACTIVE
    notification_status: NotificationStatus = NotificationStatus.NOT_SENT
    updated_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_identity)

    @property
    def outstanding_amount(self) -> Decimal:
        return Decimal(self.amount) - Decimal(self.amount_paid)

    def mark_notification_sent(self) -> None:
        """Flip the notification status. It never goes back to NOT_SENT."""
        if self.notification_status == NotificationStatus.SENT:
            raise InvalidStateError(
                f"Notification for bill {self.number} has already been sent"
            )

        self.notification_status = NotificationStatus.SENT


@dataclass
class VirtualAccount:
    bank: Bank
    bill: Bill
    number: Optional[str] = None
    status: VaStatus = VaStatus.CREATE
    id: str = field(default_factory=_identity)

    @property
    def has_number(self) -> bool:
        return bool(self.number and self.number.strip())

    def mark_in_flight(self) -> None:
        """Record that a request for this VA has been sent to the bank.

        Moving out of IN_FLIGHT is up to whoever consumes the bank's response.
        """
        if self.status not in REQUEST_STATUSES:
            raise InvalidStateError(
                f"Virtual account {self.id} cannot go in flight from {self.status.name}"
            )

        self.status = VaStatus.IN_FLIGHT


@dataclass
class Payment:
    bill: Bill
    bank: Bank
    amount: Decimal
    transaction_time: datetime
    reference: str
    id: str = field(default_factory=_identity)

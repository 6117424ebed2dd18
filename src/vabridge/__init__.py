__version__ = "0.1.0"

from .application import Application
from .config import Config, Settings
from .entities import (
    Bank,
    Bill,
    BillStatus,
    BillType,
    NotificationStatus,
    Payer,
    Payment,
    VaStatus,
    VirtualAccount,
)
from .server import Engine

__all__ = [
    "Application",
    "Bank",
    "Bill",
    "BillStatus",
    "BillType",
    "Config",
    "Engine",
    "NotificationStatus",
    "Payer",
    "Payment",
    "Settings",
    "VaStatus",
    "VirtualAccount",
]

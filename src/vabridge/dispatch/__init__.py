from .notification import NotificationDispatcher
from .virtual_account import VirtualAccountDispatcher

__all__ = ["NotificationDispatcher", "VirtualAccountDispatcher"]

from .engine import Engine
from .subscription import BaseSubscription, DispatchSubscription

__all__ = ["BaseSubscription", "DispatchSubscription", "Engine"]

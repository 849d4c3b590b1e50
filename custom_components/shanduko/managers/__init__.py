"""Manager modules for Shanduko integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and handle cross-cutting concerns.
"""

from .base_manager import BaseManager
from .gamification_manager import GamificationManager
from .notification_manager import NotificationManager

__all__ = [
    "BaseManager",
    "GamificationManager",
    "NotificationManager",
]

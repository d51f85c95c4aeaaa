# Repository Layer — Data Access (Repository Pattern, GoF)
from healx.repositories.base import BaseRepository
from healx.repositories.surgical_item_repository import SurgicalItemRepository
from healx.repositories.notification_repository import NotificationRepository

__all__ = [
    "BaseRepository",
    "SurgicalItemRepository",
    "NotificationRepository",
]

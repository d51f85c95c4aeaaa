from healx.models.surgical_item import SurgicalItem
from healx.models.restock_history import RestockHistoryEntry
from healx.models.usage_record import UsageRecord
from healx.models.notification import NotificationOutbox

__all__ = [
    "SurgicalItem",
    "RestockHistoryEntry",
    "UsageRecord",
    "NotificationOutbox",
]

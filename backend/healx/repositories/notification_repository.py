"""
Notification Outbox Repository
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from healx.repositories.base import BaseRepository
from healx.models.notification import NotificationOutbox


class NotificationRepository(BaseRepository[NotificationOutbox]):

    def __init__(self, db: Session):
        super().__init__(NotificationOutbox, db)

    def list_filtered(
        self,
        kind: Optional[str] = None,
        item_id: Optional[int] = None,
        limit: int = 50,
    ) -> List[NotificationOutbox]:
        q = self.db.query(NotificationOutbox)
        if kind:
            q = q.filter(NotificationOutbox.kind == kind)
        if item_id:
            q = q.filter(NotificationOutbox.item_id == item_id)
        return q.order_by(NotificationOutbox.id.desc()).limit(limit).all()

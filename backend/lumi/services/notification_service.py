"""
Scheduled notification records.

Reminders are stored as rows with a trigger time; the scheduler marks them
delivered once they come due. Pushing them to a device is left to the client.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from lumi.db.base import utcnow
from lumi.models.notification import ScheduledNotification

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for scheduling and cancelling notifications"""

    def __init__(self, db: Session):
        self.db = db

    def schedule(
        self,
        kind: str,
        title: str,
        body: str,
        trigger_at: datetime,
        ref_id: Optional[str] = None,
    ) -> ScheduledNotification:
        notification = ScheduledNotification(
            kind=kind,
            title=title,
            body=body,
            trigger_at=trigger_at,
            ref_id=ref_id,
            status="scheduled",
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)

        logger.info(f"Scheduled {kind} notification '{title}' for {trigger_at.isoformat()}")
        return notification

    def cancel(self, notification_id: Optional[str]) -> bool:
        """Cancel a scheduled notification. Returns False if nothing was pending."""
        if not notification_id:
            return False

        notification = self.db.query(ScheduledNotification).filter(
            ScheduledNotification.id == notification_id
        ).first()

        if not notification or notification.status != "scheduled":
            return False

        notification.status = "cancelled"
        self.db.commit()
        logger.info(f"Cancelled notification {notification_id}")
        return True

    def cancel_kind(self, kind: str) -> int:
        """Cancel every pending notification of one kind"""
        pending = self.pending(kind)
        for notification in pending:
            notification.status = "cancelled"
        if pending:
            self.db.commit()
            logger.info(f"Cancelled {len(pending)} pending {kind} notifications")
        return len(pending)

    def pending(self, kind: Optional[str] = None) -> List[ScheduledNotification]:
        query = self.db.query(ScheduledNotification).filter(
            ScheduledNotification.status == "scheduled"
        )
        if kind:
            query = query.filter(ScheduledNotification.kind == kind)
        return query.order_by(ScheduledNotification.trigger_at).all()

    def deliver_due(self, now: Optional[datetime] = None) -> List[ScheduledNotification]:
        """Mark every scheduled notification whose trigger time has passed as delivered"""
        now = now or utcnow()

        due = self.db.query(ScheduledNotification).filter(
            ScheduledNotification.status == "scheduled",
            ScheduledNotification.trigger_at <= now,
        ).order_by(ScheduledNotification.trigger_at).all()

        for notification in due:
            notification.status = "delivered"
            logger.info(f"🔔 {notification.title}: {notification.body}")

        if due:
            self.db.commit()
        return due

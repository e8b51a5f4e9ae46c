"""
Reflection Reminder Service
Keeps one evening reminder pending while today's reflection is missing.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lumi.core.config import settings
from lumi.models.notification import ScheduledNotification
from lumi.models.reflection import Reflection
from lumi.services.notification_service import NotificationService
from lumi.utils.dates import local_now, local_at, to_local

logger = logging.getLogger(__name__)

REFLECTION_KIND = "reflection"
REFLECTION_TITLE = "🌙 Reflect"
REFLECTION_BODY = "How was your day? Take a moment to reflect."


class ReflectionReminderService:
    """Schedules and cancels the daily reflection reminder"""

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.db = db
        self.notifications = notifications or NotificationService(db)

    def check_and_schedule(self, now: Optional[datetime] = None) -> Optional[ScheduledNotification]:
        """
        Make sure a reminder is pending for tonight unless the user already reflected today.

        Returns the newly scheduled notification, or None when nothing changed.
        """
        if not settings.notifications_enabled:
            logger.info("📝 Notifications disabled - skipping reflection reminder")
            return None

        now = to_local(now) if now else local_now()

        try:
            if self.has_reflection_for(now):
                logger.info("📝 Reflection exists for today - cancelling pending reminders")
                self.notifications.cancel_kind(REFLECTION_KIND)
                return None

            target = self.target_time(now)

            if self.has_reminder_near(target):
                logger.debug(f"📝 Reflection reminder already pending near {target.isoformat()}")
                return None

            self.notifications.cancel_kind(REFLECTION_KIND)
            notification = self.notifications.schedule(
                kind=REFLECTION_KIND,
                title=REFLECTION_TITLE,
                body=REFLECTION_BODY,
                trigger_at=target,
            )
            logger.info(f"📝 Reflection reminder scheduled for {target.strftime('%b %d, %I:%M %p')}")
            return notification

        except SQLAlchemyError as e:
            logger.error(f"📝 Reflection reminder check failed: {e}")
            self.db.rollback()
            return None

    def target_time(self, now: datetime) -> datetime:
        """Tonight at the reminder time, or tomorrow night once the reminder hour has passed"""
        now = to_local(now)
        day = now.date()
        if now.hour >= settings.reflection_reminder_hour:
            day = day + timedelta(days=1)
        return local_at(day, settings.reflection_reminder_hour, settings.reflection_reminder_minute)

    def has_reflection_for(self, now: datetime) -> bool:
        today = to_local(now).date()
        return self.db.query(Reflection).filter(Reflection.date == today).first() is not None

    def has_reminder_near(self, target: datetime) -> bool:
        window = timedelta(minutes=settings.reflection_reminder_window_minutes)
        return any(
            abs(notification.trigger_at - target) < window
            for notification in self.notifications.pending(REFLECTION_KIND)
        )

    def on_reflection_added(self) -> int:
        """Cancel pending reminders once the user has written a reflection"""
        logger.info("📝 Reflection added - cancelling reminders")
        return self.notifications.cancel_kind(REFLECTION_KIND)

    def send_test_notification(self) -> Optional[ScheduledNotification]:
        """Schedule an immediate reminder to check delivery end to end"""
        if not settings.notifications_enabled:
            logger.info("📝 Notifications disabled - no test reminder sent")
            return None

        return self.notifications.schedule(
            kind=REFLECTION_KIND,
            title=f"{REFLECTION_TITLE} (TEST)",
            body="This is a test reflection reminder. How was your day?",
            trigger_at=local_now(),
        )

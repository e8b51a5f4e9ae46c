import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from lumi.core.config import settings
from lumi.db.session import SessionLocal
from lumi.services.notification_service import NotificationService
from lumi.services.reflection_reminder import ReflectionReminderService
from lumi.utils.dates import local_now

logger = logging.getLogger(__name__)


class SchedulerService:
    """Service for managing scheduled jobs"""

    def __init__(self):
        self.scheduler = AsyncIOScheduler(timezone=settings.timezone)
        self._setup_jobs()

    def _setup_jobs(self):
        """Set up all scheduled jobs"""

        # Reflection reminder check at the top of every hour; start() also queues one immediately
        self.scheduler.add_job(
            func=self.check_reflection_reminder,
            trigger=CronTrigger(minute=0, timezone=settings.timezone),
            id="reflection_reminder_check",
            name="Reflection Reminder Check",
            replace_existing=True
        )

        # Deliver due notifications every minute
        self.scheduler.add_job(
            func=self.deliver_notifications,
            trigger=IntervalTrigger(minutes=1),
            id="notification_delivery",
            name="Notification Delivery",
            replace_existing=True
        )

        logger.info("Scheduled jobs configured")

    def start(self):
        """Start the scheduler"""
        try:
            self.scheduler.start()
            # Startup check, queued after start() so its run time is not already past
            self.scheduler.modify_job("reflection_reminder_check", next_run_time=local_now())
            logger.info("Scheduler started successfully")
        except Exception as e:
            logger.error(f"Failed to start scheduler: {e}")

    def shutdown(self):
        """Shutdown the scheduler"""
        try:
            self.scheduler.shutdown(wait=True)
            logger.info("Scheduler shut down successfully")
        except Exception as e:
            logger.error(f"Failed to shutdown scheduler: {e}")

    async def check_reflection_reminder(self):
        db = SessionLocal()
        try:
            ReflectionReminderService(db).check_and_schedule()
        except Exception as e:
            logger.error(f"Error in reflection reminder check: {e}")
        finally:
            db.close()

    async def deliver_notifications(self):
        db = SessionLocal()
        try:
            delivered = NotificationService(db).deliver_due()
            if delivered:
                logger.info(f"Delivered {len(delivered)} notifications")
        except Exception as e:
            logger.error(f"Error delivering notifications: {e}")
            db.rollback()
        finally:
            db.close()


# Global scheduler instance
scheduler_service = SchedulerService()

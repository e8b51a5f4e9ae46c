"""Tests for scheduled notification records."""

from lumi.models.notification import ScheduledNotification
from lumi.services.notification_service import NotificationService


class TestNotificationService:

    def test_schedule_persists_aware_trigger(self, db, at):
        service = NotificationService(db)
        notification = service.schedule("task", "⏰ Task reminder", "buy milk", at(2025, 10, 20, 18), ref_id="1")

        stored = db.query(ScheduledNotification).one()
        assert stored.id == notification.id
        assert stored.status == "scheduled"
        assert stored.trigger_at == at(2025, 10, 20, 18)
        assert stored.trigger_at.tzinfo is not None

    def test_cancel(self, db, at):
        service = NotificationService(db)
        notification = service.schedule("task", "t", "b", at(2025, 10, 20, 18))

        assert service.cancel(notification.id) is True
        assert service.cancel(notification.id) is False
        assert service.cancel(None) is False
        assert service.pending() == []

    def test_cancel_kind_leaves_other_kinds(self, db, at):
        service = NotificationService(db)
        service.schedule("reflection", "r1", "b", at(2025, 10, 20, 21))
        service.schedule("reflection", "r2", "b", at(2025, 10, 21, 21))
        task = service.schedule("task", "t", "b", at(2025, 10, 20, 18))

        assert service.cancel_kind("reflection") == 2
        assert [n.id for n in service.pending()] == [task.id]

    def test_pending_ordered_by_trigger(self, db, at):
        service = NotificationService(db)
        service.schedule("task", "late", "b", at(2025, 10, 22, 9))
        service.schedule("task", "early", "b", at(2025, 10, 21, 9))

        assert [n.title for n in service.pending("task")] == ["early", "late"]

    def test_deliver_due(self, db, at):
        service = NotificationService(db)
        service.schedule("task", "due", "b", at(2025, 10, 20, 9))
        service.schedule("task", "future", "b", at(2025, 10, 20, 18))

        delivered = service.deliver_due(now=at(2025, 10, 20, 12))

        assert [n.title for n in delivered] == ["due"]
        assert [n.title for n in service.pending()] == ["future"]
        assert db.query(ScheduledNotification).filter_by(status="delivered").count() == 1

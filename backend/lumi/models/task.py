from sqlalchemy import Column, String, Integer, Text
from lumi.db.base import Base, UTCDateTime, utcnow


TASK_STATUSES = ("todo", "in_progress", "done")
TASK_PRIORITIES = ("low", "medium", "high")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False, default="personal")
    status = Column(String, nullable=False, default="todo")  # todo, in_progress, done
    priority = Column(String, nullable=False, default="medium")  # low, medium, high
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    due_date = Column(UTCDateTime, nullable=True)
    reminder_date = Column(UTCDateTime, nullable=True)
    completed_at = Column(UTCDateTime, nullable=True)
    notification_id = Column(String, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "status": self.status,
            "priority": self.priority,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "reminder_date": self.reminder_date.isoformat() if self.reminder_date else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "type": "task",
        }

    def __repr__(self):
        return f"<Task(title='{self.title[:30]}', status='{self.status}')>"

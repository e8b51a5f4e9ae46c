from sqlalchemy import Column, String, Text
from lumi.db.base import Base, UTCDateTime, utcnow
import uuid


class ScheduledNotification(Base):
    __tablename__ = "scheduled_notifications"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    kind = Column(String, nullable=False)  # task, reflection
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    trigger_at = Column(UTCDateTime, nullable=False)
    status = Column(String, nullable=False, default="scheduled")  # scheduled, delivered, cancelled
    ref_id = Column(String, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<ScheduledNotification(kind='{self.kind}', trigger_at='{self.trigger_at}', status='{self.status}')>"

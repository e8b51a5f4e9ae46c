from sqlalchemy import Column, String, Text, Date
from lumi.db.base import Base, UTCDateTime, utcnow
import uuid


class Reflection(Base):
    """Daily free-text journal entry"""
    __tablename__ = "reflections"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    date = Column(Date, nullable=False)  # Local calendar day the reflection belongs to
    text = Column(Text, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "text": self.text,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Reflection(date='{self.date}', text='{self.text[:30]}...')>"

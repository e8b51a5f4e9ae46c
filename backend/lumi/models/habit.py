from sqlalchemy import Column, String, Text, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from lumi.db.base import Base, UTCDateTime, utcnow
import uuid


class Habit(Base):
    __tablename__ = "habits"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(Text, nullable=False)
    color = Column(String, nullable=False, default="#FFB3BA")
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    completion_rows = relationship(
        "HabitCompletion",
        back_populates="habit",
        cascade="all, delete-orphan",
        order_by="HabitCompletion.date",
    )

    @property
    def completions(self) -> dict:
        """Per-date completion map keyed by ISO date"""
        return {row.date.isoformat(): True for row in self.completion_rows}

    def __repr__(self):
        return f"<Habit(title='{self.title}')>"


class HabitCompletion(Base):
    __tablename__ = "habit_completions"
    __table_args__ = (UniqueConstraint("habit_id", "date", name="uq_habit_completion_date"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    habit_id = Column(String, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    habit = relationship("Habit", back_populates="completion_rows")

    def __repr__(self):
        return f"<HabitCompletion(habit_id='{self.habit_id}', date='{self.date}')>"

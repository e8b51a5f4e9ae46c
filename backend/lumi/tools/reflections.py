from datetime import datetime
from typing import Dict, Any
from sqlalchemy.orm import Session
from lumi.tools.base import BaseTool, ToolResult
from lumi.models.reflection import Reflection
from lumi.services.reflection_reminder import ReflectionReminderService
from lumi.utils.dates import local_today
import logging

logger = logging.getLogger(__name__)


class AddReflectionTool(BaseTool):
    """Tool for writing the daily reflection"""

    @property
    def name(self) -> str:
        return "add_reflection"

    @property
    def description(self) -> str:
        return ("Save a reflection about the user's day (how it went, feelings, lessons). "
                "Saving one cancels tonight's reflection reminder.")

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "text": {
                    "type": "string",
                    "description": "The reflection text"
                },
                "date": {
                    "type": "string",
                    "description": "Day the reflection belongs to (YYYY-MM-DD). Defaults to today."
                }
            },
            "required": ["text"]
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        text = kwargs.get("text")
        if not text or not text.strip():
            return ToolResult(success=False, message="Reflection text is required")

        day = local_today()
        if kwargs.get("date"):
            try:
                day = datetime.strptime(kwargs["date"], "%Y-%m-%d").date()
            except ValueError:
                return ToolResult(success=False, message="Invalid date format. Please use YYYY-MM-DD format.")

        reflection = Reflection(date=day, text=text.strip())
        db.add(reflection)
        db.commit()
        db.refresh(reflection)

        if day == local_today():
            ReflectionReminderService(db).on_reflection_added()

        return ToolResult(
            success=True,
            data={"reflection": reflection.to_dict()},
            message=f"Saved reflection for {day.isoformat()}"
        )


class ListReflectionsTool(BaseTool):
    """Tool for reading past reflections"""

    @property
    def name(self) -> str:
        return "list_reflections"

    @property
    def description(self) -> str:
        return "List the user's recent reflections, newest first."

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of reflections (default: 7)",
                    "default": 7
                }
            }
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        limit = kwargs.get("limit") or 7
        reflections = db.query(Reflection).order_by(
            Reflection.date.desc(), Reflection.created_at.desc()
        ).limit(limit).all()

        return ToolResult(
            success=True,
            data={"reflections": [r.to_dict() for r in reflections]},
            message=f"Found {len(reflections)} reflections"
        )

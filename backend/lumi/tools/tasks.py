from datetime import datetime, timedelta
from typing import Dict, Any, Optional
from sqlalchemy.orm import Session
from lumi.tools.base import BaseTool, ToolResult
from lumi.models.task import Task, TASK_STATUSES, TASK_PRIORITIES
from lumi.services.notification_service import NotificationService
from lumi.services.task_insights import sort_tasks
from lumi.services.task_parser import parse_task_input
from lumi.db.base import utcnow
from lumi.utils.dates import format_due, local_at, parse_iso
import logging

logger = logging.getLogger(__name__)

TASK_KIND = "task"


def _schedule_task_reminder(db: Session, task: Task) -> None:
    """Schedule a reminder for a task whose reminder date is still ahead"""
    if not task.reminder_date or task.reminder_date <= utcnow():
        return
    notification = NotificationService(db).schedule(
        kind=TASK_KIND,
        title="⏰ Task reminder",
        body=task.title,
        trigger_at=task.reminder_date,
        ref_id=str(task.id),
    )
    task.notification_id = notification.id
    db.commit()


def _task_payload(task: Task) -> Dict[str, Any]:
    data = task.to_dict()
    data["due_label"] = format_due(task.due_date)
    return data


class AddTaskTool(BaseTool):
    """Tool for capturing a task from natural language"""

    @property
    def name(self) -> str:
        return "add_task"

    @property
    def description(self) -> str:
        return ("Add a task or reminder. Pass the user's words as 'text' (e.g. 'buy groceries tomorrow at 6pm'); "
                "the due date and reminder time are extracted from it. Tasks without a time default to this evening.")

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "text": {
                    "type": "string",
                    "description": "The task in natural language, including any date or time"
                },
                "description": {
                    "type": "string",
                    "description": "Optional longer description"
                },
                "category": {
                    "type": "string",
                    "description": "Task category (default: personal)",
                    "default": "personal"
                },
                "priority": {
                    "type": "string",
                    "enum": list(TASK_PRIORITIES),
                    "default": "medium"
                },
                "due_date": {
                    "type": "string",
                    "description": "Optional explicit due date (ISO 8601). Overrides any date found in text."
                }
            },
            "required": ["text"]
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        """Create a new task"""

        text = kwargs.get("text")
        priority = kwargs.get("priority") or "medium"

        if not text or not text.strip():
            return ToolResult(success=False, message="Task text is required")

        if priority not in TASK_PRIORITIES:
            return ToolResult(success=False, message=f"Invalid priority '{priority}'")

        parsed = parse_task_input(text)
        due_date = parsed.due_date

        if kwargs.get("due_date"):
            try:
                due_date = parse_iso(kwargs["due_date"])
            except ValueError:
                return ToolResult(
                    success=False,
                    message="Invalid due_date format. Please use ISO 8601 (e.g. '2025-01-15T18:00:00+05:30')"
                )

        task = Task(
            title=parsed.title,
            description=kwargs.get("description"),
            category=kwargs.get("category") or "personal",
            status="todo",
            priority=priority,
            due_date=due_date,
            reminder_date=due_date,
        )
        db.add(task)
        db.commit()
        db.refresh(task)

        _schedule_task_reminder(db, task)

        return ToolResult(
            success=True,
            data={"task": _task_payload(task)},
            message=f"Added task: {task.title[:50]}{'...' if len(task.title) > 50 else ''}"
        )


class ListTasksTool(BaseTool):
    """Tool for listing tasks"""

    @property
    def name(self) -> str:
        return "list_tasks"

    @property
    def description(self) -> str:
        return "List tasks, optionally filtered by status and by the local day they are due (YYYY-MM-DD)."

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "status": {
                    "type": "string",
                    "enum": list(TASK_STATUSES),
                    "description": "Filter by status. Omit to list every task."
                },
                "date": {
                    "type": "string",
                    "description": "Only tasks due on this day (YYYY-MM-DD)"
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of tasks to return (default: 20)",
                    "default": 20
                }
            }
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        status = kwargs.get("status")
        date_str = kwargs.get("date")
        limit = kwargs.get("limit") or 20

        if status and status not in TASK_STATUSES:
            return ToolResult(success=False, message=f"Invalid status '{status}'")

        query = db.query(Task)
        if status:
            query = query.filter(Task.status == status)

        if date_str:
            try:
                day = datetime.strptime(date_str, "%Y-%m-%d").date()
            except ValueError:
                return ToolResult(success=False, message="Invalid date format. Please use YYYY-MM-DD format.")
            start_of_day = local_at(day, 0)
            end_of_day = local_at(day + timedelta(days=1), 0)
            query = query.filter(Task.due_date >= start_of_day, Task.due_date < end_of_day)

        tasks = sort_tasks(query.all())[:limit]

        message = f"Found {len(tasks)} {status + ' ' if status else ''}tasks"
        if date_str:
            message += f" for {date_str}"

        return ToolResult(
            success=True,
            data={"tasks": [_task_payload(t) for t in tasks], "total_found": len(tasks)},
            message=message
        )


class UpdateTaskTool(BaseTool):
    """Tool for updating tasks"""

    @property
    def name(self) -> str:
        return "update_task"

    @property
    def description(self) -> str:
        return "Update a task by id: rename it, change its status (todo, in_progress, done), priority or due date."

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "id": {"type": "integer", "description": "The task id"},
                "title": {"type": "string"},
                "description": {"type": "string"},
                "status": {"type": "string", "enum": list(TASK_STATUSES)},
                "priority": {"type": "string", "enum": list(TASK_PRIORITIES)},
                "due_date": {"type": "string", "description": "New due date (ISO 8601)"}
            },
            "required": ["id"]
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        task = _find_task(db, kwargs.get("id"))
        if not task:
            return ToolResult(success=False, message="Task not found")

        status = kwargs.get("status")
        priority = kwargs.get("priority")
        if status and status not in TASK_STATUSES:
            return ToolResult(success=False, message=f"Invalid status '{status}'")
        if priority and priority not in TASK_PRIORITIES:
            return ToolResult(success=False, message=f"Invalid priority '{priority}'")

        new_due: Optional[datetime] = None
        if kwargs.get("due_date"):
            try:
                new_due = parse_iso(kwargs["due_date"])
            except ValueError:
                return ToolResult(success=False, message="Invalid due_date format. Please use ISO 8601.")

        notifications = NotificationService(db)

        if kwargs.get("title"):
            task.title = kwargs["title"]
        if kwargs.get("description") is not None:
            task.description = kwargs["description"]
        if priority:
            task.priority = priority

        if status and status != task.status:
            task.status = status
            if status == "done":
                task.completed_at = utcnow()
                notifications.cancel(task.notification_id)
                task.notification_id = None
            else:
                task.completed_at = None

        if new_due:
            notifications.cancel(task.notification_id)
            task.notification_id = None
            task.due_date = new_due
            task.reminder_date = new_due

        db.commit()
        db.refresh(task)

        if new_due and task.status != "done":
            _schedule_task_reminder(db, task)

        return ToolResult(
            success=True,
            data={"task": _task_payload(task)},
            message=f"Updated task: {task.title[:50]}"
        )


class DeleteTaskTool(BaseTool):
    """Tool for deleting tasks"""

    @property
    def name(self) -> str:
        return "delete_task"

    @property
    def description(self) -> str:
        return "Delete a task by id and cancel its reminder."

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "id": {"type": "integer", "description": "The task id"}
            },
            "required": ["id"]
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        task = _find_task(db, kwargs.get("id"))
        if not task:
            return ToolResult(success=False, message="Task not found")

        NotificationService(db).cancel(task.notification_id)
        title = task.title
        task_id = task.id
        db.delete(task)
        db.commit()

        return ToolResult(
            success=True,
            data={"id": task_id},
            message=f"Deleted task: {title[:50]}"
        )


def _find_task(db: Session, task_id: Any) -> Optional[Task]:
    try:
        task_id = int(task_id)
    except (TypeError, ValueError):
        return None
    return db.query(Task).filter(Task.id == task_id).first()

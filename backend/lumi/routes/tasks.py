from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Dict, Any, Optional
from lumi.db.session import get_db
from lumi.models.task import Task
from lumi.services.task_insights import productivity_patterns
from lumi.services.task_parser import ParsedTask, parse_task_input
from lumi.tools.tasks import AddTaskTool, ListTasksTool
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


class ParseRequest(BaseModel):
    text: str


class TaskCreate(BaseModel):
    text: str
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[str] = None


class TaskListResponse(BaseModel):
    tasks: List[Dict[str, Any]]
    total: int


@router.post("/parse", response_model=ParsedTask)
async def parse_task(request: ParseRequest):
    """Preview how text would be captured as a task, without saving it"""
    try:
        return parse_task_input(request.text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("", status_code=201)
async def create_task(request: TaskCreate, db: Session = Depends(get_db)):
    """Capture a task from natural language"""
    result = await AddTaskTool().execute(db, **request.model_dump(exclude_none=True))
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return result.data["task"]


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    status: Optional[str] = Query(None),
    date: Optional[str] = Query(None, description="Local day, YYYY-MM-DD"),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """List tasks ordered by due date, undated tasks last"""
    result = await ListTasksTool().execute(db, status=status, date=date, limit=limit)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return TaskListResponse(tasks=result.data["tasks"], total=result.data["total_found"])


@router.get("/insights")
async def task_insights(db: Session = Depends(get_db)):
    """Productivity patterns over completed tasks"""
    try:
        tasks = db.query(Task).all()
        return productivity_patterns(tasks)
    except Exception as e:
        logger.error(f"Error computing task insights: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute task insights")

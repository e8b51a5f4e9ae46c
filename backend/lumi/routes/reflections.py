from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Dict, Any, Optional
from lumi.db.session import get_db
from lumi.tools.reflections import AddReflectionTool, ListReflectionsTool
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


class ReflectionCreate(BaseModel):
    text: str
    date: Optional[str] = None


class ReflectionsResponse(BaseModel):
    reflections: List[Dict[str, Any]]


@router.get("", response_model=ReflectionsResponse)
async def list_reflections(
    limit: int = Query(7, ge=1, le=365),
    db: Session = Depends(get_db)
):
    result = await ListReflectionsTool().execute(db, limit=limit)
    return ReflectionsResponse(reflections=result.data["reflections"])


@router.post("", status_code=201)
async def create_reflection(request: ReflectionCreate, db: Session = Depends(get_db)):
    """Save a reflection; today's reflection cancels the pending reminder"""
    result = await AddReflectionTool().execute(db, **request.model_dump(exclude_none=True))
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)
    return result.data["reflection"]

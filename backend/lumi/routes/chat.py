from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Dict, Any
from lumi.db.session import get_db
from lumi.services.agent import AgentTurn, agent_service
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


class ChatRequest(BaseModel):
    message: str
    history: List[Dict[str, Any]] = []


@router.post("", response_model=AgentTurn)
async def chat(request: ChatRequest, db: Session = Depends(get_db)):
    """Run one conversational turn through the agent"""
    logger.info(f"Chat request with {len(request.history)} prior messages")
    return await agent_service.talk(db, request.message, request.history)

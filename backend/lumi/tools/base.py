import json
from abc import ABC, abstractmethod
from typing import Dict, Any
from pydantic import BaseModel
from sqlalchemy.orm import Session


class ToolResult(BaseModel):
    """Outcome of one tool call, as reported back to the model"""
    success: bool
    data: Any = None
    message: str = ""

    def to_tool_content(self) -> str:
        """Serialize for a role=tool chat message"""
        return json.dumps(
            {"success": self.success, "message": self.message, "data": self.data},
            default=str,
        )


class BaseTool(ABC):
    """An action the agent can take on the user's tasks, memories, habits or reflections"""

    @property
    @abstractmethod
    def name(self) -> str:
        """Function name exposed to the model"""

    @property
    @abstractmethod
    def description(self) -> str:
        """When the model should call this tool"""

    @property
    def parameters(self) -> Dict[str, Any]:
        """JSON schema for the tool arguments; no arguments by default"""
        return {"type": "object", "properties": {}}

    @abstractmethod
    async def execute(self, db: Session, **kwargs) -> ToolResult:
        """Run the tool against the given session"""

    def to_openai_schema(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

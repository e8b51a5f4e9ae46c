from typing import Dict, List, Any, Optional
from sqlalchemy.orm import Session
from lumi.tools.base import BaseTool, ToolResult
from lumi.tools.tasks import AddTaskTool, ListTasksTool, UpdateTaskTool, DeleteTaskTool
from lumi.tools.memory import (
    AddMemoryTool, SearchMemoriesTool, ListMemoriesTool, UpdateMemoryTool, DeleteMemoryTool
)
from lumi.tools.reflections import AddReflectionTool, ListReflectionsTool
from lumi.tools.habits import AddHabitTool, ListHabitsTool, ToggleHabitTool
from lumi.services.memory_store import MemoryStore, memory_store as default_memory_store
import logging

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry for all available agent tools"""

    def __init__(self, memory_store: Optional[MemoryStore] = None, tools: Optional[List[BaseTool]] = None):
        self.memory_store = memory_store or default_memory_store
        self.tools: Dict[str, BaseTool] = {}
        for tool in tools if tools is not None else self._default_tools():
            self.register(tool)

    def _default_tools(self) -> List[BaseTool]:
        return [
            # Tasks
            AddTaskTool(),
            ListTasksTool(),
            UpdateTaskTool(),
            DeleteTaskTool(),

            # Memories
            AddMemoryTool(self.memory_store),
            SearchMemoriesTool(self.memory_store),
            ListMemoriesTool(self.memory_store),
            UpdateMemoryTool(self.memory_store),
            DeleteMemoryTool(self.memory_store),

            # Reflections
            AddReflectionTool(),
            ListReflectionsTool(),

            # Habits
            AddHabitTool(),
            ListHabitsTool(),
            ToggleHabitTool(),
        ]

    def register(self, tool: BaseTool):
        self.tools[tool.name] = tool
        logger.info(f"Registered tool: {tool.name}")

    def get_tool(self, name: str) -> Optional[BaseTool]:
        """Get a tool by name"""
        return self.tools.get(name)

    def get_all_tools(self) -> List[BaseTool]:
        """Get all registered tools"""
        return list(self.tools.values())

    def get_openai_schemas(self) -> List[Dict[str, Any]]:
        """Get OpenAI function calling schemas for all tools"""
        return [tool.to_openai_schema() for tool in self.tools.values()]

    async def execute_tool(
        self, name: str, db: Session, parameters: Dict[str, Any]
    ) -> ToolResult:
        """Execute a tool by name"""
        tool = self.get_tool(name)
        if not tool:
            logger.warning(f"Tool not found: {name}")
            return ToolResult(
                success=False,
                message=f"Tool '{name}' not found"
            )

        try:
            result = await tool.execute(db, **parameters)
            logger.info(f"Tool '{name}' executed (success={result.success})")
            return result
        except Exception as e:
            logger.error(f"Tool '{name}' execution failed: {e}")
            db.rollback()
            return ToolResult(
                success=False,
                message=f"Tool execution failed: {str(e)}"
            )


# Global tool registry instance
tool_registry = ToolRegistry()

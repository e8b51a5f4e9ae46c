from typing import Dict, Any
from sqlalchemy.orm import Session
import httpx
from lumi.tools.base import BaseTool, ToolResult
from lumi.services.memory_store import MemoryStore, MemoryStoreError
import logging

logger = logging.getLogger(__name__)


class MemoryTool(BaseTool):
    """Shared plumbing for tools that talk to the memory store"""

    def __init__(self, store: MemoryStore):
        self.store = store

    def _failure(self, action: str, error: Exception) -> ToolResult:
        logger.error(f"Failed to {action}: {error}")
        return ToolResult(success=False, message=f"Failed to {action}: {str(error)}")


class AddMemoryTool(MemoryTool):
    """Tool for storing a fact worth remembering"""

    @property
    def name(self) -> str:
        return "add_memory"

    @property
    def description(self) -> str:
        return ("Save something the user wants remembered (a fact, preference, idea or note). "
                "Give it a short title and the full text.")

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "title": {
                    "type": "string",
                    "description": "Short title for the memory"
                },
                "text": {
                    "type": "string",
                    "description": "The content to remember"
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Optional tags"
                }
            },
            "required": ["title", "text"]
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        title = kwargs.get("title")
        text = kwargs.get("text")
        tags = kwargs.get("tags") or []

        if not title or not text:
            return ToolResult(success=False, message="Both title and text are required")

        try:
            memory_id = await self.store.create_memory(title=title, text=text, tags=tags)
        except (httpx.HTTPError, MemoryStoreError) as e:
            return self._failure("save memory", e)

        return ToolResult(
            success=True,
            data={"memory": {"id": memory_id, "title": title, "text": text, "tags": tags, "type": "memory"}},
            message=f"Remembered: {title}"
        )


class SearchMemoriesTool(MemoryTool):
    """Tool for semantic search over memories"""

    @property
    def name(self) -> str:
        return "search_memories"

    @property
    def description(self) -> str:
        return "Search saved memories by meaning. Use this whenever the user asks about something they told you before."

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "What to look for"
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of results (default: 10)",
                    "default": 10
                }
            },
            "required": ["query"]
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        query = kwargs.get("query")
        if not query:
            return ToolResult(success=False, message="A search query is required")

        try:
            memories = await self.store.search_memories(query, limit=kwargs.get("limit"))
        except (httpx.HTTPError, MemoryStoreError) as e:
            return self._failure("search memories", e)

        return ToolResult(
            success=True,
            data={"memories": [m.to_dict() for m in memories]},
            message=f"Found {len(memories)} memories matching '{query}'"
        )


class ListMemoriesTool(MemoryTool):
    """Tool for listing memories"""

    @property
    def name(self) -> str:
        return "list_memories"

    @property
    def description(self) -> str:
        return "List saved memories."

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of memories (default: 100)"
                }
            }
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        try:
            memories = await self.store.get_all_memories(limit=kwargs.get("limit"))
        except (httpx.HTTPError, MemoryStoreError) as e:
            return self._failure("list memories", e)

        return ToolResult(
            success=True,
            data={"memories": [m.to_dict() for m in memories]},
            message=f"Found {len(memories)} memories"
        )


class UpdateMemoryTool(MemoryTool):
    """Tool for editing a memory"""

    @property
    def name(self) -> str:
        return "update_memory"

    @property
    def description(self) -> str:
        return "Update the title, text or tags of a saved memory by id."

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "The memory id"},
                "title": {"type": "string"},
                "text": {"type": "string"},
                "tags": {"type": "array", "items": {"type": "string"}}
            },
            "required": ["id"]
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        memory_id = kwargs.get("id")
        if not memory_id:
            return ToolResult(success=False, message="Memory id is required")

        try:
            existing = await self.store.get_memory(memory_id)
            if not existing:
                return ToolResult(success=False, message="Memory not found")

            await self.store.update_memory(
                memory_id,
                title=kwargs.get("title"),
                text=kwargs.get("text"),
                tags=kwargs.get("tags"),
            )
        except (httpx.HTTPError, MemoryStoreError) as e:
            return self._failure("update memory", e)

        return ToolResult(
            success=True,
            data={"id": memory_id},
            message=f"Updated memory: {kwargs.get('title') or existing.title}"
        )


class DeleteMemoryTool(MemoryTool):
    """Tool for forgetting a memory"""

    @property
    def name(self) -> str:
        return "delete_memory"

    @property
    def description(self) -> str:
        return "Delete a saved memory by id."

    @property
    def parameters(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "The memory id"}
            },
            "required": ["id"]
        }

    async def execute(self, db: Session, **kwargs) -> ToolResult:
        memory_id = kwargs.get("id")
        if not memory_id:
            return ToolResult(success=False, message="Memory id is required")

        try:
            await self.store.delete_memory(memory_id)
        except (httpx.HTTPError, MemoryStoreError) as e:
            return self._failure("delete memory", e)

        return ToolResult(success=True, data={"id": memory_id}, message="Memory deleted")

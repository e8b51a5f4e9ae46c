"""
Semantic memory store backed by Weaviate.

Talks to Weaviate's REST (`/v1/objects`, `/v1/schema`) and GraphQL
(`/v1/graphql`) endpoints. Vectors are produced server-side by the
text2vec-openai module, so search is a plain nearText query.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from lumi.core.config import settings

logger = logging.getLogger(__name__)

MEMORY_FIELDS = "title text date tags _additional { id }"


class MemoryStoreError(Exception):
    """Raised when Weaviate answers with an unusable payload"""


class Memory(BaseModel):
    id: Optional[str] = None
    title: str
    text: str
    date: Optional[str] = None
    tags: List[str] = []

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        data["type"] = "memory"
        return data


def memory_class_definition(class_name: str) -> Dict[str, Any]:
    return {
        "class": class_name,
        "description": "A class to store memory entries",
        "vectorizer": "text2vec-openai",
        "properties": [
            {"name": "title", "dataType": ["text"], "description": "The title of the memory"},
            {"name": "text", "dataType": ["text"], "description": "The content of the memory"},
            {"name": "date", "dataType": ["date"], "description": "When this memory was created"},
            {"name": "tags", "dataType": ["text[]"], "description": "Tags associated with the memory"},
        ],
    }


class MemoryStore:
    """Client for the Memory class in Weaviate"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        class_name: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or f"{settings.weaviate_scheme}://{settings.weaviate_url}/v1"
        self.class_name = class_name or settings.memory_class_name

        headers = {"Content-Type": "application/json"}
        api_key = api_key or settings.weaviate_api_key
        openai_api_key = openai_api_key or settings.weaviate_openai_api_key
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        if openai_api_key:
            headers["X-OpenAI-Api-Key"] = openai_api_key

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=30.0,
            transport=transport,
        )

    async def initialize_schema(self) -> bool:
        """Create the Memory class if it does not exist. Returns True when created."""
        response = await self.client.get("/schema")
        response.raise_for_status()

        classes = response.json().get("classes") or []
        if any(c.get("class") == self.class_name for c in classes):
            return False

        response = await self.client.post("/schema", json=memory_class_definition(self.class_name))
        response.raise_for_status()
        logger.info(f"{self.class_name} schema created successfully")
        return True

    async def create_memory(self, title: str, text: str, tags: Optional[List[str]] = None) -> str:
        payload = {
            "class": self.class_name,
            "properties": {
                "title": title,
                "text": text,
                "date": _now_iso(),
                "tags": tags or [],
            },
        }
        try:
            response = await self.client.post("/objects", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error creating memory: {e}")
            raise

        memory_id = response.json().get("id")
        if not memory_id:
            raise MemoryStoreError("Failed to create memory: no ID returned")
        return memory_id

    async def get_memory(self, memory_id: str) -> Optional[Memory]:
        response = await self.client.get(f"/objects/{self.class_name}/{memory_id}")
        if response.status_code == 404:
            return None
        response.raise_for_status()

        result = response.json()
        properties = result.get("properties")
        if not properties:
            return None
        return _to_memory(result.get("id"), properties)

    async def update_memory(
        self,
        memory_id: str,
        title: Optional[str] = None,
        text: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> None:
        """Merge the given fields into an existing memory and refresh its date"""
        properties: Dict[str, Any] = {"date": _now_iso()}
        if title is not None:
            properties["title"] = title
        if text is not None:
            properties["text"] = text
        if tags is not None:
            properties["tags"] = tags

        try:
            response = await self.client.patch(
                f"/objects/{self.class_name}/{memory_id}",
                json={"class": self.class_name, "properties": properties},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error updating memory {memory_id}: {e}")
            raise

    async def delete_memory(self, memory_id: str) -> None:
        try:
            response = await self.client.delete(f"/objects/{self.class_name}/{memory_id}")
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error deleting memory {memory_id}: {e}")
            raise

    async def search_memories(self, query: str, limit: Optional[int] = None) -> List[Memory]:
        limit = min(limit or settings.memory_search_limit, settings.memory_search_limit)
        arguments = f"nearText: {{concepts: [{json.dumps(query)}]}}, limit: {int(limit)}"
        return await self._get(arguments)

    async def get_all_memories(self, limit: Optional[int] = None) -> List[Memory]:
        limit = min(limit or settings.memory_list_limit, settings.memory_list_limit)
        return await self._get(f"limit: {int(limit)}")

    async def _get(self, arguments: str) -> List[Memory]:
        query = f"{{ Get {{ {self.class_name}({arguments}) {{ {MEMORY_FIELDS} }} }} }}"
        try:
            response = await self.client.post("/graphql", json={"query": query})
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error querying memories: {e}")
            raise

        payload = response.json()
        if payload.get("errors"):
            messages = "; ".join(str(err.get("message", err)) for err in payload["errors"])
            raise MemoryStoreError(f"GraphQL query failed: {messages}")

        items = ((payload.get("data") or {}).get("Get") or {}).get(self.class_name) or []
        return [_to_memory((item.get("_additional") or {}).get("id"), item) for item in items]

    async def close(self):
        await self.client.aclose()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _to_memory(memory_id: Optional[str], properties: Dict[str, Any]) -> Memory:
    return Memory(
        id=memory_id,
        title=properties.get("title") or "",
        text=properties.get("text") or "",
        date=properties.get("date"),
        tags=properties.get("tags") or [],
    )


# Global memory store instance
memory_store = MemoryStore()

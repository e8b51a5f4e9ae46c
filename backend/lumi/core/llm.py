import httpx
import logging
from typing import Dict, List, Any, Optional
from lumi.core.config import settings

logger = logging.getLogger(__name__)


class LLMClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.openai_base_url
        self.model = model or settings.openai_model
        self.headers = {"Authorization": f"Bearer {api_key or settings.openai_api_key}"}
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=settings.openai_timeout_s,
            transport=transport,
        )

    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict]] = None,
        tool_choice: str = "auto",
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Send chat completion request to OpenAI-compatible endpoint"""

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
        }

        if temperature is not None:
            payload["temperature"] = temperature

        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = tool_choice

        try:
            logger.info(f"Sending chat request to {self.base_url}")
            response = await self.client.post("/chat/completions", json=payload)
            response.raise_for_status()

            result = response.json()
            logger.info("Chat completion successful")
            return result

        except httpx.HTTPStatusError as e:
            logger.error(f"OpenAI API error {e.response.status_code}: {e.response.text}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"HTTP error in chat completion: {e}")
            raise

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()


# Global LLM client instance
llm_client = LLMClient()

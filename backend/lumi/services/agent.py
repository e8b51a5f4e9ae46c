"""
Agent Service - the tool-calling conversation loop behind /chat
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.orm import Session

from lumi.core.config import settings
from lumi.core.llm import LLMClient, llm_client
from lumi.core.prompts import build_system_message
from lumi.tools.base import ToolResult
from lumi.tools.registry import ToolRegistry, tool_registry

logger = logging.getLogger(__name__)

ERROR_REPLY = "An error occurred while talking to the agent."
EMPTY_REPLY = "No response"
LOOP_LIMIT_REPLY = "I couldn't finish that just now. Could you try asking again?"

DISPLAY_BLOCK = re.compile(r'\{[\s\S]*"display_message"[\s\S]*\}')
EMPTY_FENCE = re.compile(r"```(?:json)?\s*```")


class AgentTurn(BaseModel):
    response: str
    display_message: Optional[Dict[str, Any]] = None
    messages: List[Dict[str, Any]]
    tool_effects: List[Dict[str, Any]] = []
    completed: bool = True
    error: Optional[str] = None


def extract_display_message(content: Optional[str]) -> Tuple[str, Optional[Dict[str, Any]]]:
    """Split an assistant reply into chat text and its display_message payload"""
    if not content:
        return content or "", None

    match = DISPLAY_BLOCK.search(content)
    if not match:
        return content, None

    try:
        block = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.debug("Reply contains an unparseable display block")
        return content, None

    if not isinstance(block, dict) or "display_message" not in block:
        return content, None

    text = content[:match.start()] + content[match.end():]
    text = EMPTY_FENCE.sub("", text).strip()
    return text, block["display_message"]


def trim_history(history: List[Dict[str, Any]], limit: int) -> List[Dict[str, Any]]:
    """Keep the most recent messages without starting on an orphaned tool reply"""
    trimmed = list(history[-limit:]) if limit > 0 else []
    while trimmed and trimmed[0].get("role") == "tool":
        trimmed.pop(0)
    return trimmed


class AgentService:
    """Runs one user turn through the LLM, executing tool calls until it answers"""

    def __init__(self, llm: Optional[LLMClient] = None, registry: Optional[ToolRegistry] = None):
        self.llm = llm or llm_client
        self.registry = registry or tool_registry

    async def talk(
        self,
        db: Session,
        user_message: str,
        history: Optional[List[Dict[str, Any]]] = None,
    ) -> AgentTurn:
        prior = trim_history(history or [], settings.agent_history_limit)
        messages = prior + [{"role": "user", "content": user_message}]
        tool_effects: List[Dict[str, Any]] = []
        tools = self.registry.get_openai_schemas()

        try:
            for iteration in range(settings.agent_max_iterations):
                response = await self.llm.chat_completion(
                    messages=[build_system_message()] + messages,
                    tools=tools,
                )
                assistant_message = response["choices"][0]["message"]
                messages.append(_clean_assistant_message(assistant_message))

                tool_calls = assistant_message.get("tool_calls") or []
                if not tool_calls:
                    content = assistant_message.get("content") or EMPTY_REPLY
                    text, display = extract_display_message(content)
                    return AgentTurn(
                        response=text or EMPTY_REPLY,
                        display_message=display,
                        messages=messages,
                        tool_effects=tool_effects,
                    )

                logger.info(f"Agent iteration {iteration + 1}: {len(tool_calls)} tool call(s)")
                for tool_call in tool_calls:
                    reply, effect = await self._run_tool_call(db, tool_call)
                    messages.append(reply)
                    if effect:
                        tool_effects.append(effect)

        except Exception as e:
            logger.error(f"Agent error: {e}")
            return AgentTurn(
                response=ERROR_REPLY,
                messages=prior + [{"role": "user", "content": user_message}],
                tool_effects=tool_effects,
                completed=False,
                error=str(e),
            )

        logger.warning(f"Agent stopped after {settings.agent_max_iterations} iterations")
        messages.append({"role": "assistant", "content": LOOP_LIMIT_REPLY})
        return AgentTurn(
            response=LOOP_LIMIT_REPLY,
            messages=messages,
            tool_effects=tool_effects,
            completed=False,
        )

    async def _run_tool_call(
        self, db: Session, tool_call: Dict[str, Any]
    ) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
        """Execute one tool call and build the role=tool reply for it"""
        function = tool_call.get("function") or {}
        tool_name = function.get("name", "")
        call_id = tool_call.get("id")

        raw_arguments = function.get("arguments") or "{}"
        try:
            # Some OpenAI-compatible servers send the arguments already decoded
            arguments = raw_arguments if isinstance(raw_arguments, dict) else json.loads(raw_arguments)
            if not isinstance(arguments, dict):
                raise ValueError("arguments must be a JSON object")
        except (TypeError, ValueError) as e:
            logger.warning(f"Malformed arguments for tool '{tool_name}': {e}")
            result = ToolResult(success=False, message=f"Invalid arguments for tool '{tool_name}': {e}")
            return _tool_reply(call_id, result), {"tool": tool_name, "success": False, "message": result.message}

        result = await self.registry.execute_tool(tool_name, db, arguments)
        effect = {"tool": tool_name, "success": result.success, "message": result.message, "data": result.data}
        return _tool_reply(call_id, result), effect


def _tool_reply(call_id: Optional[str], result: ToolResult) -> Dict[str, Any]:
    return {"role": "tool", "tool_call_id": call_id, "content": result.to_tool_content()}


def _clean_assistant_message(message: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {"role": "assistant", "content": message.get("content")}
    if message.get("tool_calls"):
        cleaned["tool_calls"] = message["tool_calls"]
    return cleaned


# Global agent instance
agent_service = AgentService()

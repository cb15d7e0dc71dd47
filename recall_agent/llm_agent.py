"""LLM agent capability with an OpenRouter implementation and tool-call dispatch."""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import httpx
from loguru import logger

from .config import agent_config, settings
from .errors import AgentError
from .models import LLMConfig


class AgentCapability(ABC):
    """
    Anything that can answer a prompt, optionally calling tools.

    A tool is any object exposing ``name``, ``schema()`` and an async
    ``invoke(arguments) -> str``.
    """

    @abstractmethod
    async def complete(self, prompt: str, tools: Sequence[Any] = ()) -> str:
        """Return the agent's final textual answer to ``prompt``."""


class OpenRouterAgent(AgentCapability):
    """
    Agent backed by an OpenAI-compatible chat completions API (OpenRouter).

    Handles retries, model fallbacks and the tool-call loop.
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        system_prompt: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config or settings.llm_config
        self.system_prompt = system_prompt or agent_config.get_system_prompt()
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout_seconds),
            headers={
                "Authorization": f"Bearer {self.config.api_key}",
                "Content-Type": "application/json",
                "X-Title": "Recall Trading Agent"
            },
            transport=transport
        )
        self.metrics = self._empty_metrics()

    @staticmethod
    def _empty_metrics() -> Dict[str, int]:
        return {
            "total_calls": 0,
            "successful_calls": 0,
            "failed_calls": 0,
            "total_tokens": 0,
            "tool_calls": 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def complete(self, prompt: str, tools: Sequence[Any] = ()) -> str:
        """
        Run the prompt through the model, dispatching tool calls until the
        model answers in plain text.

        Args:
            prompt: user instruction
            tools: tools the model may call

        Returns:
            The final assistant message content

        Raises:
            AgentError: if the provider fails on every attempt
        """
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": prompt}
        ]
        tool_map = {tool.name: tool for tool in tools}
        tool_schemas = [tool.schema() for tool in tools] or None

        for round_number in range(self.config.max_tool_rounds):
            message = await self._call_llm(messages, tool_schemas)
            tool_calls = message.get("tool_calls") or []
            if not tool_calls:
                return (message.get("content") or "").strip()

            logger.info(f"Agent requested {len(tool_calls)} tool call(s) in round {round_number + 1}")
            messages.append({
                "role": "assistant",
                "content": message.get("content"),
                "tool_calls": tool_calls
            })
            for call in tool_calls:
                result = await self._dispatch(call, tool_map)
                messages.append({
                    "role": "tool",
                    "tool_call_id": call.get("id"),
                    "content": result
                })

        logger.warning("Tool round limit reached, requesting final answer")
        message = await self._call_llm(messages, None)
        return (message.get("content") or "").strip()

    async def _dispatch(self, call: Dict[str, Any], tool_map: Dict[str, Any]) -> str:
        """Invoke one requested tool; problems are reported back as text."""
        function = call.get("function") or {}
        name = function.get("name", "")
        tool = tool_map.get(name)
        if tool is None:
            logger.warning(f"Agent requested unknown tool: {name}")
            return f"Unknown tool: {name}"

        raw_arguments = function.get("arguments") or "{}"
        try:
            arguments = json.loads(raw_arguments) if isinstance(raw_arguments, str) else raw_arguments
        except json.JSONDecodeError as e:
            return f"Invalid JSON arguments for {name}: {e}"
        if not isinstance(arguments, dict):
            return f"Invalid arguments for {name}: expected a JSON object"

        self.metrics["tool_calls"] += 1
        return await tool.invoke(arguments)

    async def _call_llm(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]]
    ) -> Dict[str, Any]:
        """
        Make an API call to OpenRouter with retries and fallbacks.

        Returns:
            The assistant message of the first choice
        """
        models_to_try = [self.config.model] + self.config.fallback_models

        for attempt in range(self.config.max_retries):
            for model in models_to_try:
                try:
                    logger.debug(f"Calling LLM: {model} (attempt {attempt + 1})")

                    payload: Dict[str, Any] = {
                        "model": model,
                        "messages": messages,
                        "temperature": self.config.temperature,
                        "max_tokens": self.config.max_tokens,
                        "stream": False
                    }
                    if tools:
                        payload["tools"] = tools
                        payload["tool_choice"] = "auto"

                    self.metrics["total_calls"] += 1
                    response = await self.client.post(
                        f"{self.config.base_url}/chat/completions",
                        json=payload
                    )

                    if response.status_code == 200:
                        data = response.json()
                        message = data["choices"][0]["message"]
                        if not isinstance(message, dict):
                            raise TypeError(f"expected a message object, got {type(message).__name__}")

                        self.metrics["successful_calls"] += 1
                        if "usage" in data:
                            self.metrics["total_tokens"] += data["usage"].get("total_tokens", 0)

                        logger.info(f"LLM call successful: {model}")
                        return message

                    logger.warning(f"LLM call failed: {response.status_code} - {response.text}")

                except httpx.TimeoutException:
                    logger.warning(f"LLM call timeout: {model}")
                except httpx.HTTPError as e:
                    logger.warning(f"LLM call error: {model} - {e}")
                except (KeyError, IndexError, TypeError, ValueError) as e:
                    logger.warning(f"LLM returned a malformed response: {model} - {e}")

            # Exponential backoff between retries
            if attempt < self.config.max_retries - 1:
                wait_time = 2 ** attempt
                logger.info(f"Retrying in {wait_time} seconds...")
                await asyncio.sleep(wait_time)

        self.metrics["failed_calls"] += 1
        logger.error("All LLM call attempts failed")
        raise AgentError("LLM completion failed after all retries")

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics."""
        return self.metrics.copy()

    def reset_metrics(self) -> None:
        """Reset all metrics."""
        self.metrics = self._empty_metrics()

"""
Tests for the OpenRouter agent and its tool-call loop.
"""

import json
import httpx
import pytest
from unittest.mock import AsyncMock, patch

from recall_agent.errors import AgentError
from recall_agent.llm_agent import OpenRouterAgent
from recall_agent.models import LLMConfig

from conftest import RecordingTransport, sequence_handler, USDC, WETH


def completion(content=None, tool_calls=None):
    message = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return httpx.Response(200, json={
        "choices": [{"message": message}],
        "usage": {"total_tokens": 42}
    })


def tool_call(name, arguments, call_id="call_1"):
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(arguments) if not isinstance(arguments, str) else arguments}
    }


class FakeTool:
    name = "execute_trade"

    def __init__(self, result="ok"):
        self.result = result
        self.calls = []

    def schema(self):
        return {"type": "function", "function": {"name": self.name, "parameters": {"type": "object"}}}

    async def invoke(self, arguments):
        self.calls.append(arguments)
        return self.result


@pytest.fixture
def llm_config():
    return LLMConfig(api_key="llm-key", base_url="https://llm.test/v1", model="test/model",
                     max_retries=2, max_tool_rounds=3)


class TestComplete:
    """Test prompt completion and tool dispatch."""

    @pytest.mark.asyncio
    async def test_plain_answer(self, llm_config):
        """Test a plain answer is returned stripped."""
        transport = RecordingTransport(sequence_handler([completion("Nothing to do.")]))
        async with OpenRouterAgent(llm_config, transport=transport) as agent:
            result = await agent.complete("hello", [])

        assert result == "Nothing to do."
        body = json.loads(transport.requests[0].content)
        assert body["model"] == "test/model"
        assert body["messages"][0]["role"] == "system"
        assert body["messages"][1] == {"role": "user", "content": "hello"}
        assert "tools" not in body
        assert transport.requests[0].headers["Authorization"] == "Bearer llm-key"
        assert str(transport.requests[0].url) == "https://llm.test/v1/chat/completions"

    @pytest.mark.asyncio
    async def test_tool_call_round_trip(self, llm_config):
        """Test tool results are sent back to the model."""
        args = {"fromToken": USDC, "toToken": WETH, "amount": "10"}
        transport = RecordingTransport(sequence_handler([
            completion(tool_calls=[tool_call("execute_trade", args)]),
            completion("Trade done: tx-1"),
        ]))
        tool = FakeTool(result='{"transaction": {"id": "tx-1"}}')

        async with OpenRouterAgent(llm_config, transport=transport) as agent:
            result = await agent.complete("trade please", [tool])

        assert result == "Trade done: tx-1"
        assert tool.calls == [args]
        first = json.loads(transport.requests[0].content)
        assert first["tools"][0]["function"]["name"] == "execute_trade"
        second = json.loads(transport.requests[1].content)
        tool_message = second["messages"][-1]
        assert tool_message["role"] == "tool"
        assert tool_message["tool_call_id"] == "call_1"
        assert "tx-1" in tool_message["content"]
        assert agent.get_metrics()["tool_calls"] == 1

    @pytest.mark.asyncio
    async def test_unknown_tool_reported_to_model(self, llm_config):
        """Test an unknown tool name is reported as text."""
        transport = RecordingTransport(sequence_handler([
            completion(tool_calls=[tool_call("launch_rocket", {})]),
            completion("Sorry."),
        ]))

        async with OpenRouterAgent(llm_config, transport=transport) as agent:
            result = await agent.complete("go", [FakeTool()])

        assert result == "Sorry."
        second = json.loads(transport.requests[1].content)
        assert second["messages"][-1]["content"] == "Unknown tool: launch_rocket"

    @pytest.mark.asyncio
    async def test_bad_json_arguments(self, llm_config):
        """Test invalid JSON arguments are reported as text."""
        tool = FakeTool()
        transport = RecordingTransport(sequence_handler([
            completion(tool_calls=[tool_call("execute_trade", "{not json")]),
            completion("Could not trade."),
        ]))

        async with OpenRouterAgent(llm_config, transport=transport) as agent:
            await agent.complete("go", [tool])

        assert tool.calls == []
        second = json.loads(transport.requests[1].content)
        assert second["messages"][-1]["content"].startswith("Invalid JSON arguments")

    @pytest.mark.asyncio
    async def test_tool_round_limit(self, llm_config):
        """Test the loop stops at the tool round limit."""
        looping = completion(tool_calls=[tool_call("execute_trade", {})])
        transport = RecordingTransport(sequence_handler([looping, looping, looping, completion("Final.")]))
        tool = FakeTool()

        async with OpenRouterAgent(llm_config, transport=transport) as agent:
            result = await agent.complete("go", [tool])

        assert result == "Final."
        assert len(tool.calls) == 3
        last = json.loads(transport.requests[-1].content)
        assert "tools" not in last


class TestRetries:
    """Test retries and fallbacks."""

    @pytest.mark.asyncio
    async def test_fallback_model(self, llm_config):
        """Test a fallback model is tried after a failure."""
        config = llm_config.model_copy(update={"fallback_models": ["backup/model"]})
        transport = RecordingTransport(sequence_handler([
            httpx.Response(502, text="bad gateway"),
            completion("from backup"),
        ]))

        async with OpenRouterAgent(config, transport=transport) as agent:
            result = await agent.complete("hi")

        assert result == "from backup"
        models = [json.loads(r.content)["model"] for r in transport.requests]
        assert models == ["test/model", "backup/model"]

    @pytest.mark.asyncio
    async def test_all_attempts_fail(self, llm_config):
        """Test AgentError after every attempt fails."""
        transport = RecordingTransport(sequence_handler([httpx.Response(500, text="down")]))

        with patch("recall_agent.llm_agent.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            async with OpenRouterAgent(llm_config, transport=transport) as agent:
                with pytest.raises(AgentError):
                    await agent.complete("hi")

        assert len(transport.requests) == 2
        mock_sleep.assert_awaited_once_with(1)
        assert agent.get_metrics()["failed_calls"] == 1

    @pytest.mark.asyncio
    async def test_malformed_response_retried(self, llm_config):
        """Test a response without choices is retried."""
        transport = RecordingTransport(sequence_handler([
            httpx.Response(200, json={"choices": []}),
            completion("recovered"),
        ]))

        with patch("recall_agent.llm_agent.asyncio.sleep", new_callable=AsyncMock):
            async with OpenRouterAgent(llm_config, transport=transport) as agent:
                assert await agent.complete("hi") == "recovered"

    @pytest.mark.asyncio
    async def test_null_message_retried(self, llm_config):
        """Test a choice without a message object counts as malformed."""
        transport = RecordingTransport(sequence_handler([
            httpx.Response(200, json={"choices": [{"message": None}]}),
            completion("recovered"),
        ]))

        with patch("recall_agent.llm_agent.asyncio.sleep", new_callable=AsyncMock):
            async with OpenRouterAgent(llm_config, transport=transport) as agent:
                assert await agent.complete("hi") == "recovered"

        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_null_message_exhausts_to_agent_error(self, llm_config):
        """Test a provider that never sends a message object raises AgentError."""
        transport = RecordingTransport(sequence_handler([
            httpx.Response(200, json={"choices": [{"message": "not an object"}]}),
        ]))

        with patch("recall_agent.llm_agent.asyncio.sleep", new_callable=AsyncMock):
            async with OpenRouterAgent(llm_config, transport=transport) as agent:
                with pytest.raises(AgentError):
                    await agent.complete("hi")

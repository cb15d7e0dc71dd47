"""
Shared fixtures: canned API payloads and an httpx mock transport recorder.
"""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from recall_agent.http import RecallHttpClient
from recall_agent.models import RecallConfig


USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
SOL = "So11111111111111111111111111111111111111112"
BASE_URL = "https://api.test.recall.network/api"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


def sequence_handler(responses: List[Any]) -> Callable[[httpx.Request], httpx.Response]:
    """Serve responses (or raise exceptions) in order, repeating the last one."""
    state = {"index": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        item = responses[min(state["index"], len(responses) - 1)]
        state["index"] += 1
        if isinstance(item, Exception):
            raise item
        # fresh copy so a repeated response is never re-bound to a second request
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    return handler


@pytest.fixture
def recall_config() -> RecallConfig:
    return RecallConfig(
        api_key="test-api-key",
        base_url=BASE_URL,
        timeout_seconds=5,
        max_retries=3,
        backoff_base_seconds=0.5,
        backoff_max_seconds=4.0
    )


@pytest_asyncio.fixture
async def make_http(recall_config):
    """Build RecallHttpClients over a recording transport, closed on teardown."""
    clients = []

    def factory(handler, config: Optional[RecallConfig] = None):
        transport = RecordingTransport(handler)
        http = RecallHttpClient(config or recall_config, transport=transport)
        clients.append(http)
        return http, transport

    yield factory

    for http in clients:
        await http.aclose()


@pytest.fixture
def portfolio_payload() -> Dict[str, Any]:
    return {
        "success": True,
        "agentId": "agent-1",
        "totalValue": 15500.0,
        "tokens": [
            {
                "token": USDC,
                "amount": 5000,
                "price": 1.0,
                "value": 5000.0,
                "chain": "evm",
                "specificChain": "eth",
                "symbol": "USDC"
            },
            {
                "token": WETH,
                "amount": 3,
                "price": 3500.0,
                "value": 10500.0,
                "chain": "evm",
                "specificChain": "eth",
                "symbol": "WETH"
            }
        ],
        "source": "live-snapshot"
    }


@pytest.fixture
def trade_payload() -> Dict[str, Any]:
    return {
        "success": True,
        "transaction": {
            "id": "tx-7f3c",
            "agentId": "agent-1",
            "competitionId": "comp-1",
            "fromToken": USDC,
            "toToken": WETH,
            "fromAmount": 10,
            "toAmount": 0.002857,
            "price": 0.0002857,
            "success": True,
            "reason": "Rebalance into WETH",
            "tradeAmountUsd": 10.0,
            "timestamp": "2025-05-01T12:00:00.000Z",
            "fromChain": "evm",
            "toChain": "evm",
            "fromSpecificChain": "eth",
            "toSpecificChain": "eth",
            "toTokenSymbol": "WETH"
        }
    }


@pytest.fixture
def leaderboard_payload() -> Dict[str, Any]:
    return {
        "success": True,
        "competition": {"id": "comp-1", "name": "Spring Cup", "status": "active"},
        "leaderboard": [
            {"rank": 1, "agentId": "a1", "agentName": "Alpha", "portfolioValue": 11000.5, "active": True},
            {"rank": 2, "agentId": "a2", "agentName": "Beta", "portfolioValue": 9000.0,
             "active": False, "deactivationReason": "rule violation"}
        ],
        "hasInactiveAgents": True
    }


@pytest.fixture
def agent_payload() -> Dict[str, Any]:
    return {
        "success": True,
        "agent": {
            "id": "agent-1",
            "name": "Momentum Bot",
            "ownerId": "owner-1",
            "walletAddress": "0x1111111111111111111111111111111111111111",
            "status": "active",
            "createdAt": "2025-04-01T00:00:00Z"
        },
        "owner": {"id": "owner-1", "name": "Sam", "email": "sam@example.com"}
    }

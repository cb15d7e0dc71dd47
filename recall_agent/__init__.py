"""
Recall Agent - LLM trading agent for Recall trading competitions.

Typed async client for the competition API, a trade tool an LLM agent can
call, and a single-step workflow that lets the agent place a trade.
"""

__version__ = "0.1.0"

from .config import settings, agent_config
from .errors import (
    RecallError,
    ConfigurationError,
    ValidationError,
    NetworkError,
    HttpStatusError,
    TradingClientError,
    AgentError,
)
from .models import (
    Portfolio,
    TokenBalance,
    TokenPrice,
    TradeRequest,
    TradeResponse,
    Transaction,
    AgentProfile,
    AgentDetails,
    AgentBalances,
    Leaderboard,
    LeaderboardEntry,
    Chain,
    SpecificChain,
)
from .http import RecallHttpClient
from .client import RecallClient
from .tools import TradeTool
from .llm_agent import AgentCapability, OpenRouterAgent
from .workflow import TradingWorkflow

__all__ = [
    "settings",
    "agent_config",
    "RecallError",
    "ConfigurationError",
    "ValidationError",
    "NetworkError",
    "HttpStatusError",
    "TradingClientError",
    "AgentError",
    "Portfolio",
    "TokenBalance",
    "TokenPrice",
    "TradeRequest",
    "TradeResponse",
    "Transaction",
    "AgentProfile",
    "AgentDetails",
    "AgentBalances",
    "Leaderboard",
    "LeaderboardEntry",
    "Chain",
    "SpecificChain",
    "RecallHttpClient",
    "RecallClient",
    "TradeTool",
    "AgentCapability",
    "OpenRouterAgent",
    "TradingWorkflow",
]

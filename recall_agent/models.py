"""
Pydantic models for the Recall competition API and local configuration.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .validation import DECIMAL_PATTERN, is_token_address, same_token


class Chain(str, Enum):
    EVM = "evm"
    SVM = "svm"


class SpecificChain(str, Enum):
    ETH = "eth"
    POLYGON = "polygon"
    BSC = "bsc"
    ARBITRUM = "arbitrum"
    OPTIMISM = "optimism"
    AVALANCHE = "avalanche"
    BASE = "base"
    LINEA = "linea"
    ZKSYNC = "zksync"
    SCROLL = "scroll"
    MANTLE = "mantle"
    SVM = "svm"


class RecallModel(BaseModel):
    """
    Base for every wire schema.

    Attributes are snake_case, the wire is camelCase. Unknown fields are
    dropped so new server-side fields never break the client.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the JSON body shape the API expects."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# Portfolio
class TokenBalance(RecallModel):
    """One holding inside a portfolio."""
    token: str = Field(..., description="Token address")
    amount: float = Field(..., description="Token quantity held")
    price: float = Field(..., description="Unit price in USD")
    value: float = Field(..., description="amount * price in USD")
    chain: str = Field(..., description="Chain family (evm/svm)")
    specific_chain: Optional[str] = Field(None, description="Concrete chain")
    symbol: str = Field(..., description="Token symbol")


class Portfolio(RecallModel):
    """Current holdings and total value for the authenticated agent."""
    success: bool = True
    agent_id: Optional[str] = None
    total_value: float = Field(..., description="Total portfolio value in USD")
    tokens: List[TokenBalance] = Field(default_factory=list)
    source: Optional[str] = None
    snapshot_time: Optional[str] = None

    @property
    def holdings_value(self) -> float:
        return sum(t.value for t in self.tokens)


# Prices
class TokenPrice(RecallModel):
    """Current price of a single token."""
    success: bool = True
    price: float = Field(..., description="Price in USD")
    token: Optional[str] = None
    chain: Optional[str] = None
    specific_chain: Optional[str] = None
    symbol: Optional[str] = None
    timestamp: Optional[str] = None


# Trading
class TradeRequest(RecallModel):
    """
    Body of ``POST /trade/execute``.

    Validation is the client-side precondition check: both tokens must be
    well-formed addresses, they must differ, and ``amount`` must be a
    strictly positive decimal string.
    """
    from_token: str = Field(..., description="Address of the token to sell")
    to_token: str = Field(..., description="Address of the token to buy")
    amount: str = Field(..., description="Amount of from_token, decimal string")
    reason: Optional[str] = Field(None, description="Human-readable rationale")
    slippage_tolerance: Optional[str] = Field(None, description="Slippage tolerance percentage")
    from_chain: Optional[Chain] = None
    to_chain: Optional[Chain] = None
    from_specific_chain: Optional[SpecificChain] = None
    to_specific_chain: Optional[SpecificChain] = None

    @field_validator("from_token", "to_token")
    @classmethod
    def validate_address(cls, v: str) -> str:
        v = v.strip()
        if not is_token_address(v):
            raise ValueError("must be an EVM (0x + 40 hex) or Solana (base58) address")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v):
        # Agents sometimes send numbers; keep the wire format a string
        if isinstance(v, bool):
            return v
        if isinstance(v, (int, float, Decimal)):
            # str(1e-07) is "1e-07"; render positionally
            return format(Decimal(str(v)), "f")
        return v

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        v = v.strip()
        if not DECIMAL_PATTERN.match(v):
            raise ValueError("must be a plain decimal number, e.g. \"10\" or \"0.5\"")
        if Decimal(v) <= 0:
            raise ValueError("must be greater than zero")
        return v

    @model_validator(mode="after")
    def validate_distinct_tokens(self):
        if same_token(self.from_token, self.to_token):
            raise ValueError("fromToken and toToken must be different")
        return self


class Transaction(RecallModel):
    """Trade record as stored by the competition server."""
    id: str = Field(..., min_length=1)
    agent_id: Optional[str] = None
    competition_id: Optional[str] = None
    from_token: str
    to_token: str
    from_amount: float
    to_amount: float
    price: Optional[float] = None
    success: Optional[bool] = None
    error: Optional[str] = None
    reason: Optional[str] = None
    trade_amount_usd: Optional[float] = None
    timestamp: str
    from_chain: Optional[str] = None
    to_chain: Optional[str] = None
    from_specific_chain: Optional[str] = None
    to_specific_chain: Optional[str] = None
    from_token_symbol: Optional[str] = None
    to_token_symbol: Optional[str] = None
    status: Optional[str] = None


class TradeResponse(RecallModel):
    success: bool
    transaction: Transaction


# Agent
class OwnerInfo(RecallModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    wallet_address: Optional[str] = None


class AgentInfo(RecallModel):
    id: str
    name: str
    owner_id: Optional[str] = None
    wallet_address: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AgentProfile(RecallModel):
    """Agent summary, including competition performance when available."""
    success: bool = True
    agent: AgentInfo
    owner: Optional[OwnerInfo] = None
    stats: Optional[Dict[str, Any]] = None


class AgentDetails(RecallModel):
    """Agent plus owner metadata."""
    success: bool = True
    agent: AgentInfo
    owner: Optional[OwnerInfo] = None


class AgentBalance(RecallModel):
    token_address: str
    amount: float
    symbol: Optional[str] = None
    chain: str
    specific_chain: Optional[str] = None


class AgentBalances(RecallModel):
    success: bool = True
    agent_id: str
    balances: List[AgentBalance] = Field(default_factory=list)


# Competition
class CompetitionInfo(RecallModel):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class LeaderboardEntry(RecallModel):
    rank: int = Field(..., ge=1)
    agent_id: str
    agent_name: str
    portfolio_value: float
    active: bool = True
    deactivation_reason: Optional[str] = None


class Leaderboard(RecallModel):
    success: bool = True
    competition: Optional[CompetitionInfo] = None
    leaderboard: List[LeaderboardEntry] = Field(default_factory=list)
    has_inactive_agents: bool = False


# Configuration Models
class RecallConfig(BaseModel):
    """Competition API connection settings."""
    api_key: str
    base_url: str = Field(default="https://api.sandbox.competitions.recall.network/api")
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)
    max_retries: int = Field(default=3, ge=0, le=10)
    backoff_base_seconds: float = Field(default=0.5, ge=0.0, le=60.0)
    backoff_max_seconds: float = Field(default=8.0, ge=0.0, le=300.0)


class LLMConfig(BaseModel):
    """LLM configuration settings."""
    api_key: str = ""
    base_url: str = Field(default="https://openrouter.ai/api/v1")
    model: str = Field(default="openai/gpt-4o-mini")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, ge=100, le=8000)
    timeout_seconds: int = Field(default=60, ge=5, le=300)
    max_retries: int = Field(default=3, ge=1, le=10)
    max_tool_rounds: int = Field(default=5, ge=1, le=20)
    fallback_models: List[str] = Field(default_factory=list)

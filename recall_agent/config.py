"""
Centralized configuration for the Recall trading agent with Pydantic Settings.
Prompts, API endpoints and retry thresholds are managed here.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import LLMConfig, RecallConfig


# Ethereum mainnet USDC and WETH
USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
WETH_ADDRESS = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Recall competition API
    recall_api_key: str = Field(default="", description="Recall competition API key")
    recall_api_url: str = Field(
        default="https://api.sandbox.competitions.recall.network/api",
        description="Recall API base URL"
    )
    recall_timeout_seconds: float = Field(default=30.0, description="Per-attempt timeout")
    recall_max_retries: int = Field(default=3, description="Retries for transient failures")
    recall_backoff_base_seconds: float = Field(default=0.5, description="Backoff base delay")
    recall_backoff_max_seconds: float = Field(default=8.0, description="Backoff delay cap")

    # OpenRouter Configuration
    openrouter_api_key: str = Field(default="", description="OpenRouter API key")
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenRouter base URL"
    )

    # LLM Configuration
    llm_model: str = Field(default="openai/gpt-4o-mini", description="LLM model")
    llm_temperature: float = Field(default=0.1, description="LLM temperature")
    llm_max_tokens: int = Field(default=1024, description="LLM max tokens")
    llm_timeout_seconds: int = Field(default=60, description="LLM timeout")
    llm_max_retries: int = Field(default=3, description="LLM max retries")
    llm_max_tool_rounds: int = Field(default=5, description="Max tool-call rounds per prompt")
    llm_fallback_models: str = Field(default="", description="Comma-separated fallback models")

    # Trade instruction
    trade_from_token: str = Field(default=USDC_ADDRESS, description="Token to sell")
    trade_to_token: str = Field(default=WETH_ADDRESS, description="Token to buy")
    trade_amount: str = Field(default="10", description="Amount of the sell token")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_file: str = Field(default="recall_agent.log", description="Log file path")
    log_rotation: str = Field(default="10 MB", description="Log rotation size")
    log_retention: str = Field(default="30 days", description="Log retention period")

    @property
    def recall_config(self) -> RecallConfig:
        """Get Recall API configuration object."""
        return RecallConfig(
            api_key=self.recall_api_key,
            base_url=self.recall_api_url,
            timeout_seconds=self.recall_timeout_seconds,
            max_retries=self.recall_max_retries,
            backoff_base_seconds=self.recall_backoff_base_seconds,
            backoff_max_seconds=self.recall_backoff_max_seconds
        )

    @property
    def llm_config(self) -> LLMConfig:
        """Get LLM configuration object."""
        return LLMConfig(
            api_key=self.openrouter_api_key,
            base_url=self.openrouter_base_url,
            model=self.llm_model,
            temperature=self.llm_temperature,
            max_tokens=self.llm_max_tokens,
            timeout_seconds=self.llm_timeout_seconds,
            max_retries=self.llm_max_retries,
            max_tool_rounds=self.llm_max_tool_rounds,
            fallback_models=[m.strip() for m in self.llm_fallback_models.split(",") if m.strip()]
        )


class AgentConfig:
    """LLM agent prompts and the fixed trade instruction."""

    SYSTEM_PROMPT = """You are a trading agent competing in a Recall trading competition.

You can place trades with the execute_trade tool. Each trade sells an amount of
one token (fromToken) to buy another (toToken). Token arguments are contract
addresses, amounts are decimal strings denominated in the token you sell.

RULES:
- Only call execute_trade when the user asks for a trade.
- Never trade a token for itself.
- Always include a short reason for the trade.
- If the tool reports a failure, explain it to the user and do not retry more than once.

When you are done, reply with a one-paragraph summary of what happened,
including the transaction id when a trade succeeded."""

    TRADE_INSTRUCTION = """Execute a trade on the Recall competition.

Sell {amount} of token {from_token} to buy token {to_token}.
Use the execute_trade tool and report the result."""

    @classmethod
    def get_system_prompt(cls) -> str:
        """Get the system prompt for the LLM agent."""
        return cls.SYSTEM_PROMPT

    @classmethod
    def format_trade_instruction(cls, from_token: str, to_token: str, amount: str) -> str:
        """Format the workflow's trade instruction."""
        return cls.TRADE_INSTRUCTION.format(
            from_token=from_token,
            to_token=to_token,
            amount=amount
        )


# Global settings instance, read once at import.
settings = Settings()
agent_config = AgentConfig()

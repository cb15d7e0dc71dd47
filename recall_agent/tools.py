"""
Agent tools backed by the Recall competition client.
"""

import json
from typing import Any, Dict, Optional, Union

from loguru import logger
from pydantic import Field

from .client import RecallClient
from .errors import RecallError
from .models import RecallModel, TradeResponse
from .validation import parse_model


class TradeToolInput(RecallModel):
    """Arguments the agent passes to the trade tool."""
    from_token: str = Field(..., description="Contract address of the token to sell")
    to_token: str = Field(..., description="Contract address of the token to buy")
    amount: str = Field(..., description="Amount of fromToken to sell, as a decimal string")
    reason: Optional[str] = Field(None, description="Short explanation of why this trade is made")


class TradeTool:
    """
    Executes a single trade on behalf of an LLM agent.

    Failures never raise; they come back as plain text so the agent can
    decide how to react.
    """

    name = "execute_trade"
    description = (
        "Execute a token swap in the Recall trading competition. Sells `amount` of "
        "`fromToken` and buys `toToken`. Tokens are contract addresses; amount is a "
        "decimal string in units of fromToken."
    )

    def __init__(self, client: RecallClient):
        self.client = client

    @property
    def parameters(self) -> Dict[str, Any]:
        """JSON schema of the tool input."""
        schema = TradeToolInput.model_json_schema(by_alias=True)
        schema.pop("title", None)
        for prop in schema.get("properties", {}).values():
            prop.pop("title", None)
        return schema

    def schema(self) -> Dict[str, Any]:
        """Return the tool declaration in OpenAI function-calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            }
        }

    async def run(self, arguments: Dict[str, Any]) -> Union[TradeResponse, str]:
        """
        Execute the trade described by ``arguments``.

        Args:
            arguments: ``{fromToken, toToken, amount, reason?}``

        Returns:
            TradeResponse on success, otherwise a failure description
        """
        try:
            args = parse_model(TradeToolInput, arguments, context="execute_trade arguments")
            logger.info(f"Trade tool invoked: {args.amount} {args.from_token} -> {args.to_token}")
            return await self.client.execute_trade(
                args.from_token,
                args.to_token,
                args.amount,
                reason=args.reason
            )
        except RecallError as e:
            logger.warning(f"Trade tool failed: {e}")
            return f"Trade failed: {e}"

    async def invoke(self, arguments: Dict[str, Any]) -> str:
        """Run the tool and render the result as text for the agent."""
        result = await self.run(arguments)
        if isinstance(result, TradeResponse):
            return json.dumps(result.to_wire())
        return result

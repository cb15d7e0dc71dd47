"""
Trading client facade over the endpoint functions with uniform error wrapping.
"""

from typing import Awaitable, Optional, TypeVar

import httpx
from loguru import logger

from . import endpoints
from .config import Settings, settings as default_settings
from .errors import RecallError, TradingClientError
from .http import RecallHttpClient
from .models import (
    AgentBalances,
    AgentDetails,
    AgentProfile,
    Leaderboard,
    Portfolio,
    RecallConfig,
    TokenPrice,
    TradeResponse,
)


T = TypeVar("T")


class RecallClient:
    """
    Recall competition client.

    Every failure is re-raised as :class:`TradingClientError` carrying the
    operation name and the original exception. Retries happen only in the
    HTTP layer.
    """

    def __init__(
        self,
        config: Optional[RecallConfig] = None,
        http: Optional[RecallHttpClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        if http is None:
            config = config or default_settings.recall_config
            http = RecallHttpClient(config, transport=transport)
            self._owns_http = True
        else:
            self._owns_http = False
        self.http = http

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "RecallClient":
        """Build a client from application settings."""
        config = config or default_settings
        return cls(config=config.recall_config, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def _call(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except RecallError as e:
            logger.error(f"{operation} failed: {e}")
            raise TradingClientError(operation, e) from e

    async def get_portfolio(self) -> Portfolio:
        return await self._call("get_portfolio", endpoints.get_portfolio(self.http))

    async def get_token_price(
        self,
        token: str,
        chain: Optional[str] = None,
        specific_chain: Optional[str] = None
    ) -> TokenPrice:
        return await self._call(
            "get_token_price",
            endpoints.get_token_price(self.http, token, chain=chain, specific_chain=specific_chain)
        )

    async def execute_trade(
        self,
        from_token,
        to_token: Optional[str] = None,
        amount=None,
        reason: Optional[str] = None,
        **chain_hints
    ) -> TradeResponse:
        """
        Execute a trade.

        Args:
            from_token: sell token address, or a prepared TradeRequest
            to_token: buy token address
            amount: positive decimal amount of the sell token
            reason: optional rationale

        Returns:
            TradeResponse from the server
        """
        return await self._call(
            "execute_trade",
            endpoints.execute_trade(
                self.http, from_token, to_token, amount, reason=reason, **chain_hints
            )
        )

    async def get_agent_profile(self) -> AgentProfile:
        return await self._call("get_agent_profile", endpoints.get_agent_profile(self.http))

    async def get_agent_details(self) -> AgentDetails:
        return await self._call("get_agent_details", endpoints.get_agent_details(self.http))

    async def get_agent_balances(self, competition_id: Optional[str] = None) -> AgentBalances:
        return await self._call(
            "get_agent_balances",
            endpoints.get_agent_balances(self.http, competition_id=competition_id)
        )

    async def get_leaderboard(self, competition_id: Optional[str] = None) -> Leaderboard:
        return await self._call(
            "get_leaderboard",
            endpoints.get_leaderboard(self.http, competition_id=competition_id)
        )

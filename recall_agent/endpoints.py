"""
Typed endpoint functions for the Recall competition API.

Each function validates its inputs, calls the HTTP client and parses the
response into a pydantic model. Errors propagate unchanged.
"""

from typing import Optional, Union

from loguru import logger

from .http import RecallHttpClient
from .models import (
    AgentBalances,
    AgentDetails,
    AgentProfile,
    Chain,
    Leaderboard,
    Portfolio,
    SpecificChain,
    TokenPrice,
    TradeRequest,
    TradeResponse,
)
from .validation import is_token_address, parse_model
from .errors import ValidationError


PORTFOLIO_PATH = "/agent/portfolio"
PROFILE_PATH = "/agent/profile"
DETAILS_PATH = "/agent/details"
BALANCES_PATH = "/agent/balances"
PRICE_PATH = "/price"
TRADE_PATH = "/trade/execute"
LEADERBOARD_PATH = "/competition/leaderboard"


def _enum_value(value: Union[str, Chain, SpecificChain, None]) -> Optional[str]:
    if value is None:
        return None
    return value.value if hasattr(value, "value") else str(value)


def build_trade_request(
    from_token: str,
    to_token: str,
    amount: Union[str, int, float],
    reason: Optional[str] = None,
    slippage_tolerance: Optional[str] = None,
    from_chain: Optional[str] = None,
    to_chain: Optional[str] = None,
    from_specific_chain: Optional[str] = None,
    to_specific_chain: Optional[str] = None,
) -> TradeRequest:
    """
    Build and validate a trade request without touching the network.

    Raises:
        ValidationError: bad addresses, identical tokens, or non-positive amount
    """
    payload = {
        "fromToken": from_token,
        "toToken": to_token,
        "amount": amount,
        "reason": reason,
        "slippageTolerance": slippage_tolerance,
        "fromChain": _enum_value(from_chain),
        "toChain": _enum_value(to_chain),
        "fromSpecificChain": _enum_value(from_specific_chain),
        "toSpecificChain": _enum_value(to_specific_chain),
    }
    return parse_model(TradeRequest, payload, context="TradeRequest")


async def get_portfolio(http: RecallHttpClient) -> Portfolio:
    data = await http.get(PORTFOLIO_PATH)
    return parse_model(Portfolio, data)


async def get_token_price(
    http: RecallHttpClient,
    token: str,
    chain: Optional[Union[str, Chain]] = None,
    specific_chain: Optional[Union[str, SpecificChain]] = None
) -> TokenPrice:
    """
    Fetch the current price of ``token``.

    When ``chain``/``specific_chain`` are omitted the server infers the
    chain from the address format.
    """
    if not is_token_address(token):
        raise ValidationError.single(
            "token", "must be an EVM (0x + 40 hex) or Solana (base58) address",
            context="getTokenPrice"
        )

    params = {
        "token": token,
        "chain": _enum_value(chain),
        "specificChain": _enum_value(specific_chain),
    }
    data = await http.get(PRICE_PATH, params=params)
    return parse_model(TokenPrice, data)


async def execute_trade(
    http: RecallHttpClient,
    from_token: Union[str, TradeRequest],
    to_token: Optional[str] = None,
    amount: Optional[Union[str, int, float]] = None,
    reason: Optional[str] = None,
    **chain_hints
) -> TradeResponse:
    """
    Execute a trade.

    Accepts either a :class:`TradeRequest` or the individual fields. The
    request is validated before any network call.

    Args:
        http: HTTP client
        from_token: address of the token to sell, or a prepared TradeRequest
        to_token: address of the token to buy
        amount: positive decimal amount of ``from_token``
        reason: optional rationale recorded with the trade
        **chain_hints: slippage_tolerance, from_chain, to_chain,
            from_specific_chain, to_specific_chain

    Returns:
        TradeResponse with the server's transaction record

    Raises:
        ValidationError: invalid arguments (no request is sent) or a
            malformed response. A malformed 2xx response says nothing about
            whether the trade was executed.
    """
    if isinstance(from_token, TradeRequest):
        request = from_token
    else:
        request = build_trade_request(
            from_token=from_token,
            to_token=to_token,
            amount=amount,
            reason=reason,
            **chain_hints
        )

    logger.info(f"Executing trade: {request.amount} {request.from_token} -> {request.to_token}")
    data = await http.post(TRADE_PATH, json=request.to_wire())
    response = parse_model(TradeResponse, data)
    logger.info(f"Trade executed: transaction {response.transaction.id}")
    return response


async def get_agent_profile(http: RecallHttpClient) -> AgentProfile:
    data = await http.get(PROFILE_PATH)
    return parse_model(AgentProfile, data)


async def get_agent_details(http: RecallHttpClient) -> AgentDetails:
    data = await http.get(DETAILS_PATH)
    return parse_model(AgentDetails, data)


async def get_agent_balances(
    http: RecallHttpClient,
    competition_id: Optional[str] = None
) -> AgentBalances:
    data = await http.get(BALANCES_PATH, params={"competitionId": competition_id})
    return parse_model(AgentBalances, data)


async def get_leaderboard(
    http: RecallHttpClient,
    competition_id: Optional[str] = None
) -> Leaderboard:
    data = await http.get(LEADERBOARD_PATH, params={"competitionId": competition_id})
    return parse_model(Leaderboard, data)

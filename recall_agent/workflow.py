"""
Single-step trading workflow: hand a fixed instruction to the agent.
"""

from typing import Optional

from loguru import logger

from .client import RecallClient
from .config import Settings, agent_config, settings as default_settings
from .llm_agent import AgentCapability, OpenRouterAgent
from .tools import TradeTool


class TradingWorkflow:
    """Asks the agent to place one trade and returns its answer."""

    def __init__(
        self,
        agent: AgentCapability,
        tool: TradeTool,
        instruction: Optional[str] = None
    ):
        self.agent = agent
        self.tool = tool
        self.instruction = instruction or agent_config.format_trade_instruction(
            from_token=default_settings.trade_from_token,
            to_token=default_settings.trade_to_token,
            amount=default_settings.trade_amount
        )

    async def run(self) -> str:
        logger.info("Starting trading workflow")
        result = await self.agent.complete(self.instruction, [self.tool])
        logger.info("Trading workflow finished")
        return result


def build_default_workflow(config: Optional[Settings] = None):
    """
    Wire the real client, tool and OpenRouter agent from settings.

    Returns:
        (workflow, client, agent); the caller closes client and agent.
    """
    config = config or default_settings
    client = RecallClient.from_settings(config)
    agent = OpenRouterAgent(config.llm_config)
    instruction = agent_config.format_trade_instruction(
        from_token=config.trade_from_token,
        to_token=config.trade_to_token,
        amount=config.trade_amount
    )
    workflow = TradingWorkflow(agent, TradeTool(client), instruction=instruction)
    return workflow, client, agent

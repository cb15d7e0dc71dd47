"""
Command-line interface for the Recall trading agent using Typer.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.markup import escape
from rich.text import Text
from loguru import logger

from recall_agent.client import RecallClient
from recall_agent.config import settings
from recall_agent.errors import RecallError
from recall_agent.utils import format_currency, setup_logging, shorten_address
from recall_agent.workflow import build_default_workflow

# Initialize Typer app
app = typer.Typer(
    name="recall-agent",
    help="LLM trading agent for Recall trading competitions",
    add_completion=False
)

console = Console()


def version_callback(value: bool):
    """Show version information."""
    if value:
        from recall_agent import __version__
        console.print(f"Recall Agent v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
    debug: bool = typer.Option(
        False, "--debug", "-d",
        help="Enable debug logging"
    )
):
    """
    Recall Agent - let an LLM place trades in a Recall competition.
    """
    log_settings = settings.model_copy(update={"log_level": "DEBUG"}) if debug else settings
    setup_logging(log_settings)


def _with_client(call: Callable[[RecallClient], Awaitable[Any]]) -> Any:
    """Run ``call`` against a fresh client, exiting non-zero on failure."""
    async def runner():
        async with RecallClient.from_settings(settings) as client:
            return await call(client)

    try:
        return asyncio.run(runner())
    except RecallError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        logger.error(f"CLI error: {e}")
        raise typer.Exit(1)


@app.command()
def trade():
    """
    Run the trading workflow once.

    The LLM agent receives the configured trade instruction and decides
    whether and how to call the trade tool.
    """
    async def run_workflow() -> str:
        workflow, client, agent = build_default_workflow(settings)
        async with client, agent:
            return await workflow.run()

    console.print("[bold green]Running trading workflow...[/bold green]")
    try:
        result = asyncio.run(run_workflow())
    except RecallError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        logger.error(f"CLI error in trade command: {e}")
        raise typer.Exit(1)

    console.print(Panel(Text(result), title="Agent", border_style="blue"))


@app.command()
def portfolio():
    """Show current holdings and total value."""
    result = _with_client(lambda client: client.get_portfolio())

    table = Table(title=f"Portfolio ({format_currency(result.total_value)})")
    table.add_column("Symbol", style="cyan")
    table.add_column("Token")
    table.add_column("Chain")
    table.add_column("Amount", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Value", justify="right", style="green")
    for token in result.tokens:
        table.add_row(
            token.symbol,
            shorten_address(token.token),
            token.specific_chain or token.chain,
            f"{token.amount:,.6f}",
            format_currency(token.price),
            format_currency(token.value)
        )
    console.print(table)


@app.command()
def price(
    token: str = typer.Argument(..., help="Token address"),
    chain: Optional[str] = typer.Option(None, "--chain", help="Chain family (evm or svm)"),
    specific_chain: Optional[str] = typer.Option(
        None, "--specific-chain", help="Specific chain, e.g. eth, base, svm"
    )
):
    """Show the current price of a token."""
    result = _with_client(
        lambda client: client.get_token_price(token, chain=chain, specific_chain=specific_chain)
    )
    symbol = result.symbol or shorten_address(token)
    console.print(f"[cyan]{symbol}:[/cyan] {result.price}")


@app.command()
def balances(
    competition_id: Optional[str] = typer.Option(
        None, "--competition-id", help="Scope balances to a competition"
    )
):
    """Show token balances."""
    result = _with_client(lambda client: client.get_agent_balances(competition_id))

    table = Table(title=f"Balances for agent {result.agent_id}")
    table.add_column("Symbol", style="cyan")
    table.add_column("Token")
    table.add_column("Chain")
    table.add_column("Amount", justify="right")
    for balance in result.balances:
        table.add_row(
            balance.symbol or "?",
            shorten_address(balance.token_address),
            balance.specific_chain or balance.chain,
            f"{balance.amount:,.6f}"
        )
    console.print(table)


@app.command()
def profile():
    """Show the agent profile."""
    result = _with_client(lambda client: client.get_agent_profile())
    console.print_json(data=result.to_wire())


@app.command()
def details():
    """Show agent and owner details."""
    result = _with_client(lambda client: client.get_agent_details())
    console.print_json(data=result.to_wire())


@app.command()
def leaderboard(
    competition_id: Optional[str] = typer.Option(
        None, "--competition-id", help="Competition to show (defaults to the active one)"
    )
):
    """Show the competition leaderboard."""
    result = _with_client(lambda client: client.get_leaderboard(competition_id))

    title = result.competition.name if result.competition and result.competition.name else "Leaderboard"
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Agent", style="cyan")
    table.add_column("Portfolio", justify="right", style="green")
    table.add_column("Active")
    for entry in result.leaderboard:
        table.add_row(
            str(entry.rank),
            entry.agent_name,
            format_currency(entry.portfolio_value),
            "yes" if entry.active else f"no ({entry.deactivation_reason or 'inactive'})"
        )
    console.print(table)


if __name__ == "__main__":
    app()

"""CLI entrypoint for agent-core."""

from pathlib import Path

import rich_click as click

from agent_core import __version__
from agent_core.controllers import (
    AgentCoreCliController,
    AgentRunCommand,
    CacheClearCommand,
    CacheStatsCommand,
    parse_input_pairs,
)
from agent_core.errors import AgentNotRegisteredError

click.rich_click.USE_MARKDOWN = True
CONTROLLER = AgentCoreCliController()


@click.group()
@click.version_option(version=__version__, prog_name="agent-core")
def agent_core() -> None:
    """Agent execution core CLI."""


@agent_core.group()
def cache() -> None:
    """Result cache commands."""


@cache.command("stats")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
def cache_stats(db_path: Path | None) -> None:
    """Show total and expired-but-unpurged cache entries."""

    _emit_lines(CONTROLLER.cache_stats(CacheStatsCommand(db_path=db_path)))


@cache.command("clear")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
@click.option("--owner", "owner_id", default=None, help="Only clear entries of this agent id.")
def cache_clear(db_path: Path | None, owner_id: str | None) -> None:
    """Delete cached results for one agent, or all of them."""

    _emit_lines(CONTROLLER.cache_clear(CacheClearCommand(db_path=db_path, owner_id=owner_id)))


@agent_core.group()
def agents() -> None:
    """Agent commands."""


@agents.command("list")
def agents_list() -> None:
    """List built-in agents."""

    _emit_lines(CONTROLLER.list_agents())


@agents.command("run")
@click.argument("agent_id")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
@click.option(
    "--input",
    "input_pairs",
    multiple=True,
    help="Agent input as key=value (value parsed as JSON when possible). Can be repeated.",
)
@click.option(
    "--no-cache",
    is_flag=True,
    default=False,
    help="Skip the result cache for this run.",
)
def agents_run(
    agent_id: str,
    db_path: Path | None,
    input_pairs: tuple[str, ...],
    no_cache: bool,
) -> None:
    """Run one agent and print its result."""

    try:
        inputs = parse_input_pairs(input_pairs)
    except ValueError as error:
        raise click.BadParameter(str(error), param_hint="--input") from error

    try:
        outcome = CONTROLLER.run_agent(
            AgentRunCommand(
                db_path=db_path,
                agent_id=agent_id,
                inputs=inputs,
                use_cache=not no_cache,
            ),
        )
    except AgentNotRegisteredError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(outcome.lines)
    if not outcome.success:
        raise click.ClickException(f"Agent {agent_id} failed.")


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    agent_core()

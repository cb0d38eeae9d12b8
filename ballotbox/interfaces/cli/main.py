"""ballotbox command line entry point."""

import click

from ballotbox.common.logging import setup_logging
from ballotbox.infrastructure.config.settings import get_settings
from ballotbox.interfaces.cli.commands.election_commands import (
    add_candidate,
    candidates,
    delegate,
    init_db,
    register_voter,
    set_period,
    total_votes,
    vote,
    voter,
    winners,
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="DEBUGログを表示する")
@click.option("--json-logs", is_flag=True, help="ログをJSON形式で出力する")
def cli(verbose: bool, json_logs: bool):
    """Single-election vote accounting (選挙の投票管理)."""
    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_output=json_logs or settings.log_json,
    )


cli.add_command(init_db)
cli.add_command(set_period)
cli.add_command(register_voter)
cli.add_command(add_candidate)
cli.add_command(delegate)
cli.add_command(vote)
cli.add_command(candidates)
cli.add_command(voter)
cli.add_command(total_votes)
cli.add_command(winners)


if __name__ == "__main__":
    cli()

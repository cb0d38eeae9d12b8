"""選挙操作 CLI コマンド."""

from typing import TypeVar
import asyncio

from collections.abc import Awaitable, Callable
from datetime import datetime

import click

from ballotbox.application.dtos.election_dto import (
    AddCandidateInputDto,
    CandidateOutputItem,
    DelegateVoteInputDto,
    ElectionOperationOutputDto,
    RegisterVoterInputDto,
    SetPeriodInputDto,
    VoteInputDto,
)
from ballotbox.application.usecases.conduct_election_usecase import (
    ConductElectionUseCase,
)
from ballotbox.interfaces.cli.base import BaseCommand, with_error_handling


DATETIME_FORMATS = ["%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d"]

caller_option = click.option(
    "--caller",
    required=True,
    envvar="BALLOTBOX_CALLER_ID",
    help="呼び出し元ID（管理者操作に必要）",
)


def _get_container():
    from ballotbox.infrastructure.di.container import get_container, init_container

    try:
        return get_container()
    except RuntimeError:
        return init_container()


T = TypeVar("T")


def run_with_usecase(
    handler: Callable[[ConductElectionUseCase], Awaitable[T]],
) -> T:
    """データベースに束縛したユースケースでハンドラを実行する."""

    async def _run() -> T:
        container = _get_container()
        try:
            async with container.election_usecase() as usecase:
                return await handler(usecase)
        finally:
            await container.database.dispose()

    return asyncio.run(_run())


def report(output: ElectionOperationOutputDto, success_message: str) -> None:
    """操作結果を表示し、失敗時は終了コード1で終了する."""
    if not output.success:
        BaseCommand.echo_error(f"[{output.error_code}] {output.error_message}")
        raise click.exceptions.Exit(1)
    BaseCommand.echo_success(success_message)


def format_candidate(candidate: CandidateOutputItem) -> str:
    return f"{candidate.id:>4}. {candidate.name}  ({candidate.vote_count:,} votes)"


@click.command("init-db")
@with_error_handling
def init_db():
    """Create election tables (テーブル作成)."""

    async def _run() -> None:
        container = _get_container()
        try:
            await container.database.create_schema()
        finally:
            await container.database.dispose()

    asyncio.run(_run())
    BaseCommand.echo_success("Election tables are ready")


@click.command("set-period")
@caller_option
@click.option("--start", type=click.DateTime(DATETIME_FORMATS), required=True)
@click.option("--end", type=click.DateTime(DATETIME_FORMATS), required=True)
@with_error_handling
def set_period(caller: str, start: datetime, end: datetime):
    """Set the voting period, UTC (投票期間の設定)."""
    output = run_with_usecase(
        lambda usecase: usecase.set_period(
            SetPeriodInputDto(caller_id=caller, start_time=start, end_time=end)
        )
    )
    report(output, f"Voting period set: {start.isoformat()} - {end.isoformat()}")


@click.command("register-voter")
@click.argument("voter_id")
@with_error_handling
def register_voter(voter_id: str):
    """Register a voter (有権者登録)."""
    output = run_with_usecase(
        lambda usecase: usecase.register_voter(RegisterVoterInputDto(voter_id=voter_id))
    )
    report(output, f"Voter '{voter_id}' registered")


@click.command("add-candidate")
@caller_option
@click.argument("name")
@with_error_handling
def add_candidate(caller: str, name: str):
    """Add a candidate (候補者登録)."""
    output = run_with_usecase(
        lambda usecase: usecase.add_candidate(
            AddCandidateInputDto(caller_id=caller, name=name)
        )
    )
    report(output, f"Candidate '{name}' added with id {output.candidate_id}")


@click.command("delegate")
@click.argument("from_voter_id")
@click.argument("to_voter_id")
@with_error_handling
def delegate(from_voter_id: str, to_voter_id: str):
    """Delegate a vote to another voter (投票委任)."""
    output = run_with_usecase(
        lambda usecase: usecase.delegate_vote(
            DelegateVoteInputDto(from_voter_id=from_voter_id, to_voter_id=to_voter_id)
        )
    )
    report(output, f"'{from_voter_id}' delegated to '{to_voter_id}'")
    for event in output.events:
        BaseCommand.echo_info(f"  {event.name}: {event.payload}")


@click.command("vote")
@click.argument("voter_id")
@click.argument("candidate_id", type=int)
@with_error_handling
def vote(voter_id: str, candidate_id: int):
    """Cast a direct vote (直接投票)."""
    output = run_with_usecase(
        lambda usecase: usecase.vote(
            VoteInputDto(voter_id=voter_id, candidate_id=candidate_id)
        )
    )
    report(output, f"'{voter_id}' voted for candidate {candidate_id}")


@click.command("candidates")
@with_error_handling
def candidates():
    """List candidates in registration order (候補者一覧)."""
    output = run_with_usecase(lambda usecase: usecase.list_candidates())
    if not output.candidates:
        click.echo("候補者はいません。")
        return
    click.echo("=== 候補者一覧 ===")
    for candidate in output.candidates:
        click.echo(f"  {format_candidate(candidate)}")


@click.command("voter")
@click.argument("voter_id")
@with_error_handling
def voter(voter_id: str):
    """Show a voter's state (有権者の状態)."""
    output = run_with_usecase(lambda usecase: usecase.get_voter(voter_id))
    info = output.voter
    if info is None:
        report(output, "")
        return
    click.echo(f"=== 有権者 {info.voter_id} ===")
    click.echo(f"  registered:         {info.is_registered}")
    click.echo(f"  has voted:          {info.has_voted}")
    click.echo(f"  voted candidate id: {info.voted_candidate_id or '-'}")
    click.echo(f"  pending delegator:  {info.delegate_of or '-'}")


@click.command("total-votes")
@with_error_handling
def total_votes():
    """Show the number of direct votes (直接投票数)."""
    output = run_with_usecase(lambda usecase: usecase.get_total_votes())
    click.echo(f"Total direct votes: {output.total_votes:,}")


@click.command("winners")
@click.option(
    "--announce", is_flag=True, default=False, help="WINNERS_SELECTEDイベントを発行する"
)
@with_error_handling
def winners(announce: bool):
    """Show the leading candidates (首位候補者)."""
    if announce:
        output = run_with_usecase(lambda usecase: usecase.announce_winners())
    else:
        output = run_with_usecase(lambda usecase: usecase.get_winners())

    if not output.winners:
        click.echo("まだ得票した候補者はいません。")
        return
    title = "Winner" if len(output.winners) == 1 else "Tied winners"
    click.echo(f"=== {title} ===")
    for candidate in output.winners:
        click.echo(f"  {format_candidate(candidate)}")

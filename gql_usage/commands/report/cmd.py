"""CLI commands for collected operations: inspect them, report them."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click
from rich.table import Table

from gql_usage.helpers.console import console, display_name, short_key

if TYPE_CHECKING:
    from gql_usage.formats.usage_report import OperationDefinition
    from gql_usage.recorder import CompletionStatus, UsageRecorder


@click.group()
def report() -> None:
    """Inspect and send collected operations."""


@report.command()
@click.argument("artifact_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--key", default=None, help="Show the fields of one operation (key or name)")
def inspect(artifact_path: str, key: str | None) -> None:
    """Summarize an operations file written by `collect`."""
    from gql_usage.commands.collect.loader import read_artifact

    definitions = read_artifact(artifact_path)

    if key:
        match = next(
            (d for d in definitions if key in (d.key, d.operation_name)),
            None,
        )
        if match is None:
            raise click.ClickException(f"Operation {key} not found")
        console.print(f"[bold]{display_name(match)}[/bold] ({match.key})")
        console.print(f"  {match.operation}", markup=False)
        for field in match.fields:
            console.print(f"    {field}")
        return

    table = Table(title="Operations")
    table.add_column("Name", style="cyan")
    table.add_column("Key")
    table.add_column("Fields", justify="right")
    for d in definitions:
        table.add_row(display_name(d), short_key(d.key), str(len(d.fields)))
    console.print(table)


@report.command()
@click.argument("artifact_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--token", default=None, help="Usage token (defaults to GQL_USAGE_TOKEN)")
@click.option("--endpoint", default=None, help="Usage endpoint (defaults to GQL_USAGE_ENDPOINT)")
@click.option("--sample-rate", type=float, default=None, help="Fraction of executions sent")
def send(
    artifact_path: str, token: str | None, endpoint: str | None, sample_rate: float | None
) -> None:
    """Report one successful execution of every operation in a file."""
    from gql_usage.commands.collect.loader import read_artifact
    from gql_usage.config import UsageConfig
    from gql_usage.recorder import CompletionStatus, UsageRecorder

    definitions = read_artifact(artifact_path)

    try:
        config = UsageConfig.from_env(token=token, endpoint=endpoint, sample_rate=sample_rate)
        recorder = UsageRecorder.from_config(config)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"[bold]Sending usage:[/bold] {len(definitions)} operations to {config.endpoint}")
    statuses = asyncio.run(_record_all(recorder, definitions))

    sent = statuses.count(CompletionStatus.SENT)
    failed = statuses.count(CompletionStatus.FAILED)
    console.print(f"  {sent} sent, {statuses.count(CompletionStatus.SAMPLED_OUT)} sampled out")
    if failed:
        raise click.ClickException(f"{failed} operations could not be sent")
    console.print("[green]Usage report sent[/green]")


async def _record_all(
    recorder: UsageRecorder, definitions: list[OperationDefinition]
) -> list[CompletionStatus]:
    from gql_usage.formats.usage_report import ExecutionOutcome

    pending = [recorder.collect(d)(ExecutionOutcome(ok=True)) for d in definitions]
    await recorder.dispose()
    return list(await asyncio.gather(*pending))

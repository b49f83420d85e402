"""CLI command collecting the usage of a corpus of operations."""

from __future__ import annotations

import click

from gql_usage.helpers.console import console


@click.command()
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("documents", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("-o", "--output", required=True, help="Output file for the operations (.json)")
def collect(schema_path: str, documents: tuple[str, ...], output: str) -> None:
    """Extract the schema usage of every operation in DOCUMENTS.

    SCHEMA_PATH is an SDL file or an introspection result (.json).
    DOCUMENTS are .graphql/.gql files or directories searched recursively.
    """
    from gql_usage.collector import OperationCollector, SchemaMismatchError
    from gql_usage.commands.collect.loader import (
        CorpusError,
        load_operations,
        load_schema,
        write_artifact,
    )

    try:
        schema = load_schema(schema_path)
        operations = load_operations(documents)
    except CorpusError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"[bold]Collecting usage:[/bold] {len(operations)} operations")

    collector = OperationCollector(schema)
    definitions = []
    for op in operations:
        try:
            definitions.append(collector.collect(op.document, None))
        except SchemaMismatchError as e:
            raise click.ClickException(f"{op.path}: {e}") from e

    write_artifact(definitions, output)
    field_count = len({f for d in definitions for f in d.fields})
    console.print(f"  {field_count} distinct schema coordinates used")
    console.print(f"[green]Operations written to {output}[/green]")

"""Load a schema and a corpus of operation documents from disk."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from graphql import (
    GraphQLSchema,
    IntrospectionQuery,
    build_client_schema,
    build_schema,
    parse,
    separate_operations,
)
from graphql.error import GraphQLSyntaxError
from graphql.language.ast import (
    DefinitionNode,
    DocumentNode,
    FragmentDefinitionNode,
    OperationDefinitionNode,
)

from gql_usage.formats.usage_report import OperationDefinition

DOCUMENT_SUFFIXES = (".graphql", ".gql")
SCHEMA_SUFFIXES = (".graphql", ".graphqls", ".gql")


class CorpusError(Exception):
    """Raised when a schema or document file cannot be loaded."""

    def __init__(self, message: str, path: Path):
        super().__init__(f"{path}: {message}")
        self.path = path


@dataclass
class SourceOperation:
    """One operation of the corpus, with the fragments it uses attached."""

    path: Path
    document: DocumentNode


def load_schema(path: str | Path) -> GraphQLSchema:
    """Build a schema from SDL or from an introspection query result."""
    path = Path(path)
    text = path.read_text()

    if path.suffix == ".json":
        data: dict[str, Any] = json.loads(text)
        if "data" in data:
            data = cast(dict[str, Any], data["data"])
        return build_client_schema(cast(IntrospectionQuery, data))

    if path.suffix not in SCHEMA_SUFFIXES:
        raise CorpusError(f"unsupported schema format '{path.suffix}'", path)
    try:
        return build_schema(text)
    except GraphQLSyntaxError as e:
        raise CorpusError(e.message, path) from e


def find_documents(paths: Iterable[str | Path]) -> list[Path]:
    """Expand directories into the GraphQL documents they contain."""
    found: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found.extend(
                sorted(p for p in path.rglob("*") if p.suffix in DOCUMENT_SUFFIXES and p.is_file())
            )
        else:
            found.append(path)
    return found


def load_operations(paths: Iterable[str | Path]) -> list[SourceOperation]:
    """Parse every document and split the corpus into single operations.

    Fragments are shared across files, and each operation only keeps the
    fragments it spreads.  Fragment-only files yield nothing.
    """
    parsed: list[tuple[Path, DocumentNode]] = []
    for path in find_documents(paths):
        try:
            parsed.append((path, parse(path.read_text())))
        except GraphQLSyntaxError as e:
            raise CorpusError(e.message, path) from e

    fragments: list[DefinitionNode] = [
        definition
        for _, document in parsed
        for definition in document.definitions
        if isinstance(definition, FragmentDefinitionNode)
    ]

    operations: list[SourceOperation] = []
    for path, document in parsed:
        for definition in document.definitions:
            if not isinstance(definition, OperationDefinitionNode):
                continue
            combined = DocumentNode(definitions=(definition, *fragments))
            name = definition.name.value if definition.name else ""
            operations.append(SourceOperation(path=path, document=separate_operations(combined)[name]))
    return operations


def write_artifact(definitions: list[OperationDefinition], path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [d.model_dump(by_alias=True) for d in definitions]
    path.write_text(json.dumps(data, indent=2))


def read_artifact(path: str | Path) -> list[OperationDefinition]:
    data = json.loads(Path(path).read_text())
    return [OperationDefinition.model_validate(item) for item in data]

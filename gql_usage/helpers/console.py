"""Shared rich console for CLI output."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

if TYPE_CHECKING:
    from gql_usage.formats.usage_report import OperationDefinition

console = Console()


def short_key(key: str, length: int = 12) -> str:
    return key[:length]


def display_name(definition: OperationDefinition) -> str:
    return definition.operation_name or "<anonymous>"

"""Extraction of the schema coordinates used by GraphQL operations."""

from __future__ import annotations

from gql_usage.collector.engine import (
    OperationCollector as OperationCollector,
    SchemaMismatchError as SchemaMismatchError,
    create_collector as create_collector,
)
from gql_usage.collector.normalize import normalize_operation as normalize_operation

__all__ = [
    "OperationCollector",
    "SchemaMismatchError",
    "create_collector",
    "normalize_operation",
]

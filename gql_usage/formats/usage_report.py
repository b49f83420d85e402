"""Pydantic models for operation definitions and usage reports.

Attribute names are snake_case; the wire format uses camelCase aliases, so
dump with ``by_alias=True`` and ``exclude_none=True``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class OperationDefinition(BaseModel):
    """Usage extracted from one operation document."""

    key: str
    operation: str
    operation_name: str | None = Field(default=None, alias="operationName")
    fields: list[str] = []

    model_config = {"populate_by_name": True, "frozen": True}


# -- Caller input -------------------------------------------------------------


class OutcomeError(BaseModel):
    message: str
    path: list[str | int] | None = None


class ExecutionOutcome(BaseModel):
    """Result of executing a tracked operation, as reported by the caller."""

    ok: bool
    errors: list[OutcomeError] | None = None

    @classmethod
    def from_graphql(cls, result: Any) -> ExecutionOutcome:
        """Build an outcome from a graphql-core ``ExecutionResult``."""
        errors = [
            OutcomeError(message=error.message, path=error.path)
            for error in result.errors or []
        ]
        return cls(ok=not errors, errors=errors)


class Client(BaseModel):
    name: str | None = None
    version: str | None = None


# -- Report -------------------------------------------------------------------


class ExecutionError(BaseModel):
    message: str
    path: str | None = None


class Execution(BaseModel):
    ok: bool
    duration: int  # nanoseconds
    errors_total: int = Field(alias="errorsTotal")
    errors: list[ExecutionError] = []

    model_config = {"populate_by_name": True}


class OperationMetadata(BaseModel):
    client: Client | None = None


class Operation(BaseModel):
    operation_map_key: str = Field(alias="operationMapKey")
    timestamp: int  # epoch milliseconds
    execution: Execution
    metadata: OperationMetadata | None = None

    model_config = {"populate_by_name": True}


class OperationMapRecord(BaseModel):
    operation: str
    operation_name: str | None = Field(default=None, alias="operationName")
    fields: list[str] = []

    model_config = {"populate_by_name": True}


class Report(BaseModel):
    size: int
    map: dict[str, OperationMapRecord] = {}
    operations: list[Operation] = []

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

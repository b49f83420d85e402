"""Collect the schema coordinates an operation uses.

Walks the operation document with graphql-core's ``TypeInfo`` tracking the
schema type at every node and records usage identifiers:

- ``Type.field`` for every selected field (fragments included)
- ``Type.field.arg`` for every field argument
- ``Enum.VALUE`` for enum literals
- input object fields, either the ones a literal or runtime value sets, or
  all of them when only the type is known
- bare scalar names for scalar inputs

Directive arguments are never counted.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from graphql import GraphQLSchema, TypeInfo, TypeInfoVisitor, get_named_type, parse
from graphql.language.ast import (
    ArgumentNode,
    DocumentNode,
    EnumValueNode,
    FieldNode,
    ListValueNode,
    Node,
    ObjectFieldNode,
    ObjectValueNode,
    OperationDefinitionNode,
    VariableDefinitionNode,
    VariableNode,
)
from graphql.language.visitor import SKIP, Visitor, visit

from gql_usage.collector.input_types import InputTypeUsage
from gql_usage.collector.normalize import normalize_operation
from gql_usage.collector.strategies import VariableStrategy, choose_strategy
from gql_usage.formats.usage_report import OperationDefinition

HashFn = Callable[[str], str]

T = TypeVar("T")


def md5_hash(item: str) -> str:
    return hashlib.md5(item.encode("utf-8")).hexdigest()


class SchemaMismatchError(Exception):
    """Raised when the document refers to something the schema does not define."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


def _require(value: T | None, what: str, node: Node) -> T:
    if value is None:
        name = getattr(getattr(node, "name", None), "value", None)
        raise SchemaMismatchError(
            f"Cannot resolve {what} for {node.kind} {name or ''}".rstrip(),
            details={"kind": node.kind, "name": name},
        )
    return value


class _UsageVisitor(Visitor):
    """Records usage while ``TypeInfoVisitor`` keeps ``type_info`` in sync."""

    def __init__(self, type_info: TypeInfo, usage: InputTypeUsage, strategy: VariableStrategy):
        super().__init__()
        self.type_info = type_info
        self.usage = usage
        self.strategy = strategy

    def enter_field(self, node: FieldNode, *_args: object) -> None:
        parent = _require(self.type_info.get_parent_type(), "parent type", node)
        _require(self.type_info.get_field_def(), "field", node)
        self.usage.mark_used(parent.name, node.name.value)

    def enter_variable_definition(self, node: VariableDefinitionNode, *_args: object) -> None:
        input_type = _require(self.type_info.get_input_type(), "variable type", node)
        self.strategy.collect(
            self.usage, get_named_type(input_type), node.variable.name.value
        )

    def enter_directive(self, *_args: object) -> bool:
        return SKIP

    def enter_argument(
        self,
        node: ArgumentNode,
        _key: object,
        _parent: object,
        _path: object,
        ancestors: list[Any],
    ) -> None:
        parent = _require(self.type_info.get_parent_type(), "parent type", node)
        _require(self.type_info.get_argument(), "argument", node)
        field = _require(
            next((a for a in reversed(ancestors) if isinstance(a, FieldNode)), None),
            "field",
            node,
        )
        self.usage.mark_used(parent.name, field.name.value, node.name.value)
        self._collect_value(node)

    def enter_list_value(self, node: ListValueNode, *_args: object) -> None:
        input_type = _require(self.type_info.get_input_type(), "list item type", node)
        type_name = get_named_type(input_type).name
        for value in node.values:
            if not isinstance(value, (ObjectValueNode, ListValueNode)):
                self.usage.collect_input_type(type_name)

    def enter_object_field(self, node: ObjectFieldNode, *_args: object) -> None:
        parent = _require(self.type_info.get_parent_input_type(), "input object", node)
        self._collect_value(node)
        self.usage.collect_input_type(get_named_type(parent).name, node.name.value)

    def _collect_value(self, node: ArgumentNode | ObjectFieldNode) -> None:
        input_type = _require(self.type_info.get_input_type(), "input type", node)
        type_name = get_named_type(input_type).name
        value = node.value

        if isinstance(value, EnumValueNode):
            self.usage.collect_input_type(type_name, value.value)
        elif isinstance(value, (ObjectValueNode, ListValueNode)):
            return
        elif isinstance(value, VariableNode) and self.strategy.defers_variable_references:
            return
        else:
            self.usage.collect_input_type(type_name)


class OperationCollector:
    """Extracts an ``OperationDefinition`` from documents valid against ``schema``.

    With ``process_variables`` enabled and variables passed to ``collect``,
    input objects reached through variables only count the fields the
    runtime values actually set.
    """

    def __init__(
        self,
        schema: GraphQLSchema,
        *,
        process_variables: bool = False,
        key_hash_fn: HashFn | None = None,
    ):
        self.schema = schema
        self.process_variables = process_variables
        self.key_hash_fn = key_hash_fn or md5_hash

    def collect(
        self,
        document: DocumentNode | str,
        variables: Mapping[str, Any] | None = None,
    ) -> OperationDefinition:
        if isinstance(document, str):
            document = parse(document)

        usage = InputTypeUsage(self.schema)
        strategy = choose_strategy(self.process_variables, variables)
        type_info = TypeInfo(self.schema)
        visit(document, TypeInfoVisitor(type_info, _UsageVisitor(type_info, usage, strategy)))

        operation = normalize_operation(document, hide_literals=True, remove_aliases=True)
        op_def = next(
            (d for d in document.definitions if isinstance(d, OperationDefinitionNode)),
            None,
        )

        return OperationDefinition(
            key=self.key_hash_fn(json.dumps(operation, ensure_ascii=False)),
            operation=operation,
            operation_name=op_def.name.value if op_def and op_def.name else None,
            fields=sorted(usage.resolve()),
        )


def create_collector(
    schema: GraphQLSchema,
    *,
    process_variables: bool = False,
    key_hash_fn: HashFn | None = None,
) -> Callable[..., OperationDefinition]:
    """Shortcut returning the bound ``collect`` of a new ``OperationCollector``."""
    return OperationCollector(
        schema, process_variables=process_variables, key_hash_fn=key_hash_fn
    ).collect

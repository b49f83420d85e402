"""Per-call usage state: identifiers, collected input types, visited types.

Input types are not marked as soon as the walk meets them.  Each input type
gets one ``CollectedInputType`` record saying either "the whole type is used"
or "only these fields are used"; records are resolved into identifiers once
the document walk is over.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, cast

from graphql import (
    GraphQLEnumType,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    get_named_type,
)

SEPARATOR = "."

_TYPES_WITH_FIELDS = (GraphQLInputObjectType, GraphQLObjectType, GraphQLInterfaceType)


def make_id(*names: str) -> str:
    """Join schema coordinate parts into a usage identifier."""
    return SEPARATOR.join(names)


@dataclass
class CollectedInputType:
    """What is known to be used of one input type."""

    all: bool = False
    fields: set[str] = field(default_factory=lambda: set[str]())


@dataclass
class InputTypeUsage:
    """Mutable state owned by a single ``collect`` call."""

    schema: GraphQLSchema
    entries: set[str] = field(default_factory=lambda: set[str]())
    collected: dict[str, CollectedInputType] = field(
        default_factory=lambda: dict[str, CollectedInputType]()
    )
    visited: set[str] = field(default_factory=lambda: set[str]())

    def mark_used(self, *names: str) -> None:
        self.entries.add(make_id(*names))

    def collect_input_type(self, type_name: str, field_name: str | None = None) -> None:
        """Record a specific field of an input type, or the whole type."""
        record = self.collected.get(type_name)
        if record is None:
            record = self.collected[type_name] = CollectedInputType()

        if field_name is not None:
            record.fields.add(field_name)
        else:
            record.all = True

    def collect_variable_value(self, named_type: GraphQLNamedType, value: Any) -> None:
        """Record the fields of ``named_type`` that a runtime value actually sets.

        A missing value marks the bare input type.  Non input-object types
        (scalars, enums) are always marked as a whole.
        """
        if not isinstance(named_type, GraphQLInputObjectType):
            self.collect_input_type(named_type.name)
            return

        type_fields = named_type.fields
        for item in _flatten(value):
            if item is None:
                self.mark_used(named_type.name)
                continue
            if not isinstance(item, Mapping):
                continue
            for field_name, field_value in item.items():
                input_field = type_fields.get(field_name)
                if input_field is None:
                    continue
                self.collect_input_type(named_type.name, field_name)
                self.collect_variable_value(get_named_type(input_field.type), field_value)

    def mark_entire_type(self, named_type: GraphQLNamedType) -> None:
        """Mark a type and everything reachable from its fields as used.

        Walks with an explicit stack; ``visited`` guarantees each named type
        is expanded at most once per call, so cyclic input types terminate.
        """
        stack = [named_type]
        while stack:
            current = stack.pop()
            if current.name in self.visited:
                continue
            self.visited.add(current.name)

            if isinstance(current, GraphQLEnumType):
                for value_name in current.values:
                    self.mark_used(current.name, value_name)
                continue

            if not isinstance(current, _TYPES_WITH_FIELDS):
                self.mark_used(current.name)
                continue

            for field_name, type_field in current.fields.items():
                self.mark_used(current.name, field_name)
                stack.append(get_named_type(type_field.type))

    def resolve(self) -> set[str]:
        """Turn the collected input type records into identifiers."""
        for type_name, record in self.collected.items():
            if record.all:
                self.mark_entire_type(cast(GraphQLNamedType, self.schema.get_type(type_name)))
            else:
                for field_name in record.fields:
                    self.mark_used(type_name, field_name)
        return self.entries


def _flatten(value: Any) -> list[Any]:
    """Unwrap (possibly nested) lists into their leaf items."""
    if not isinstance(value, (list, tuple)):
        return [value]
    items: list[Any] = []
    for item in value:
        items.extend(_flatten(item))
    return items

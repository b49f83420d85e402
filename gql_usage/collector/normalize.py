"""Canonical text form of an operation.

Two documents that differ only in literal values, aliases, whitespace or the
order of selections and arguments normalize to the same text, which is what
the operation key is hashed from.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import is_dataclass, replace
from typing import Any, TypeVar

from graphql import print_ast, separate_operations
from graphql.utilities import strip_ignored_characters
from graphql.language.ast import (
    BooleanValueNode,
    DirectiveNode,
    DocumentNode,
    FieldNode,
    FloatValueNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    IntValueNode,
    ListValueNode,
    Node,
    ObjectValueNode,
    OperationDefinitionNode,
    SelectionSetNode,
    StringValueNode,
)
from graphql.language.visitor import Visitor, visit

NodeT = TypeVar("NodeT", bound=Node)


def _replace(node: NodeT, **changes: Any) -> NodeT:
    """Return a copy of ``node`` with ``changes`` applied; ``node`` is left as is.

    AST nodes are frozen dataclasses from graphql-core 3.3 on, plain
    slotted classes before.
    """
    if is_dataclass(node):
        return replace(node, **changes)
    values = {key: getattr(node, key) for key in node.keys}
    values.update(changes)
    return node.__class__(**values)


def _sorted(nodes: Collection[Node] | None) -> tuple[Node, ...]:
    return tuple(sorted(nodes or (), key=lambda n: (n.kind, print_ast(n))))


class _Normalizer(Visitor):
    """Hides literals, drops aliases and sorts every unordered node list."""

    def __init__(self, hide_literals: bool, remove_aliases: bool):
        super().__init__()
        self.hide_literals = hide_literals
        self.remove_aliases = remove_aliases

    def leave_int_value(self, node: IntValueNode, *_args: object) -> Node | None:
        return _replace(node, value="0") if self.hide_literals else None

    def leave_float_value(self, node: FloatValueNode, *_args: object) -> Node | None:
        return IntValueNode(value="0") if self.hide_literals else None

    def leave_string_value(self, node: StringValueNode, *_args: object) -> Node | None:
        return _replace(node, value="", block=False) if self.hide_literals else None

    def leave_boolean_value(self, node: BooleanValueNode, *_args: object) -> Node | None:
        return _replace(node, value=False) if self.hide_literals else None

    def leave_list_value(self, node: ListValueNode, *_args: object) -> Node | None:
        return _replace(node, values=()) if self.hide_literals else None

    def leave_object_value(self, node: ObjectValueNode, *_args: object) -> Node:
        return _replace(node, fields=_sorted(node.fields))

    def leave_field(self, node: FieldNode, *_args: object) -> Node:
        changes: dict[str, Any] = {
            "arguments": _sorted(node.arguments),
            "directives": _sorted(node.directives),
        }
        if self.remove_aliases:
            changes["alias"] = None
        return _replace(node, **changes)

    def leave_directive(self, node: DirectiveNode, *_args: object) -> Node:
        return _replace(node, arguments=_sorted(node.arguments))

    def leave_selection_set(self, node: SelectionSetNode, *_args: object) -> Node:
        return _replace(node, selections=_sorted(node.selections))

    def leave_fragment_spread(self, node: FragmentSpreadNode, *_args: object) -> Node:
        return _replace(node, directives=_sorted(node.directives))

    def leave_inline_fragment(self, node: InlineFragmentNode, *_args: object) -> Node:
        return _replace(node, directives=_sorted(node.directives))

    def leave_fragment_definition(self, node: FragmentDefinitionNode, *_args: object) -> Node:
        return _replace(
            node,
            directives=_sorted(node.directives),
            variable_definitions=_sorted(node.variable_definitions),
        )

    def leave_operation_definition(self, node: OperationDefinitionNode, *_args: object) -> Node:
        return _replace(
            node,
            directives=_sorted(node.directives),
            variable_definitions=_sorted(node.variable_definitions),
        )

    def leave_document(self, node: DocumentNode, *_args: object) -> Node:
        return _replace(node, definitions=_sorted(node.definitions))


def _drop_unused_definitions(document: DocumentNode, operation_name: str | None) -> DocumentNode:
    """Keep one operation and the fragments it spreads, transitively."""
    operations = [d for d in document.definitions if isinstance(d, OperationDefinitionNode)]
    if not operations:
        return document

    if operation_name is None:
        first = operations[0]
        operation_name = first.name.value if first.name else ""

    separated = separate_operations(document)
    return separated.get(operation_name, document)


def normalize_operation(
    document: DocumentNode,
    *,
    operation_name: str | None = None,
    hide_literals: bool = True,
    remove_aliases: bool = True,
) -> str:
    """Return the compact canonical text of an operation document.

    >>> from graphql import parse
    >>> normalize_operation(parse('query q { b a: c(x: 5) }'))
    'query q{b c(x:0)}'
    """
    document = _drop_unused_definitions(document, operation_name)
    normalized = visit(document, _Normalizer(hide_literals, remove_aliases))
    return strip_ignored_characters(print_ast(normalized))

"""How declared variables contribute to input type usage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from graphql import GraphQLNamedType

from gql_usage.collector.input_types import InputTypeUsage


class VariableStrategy(ABC):
    """Decides what a declared variable marks as used.

    ``defers_variable_references`` tells the document walk to leave
    ``$variable`` argument and object field values alone, because the
    variable definition already accounts for them.
    """

    defers_variable_references: bool = False

    @abstractmethod
    def collect(self, usage: InputTypeUsage, named_type: GraphQLNamedType, name: str) -> None:
        ...


class WholeTypeStrategy(VariableStrategy):
    """Without runtime values every variable uses its whole input type."""

    def collect(self, usage: InputTypeUsage, named_type: GraphQLNamedType, name: str) -> None:
        usage.collect_input_type(named_type.name)


class ValueDrivenStrategy(VariableStrategy):
    """Only the input fields present in the runtime values are used."""

    defers_variable_references = True

    def __init__(self, variables: Mapping[str, Any]):
        self.variables = variables

    def collect(self, usage: InputTypeUsage, named_type: GraphQLNamedType, name: str) -> None:
        usage.collect_variable_value(named_type, self.variables.get(name))


def choose_strategy(
    process_variables: bool, variables: Mapping[str, Any] | None
) -> VariableStrategy:
    if process_variables and variables is not None:
        return ValueDrivenStrategy(variables)
    return WholeTypeStrategy()

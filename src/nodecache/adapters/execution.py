"""Schema-less query executor driving a field resolver callback.

Walks a parsed ``graphql-core`` document and asks the resolver for every
selected field, the way resolver-only executors for client caches work: no
schema validation, no type conditions on fragments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from graphql import (
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    OperationDefinitionNode,
)
from graphql.pyutils import Undefined
from graphql.utilities import value_from_ast_untyped

from nodecache.domain.errors import QueryExecutionError
from nodecache.domain.ports.execution import QueryExecutor
from nodecache.domain.types import FieldInfo

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from graphql import DirectiveNode, DocumentNode, SelectionNode, SelectionSetNode

    from nodecache.domain.ports.execution import FieldResolverFn


def select_operation(
    document: DocumentNode,
    operation_name: str | None = None,
) -> OperationDefinitionNode:
    operations = [
        definition
        for definition in document.definitions
        if isinstance(definition, OperationDefinitionNode)
    ]
    if operation_name is not None:
        for operation in operations:
            if operation.name is not None and operation.name.value == operation_name:
                return operation
        raise QueryExecutionError(f"Unknown operation named {operation_name!r}")
    if not operations:
        raise QueryExecutionError("Document contains no operation")
    if len(operations) > 1:
        raise QueryExecutionError("Document contains several operations; name one")
    return operations[0]


def coerce_variables(
    operation: OperationDefinitionNode,
    variables: Mapping[str, object] | None,
) -> dict[str, object]:
    """Provided variables plus declared defaults for the ones left out."""

    values = dict(variables or {})
    for definition in operation.variable_definitions or ():
        name = definition.variable.name.value
        if name not in values and definition.default_value is not None:
            values[name] = value_from_ast_untyped(definition.default_value)
    return values


def _copy_leaf(value: object) -> object:
    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict):
        return dict(value)
    return value


def _merge_into(result: dict[str, object], key: str, value: object) -> None:
    existing = result.get(key)
    if isinstance(existing, dict) and isinstance(value, dict):
        for sub_key, sub_value in value.items():
            _merge_into(existing, sub_key, sub_value)
        return
    result[key] = value


@dataclass(slots=True)
class _Execution:
    resolver: FieldResolverFn
    fragments: dict[str, FragmentDefinitionNode]
    variables: dict[str, object]

    def selection_set(self, selection_set: SelectionSetNode, current: object) -> dict[str, object]:
        result: dict[str, object] = {}
        for node in self._collect_fields(selection_set):
            key = node.alias.value if node.alias else node.name.value
            _merge_into(result, key, self._field(node, current))
        return result

    def _collect_fields(self, selection_set: SelectionSetNode) -> Iterator[FieldNode]:
        for selection in selection_set.selections:
            if not self._included(selection):
                continue
            if isinstance(selection, FieldNode):
                yield selection
            elif isinstance(selection, InlineFragmentNode):
                yield from self._collect_fields(selection.selection_set)
            elif isinstance(selection, FragmentSpreadNode):
                name = selection.name.value
                fragment = self.fragments.get(name)
                if fragment is None:
                    raise QueryExecutionError(f"Unknown fragment {name!r}")
                yield from self._collect_fields(fragment.selection_set)

    def _field(self, node: FieldNode, current: object) -> object:
        info = FieldInfo(
            is_leaf=node.selection_set is None,
            alias=node.alias.value if node.alias else None,
        )
        value = self.resolver(node.name.value, current, self._arguments(node), info)
        if node.selection_set is None:
            return _copy_leaf(value)
        return self._complete(node.selection_set, value)

    def _complete(self, selection_set: SelectionSetNode, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return [self._complete(selection_set, item) for item in value]
        return self.selection_set(selection_set, value)

    def _arguments(self, node: FieldNode | DirectiveNode) -> dict[str, object]:
        arguments: dict[str, object] = {}
        for argument in node.arguments or ():
            value = value_from_ast_untyped(argument.value, self.variables)
            if value is not Undefined:
                arguments[argument.name.value] = value
        return arguments

    def _included(self, selection: SelectionNode) -> bool:
        for directive in selection.directives or ():
            name = directive.name.value
            if name not in {"skip", "include"}:
                continue
            condition = bool(self._arguments(directive).get("if"))
            if name == "skip" and condition:
                return False
            if name == "include" and not condition:
                return False
        return True


@dataclass(slots=True)
class DocumentExecutor:
    """``QueryExecutor`` over parsed documents; one operation per call."""

    operation_name: str | None = None

    def execute(
        self,
        resolver: FieldResolverFn,
        document: DocumentNode,
        root: object,
        variables: Mapping[str, object] | None = None,
    ) -> dict[str, object]:
        operation = select_operation(document, self.operation_name)
        fragments = {
            definition.name.value: definition
            for definition in document.definitions
            if isinstance(definition, FragmentDefinitionNode)
        }
        execution = _Execution(
            resolver=resolver,
            fragments=fragments,
            variables=coerce_variables(operation, variables),
        )
        return execution.selection_set(operation.selection_set, root)


if TYPE_CHECKING:
    _executor_check: QueryExecutor = DocumentExecutor()
